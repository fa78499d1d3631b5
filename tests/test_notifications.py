from datetime import datetime, timedelta

import pytest

from conftest import make_software_type
from asset_catalog import db
from asset_catalog.models import AssetEntity, NotificationLog
from asset_catalog.notifications import ExpiryNotifier

NOW = datetime(2024, 3, 1, 9, 0)


def add_assets(app, *assets):
    """Each asset is (title, expiresAt or None, status)."""
    type_id = make_software_type(app)
    with app.app_context():
        for title, expires, status in assets:
            data = {'version': '1'}
            if expires:
                data['expiresAt'] = expires
            db.session.add(AssetEntity(type_id=type_id, title=title, status=status, data=data))
        db.session.commit()


def test_run_classifies_by_days_left(app, session):
    add_assets(app,
               ('Soon', '2024-03-05', 'ACTIVE'),
               ('Later', '2024-03-20', 'ACTIVE'),
               ('Edge', '2024-03-31', 'active'),
               ('Far', '2024-05-01', 'ACTIVE'),
               ('Past', '2024-02-20', 'ACTIVE'),
               ('Retired', '2024-03-04', 'RETIRED'),
               ('Undated', None, 'ACTIVE'))

    result = ExpiryNotifier(session).run(now=NOW)

    assert result['summary'] == {'totalCandidates': 3, 'd30': 3, 'd7': 1, 'newlyLogged': 4}
    assert [c['title'] for c in result['candidates']['d30']] == ['Soon', 'Later', 'Edge']
    assert [c['expiresAt'] for c in result['candidates']['d7']] == ['2024-03-05']


def test_same_day_runs_are_deduplicated(app, session):
    add_assets(app, ('Soon', '2024-03-05', 'ACTIVE'), ('Later', '2024-03-20', 'ACTIVE'))
    notifier = ExpiryNotifier(session)

    assert notifier.run(now=NOW)['summary']['newlyLogged'] == 3
    assert notifier.run(now=NOW + timedelta(hours=8))['summary']['newlyLogged'] == 0
    assert session.query(NotificationLog).count() == 3

    # a new day logs again
    assert notifier.run(now=NOW + timedelta(days=1))['summary']['newlyLogged'] == 3
    assert session.query(NotificationLog).count() == 6


def test_log_ranges(app, session):
    add_assets(app, ('Soon', '2024-03-05', 'ACTIVE'))
    notifier = ExpiryNotifier(session)
    notifier.run(now=NOW)
    notifier.run(now=NOW + timedelta(days=1))

    later = NOW + timedelta(days=1, hours=1)
    assert len(notifier.logs('today', now=later)) == 2
    assert len(notifier.logs('week', now=later)) == 4
    assert {log.rule for log in notifier.logs('week', now=later)} == {'D7', 'D30'}
    with pytest.raises(ValueError):
        notifier.logs('month')


def test_notification_endpoints(admin_client, app):
    expires = (datetime.utcnow().date() + timedelta(days=3)).isoformat()
    add_assets(app, ('Soon', expires, 'ACTIVE'))

    response = admin_client.post('/notifications/run')
    assert response.status_code == 200
    assert response.get_json()['summary']['newlyLogged'] == 2
    assert admin_client.post('/notifications/run').get_json()['summary']['newlyLogged'] == 0

    items = admin_client.get('/notifications/logs').get_json()['items']
    assert sorted(item['rule'] for item in items) == ['D30', 'D7']
    assert items[0]['asset']['expiresAt'] == expires

    assert admin_client.get('/notifications/logs?range=month').status_code == 400


def test_notifications_require_login(client):
    assert client.post('/notifications/run').status_code == 401
    assert client.get('/notifications/logs').status_code == 401
