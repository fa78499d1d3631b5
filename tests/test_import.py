import io

from conftest import login, make_software_type, make_user
from asset_catalog.models import AssetEntity, ImportLog

SAMPLE = "name,version,expiresAt\nAppA,1.0,2024-01-01\nAppB,,bad-date\nAppC,2.0,\n"


def upload(client, text, slug='software', filename='software.csv'):
    data = {'file': (io.BytesIO(text.encode('utf-8')), filename)}
    if slug is not None:
        data['typeSlug'] = slug
    return client.post('/assets/import', data=data, content_type='multipart/form-data')


def test_import_csv(admin_client, app):
    make_software_type(app)

    response = upload(admin_client, SAMPLE)

    assert response.status_code == 200
    assert response.get_json() == {
        'typeSlug': 'software',
        'successCount': 2,
        'failCount': 1,
        'errors': [{'row': 3, 'field': 'version', 'reason': 'missing required value'}],
    }
    with app.app_context():
        assert sorted(a.title for a in AssetEntity.query.all()) == ['AppA', 'AppC']
        log = ImportLog.query.one()
        assert (log.filename, log.success_count, log.fail_count) == ('software.csv', 2, 1)


def test_import_unknown_type(admin_client, app):
    response = upload(admin_client, SAMPLE, slug='hardware')
    assert response.status_code == 404
    with app.app_context():
        assert AssetEntity.query.count() == 0
        assert ImportLog.query.count() == 0


def test_fully_failed_import_is_still_a_report(admin_client, app):
    make_software_type(app)
    response = upload(admin_client, "title,version\n,1.0\nNoVersion,\n")
    assert response.status_code == 200
    body = response.get_json()
    assert (body['successCount'], body['failCount']) == (0, 2)
    assert body['errors'][0] == {'row': 2, 'reason': 'missing title'}


def test_import_requires_slug_and_file(admin_client, app):
    make_software_type(app)
    assert upload(admin_client, SAMPLE, slug=None).status_code == 400
    response = admin_client.post('/assets/import', data={'typeSlug': 'software'},
                                 content_type='multipart/form-data')
    assert response.status_code == 400


def test_import_requires_permission(client, app):
    make_software_type(app)
    make_user(app, 'viewer')
    login(client, 'viewer')
    assert upload(client, SAMPLE).status_code == 403


def test_import_with_granted_permission(client, app):
    make_software_type(app)
    make_user(app, 'importer', permissions=['ASSET_CSV_IMPORT'])
    login(client, 'importer')
    assert upload(client, SAMPLE).status_code == 200


def test_import_history(admin_client, app):
    make_software_type(app)
    upload(admin_client, SAMPLE, filename='first.csv')
    upload(admin_client, SAMPLE, filename='second.csv')

    items = admin_client.get('/assets/imports').get_json()['items']
    assert [i['filename'] for i in items] == ['second.csv', 'first.csv']
    assert items[0]['createdBy'] == 'root'


def test_export_round_trips_through_import(admin_client, app):
    make_software_type(app)
    upload(admin_client, SAMPLE)

    response = admin_client.get('/assets/export?type=software')
    assert response.status_code == 200
    assert response.headers['Content-Type'].startswith('text/csv')
    lines = response.get_data(as_text=True).splitlines()
    assert lines == ['title,status,version,expiresAt', 'AppA,ACTIVE,1.0,2024-01-01', 'AppC,ACTIVE,2.0,']

    result = upload(admin_client, response.get_data(as_text=True)).get_json()
    assert (result['successCount'], result['failCount']) == (2, 0)


def test_export_unknown_type(admin_client):
    assert admin_client.get('/assets/export?type=nope').status_code == 404
