import pytest

from conftest import make_software_type
from asset_catalog.errors import RecordNotFound
from asset_catalog.models import AssetEntity, AssetHistory
from asset_catalog.store import RecordStore


def test_create_many_counts_and_stores(app, session):
    type_id = make_software_type(app)
    store = RecordStore(session)
    written = store.create_many([
        {'type_id': type_id, 'title': 'A', 'status': 'ACTIVE', 'data': {'version': '1'}},
        {'type_id': type_id, 'title': 'B', 'status': 'ACTIVE', 'data': {}},
    ])
    assert written == 2
    assert store.create_many([]) == 0
    assert session.query(AssetEntity).count() == 2


def test_create_writes_history(app, session):
    type_id = make_software_type(app)
    asset = RecordStore(session).create(type_id, 'Office', {'version': '365'})
    assert asset.status == 'ACTIVE'
    assert asset.source == 'MANUAL'
    assert [h.event_type for h in asset.history] == ['Asset Created']


def test_update_is_partial(app, session):
    type_id = make_software_type(app)
    store = RecordStore(session)
    asset = store.create(type_id, 'Office', {'version': '365'})

    store.update(asset.id, status='EXPIRED')

    updated = store.get(asset.id)
    assert updated.title == 'Office'
    assert updated.status == 'EXPIRED'
    assert updated.data == {'version': '365'}
    assert updated.history[-1].event_type == 'Asset Updated'


def test_update_and_delete_missing_record(app, session):
    store = RecordStore(session)
    with pytest.raises(RecordNotFound):
        store.update(999, title='x')
    with pytest.raises(RecordNotFound):
        store.delete(999)


def test_delete_removes_history(app, session):
    type_id = make_software_type(app)
    store = RecordStore(session)
    asset = store.create(type_id, 'Office', {'version': '365'})
    store.delete(asset.id)
    assert session.query(AssetEntity).count() == 0
    assert session.query(AssetHistory).count() == 0


def test_search(app, session):
    type_id = make_software_type(app)
    store = RecordStore(session)
    store.create_many([{'type_id': type_id, 'title': t, 'status': 'ACTIVE', 'data': {}}
                       for t in ('Slack', 'Zoom Pro', 'Zoom Basic')])
    assert sorted(a.title for a in store.search(q='zoom')) == ['Zoom Basic', 'Zoom Pro']
    assert len(store.search(take=0)) == 1
    assert len(store.search(type_id=type_id + 1)) == 0


def test_search_treats_wildcards_literally(app, session):
    type_id = make_software_type(app)
    store = RecordStore(session)
    store.create_many([{'type_id': type_id, 'title': t, 'status': 'ACTIVE', 'data': {}}
                       for t in ('Discount 50%', 'Plan 500', 'snake_case')])
    assert [a.title for a in store.search(q='50%')] == ['Discount 50%']
    assert [a.title for a in store.search(q='_')] == ['snake_case']
    assert [a.title for a in store.search(q='DISCOUNT')] == ['Discount 50%']
