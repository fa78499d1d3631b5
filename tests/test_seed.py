from asset_catalog.models import AssetType, User
from asset_catalog.registry import SchemaRegistry
from asset_catalog.seed import seed_db


def test_seed_is_idempotent(app, session):
    seed_db()
    seed_db()

    admin = User.query.filter_by(username='admin').one()
    assert admin.is_super_admin
    assert admin.check_password('admin123')
    assert AssetType.query.count() == 1

    schema = SchemaRegistry(session).get_active_schema('software')
    assert [f.key for f in schema.fields] == ['version', 'vendor', 'seats', 'expiresAt',
                                              'licenseType', 'autoRenew']
    assert schema.fields[0].required
    assert schema.fields[4].options == ['subscription', 'perpetual']
