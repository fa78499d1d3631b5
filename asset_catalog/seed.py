from flask import current_app
from asset_catalog import db
from asset_catalog.models.asset_type import AssetType, AssetTypeField, FieldType
from asset_catalog.models.user import User, Role

# The starter "software" type: (key, label, field type, required, options)
SOFTWARE_FIELDS = [
    ('version', 'Version', FieldType.TEXT, True, None),
    ('vendor', 'Vendor', FieldType.TEXT, False, None),
    ('seats', 'Seats', FieldType.NUMBER, False, None),
    ('expiresAt', 'Expires At', FieldType.DATE, False, None),
    ('licenseType', 'License Type', FieldType.SELECT, False, ['subscription', 'perpetual']),
    ('autoRenew', 'Auto Renew', FieldType.BOOLEAN, False, None),
]


def seed_db():
    """Creates the super admin and the starter asset type. Safe to run repeatedly."""
    config = current_app.config

    # Check if the admin account is already seeded
    if not User.query.filter_by(username=config['SEED_ADMIN_USERNAME']).first():
        admin = User(username=config['SEED_ADMIN_USERNAME'], email=config['SEED_ADMIN_EMAIL'],
                     name='Administrator', role=Role.SUPER_ADMIN.value)
        admin.set_password(config['SEED_ADMIN_PASSWORD'])
        db.session.add(admin)
        current_app.logger.info("Seeded super admin %s", admin.username)

    if not AssetType.query.filter_by(slug='software').first():
        software = AssetType(slug='software', name='Software', order=0)
        db.session.add(software)
        db.session.flush()
        for order, (key, label, field_type, required, options) in enumerate(SOFTWARE_FIELDS):
            db.session.add(AssetTypeField(type_id=software.id, key=key, label=label,
                                          field_type=field_type.value, required=required,
                                          options=options, order=order))
        current_app.logger.info("Seeded asset type 'software'")

    db.session.commit()
