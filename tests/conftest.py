import pytest

from asset_catalog import create_app, db
from asset_catalog.config import TestingConfig
from asset_catalog.models import AssetType, AssetTypeField, PermissionGrant, User


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    with app.app_context():
        yield db.session


def make_user(app, username, password='password', role='ADMIN', permissions=(), active=True):
    with app.app_context():
        user = User(username=username, email=f'{username}@example.com', name=username.title(),
                    role=role, active=active)
        user.set_password(password)
        db.session.add(user)
        db.session.flush()
        for permission in permissions:
            db.session.add(PermissionGrant(user_id=user.id, permission=permission))
        db.session.commit()
        return user.id


def login(client, username, password='password'):
    return client.post('/login', json={'username': username, 'password': password})


def make_software_type(app):
    """The "software" type used across the tests: version (text, required), expiresAt (date)."""
    with app.app_context():
        software = AssetType(slug='software', name='Software')
        db.session.add(software)
        db.session.flush()
        db.session.add_all([
            AssetTypeField(type_id=software.id, key='version', label='Version',
                           field_type='text', required=True, order=0),
            AssetTypeField(type_id=software.id, key='expiresAt', label='Expires At',
                           field_type='date', required=False, order=1),
        ])
        db.session.commit()
        return software.id


@pytest.fixture
def admin_client(app, client):
    """A client logged in as a super admin."""
    make_user(app, 'root', role='SUPER_ADMIN')
    login(client, 'root')
    return client
