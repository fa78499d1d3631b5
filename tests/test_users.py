from conftest import login, make_user
from asset_catalog import db
from asset_catalog.models import User


def test_login_logout(client, app):
    make_user(app, 'testuser')

    response = login(client, 'testuser')
    assert response.status_code == 200
    assert response.get_json()['user']['username'] == 'testuser'

    response = client.get('/me')
    assert response.status_code == 200
    assert response.get_json()['user']['role'] == 'ADMIN'

    response = client.post('/logout')
    assert response.status_code == 200

    response = client.get('/me')
    assert response.status_code == 401


def test_login_with_form_data(client, app):
    make_user(app, 'formuser')
    response = client.post('/login', data={'username': 'formuser', 'password': 'password'})
    assert response.status_code == 200


def test_bad_password(client, app):
    make_user(app, 'testuser')
    response = login(client, 'testuser', password='wrong')
    assert response.status_code == 401
    assert client.get('/me').status_code == 401


def test_missing_credentials(client):
    response = client.post('/login', json={'username': ''})
    assert response.status_code == 400


def test_disabled_account_cannot_login(client, app):
    make_user(app, 'gone', active=False)
    response = login(client, 'gone')
    assert response.status_code == 403
    assert response.get_json()['error'] == 'Account is disabled'


def test_me_lists_effective_permissions(client, app):
    make_user(app, 'importer', permissions=['ASSET_CSV_IMPORT'])
    login(client, 'importer')
    assert client.get('/me').get_json()['user']['permissions'] == ['ASSET_CSV_IMPORT']


def test_super_admin_has_every_permission(admin_client):
    permissions = admin_client.get('/me').get_json()['user']['permissions']
    assert set(permissions) == {'ASSET_CSV_IMPORT', 'ASSET_TYPE_MANAGE', 'ADMIN_MANAGE'}


def test_deactivated_account_session_is_logged_out(client, app):
    user_id = make_user(app, 'leaver')
    login(client, 'leaver')
    assert client.get('/me').status_code == 200

    with app.app_context():
        db.session.get(User, user_id).active = False
        db.session.commit()

    assert client.get('/me').status_code == 401
