from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from asset_catalog.models.user import User

users_bp = Blueprint('users', __name__)


def _payload():
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form


@users_bp.route("/login", methods=['POST'])
def login():
    data = _payload()
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''
    if not username or not password:
        return jsonify({'error': 'username and password are required'}), 400

    user = User.query.filter_by(username=username).first()
    if not user or not user.check_password(password):
        current_app.logger.warning("Login failed for %r from %s", username, request.remote_addr)
        return jsonify({'error': 'Invalid username or password'}), 401
    if not user.active:
        current_app.logger.warning("Login refused for disabled account %r", username)
        return jsonify({'error': 'Account is disabled'}), 403

    login_user(user, remember=bool(data.get('remember')))
    current_app.logger.info("User %s logged in", user.username)
    return jsonify({'user': user.to_dict()})


@users_bp.route("/logout", methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True})


@users_bp.route("/me")
@login_required
def me():
    return jsonify({'user': current_user.to_dict()})
