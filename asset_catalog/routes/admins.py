from flask import current_app, jsonify, request
from flask_login import login_required
from sqlalchemy.exc import IntegrityError
from asset_catalog import db
from asset_catalog.access import permission_required, super_admin_required
from asset_catalog.models.user import User, PermissionGrant, Role, Permission
from asset_catalog.routes import admins_bp as bp


@bp.route('/')
@login_required
@permission_required(Permission.ADMIN_MANAGE)
def list_admins():
    admins = User.query.order_by(User.id.asc()).all()
    return jsonify({'items': [a.to_dict() for a in admins]})


@bp.route('/', methods=['POST'])
@login_required
@permission_required(Permission.ADMIN_MANAGE)
def add_admin():
    data = request.get_json(silent=True) or {}
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''
    role = (data.get('role') or Role.ADMIN.value).upper()

    if not username or not password:
        return jsonify({'error': 'username and password are required'}), 400
    if role not in {r.value for r in Role}:
        return jsonify({'error': f'Invalid role: {role}'}), 400

    user = User(username=username, email=(data.get('email') or None), name=data.get('name'), role=role)
    user.set_password(password)
    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'Username or email already in use'}), 409

    current_app.logger.info("Created admin %s (%s)", user.username, user.role)
    return jsonify({'item': user.to_dict()}), 201


@bp.route('/<int:id>/permissions', methods=['PATCH'])
@login_required
@super_admin_required
def set_permission(id):
    user = db.get_or_404(User, id)
    data = request.get_json(silent=True) or {}
    permission = (data.get('permission') or '').strip().upper()
    enabled = bool(data.get('enabled'))

    if permission not in {p.value for p in Permission}:
        return jsonify({'error': f'Invalid permission: {permission or None}'}), 400

    grant = PermissionGrant.query.filter_by(user_id=user.id, permission=permission).first()
    if enabled and grant is None:
        db.session.add(PermissionGrant(user_id=user.id, permission=permission))
    elif not enabled and grant is not None:
        db.session.delete(grant)
    db.session.commit()

    current_app.logger.info("Permission %s %s for %s", permission,
                            'granted' if enabled else 'revoked', user.username)
    grants = PermissionGrant.query.filter_by(user_id=user.id).order_by(PermissionGrant.permission).all()
    return jsonify({
        'success': True,
        'adminId': user.id,
        'permissions': [g.permission for g in grants],
    })
