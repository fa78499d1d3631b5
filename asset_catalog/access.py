from functools import wraps

from flask import current_app, jsonify
from flask_login import current_user

from asset_catalog.models.user import Permission


def permission_required(permission):
    """
    Lets the view run only for an active account that holds `permission`.
    Super admins hold every permission.
    """
    if isinstance(permission, Permission):
        permission = permission.value

    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({'error': 'Authentication required'}), 401
            if not current_user.has_permission(permission):
                current_app.logger.warning("Permission denied: user=%s permission=%s",
                                           current_user.username, permission)
                return jsonify({'error': 'Forbidden'}), 403
            return view(*args, **kwargs)
        return wrapped
    return decorator


def super_admin_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not current_user.is_authenticated:
            return jsonify({'error': 'Authentication required'}), 401
        if not (current_user.active and current_user.is_super_admin):
            current_app.logger.warning("Super admin required: user=%s", current_user.username)
            return jsonify({'error': 'Forbidden'}), 403
        return view(*args, **kwargs)
    return wrapped
