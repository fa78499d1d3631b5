# asset_catalog/routes/notifications.py
from flask import current_app, jsonify, request
from flask_login import current_user, login_required
from asset_catalog import db
from asset_catalog.errors import StorageWriteError
from asset_catalog.notifications import ExpiryNotifier
from asset_catalog.routes import notifications_bp as bp


@bp.route('/run', methods=['POST'])
@login_required
def run_expiry_check():
    try:
        result = ExpiryNotifier(db.session).run()
    except StorageWriteError:
        return jsonify({'error': 'Notification logs could not be saved'}), 500
    current_app.logger.info("Expiry check run by %s: %d newly logged", current_user.username,
                            result['summary']['newlyLogged'])
    return jsonify(result)


@bp.route('/logs')
@login_required
def list_logs():
    try:
        logs = ExpiryNotifier(db.session).logs(request.args.get('range', 'today'))
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify({'items': [log.to_dict() for log in logs]})
