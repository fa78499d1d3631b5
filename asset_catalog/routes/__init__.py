# asset_catalog/routes/__init__.py
from flask import Blueprint

# Create blueprints
assets_bp = Blueprint('assets', __name__, url_prefix='/assets')
asset_types_bp = Blueprint('asset_types', __name__, url_prefix='/asset-types')
admins_bp = Blueprint('admins', __name__, url_prefix='/admins')
notifications_bp = Blueprint('notifications', __name__, url_prefix='/notifications')

# Import views after blueprints are created
from . import assets, asset_types, admins, notifications
