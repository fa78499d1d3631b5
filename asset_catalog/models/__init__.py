# asset_catalog/models/__init__.py
from asset_catalog import db

# Import models after db
from .asset_type import AssetType, AssetTypeField, FieldType
from .asset import AssetEntity, AssetSource
from .asset_history import AssetHistory
from .import_log import ImportLog
from .assignment import Assignment
from .notification_log import ExpiryRule, NotificationLog
from .user import User, PermissionGrant, Role, Permission

__all__ = ['AssetType', 'AssetTypeField', 'FieldType', 'AssetEntity', 'AssetSource', 'AssetHistory',
    'ImportLog', 'Assignment', 'ExpiryRule', 'NotificationLog', 'User', 'PermissionGrant', 'Role', 'Permission']
