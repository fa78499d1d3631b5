# asset_catalog/models/user.py
from enum import Enum
from flask_login import UserMixin
from asset_catalog import db, bcrypt

class Role(Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"

class Permission(Enum):
    ASSET_CSV_IMPORT = "ASSET_CSV_IMPORT"
    ASSET_TYPE_MANAGE = "ASSET_TYPE_MANAGE"
    ADMIN_MANAGE = "ADMIN_MANAGE"

class User(db.Model, UserMixin):
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=True)
    name = db.Column(db.String(100))
    password_hash = db.Column(db.String(128), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=Role.ADMIN.value)
    active = db.Column(db.Boolean, nullable=False, default=True)

    grants = db.relationship('PermissionGrant', backref='user', lazy=True, cascade='all, delete-orphan')

    @property
    def is_active(self):
        return self.active

    @property
    def is_super_admin(self):
        return self.role == Role.SUPER_ADMIN.value

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def permissions(self):
        if self.is_super_admin:
            return [p.value for p in Permission]
        return sorted(g.permission for g in self.grants)

    def has_permission(self, permission):
        if isinstance(permission, Permission):
            permission = permission.value
        if not self.active:
            return False
        return self.is_super_admin or any(g.permission == permission for g in self.grants)

    def to_summary(self):
        return {'id': self.id, 'username': self.username, 'name': self.name}

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'name': self.name,
            'role': self.role,
            'active': self.active,
            'permissions': self.permissions(),
        }

    def __repr__(self):
        return f"User('{self.username}', '{self.role}')"

class PermissionGrant(db.Model):
    __table_args__ = (db.UniqueConstraint('user_id', 'permission', name='uq_permission_grant'),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    permission = db.Column(db.String(40), nullable=False)

    def __repr__(self):
        return f"PermissionGrant({self.user_id}, '{self.permission}')"
