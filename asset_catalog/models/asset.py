# asset_catalog/models/asset.py
from datetime import datetime
from enum import Enum
from asset_catalog import db

DEFAULT_STATUS = "ACTIVE"

class AssetSource(Enum):
    MANUAL = "MANUAL"
    CSV = "CSV"

class AssetEntity(db.Model):
    __tablename__ = 'asset_entity'

    id = db.Column(db.Integer, primary_key=True)
    type_id = db.Column(db.Integer, db.ForeignKey('asset_type.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False, index=True)
    status = db.Column(db.String(50), nullable=False, default=DEFAULT_STATUS)
    data = db.Column(db.JSON, nullable=False, default=dict)
    source = db.Column(db.String(20), nullable=False, default=AssetSource.MANUAL.value)
    created_by_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='SET NULL'), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    created_by = db.relationship('User', lazy=True)
    history = db.relationship('AssetHistory', backref='asset', lazy=True,
                              cascade='all, delete-orphan', order_by='AssetHistory.id')
    assignments = db.relationship('Assignment', backref='asset', lazy=True,
                                  cascade='all, delete-orphan', order_by='Assignment.id')

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'status': self.status,
            'data': self.data or {},
            'source': self.source,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
            'type': {'slug': self.asset_type.slug, 'name': self.asset_type.name},
            'createdBy': self.created_by.to_summary() if self.created_by else None,
        }

    def __repr__(self):
        return f'<AssetEntity {self.id}: {self.title} ({self.status})>'
