from datetime import datetime
from enum import Enum
from asset_catalog import db


class ExpiryRule(Enum):
    """How far ahead of its expiry date an asset is flagged."""
    D30 = 30
    D7 = 7


class NotificationLog(db.Model):
    __tablename__ = 'notification_log'

    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey('asset_entity.id', ondelete='CASCADE'),
                         nullable=False, index=True)
    rule = db.Column(db.String(10), nullable=False)
    sent_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    asset = db.relationship('AssetEntity', lazy=True,
                            backref=db.backref('notifications', cascade='all, delete-orphan'))

    def to_dict(self):
        data = self.asset.data or {}
        return {
            'id': self.id,
            'rule': self.rule,
            'sentAt': self.sent_at.isoformat(),
            'asset': {
                'id': self.asset.id,
                'title': self.asset.title,
                'status': self.asset.status,
                'type': self.asset.asset_type.slug,
                'expiresAt': data.get('expiresAt'),
            },
        }

    def __repr__(self):
        return f'<NotificationLog {self.rule} asset={self.asset_id}>'
