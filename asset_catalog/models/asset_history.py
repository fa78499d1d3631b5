# asset_catalog/models/asset_history.py
from datetime import datetime
from asset_catalog import db

class AssetHistory(db.Model):
    """Audit trail of interactive changes to one asset entity."""
    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey('asset_entity.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='SET NULL'), nullable=True)
    event_type = db.Column(db.String(50), nullable=False)
    details = db.Column(db.String(500))
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    user = db.relationship('User', lazy=True)

    def to_dict(self):
        return {
            'eventType': self.event_type,
            'details': self.details,
            'user': self.user.username if self.user else None,
            'timestamp': self.timestamp.isoformat(),
        }

    def __repr__(self):
        return f"<AssetHistory {self.asset_id} {self.event_type}>"
