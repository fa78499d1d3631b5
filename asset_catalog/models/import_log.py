from asset_catalog import db
from datetime import datetime

class ImportLog(db.Model):
    """One CSV batch that reached the database."""
    id = db.Column(db.Integer, primary_key=True)
    type_id = db.Column(db.Integer, db.ForeignKey('asset_type.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    filename = db.Column(db.String(255))
    success_count = db.Column(db.Integer, nullable=False, default=0)
    fail_count = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    asset_type = db.relationship('AssetType', lazy=True)
    user = db.relationship('User', lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'typeSlug': self.asset_type.slug,
            'filename': self.filename,
            'successCount': self.success_count,
            'failCount': self.fail_count,
            'createdBy': self.user.username if self.user else None,
            'createdAt': self.created_at.isoformat(),
        }

    def __repr__(self):
        return f"ImportLog('{self.filename}', {self.success_count}/{self.fail_count})"
