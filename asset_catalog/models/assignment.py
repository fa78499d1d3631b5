# asset_catalog/models/assignment.py
from asset_catalog import db
from datetime import datetime

class Assignment(db.Model):
    """One seat of a license handed to a person. Open while return_date is unset."""
    __tablename__ = 'asset_assignment'

    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey('asset_entity.id', ondelete='CASCADE'),
                         nullable=False, index=True)
    user_name = db.Column(db.String(120), nullable=False)
    user_email = db.Column(db.String(120), nullable=False)
    notes = db.Column(db.Text)
    assigned_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    return_date = db.Column(db.DateTime)

    @property
    def is_open(self):
        return self.return_date is None

    def to_dict(self):
        return {
            'id': self.id,
            'userName': self.user_name,
            'userEmail': self.user_email,
            'notes': self.notes,
            'assignedAt': self.assigned_date.isoformat(),
            'returnedAt': self.return_date.isoformat() if self.return_date else None,
        }
