# asset_catalog/models/asset_type.py
from datetime import datetime
from enum import Enum
from asset_catalog import db

class FieldType(Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"
    BOOLEAN = "boolean"

    @classmethod
    def parse(cls, value):
        """Match a field-type tag case-insensitively, raising ValueError for unknown tags."""
        if isinstance(value, cls):
            return value
        try:
            return next(t for t in cls if t.value == str(value).strip().lower())
        except StopIteration:
            raise ValueError(f"Invalid field type: {value}")

class AssetType(db.Model):
    __tablename__ = 'asset_type'

    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(64), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    active = db.Column(db.Boolean, nullable=False, default=True)
    order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    fields = db.relationship('AssetTypeField', backref='asset_type', lazy=True,
                             order_by=lambda: [AssetTypeField.order, AssetTypeField.id])
    entities = db.relationship('AssetEntity', backref='asset_type', lazy=True)

    def __repr__(self):
        return f'<AssetType {self.slug}>'

class AssetTypeField(db.Model):
    __tablename__ = 'asset_type_field'
    __table_args__ = (db.UniqueConstraint('type_id', 'key', name='uq_asset_type_field_key'),)

    id = db.Column(db.Integer, primary_key=True)
    type_id = db.Column(db.Integer, db.ForeignKey('asset_type.id'), nullable=False)
    key = db.Column(db.String(64), nullable=False)
    label = db.Column(db.String(100), nullable=False)
    field_type = db.Column(db.String(20), nullable=False, default=FieldType.TEXT.value)
    required = db.Column(db.Boolean, nullable=False, default=False)
    options = db.Column(db.JSON)  # only meaningful for select fields
    order = db.Column(db.Integer, nullable=False, default=0)
    active = db.Column(db.Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"AssetTypeField('{self.key}', '{self.field_type}')"
