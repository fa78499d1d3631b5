import logging
import re
from dataclasses import dataclass, field as dc_field
from typing import List, Optional

from asset_catalog.errors import SchemaConflict, SchemaNotFound
from asset_catalog.models.asset import AssetEntity
from asset_catalog.models.asset_type import AssetType, AssetTypeField, FieldType

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r'^[a-z0-9][a-z0-9_-]*$')
KEY_PATTERN = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
RESERVED_KEYS = {'title', 'name', 'status'}


@dataclass(frozen=True)
class FieldDef:
    id: int
    key: str
    label: str
    field_type: str
    required: bool
    options: Optional[list]
    order: int

    def to_dict(self):
        return {
            'id': self.id,
            'key': self.key,
            'label': self.label,
            'fieldType': self.field_type,
            'required': self.required,
            'optionsJson': self.options,
            'order': self.order,
        }


@dataclass(frozen=True)
class Schema:
    """A read-only snapshot of an active asset type and its active fields."""
    type_id: int
    slug: str
    name: str
    fields: List[FieldDef] = dc_field(default_factory=list)

    def to_dict(self):
        return {
            'id': self.type_id,
            'slug': self.slug,
            'name': self.name,
            'fields': [f.to_dict() for f in self.fields],
        }


def normalize_options(field_type, options):
    """Keeps options only for select fields; accepts a list of strings or of {label, value} objects."""
    if field_type != FieldType.SELECT or options is None:
        return None
    if not isinstance(options, list):
        raise ValueError("options must be a list")
    normalized = []
    for option in options:
        if isinstance(option, str):
            normalized.append(option)
        elif isinstance(option, dict) and 'value' in option:
            value = str(option['value'])
            normalized.append({'label': str(option.get('label', value)), 'value': value})
        else:
            raise ValueError("options must be strings or {label, value} objects")
    return normalized


def _as_int(value, name):
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer")

class SchemaRegistry:
    """Reads and administers asset types. Works on the session it is given."""

    def __init__(self, session):
        self.session = session

    def _get_type(self, slug):
        asset_type = self.session.query(AssetType).filter_by(slug=slug).first()
        if asset_type is None:
            raise SchemaNotFound(slug)
        return asset_type

    def type_id_for(self, slug):
        """Id of the type with this slug, active or not."""
        return self._get_type(slug).id

    def list_active_types(self):
        return (self.session.query(AssetType)
                .filter_by(active=True)
                .order_by(AssetType.order.asc(), AssetType.id.asc())
                .all())

    def get_active_schema(self, slug) -> Schema:
        asset_type = self.session.query(AssetType).filter_by(slug=slug, active=True).first()
        if asset_type is None:
            logger.warning("No active asset type for slug %r", slug)
            raise SchemaNotFound(slug)

        rows = (self.session.query(AssetTypeField)
                .filter_by(type_id=asset_type.id, active=True)
                .order_by(AssetTypeField.order.asc(), AssetTypeField.id.asc())
                .all())
        fields = [FieldDef(id=f.id, key=f.key, label=f.label, field_type=f.field_type,
                           required=f.required, options=f.options, order=f.order)
                  for f in rows]
        return Schema(type_id=asset_type.id, slug=asset_type.slug, name=asset_type.name, fields=fields)

    def describe(self, slug):
        return self.get_active_schema(slug).to_dict()

    # Administration

    def create_type(self, slug, name, order=0):
        slug = str(slug or '').strip().lower()
        name = str(name or '').strip()
        if not SLUG_PATTERN.match(slug):
            raise ValueError(f"Invalid slug: {slug!r}")
        if not name:
            raise ValueError("name is required")
        if self.session.query(AssetType).filter_by(slug=slug).first():
            raise SchemaConflict(f"Asset type already exists: {slug}")

        asset_type = AssetType(slug=slug, name=name, order=_as_int(order or 0, 'order'))
        self.session.add(asset_type)
        self.session.commit()
        logger.info("Created asset type %s", slug)
        return asset_type

    def update_type(self, slug, name=None, order=None, active=None):
        asset_type = self._get_type(slug)
        if name is not None:
            if not str(name).strip():
                raise ValueError("name is required")
            asset_type.name = str(name).strip()
        if order is not None:
            asset_type.order = _as_int(order, 'order')
        if active is not None:
            asset_type.active = bool(active)
        self.session.commit()
        return asset_type

    def add_field(self, slug, key, label, field_type, required=False, options=None, order=None):
        asset_type = self._get_type(slug)
        key = str(key or '').strip()
        self._check_key(key)
        field_type = FieldType.parse(field_type)
        if any(f.key == key for f in asset_type.fields):
            raise SchemaConflict(f"Field {key!r} already exists on {slug}")

        field = AssetTypeField(
            type_id=asset_type.id,
            key=key,
            label=str(label or '').strip() or key,
            field_type=field_type.value,
            required=bool(required),
            options=normalize_options(field_type, options),
            order=len(asset_type.fields) if order is None else _as_int(order, 'order'),
        )
        self.session.add(field)
        self.session.commit()
        logger.info("Added field %s.%s (%s)", slug, key, field_type.value)
        return field

    def update_field(self, slug, field_key, **changes):
        """
        Applies `changes` (key, label, field_type, required, options, order,
        active) to the field currently named `field_key`.
        """
        asset_type = self._get_type(slug)
        field = next((f for f in asset_type.fields if f.key == field_key), None)
        if field is None:
            raise SchemaNotFound(f"{slug}.{field_key}")

        new_key = changes.get('key')
        if new_key is not None and str(new_key).strip() != field.key:
            new_key = str(new_key).strip()
            self._check_key(new_key)
            if any(f.key == new_key for f in asset_type.fields):
                raise SchemaConflict(f"Field {new_key!r} already exists on {slug}")
            if self._key_in_use(asset_type.id, field.key):
                raise SchemaConflict(f"Field {field.key!r} holds stored data and cannot be renamed")
            field.key = new_key

        if changes.get('field_type') is not None:
            field.field_type = FieldType.parse(changes['field_type']).value
        if changes.get('label') is not None:
            field.label = str(changes['label']).strip() or field.key
        if changes.get('required') is not None:
            field.required = bool(changes['required'])
        if changes.get('order') is not None:
            field.order = _as_int(changes['order'], 'order')
        if changes.get('active') is not None:
            field.active = bool(changes['active'])
        if 'options' in changes or 'field_type' in changes:
            field.options = normalize_options(FieldType.parse(field.field_type),
                                              changes.get('options', field.options))

        self.session.commit()
        return field

    def _check_key(self, key):
        if not KEY_PATTERN.match(key):
            raise ValueError(f"Invalid field key: {key!r}")
        if key.lower() in RESERVED_KEYS:
            raise ValueError(f"{key!r} is a reserved column name")

    def _key_in_use(self, type_id, key):
        rows = self.session.query(AssetEntity.data).filter_by(type_id=type_id)
        return any(key in (data or {}) for (data,) in rows)
