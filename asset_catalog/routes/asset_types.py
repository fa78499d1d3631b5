# asset_catalog/routes/asset_types.py
from flask import jsonify, request
from flask_login import login_required
from asset_catalog import db
from asset_catalog.access import permission_required
from asset_catalog.errors import SchemaConflict, SchemaNotFound
from asset_catalog.models.user import Permission
from asset_catalog.registry import SchemaRegistry
from asset_catalog.routes import asset_types_bp as bp

# JSON names accepted for field updates
FIELD_CHANGES = {
    'key': 'key',
    'label': 'label',
    'fieldType': 'field_type',
    'required': 'required',
    'optionsJson': 'options',
    'options': 'options',
    'order': 'order',
    'active': 'active',
}


def _field_to_dict(field):
    return {
        'id': field.id,
        'key': field.key,
        'label': field.label,
        'fieldType': field.field_type,
        'required': field.required,
        'optionsJson': field.options,
        'order': field.order,
        'active': field.active,
    }


def _type_to_dict(asset_type):
    return {'id': asset_type.id, 'slug': asset_type.slug, 'name': asset_type.name,
            'active': asset_type.active, 'order': asset_type.order}


@bp.route('/')
@login_required
def list_types():
    registry = SchemaRegistry(db.session)
    return jsonify({'items': [_type_to_dict(t) for t in registry.list_active_types()]})


@bp.route('/<slug>')
@login_required
def get_type(slug):
    try:
        item = SchemaRegistry(db.session).describe(slug)
    except SchemaNotFound as e:
        return jsonify({'error': str(e)}), 404
    return jsonify({'item': item})


@bp.route('/', methods=['POST'])
@login_required
@permission_required(Permission.ASSET_TYPE_MANAGE)
def add_type():
    data = request.get_json(silent=True) or {}
    try:
        asset_type = SchemaRegistry(db.session).create_type(
            data.get('slug'), data.get('name'), order=data.get('order', 0))
    except SchemaConflict as e:
        return jsonify({'error': str(e)}), 409
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify({'item': _type_to_dict(asset_type)}), 201


@bp.route('/<slug>', methods=['PATCH'])
@login_required
@permission_required(Permission.ASSET_TYPE_MANAGE)
def edit_type(slug):
    data = request.get_json(silent=True) or {}
    try:
        asset_type = SchemaRegistry(db.session).update_type(
            slug, name=data.get('name'), order=data.get('order'), active=data.get('active'))
    except SchemaNotFound as e:
        return jsonify({'error': str(e)}), 404
    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400
    return jsonify({'item': _type_to_dict(asset_type)})


@bp.route('/<slug>/fields', methods=['POST'])
@login_required
@permission_required(Permission.ASSET_TYPE_MANAGE)
def add_field(slug):
    data = request.get_json(silent=True) or {}
    try:
        field = SchemaRegistry(db.session).add_field(
            slug,
            key=data.get('key'),
            label=data.get('label'),
            field_type=data.get('fieldType', 'text'),
            required=data.get('required', False),
            options=data.get('optionsJson', data.get('options')),
            order=data.get('order'),
        )
    except SchemaNotFound as e:
        return jsonify({'error': str(e)}), 404
    except SchemaConflict as e:
        return jsonify({'error': str(e)}), 409
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify({'item': _field_to_dict(field)}), 201


@bp.route('/<slug>/fields/<key>', methods=['PATCH'])
@login_required
@permission_required(Permission.ASSET_TYPE_MANAGE)
def edit_field(slug, key):
    data = request.get_json(silent=True) or {}
    changes = {FIELD_CHANGES[name]: value for name, value in data.items() if name in FIELD_CHANGES}
    try:
        field = SchemaRegistry(db.session).update_field(slug, key, **changes)
    except SchemaNotFound as e:
        return jsonify({'error': str(e)}), 404
    except SchemaConflict as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 409
    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400
    return jsonify({'item': _field_to_dict(field)})
