# asset_catalog/routes/assets.py
import csv
import io
from datetime import datetime, timezone

from flask import current_app, jsonify, make_response, request
from flask_login import current_user, login_required
from asset_catalog import db
from asset_catalog.access import permission_required
from asset_catalog.errors import (AssignmentNotFound, FieldValidationError, RecordNotFound,
                                  SchemaNotFound, SeatLimitReached, StorageWriteError)
from asset_catalog.ingest import BatchIngestor, parse_csv
from asset_catalog.models.asset import AssetSource
from asset_catalog.models.user import Permission
from asset_catalog.registry import SchemaRegistry
from asset_catalog.routes import assets_bp as bp
from asset_catalog.store import DEFAULT_TAKE, RecordStore
from asset_catalog.validation import stringify, validate_data


def _field_error(e):
    return jsonify({'error': f'{e.field}: {e.reason}', 'field': e.field, 'reason': e.reason}), 400


@bp.route('/')
@login_required
def list_assets():
    q = request.args.get('q', '').strip()
    type_slug = request.args.get('type', '').strip()
    try:
        take = int(request.args.get('take', DEFAULT_TAKE))
    except ValueError:
        take = DEFAULT_TAKE

    store = RecordStore(db.session)
    type_id = None
    if type_slug:
        try:
            type_id = SchemaRegistry(db.session).type_id_for(type_slug)
        except SchemaNotFound:
            return jsonify({'assets': []})

    assets = store.search(q=q, type_id=type_id, take=take)
    return jsonify({'assets': [a.to_dict() for a in assets]})


@bp.route('/', methods=['POST'])
@login_required
def add_asset():
    body = request.get_json(silent=True) or {}
    type_slug = (body.get('typeSlug') or '').strip()
    title = stringify(body.get('title')).strip()
    data = body.get('data')

    if not type_slug or not title or not isinstance(data, dict):
        return jsonify({'error': 'typeSlug, title and data are required'}), 400

    try:
        schema = SchemaRegistry(db.session).get_active_schema(type_slug)
    except SchemaNotFound as e:
        return jsonify({'error': str(e)}), 404

    try:
        clean = validate_data(schema.fields, data)
    except FieldValidationError as e:
        return _field_error(e)

    status = stringify(body.get('status')).strip() or None
    try:
        asset = RecordStore(db.session).create(schema.type_id, title, clean, status=status,
                                               created_by_id=current_user.id,
                                               source=AssetSource.MANUAL.value)
    except StorageWriteError:
        return jsonify({'error': 'An error occurred while creating the asset'}), 500
    return jsonify({'success': True, 'id': asset.id}), 201


@bp.route('/<int:id>')
@login_required
def view_asset(id):
    store = RecordStore(db.session)
    try:
        asset = store.get(id)
    except RecordNotFound as e:
        return jsonify({'error': str(e)}), 404

    item = asset.to_dict()
    try:
        item['schema'] = SchemaRegistry(db.session).describe(asset.asset_type.slug)
    except SchemaNotFound:
        # type was deactivated after the record was stored
        item['schema'] = None
    item['history'] = [h.to_dict() for h in asset.history]
    item['seats'] = {'total': store.seats_total(asset), 'used': store.seats_used(asset.id)}
    item['assignments'] = [a.to_dict() for a in asset.assignments]
    return jsonify({'asset': item})


@bp.route('/<int:id>', methods=['PATCH'])
@login_required
def edit_asset(id):
    body = request.get_json(silent=True) or {}
    store = RecordStore(db.session)
    try:
        asset = store.get(id)
    except RecordNotFound as e:
        return jsonify({'error': str(e)}), 404

    title = body.get('title')
    if title is not None:
        title = stringify(title).strip()
        if not title:
            return jsonify({'error': 'title cannot be blank'}), 400

    status = body.get('status')
    if status is not None:
        status = stringify(status)

    data = body.get('data')
    if data is not None:
        if not isinstance(data, dict):
            return jsonify({'error': 'data must be an object'}), 400
        try:
            schema = SchemaRegistry(db.session).get_active_schema(asset.asset_type.slug)
        except SchemaNotFound as e:
            return jsonify({'error': str(e)}), 409
        try:
            data = validate_data(schema.fields, data)
        except FieldValidationError as e:
            return _field_error(e)

    try:
        store.update(id, title=title, status=status, data=data, user_id=current_user.id)
    except StorageWriteError:
        return jsonify({'error': 'An error occurred while updating the asset'}), 500
    return jsonify({'success': True, 'id': id})


@bp.route('/<int:id>', methods=['DELETE'])
@login_required
def delete_asset(id):
    try:
        RecordStore(db.session).delete(id)
    except RecordNotFound as e:
        return jsonify({'error': str(e)}), 404
    except StorageWriteError:
        return jsonify({'error': 'An error occurred while deleting the asset'}), 500
    return jsonify({'success': True})


@bp.route('/<int:id>/assignments')
@login_required
def list_assignments(id):
    try:
        asset = RecordStore(db.session).get(id)
    except RecordNotFound as e:
        return jsonify({'error': str(e)}), 404
    return jsonify({'items': [a.to_dict() for a in asset.assignments]})


@bp.route('/<int:id>/assignments', methods=['POST'])
@login_required
def add_assignment(id):
    body = request.get_json(silent=True) or {}
    try:
        assignment = RecordStore(db.session).assign(id, body.get('userName'), body.get('userEmail'),
                                                    notes=body.get('notes'), user_id=current_user.id)
    except RecordNotFound as e:
        return jsonify({'error': str(e)}), 404
    except SeatLimitReached as e:
        return jsonify({'error': str(e)}), 409
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except StorageWriteError:
        return jsonify({'error': 'An error occurred while assigning the asset'}), 500
    return jsonify({'assignment': assignment.to_dict()}), 201


def _returned_at(body):
    """Missing means now, null means reopen, anything else must be an ISO 8601 timestamp."""
    if 'returnedAt' not in body:
        return datetime.utcnow()
    value = body['returnedAt']
    if value is None:
        return None
    text = str(value).strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    try:
        returned = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError('Invalid returnedAt')
    if returned.tzinfo is not None:
        returned = returned.astimezone(timezone.utc).replace(tzinfo=None)
    return returned


@bp.route('/<int:id>/assignments/<int:assignment_id>', methods=['PATCH'])
@login_required
def return_assignment(id, assignment_id):
    body = request.get_json(silent=True) or {}
    try:
        returned_at = _returned_at(body)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    try:
        assignment = RecordStore(db.session).set_returned(id, assignment_id, returned_at,
                                                          user_id=current_user.id)
    except (RecordNotFound, AssignmentNotFound) as e:
        return jsonify({'error': str(e)}), 404
    except SeatLimitReached as e:
        return jsonify({'error': str(e)}), 409
    except StorageWriteError:
        return jsonify({'error': 'An error occurred while updating the assignment'}), 500
    return jsonify({'success': True, 'assignment': assignment.to_dict()})


@bp.route('/import', methods=['POST'])
@login_required
@permission_required(Permission.ASSET_CSV_IMPORT)
def import_assets():
    type_slug = (request.form.get('typeSlug') or '').strip()
    file = request.files.get('file')

    if not type_slug:
        return jsonify({'error': 'typeSlug is required'}), 400
    if not file or not file.filename:
        return jsonify({'error': 'file is required'}), 400

    try:
        rows = parse_csv(file.read())
    except (UnicodeDecodeError, csv.Error) as e:
        return jsonify({'error': f'Could not read CSV file: {e}'}), 400

    registry = SchemaRegistry(db.session)
    store = RecordStore(db.session)
    try:
        result = BatchIngestor(registry, store).ingest(type_slug, rows, created_by_id=current_user.id)
    except SchemaNotFound as e:
        return jsonify({'error': str(e)}), 404
    except StorageWriteError:
        return jsonify({'error': 'The accepted rows could not be saved; no rows were imported'}), 500

    store.log_import(result.type_id, current_user.id, file.filename,
                     result.success_count, result.fail_count)
    current_app.logger.info("CSV import by %s into %s: %d ok, %d failed", current_user.username,
                            type_slug, result.success_count, result.fail_count)
    return jsonify(result.to_dict())


@bp.route('/imports')
@login_required
def list_imports():
    logs = RecordStore(db.session).recent_imports()
    return jsonify({'items': [log.to_dict() for log in logs]})


@bp.route('/export')
@login_required
def export_assets():
    type_slug = request.args.get('type', '').strip()
    try:
        schema = SchemaRegistry(db.session).get_active_schema(type_slug)
    except SchemaNotFound as e:
        return jsonify({'error': str(e)}), 404

    keys = [f.key for f in schema.fields]
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(['title', 'status'] + keys)

    for asset in RecordStore(db.session).for_type(schema.type_id):
        data = asset.data or {}
        writer.writerow([asset.title, asset.status] + [stringify(data.get(k)) for k in keys])

    output.seek(0)

    response = make_response(output.getvalue())
    response.headers["Content-Disposition"] = f"attachment; filename={schema.slug}_assets.csv"
    response.headers["Content-type"] = "text/csv"

    return response
