import csv
import io
import logging

from asset_catalog.errors import FieldValidationError, RowValidationError
from asset_catalog.models.asset import AssetSource, DEFAULT_STATUS
from asset_catalog.validation import validate

logger = logging.getLogger(__name__)

MISSING_TITLE = "missing title"
COLUMN_MISMATCH = "column count does not match header"

# Data rows start on line 2, after the header line
HEADER_OFFSET = 2


def parse_csv(text):
    """
    Parses CSV text into a list of row dicts keyed by the header line.
    Header names and cell values are trimmed, blank lines are skipped and
    missing trailing cells come back as ''. Cells beyond the header are
    kept in a list under the None key, as csv.DictReader does, unless they
    are all blank (a trailing comma).
    """
    if isinstance(text, bytes):
        text = text.decode('utf-8-sig')
    elif text.startswith('\ufeff'):
        text = text[1:]

    reader = csv.reader(io.StringIO(text))
    header = None
    rows = []
    for cells in reader:
        if not any(cell.strip() for cell in cells):
            continue
        if header is None:
            header = [cell.strip() for cell in cells]
            continue
        row = {}
        for index, name in enumerate(header):
            row[name] = cells[index].strip() if index < len(cells) else ''
        extra = [cell.strip() for cell in cells[len(header):]]
        if any(extra):
            row[None] = extra
        rows.append(row)
    return rows


def _cell(row, column):
    value = row.get(column)
    return '' if value is None else str(value).strip()


class IngestResult:
    def __init__(self, slug, type_id=None, success_count=0, errors=None):
        self.slug = slug
        self.type_id = type_id
        self.success_count = success_count
        self.errors = errors or []

    @property
    def fail_count(self):
        return len(self.errors)

    def to_dict(self):
        return {
            'typeSlug': self.slug,
            'successCount': self.success_count,
            'failCount': self.fail_count,
            'errors': [e.to_dict() for e in self.errors],
        }


class BatchIngestor:
    """
    Validates tabular rows against one asset type and stores the rows that
    pass. Rows that fail are reported individually and never written; the
    rows that pass are written together in one transaction.
    """

    def __init__(self, registry, store):
        self.registry = registry
        self.store = store

    def classify_row(self, schema, row, row_number):
        """
        Returns (candidate, None) for a valid row or (None, RowValidationError)
        for the first problem found in it.
        """
        if row.get(None):
            return None, RowValidationError(row_number, COLUMN_MISMATCH)

        title = _cell(row, 'title') or _cell(row, 'name')
        if not title:
            return None, RowValidationError(row_number, MISSING_TITLE)

        status = (_cell(row, 'status') or DEFAULT_STATUS).upper()

        data = {}
        for field in schema.fields:
            try:
                value = validate(field, _cell(row, field.key))
            except FieldValidationError as e:
                return None, RowValidationError(row_number, e.reason, field=field.key)
            if value is not None:
                data[field.key] = value

        return {'type_id': schema.type_id, 'title': title, 'status': status, 'data': data}, None

    def ingest(self, slug, rows, created_by_id=None, source=AssetSource.CSV.value):
        """
        Raises SchemaNotFound before looking at any row when the slug does not
        name an active type, and StorageWriteError when the accepted rows
        cannot be written.
        """
        schema = self.registry.get_active_schema(slug)

        candidates = []
        errors = []
        for index, row in enumerate(rows):
            candidate, error = self.classify_row(schema, row, index + HEADER_OFFSET)
            if error is not None:
                errors.append(error)
                continue
            candidate['created_by_id'] = created_by_id
            candidate['source'] = source
            candidates.append(candidate)

        written = self.store.create_many(candidates)
        logger.info("Ingested %s: %d accepted, %d rejected", slug, written, len(errors))
        return IngestResult(schema.slug, type_id=schema.type_id, success_count=written, errors=errors)

    def ingest_csv(self, slug, text, created_by_id=None):
        return self.ingest(slug, parse_csv(text), created_by_id=created_by_id)
