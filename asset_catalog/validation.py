import math
from datetime import datetime

from asset_catalog.errors import FieldValidationError
from asset_catalog.models.asset_type import FieldType

TRUTHY = {"true", "1", "y", "yes", "o"}
FALSY = {"false", "0", "n", "no", "x"}

# Accepted after ISO 8601 has been tried
DATE_FORMATS = ('%Y/%m/%d', '%Y.%m.%d', '%m/%d/%Y', '%d %b %Y', '%b %d %Y', '%B %d %Y')

MISSING_REQUIRED = "missing required value"
INVALID_NUMBER = "not a valid number"
INVALID_DATE = "invalid date format"
INVALID_BOOLEAN = "not a valid boolean"
INVALID_OPTION = "value not in allowed options"


def parse_number(raw):
    """
    Parses a finite decimal number. Integral values come back as int so the
    stored JSON reads "3" rather than "3.0".
    """
    if '_' in raw:
        raise FieldValidationError(INVALID_NUMBER)
    try:
        number = float(raw)
    except ValueError:
        raise FieldValidationError(INVALID_NUMBER)
    if not math.isfinite(number):
        raise FieldValidationError(INVALID_NUMBER)
    if number.is_integer() and abs(number) < 2 ** 53:
        return int(number)
    return number


def parse_date(raw):
    """
    Parses a calendar date and returns it as 'YYYY-MM-DD'.
    The time of day and any offset are dropped, e.g.
    "2024-03-01T15:30:00Z" -> "2024-03-01".
    """
    text = raw.strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(text).date().isoformat()
    except ValueError:
        pass
    cleaned = text.replace(',', '')
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date().isoformat()
        except ValueError:
            continue
    raise FieldValidationError(INVALID_DATE)


def parse_boolean(raw):
    token = raw.strip().lower()
    if token in TRUTHY:
        return True
    if token in FALSY:
        return False
    raise FieldValidationError(INVALID_BOOLEAN)


def is_allowed_option(value, options):
    """
    Options are either a list of strings or a list of {label, value} objects.
    A missing or empty list allows anything, so a half-configured select
    field does not block data entry.
    """
    if not options:
        return True
    for option in options:
        if isinstance(option, dict):
            if str(option.get('value')) == value:
                return True
        elif str(option) == value:
            return True
    return False


def validate(field, raw):
    """
    Validates one raw string against a field definition.

    `field` is anything with `key`, `field_type`, `required` and `options`
    attributes (a FieldDef or an AssetTypeField row). Returns the typed value,
    or None when the value is empty and optional (the caller leaves the key
    out of the stored data). Raises FieldValidationError otherwise.
    """
    text = '' if raw is None else str(raw).strip()

    if not text:
        if field.required:
            raise FieldValidationError(MISSING_REQUIRED, field=field.key)
        return None

    field_type = FieldType.parse(field.field_type)
    try:
        if field_type in (FieldType.TEXT, FieldType.TEXTAREA):
            return text
        elif field_type == FieldType.NUMBER:
            return parse_number(text)
        elif field_type == FieldType.DATE:
            return parse_date(text)
        elif field_type == FieldType.BOOLEAN:
            return parse_boolean(text)
        elif field_type == FieldType.SELECT:
            if not is_allowed_option(text, field.options):
                raise FieldValidationError(INVALID_OPTION)
            return text
    except FieldValidationError as e:
        e.field = field.key
        raise
    raise ValueError(f"Unhandled field type: {field_type}")


def stringify(value):
    """Turns a JSON value from an interactive form into the raw string the validator expects."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def validate_data(fields, data):
    """
    Validates a submitted data map against a list of field definitions, in
    field order, stopping at the first failure. Keys that are not fields of
    the schema are not carried over.
    """
    clean = {}
    for field in fields:
        value = validate(field, stringify(data.get(field.key)))
        if value is not None:
            clean[field.key] = value
    return clean
