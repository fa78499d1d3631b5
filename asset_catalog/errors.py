# asset_catalog/errors.py


class CatalogError(Exception):
    """Base class for catalog failures that abort a whole operation."""


class SchemaNotFound(CatalogError):
    def __init__(self, slug):
        super().__init__(f"Asset type not found: {slug}")
        self.slug = slug


class SchemaConflict(CatalogError):
    pass


class RecordNotFound(CatalogError):
    def __init__(self, record_id):
        super().__init__(f"Asset not found: {record_id}")
        self.record_id = record_id


class StorageWriteError(CatalogError):
    pass


class AssignmentNotFound(CatalogError):
    def __init__(self, assignment_id):
        super().__init__(f"Assignment not found: {assignment_id}")
        self.assignment_id = assignment_id


class SeatLimitReached(CatalogError):
    def __init__(self, seats):
        super().__init__(f"All {seats} seats are assigned")
        self.seats = seats


class FieldValidationError(ValueError):
    """A single raw value was rejected by its field definition."""

    def __init__(self, reason, field=None):
        super().__init__(reason)
        self.reason = reason
        self.field = field


class RowValidationError:
    """One rejected row in a batch. Collected, never raised."""

    def __init__(self, row, reason, field=None):
        self.row = row
        self.field = field
        self.reason = reason

    def to_dict(self):
        item = {'row': self.row}
        if self.field is not None:
            item['field'] = self.field
        item['reason'] = self.reason
        return item

    def __eq__(self, other):
        if not isinstance(other, RowValidationError):
            return NotImplemented
        return (self.row, self.field, self.reason) == (other.row, other.field, other.reason)

    def __repr__(self):
        return f"RowValidationError(row={self.row}, field={self.field!r}, reason={self.reason!r})"
