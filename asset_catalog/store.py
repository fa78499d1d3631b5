import logging

from sqlalchemy.exc import SQLAlchemyError

from asset_catalog.errors import AssignmentNotFound, RecordNotFound, SeatLimitReached, StorageWriteError
from asset_catalog.models.asset import AssetEntity, AssetSource, DEFAULT_STATUS
from asset_catalog.models.asset_history import AssetHistory
from asset_catalog.models.assignment import Assignment
from asset_catalog.models.import_log import ImportLog

logger = logging.getLogger(__name__)

MAX_TAKE = 500
DEFAULT_TAKE = 200

# Data key holding the number of seats a license allows
SEATS_KEY = 'seats'


class RecordStore:
    """
    Write path for asset entities. Data maps are stored as given: callers
    validate them against the schema before they get here.
    """

    def __init__(self, session):
        self.session = session

    def get(self, record_id):
        entity = self.session.get(AssetEntity, record_id)
        if entity is None:
            raise RecordNotFound(record_id)
        return entity

    def search(self, q=None, type_id=None, take=DEFAULT_TAKE):
        query = self.session.query(AssetEntity)
        if type_id is not None:
            query = query.filter(AssetEntity.type_id == type_id)
        if q:
            query = query.filter(AssetEntity.title.icontains(q, autoescape=True))
        take = min(max(int(take), 1), MAX_TAKE)
        return query.order_by(AssetEntity.created_at.desc(), AssetEntity.id.desc()).limit(take).all()

    def for_type(self, type_id):
        return (self.session.query(AssetEntity)
                .filter_by(type_id=type_id)
                .order_by(AssetEntity.id.asc())
                .all())

    def create(self, type_id, title, data, status=None, created_by_id=None,
               source=AssetSource.MANUAL.value):
        entity = AssetEntity(type_id=type_id, title=title, status=status or DEFAULT_STATUS,
                             data=data, created_by_id=created_by_id, source=source)
        try:
            self.session.add(entity)
            self.session.flush()  # Flush to get the entity ID
            self.session.add(AssetHistory(asset_id=entity.id, user_id=created_by_id,
                                          event_type='Asset Created',
                                          details=f"Asset {entity.title} created."))
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Failed to create asset %r", title)
            raise StorageWriteError(str(e)) from e
        return entity

    def create_many(self, candidates):
        """
        Inserts every candidate in one transaction. Either all of them are
        written or none are. Returns the number written.
        """
        if not candidates:
            return 0
        try:
            self.session.add_all([AssetEntity(**candidate) for candidate in candidates])
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Bulk insert of %d assets failed", len(candidates))
            raise StorageWriteError(str(e)) from e
        return len(candidates)

    def update(self, record_id, title=None, status=None, data=None, user_id=None):
        entity = self.get(record_id)
        changed = []
        if title is not None:
            entity.title = title
            changed.append('title')
        if status is not None:
            entity.status = status
            changed.append('status')
        if data is not None:
            entity.data = dict(data)
            changed.append('data')
        if not changed:
            return entity
        try:
            self.session.add(AssetHistory(asset_id=entity.id, user_id=user_id,
                                          event_type='Asset Updated',
                                          details=f"Changed: {', '.join(changed)}"))
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageWriteError(str(e)) from e
        logger.info("Updated asset %s (%s)", record_id, ', '.join(changed))
        return entity

    def delete(self, record_id):
        entity = self.get(record_id)
        try:
            self.session.delete(entity)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageWriteError(str(e)) from e
        logger.info("Deleted asset %s", record_id)

    def log_import(self, type_id, user_id, filename, success_count, fail_count):
        log = ImportLog(type_id=type_id, user_id=user_id, filename=filename,
                        success_count=success_count, fail_count=fail_count)
        self.session.add(log)
        self.session.commit()
        return log

    def recent_imports(self, limit=50):
        return self.session.query(ImportLog).order_by(ImportLog.id.desc()).limit(limit).all()

    # Seat assignments

    def seats_total(self, entity):
        """The seat limit stored on the asset, or None when it has none."""
        seats = (entity.data or {}).get(SEATS_KEY)
        if isinstance(seats, bool) or not isinstance(seats, (int, float)):
            return None
        return int(seats)

    def seats_used(self, record_id):
        return (self.session.query(Assignment)
                .filter_by(asset_id=record_id, return_date=None)
                .count())

    def _check_seat_free(self, entity):
        seats = self.seats_total(entity)
        if seats is not None and self.seats_used(entity.id) >= seats:
            raise SeatLimitReached(seats)

    def assign(self, record_id, user_name, user_email, notes=None, user_id=None):
        entity = self.get(record_id)
        user_name = str(user_name or '').strip()
        user_email = str(user_email or '').strip()
        if not user_name:
            raise ValueError("userName is required")
        if '@' not in user_email:
            raise ValueError("Valid userEmail is required")
        self._check_seat_free(entity)

        assignment = Assignment(asset_id=entity.id, user_name=user_name, user_email=user_email,
                                notes=str(notes or '').strip() or None)
        try:
            self.session.add(assignment)
            self.session.add(AssetHistory(asset_id=entity.id, user_id=user_id,
                                          event_type='Asset Assigned',
                                          details=f"Assigned to {user_name} <{user_email}>"))
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageWriteError(str(e)) from e
        logger.info("Assigned asset %s to %s", record_id, user_email)
        return assignment

    def set_returned(self, record_id, assignment_id, returned_at, user_id=None):
        """
        Closes an assignment at `returned_at`, or reopens it when `returned_at`
        is None. Reopening takes a seat again, so the seat limit applies.
        """
        entity = self.get(record_id)
        assignment = (self.session.query(Assignment)
                      .filter_by(id=assignment_id, asset_id=entity.id)
                      .first())
        if assignment is None:
            raise AssignmentNotFound(assignment_id)

        if returned_at is None:
            if assignment.is_open:
                return assignment
            self._check_seat_free(entity)
            event, details = 'Assignment Reopened', f"Reassigned to {assignment.user_name}"
        else:
            event, details = 'Asset Returned', f"Returned by {assignment.user_name}"

        assignment.return_date = returned_at
        try:
            self.session.add(AssetHistory(asset_id=entity.id, user_id=user_id,
                                          event_type=event, details=details))
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageWriteError(str(e)) from e
        return assignment
