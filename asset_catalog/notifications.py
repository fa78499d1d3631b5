import logging
from datetime import date, datetime, time, timedelta

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from asset_catalog.errors import StorageWriteError
from asset_catalog.models.asset import AssetEntity, DEFAULT_STATUS
from asset_catalog.models.notification_log import ExpiryRule, NotificationLog

logger = logging.getLogger(__name__)

# Data key holding the expiry date, stored as 'YYYY-MM-DD' by the date field type
EXPIRY_KEY = 'expiresAt'

# How many days back each log listing reaches from the start of today
LOG_RANGES = {'today': 0, 'week': 7}
MAX_LOGS = 200


def expiry_date(entity):
    value = (entity.data or {}).get(EXPIRY_KEY)
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _start_of_day(now):
    return datetime.combine(now.date(), time.min)


class ExpiryNotifier:
    """
    Records which active assets are close to expiry. Sending the notices is
    left to whatever reads the log; a run only writes NotificationLog rows,
    at most one per asset and rule per day.
    """

    def __init__(self, session):
        self.session = session

    def candidates(self, today):
        """Active assets expiring between today and the widest rule's horizon, soonest first."""
        horizon = today + timedelta(days=max(rule.value for rule in ExpiryRule))
        found = []
        query = self.session.query(AssetEntity).filter(func.upper(AssetEntity.status) == DEFAULT_STATUS)
        for entity in query:
            expires = expiry_date(entity)
            if expires is not None and today <= expires <= horizon:
                found.append((entity, expires))
        found.sort(key=lambda pair: (pair[1], pair[0].id))
        return found

    def run(self, now=None):
        now = now or datetime.utcnow()
        today = now.date()
        start = _start_of_day(now)

        candidates = self.candidates(today)
        targets = {rule: [(entity, expires) for entity, expires in candidates
                          if expires <= today + timedelta(days=rule.value)]
                   for rule in ExpiryRule}

        logged = (self.session.query(NotificationLog.asset_id, NotificationLog.rule)
                  .filter(NotificationLog.sent_at >= start,
                          NotificationLog.sent_at < start + timedelta(days=1)))
        logged_today = {(asset_id, rule) for asset_id, rule in logged}

        new_logs = [NotificationLog(asset_id=entity.id, rule=rule.name, sent_at=now)
                    for rule, pairs in targets.items()
                    for entity, _ in pairs
                    if (entity.id, rule.name) not in logged_today]
        if new_logs:
            try:
                self.session.add_all(new_logs)
                self.session.commit()
            except SQLAlchemyError as e:
                self.session.rollback()
                logger.exception("Writing %d notification logs failed", len(new_logs))
                raise StorageWriteError(str(e)) from e

        logger.info("Expiry run: %d candidates, %d newly logged", len(candidates), len(new_logs))
        return {
            'summary': {
                'totalCandidates': len(candidates),
                'd30': len(targets[ExpiryRule.D30]),
                'd7': len(targets[ExpiryRule.D7]),
                'newlyLogged': len(new_logs),
            },
            'candidates': {
                rule.name.lower(): [{'id': entity.id, 'title': entity.title,
                                     'expiresAt': expires.isoformat()}
                                    for entity, expires in targets[rule]]
                for rule in ExpiryRule
            },
        }

    def logs(self, range_name='today', now=None):
        if range_name not in LOG_RANGES:
            raise ValueError(f"range must be one of: {', '.join(LOG_RANGES)}")
        since = _start_of_day(now or datetime.utcnow()) - timedelta(days=LOG_RANGES[range_name])
        return (self.session.query(NotificationLog)
                .filter(NotificationLog.sent_at >= since)
                .order_by(NotificationLog.sent_at.desc(), NotificationLog.id.desc())
                .limit(MAX_LOGS)
                .all())
