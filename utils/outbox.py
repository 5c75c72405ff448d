"""Notification outbox.

A notification row is the record of an obligation to tell a user about an
event. Rows are written with ``delivered=0`` and picked up later by the
delivery poller. Appending is best-effort: a failure is logged and never
fails the action that triggered it.
"""
import logging
from dataclasses import dataclass, asdict
from datetime import date, datetime, time, timedelta
from typing import Optional

from utils import store
from utils.helpers import format_timedelta

log = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M:%S"


def format_date(value):
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.strftime(DATE_FORMAT)
    return str(value)[:10]


def format_time(value):
    if value is None:
        return None
    if isinstance(value, timedelta):
        return format_timedelta(value)
    if isinstance(value, (time, datetime)):
        return value.strftime(TIME_FORMAT)
    return str(value)[:8]


@dataclass(frozen=True)
class NotificationPayload:
    """Body of the ``notification`` event pushed to a user's channel."""

    notificationID: int
    type: str
    date: str
    time: str
    applicationID: int
    adminID: Optional[int] = None

    @classmethod
    def from_row(cls, row):
        admin_id = row.get("adminID")
        return cls(
            notificationID=int(row["notificationID"]),
            type=str(row["type"]),
            date=format_date(row.get("date")),
            time=format_time(row.get("time")),
            applicationID=int(row["applicationID"]),
            adminID=int(admin_id) if admin_id is not None else None,
        )

    def to_dict(self):
        return asdict(self)


def append(notification_type, application_id, admin_id=None, occurred_at=None):
    """Write an undelivered notification; return its id, or ``None`` on failure.

    ``occurred_at`` defaults to the server's local time. No timezone
    conversion is applied.
    """
    occurred_at = occurred_at or datetime.now()
    try:
        notification_id = store.insert_notification(
            notification_type,
            occurred_at.strftime(DATE_FORMAT),
            occurred_at.strftime(TIME_FORMAT),
            application_id,
            admin_id,
        )
    except Exception:
        log.exception("⚠️ Failed to append notification for application %s (non-blocking)", application_id)
        return None

    log.info("✅ Notification %s queued for application %s: %s", notification_id, application_id, notification_type)
    return notification_id
