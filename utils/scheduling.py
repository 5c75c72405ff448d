"""Interview scheduling with the status guard applied and a notification queued."""
import logging

from utils import outbox, store
from utils.status import INTERVIEW_SCHEDULED, decide_status, parse_status

log = logging.getLogger(__name__)

INTERVIEW_MODES = ("Online", "Offline")
INTERVIEW_RESULTS = ("Pending", "Passed", "Failed")


class ApplicationNotFound(LookupError):
    pass


def interview_message(interview_date, interview_time=None):
    message = f"Interview scheduled on {interview_date}"
    if interview_time:
        message += f" at {interview_time}"
    return message


def schedule_interview(application_id, interview_date, interview_mode, result="Pending", interview_time=None, admin_id=None):
    """Record an interview and move the application to ``Interview`` when allowed.

    Store errors while inserting the interview or updating the status
    propagate to the caller. The notification is appended whatever the
    status decision was, and a failed append does not fail the scheduling.

    Returns ``(interview, application)``.
    """
    current = store.get_application_status(application_id)
    if current is None:
        raise ApplicationNotFound(f"Application {application_id} not found")

    interview = store.insert_interview(application_id, interview_date, interview_mode, result)

    new_status = decide_status(current, INTERVIEW_SCHEDULED)
    if parse_status(current) != new_status:
        store.set_application_status(application_id, new_status)
        log.info("✅ Status updated: Application %s %s -> %s", application_id, current, new_status.value)
    else:
        log.info("Application %s keeps status %s after interview scheduling", application_id, current)

    outbox.append(interview_message(interview_date, interview_time), application_id, admin_id=admin_id)

    return interview, store.get_application(application_id)
