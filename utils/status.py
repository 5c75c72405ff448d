"""Application status values and the rule applied when an interview is scheduled."""
from enum import Enum


class ApplicationStatus(str, Enum):
    APPLIED = "Applied"
    PROCESSING = "Processing"
    INTERVIEW = "Interview"
    SELECTED = "Selected"
    REJECTED = "Rejected"
    NO_RESPONSE = "No Response"


# Automated events never move an application out of these states.
# Admins can still override them through the manual status update.
TERMINAL_STATUSES = frozenset({ApplicationStatus.SELECTED, ApplicationStatus.REJECTED})

INTERVIEW_SCHEDULED = "interview_scheduled"

APPLICATION_STATUSES = [s.value for s in ApplicationStatus]


def parse_status(value):
    """Map a stored status string to ``ApplicationStatus``; ``None`` when unknown."""
    if isinstance(value, ApplicationStatus):
        return value
    if value is None:
        return None
    try:
        return ApplicationStatus(str(value).strip())
    except ValueError:
        return None


def is_terminal(status):
    return parse_status(status) in TERMINAL_STATUSES


def decide_status(current, event=INTERVIEW_SCHEDULED):
    """Return the status an application should hold after ``event``.

    Terminal statuses are returned unchanged, as is ``Interview`` so that a
    second interview does not re-fire a status change. Anything else,
    including an unknown or empty stored status, moves to ``Interview``.
    """
    if event != INTERVIEW_SCHEDULED:
        raise ValueError(f"Unsupported application event: {event!r}")

    status = parse_status(current)
    if status in TERMINAL_STATUSES:
        return status
    if status == ApplicationStatus.INTERVIEW:
        return status
    return ApplicationStatus.INTERVIEW
