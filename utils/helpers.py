import re
from datetime import date, datetime, timedelta
from decimal import Decimal

_ISO_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")

_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y", "%d %b %Y", "%b %d, %Y")


def format_timedelta(value):
    """Render a TIME column (returned by mysql-connector as ``timedelta``) as ``HH:MM:SS``."""
    total = int(value.total_seconds()) % (24 * 3600)
    return f"{total // 3600:02d}:{total % 3600 // 60:02d}:{total % 60:02d}"


def normalize_to_date(value):
    """Return ``value`` as a ``YYYY-MM-DD`` string, or ``None`` if it can't be read as a date.

    Accepts date objects, ISO strings (anything after the date part, such as a
    time or timezone, is dropped) and a few common human formats.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    text = str(value).strip()
    if _ISO_DATE_PREFIX.match(text):
        try:
            return datetime.strptime(text[:10], "%Y-%m-%d").date().isoformat()
        except ValueError:
            return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    return None


def normalize_time(value):
    """Return ``HH:MM`` / ``HH:MM:SS`` strings unchanged, anything else as ``None``."""
    if not value:
        return None
    text = str(value).strip()
    if re.match(r"^\d{1,2}:\d{2}(:\d{2})?$", text):
        return text
    return None


def normalize_choice(value, valid_choices, default=None):
    """Match ``value`` case-insensitively against ``valid_choices`` and return the canonical spelling."""
    if value is None or value == "":
        return default
    lowered = str(value).strip().lower()
    for choice in valid_choices:
        if choice.lower() == lowered:
            return choice
    return None


def parse_id(value):
    """Parse a positive integer identifier; ``None`` when missing or invalid."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def serialize_row(row):
    """Convert driver values (dates, timedeltas, decimals) into JSON friendly ones."""
    if row is None:
        return None
    out = {}
    for key, value in row.items():
        if isinstance(value, (datetime, date)):
            out[key] = value.isoformat() if isinstance(value, datetime) else value.strftime("%Y-%m-%d")
        elif isinstance(value, timedelta):
            out[key] = format_timedelta(value)
        elif isinstance(value, Decimal):
            out[key] = float(value)
        else:
            out[key] = value
    return out


def serialize_rows(rows):
    return [serialize_row(r) for r in rows or []]
