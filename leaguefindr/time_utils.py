import re
from datetime import UTC, date, datetime

_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')
_ZONED_RE = re.compile(
    r'^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d{1,9}))?(Z|[+-]\d{2}:\d{2})$'
)
_LOCAL_RE = re.compile(r'^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d{1,6}))?$')


def utcnow_naive():
    """Return current UTC timestamp as naive datetime for DB timestamp columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def _build_datetime(base, fraction, zone):
    micros = (fraction or '').ljust(6, '0')[:6]
    text = f'{base}.{micros}'
    if zone:
        text += '+00:00' if zone == 'Z' else zone
    return datetime.fromisoformat(text)


def parse_timestamp(value):
    """Parse RFC3339 (with or without nanoseconds) or a zone-less ISO timestamp.

    Returns a naive UTC datetime. Zone-less values are taken as UTC.
    """
    text = str(value or '').strip()
    match = _ZONED_RE.match(text)
    if match:
        parsed = _build_datetime(*match.groups())
        return parsed.astimezone(UTC).replace(tzinfo=None)
    match = _LOCAL_RE.match(text)
    if match:
        return _build_datetime(match.group(1), match.group(2), None)
    raise ValueError(f'invalid timestamp: {value!r}')


def parse_date(value):
    """Parse YYYY-MM-DD or an RFC3339 timestamp into a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or '').strip()
    if _DATE_RE.match(text):
        return date.fromisoformat(text)
    match = _ZONED_RE.match(text)
    if match:
        return _build_datetime(*match.groups()).date()
    raise ValueError(f'invalid date: {value!r}')


def format_timestamp(value):
    """Render a naive UTC datetime as RFC3339 with trailing zeros trimmed."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    text = value.strftime('%Y-%m-%dT%H:%M:%S')
    if value.microsecond:
        text += '.' + f'{value.microsecond:06d}'.rstrip('0')
    return text + 'Z'


def format_date(value):
    if value is None:
        return None
    return value.strftime('%Y-%m-%dT00:00:00Z')
