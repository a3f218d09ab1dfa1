"""Shared parsing helpers for request payloads.

clean_text:            strips strings, rejects non-scalar values
parse_date_input:      raises ValueError on invalid input
parse_datetime_input:  raises ValueError on invalid input, returns naive local time
"""
from datetime import date, datetime

from crm.core.exceptions import ValidationError

_DATE_FORMATS = ("%d/%m/%Y", "%d.%m.%Y")
_DATETIME_FORMATS = ("%d/%m/%Y %H:%M", "%d/%m/%Y %H:%M:%S")


def is_blank(value) -> bool:
    """True for None and for strings that are empty once stripped."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def clean_text(field: str, value, max_length: int | None = None):
    """Strip a free-text payload value; numbers are stringified.

    Raises ValidationError for objects, lists and booleans.
    """
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ValidationError(f"{field} must be a string", details={field: "invalid_type"})
    text = str(value).strip()
    return text[:max_length] if max_length else text


def parse_date_input(value):
    """Parse a date string, raising ValueError on bad input.

    Supports: YYYY-MM-DD, full ISO datetimes (date part kept), DD/MM/YYYY,
    DD.MM.YYYY, date objects.
    """
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    value = str(value).strip()
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise ValueError("Invalid date format. Use YYYY-MM-DD or DD/MM/YYYY.")


def parse_datetime_input(value):
    """Parse a datetime string, raising ValueError on bad input.

    Timezone-aware values (``...Z`` or ``+02:00`` as sent by browsers) are
    converted to server local time and made naive; every stored date_heure
    is naive local time.
    """
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        raw = str(value).strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            dt = None
            for fmt in _DATETIME_FORMATS:
                try:
                    dt = datetime.strptime(raw, fmt)
                    break
                except ValueError:
                    continue
            if dt is None:
                raise ValueError(
                    "Invalid datetime format. Use ISO 8601 (YYYY-MM-DDTHH:MM)."
                ) from None
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt
