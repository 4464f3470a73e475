"""
Custom validators
"""
import re
from datetime import date, datetime, time

TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):([0-5]\d)$')
DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def validate_time(value: str) -> str:
    """
    Validate a 24h clock time
    Expected format: HH:MM
    """
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise ValueError("Invalid time format (HH:MM).")
    return value


def validate_date(value) -> str:
    """
    Validate a calendar date and return it as YYYY-MM-DD
    Accepts date/datetime objects or strings
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValueError("A date is required (YYYY-MM-DD).")
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValueError("A date is required (YYYY-MM-DD).")
    return value


def parse_time(value: str) -> time:
    hours, minutes = value.split(":", 1)
    return time(int(hours), int(minutes))


def validate_mobile(mobile: str) -> bool:
    """
    Validate Indian mobile number
    Accepts: +919876543210 or 9876543210
    """
    pattern = r'^(\+91)?[6-9]\d{9}$'
    return bool(re.match(pattern, mobile))


def validate_ifsc(code: str) -> bool:
    """IFSC: 4 letters, a zero, 6 alphanumerics (e.g. SBIN0001234)"""
    return bool(re.match(r'^[A-Z]{4}0[A-Z0-9]{6}$', code.upper()))


def validate_upi_id(upi_id: str) -> bool:
    """UPI handle, e.g. name@okbank"""
    return bool(re.match(r'^[\w.\-]{2,256}@[a-zA-Z][a-zA-Z0-9]{1,64}$', upi_id))


def validate_photo_data_url(value: str) -> bool:
    return value.startswith("data:image/") and ";base64," in value
