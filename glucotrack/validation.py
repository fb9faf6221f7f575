import re
from datetime import date, datetime, time

_CHAT_ID_PATTERN = re.compile(r"^(-?\d+|@[A-Za-z][A-Za-z0-9_]{3,})$")


def parse_date(date_str: str) -> date:
    return datetime.strptime(date_str, "%Y-%m-%d").date()


def parse_time(time_str: str) -> time:
    return datetime.strptime(time_str, "%H:%M").time()


def validate_glucose_value(value) -> tuple[bool, str]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return False, "Enter a glucose value."
    if isinstance(value, bool):
        return False, "The glucose value must be a whole number."
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False, "The glucose value must be a whole number."
    if not number.is_integer():
        return False, "The glucose value must be a whole number."
    if number < 1 or number > 1000:
        return False, "The glucose value must be between 1 and 1000 mg/dL."
    return True, ""


def validate_date(date_str: str) -> tuple[bool, str]:
    try:
        parse_date(date_str)
    except (TypeError, ValueError):
        return False, "The date must use the YYYY-MM-DD format."
    return True, ""


def validate_time(time_str: str) -> tuple[bool, str]:
    try:
        parse_time(time_str)
    except (TypeError, ValueError):
        return False, "The time must use the 24-hour HH:MM format."
    return True, ""


def validate_chat_id(chat_id: str) -> tuple[bool, str]:
    if not chat_id.strip():
        return False, "The Telegram chat ID is required."
    if not _CHAT_ID_PATTERN.match(chat_id.strip()):
        return False, "The Telegram chat ID must be a number (e.g. 123456789) or an @channel name."
    return True, ""
