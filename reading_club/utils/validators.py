"""
Validation utilities for the Reading Club backend
Provides reusable parsing and validation helpers for API endpoints

Helpers raise ValidationException so @handle_errors turns them into 400s.
"""
import re
from datetime import datetime, date
from typing import Any, Dict, List, Optional

from reading_club.error_handlers.exceptions import ValidationException

_BOOL_STRINGS = {'true': True, 'false': False, '1': True, '0': False}


def validate_date_param(date_str: str, param_name: str = 'date') -> date:
    """
    Validate and parse date parameter from string.

    Args:
        date_str: Date string in YYYY-MM-DD format
        param_name: Name of parameter for error messages (default: 'date')

    Returns:
        date: Parsed date object

    Raises:
        ValidationException: If date format is invalid

    Examples:
        >>> validate_date_param('2025-10-15')
        datetime.date(2025, 10, 15)
    """
    try:
        return datetime.strptime(date_str, '%Y-%m-%d').date()
    except (TypeError, ValueError):
        raise ValidationException(
            f"Invalid {param_name} format. Use YYYY-MM-DD (e.g., 2025-10-15)"
        )


def validate_required_fields(data: Dict[str, Any], required_fields: List[str]) -> None:
    """
    Validate that all required fields are present and non-empty in request data.

    Raises:
        ValidationException: If any required field is missing
    """
    missing = [field for field in required_fields if data.get(field) in (None, '')]
    if missing:
        raise ValidationException(f"Missing required fields: {', '.join(missing)}")


def parse_int_param(value: Any, param_name: str, minimum: Optional[int] = None) -> Optional[int]:
    """
    Parse an optional integer parameter.

    Returns:
        int or None when the value is absent/blank

    Raises:
        ValidationException: If the value is not an integer or below minimum
    """
    if value is None or value == '':
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationException(f"{param_name} must be an integer")
    if minimum is not None and parsed < minimum:
        raise ValidationException(f"{param_name} must be at least {minimum}")
    return parsed


def parse_bool_param(value: Any, param_name: str, default: bool = False) -> bool:
    """
    Parse an optional boolean flag.

    Accepts JSON booleans and the strings true/false/1/0 in any case.

    Raises:
        ValidationException: For any other value
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _BOOL_STRINGS:
        return _BOOL_STRINGS[value.strip().lower()]
    raise ValidationException(f"{param_name} must be true or false")


def parse_id_mapping(value: Any, param_name: str) -> Dict[int, int]:
    """
    Parse a JSON object of {schedule_id: user_id} pairs.

    JSON object keys always arrive as strings, so both sides are cast.

    Raises:
        ValidationException: If the value is not a mapping of integers
    """
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationException(f"{param_name} must be an object of schedule_id -> user_id")
    try:
        return {int(key): int(val) for key, val in value.items()}
    except (TypeError, ValueError):
        raise ValidationException(f"{param_name} keys and values must be integers")


def sanitize_request_data(data: str) -> str:
    """
    Remove sensitive data from request strings for safe logging.

    Examples:
        >>> sanitize_request_data('{"token": "abc"}')
        '{"token": "[REDACTED]"}'
    """
    for field in ('password', 'token', 'api_token', 'api_key', 'secret'):
        data = re.sub(rf'("{field}"\s*:\s*")[^"]*(")', r'\1[REDACTED]\2', data, flags=re.IGNORECASE)
    return data
