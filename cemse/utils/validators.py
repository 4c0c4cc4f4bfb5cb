"""Validators and coercion helpers for request payloads."""

import json
import math
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Type

from cemse.core.exceptions import ValidationError


def validate_email(email: str) -> bool:
    """Validate email format."""
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(data: Dict[str, Any], fields: Iterable[str]) -> None:
    """Raise for the first missing field, in the order given."""
    for field in fields:
        if is_blank(data.get(field)):
            raise ValidationError(f"{field} is required", field=field)


def missing_fields(data: Dict[str, Any], fields: Iterable[str]) -> List[str]:
    return [field for field in fields if is_blank(data.get(field))]


def parse_optional_datetime(value: Any) -> Optional[datetime]:
    """Coerce a date-like value to a naive UTC datetime.

    Empty or malformed input becomes None rather than an error.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        except (OverflowError, ValueError):
            # Offset pushes the instant outside the representable range
            return None
    return parsed


def parse_optional_number(value: Any, field: str) -> Optional[float]:
    if is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", field=field)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number", field=field)
    if not math.isfinite(number):
        raise ValidationError(f"{field} must be a number", field=field)
    return number


def parse_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def parse_string_list(value: Any) -> List[str]:
    """Accept a list, a JSON array string or a comma-separated string."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        if text.startswith("["):
            try:
                items = json.loads(text)
            except ValueError:
                items = text.strip("[]").split(",")
        else:
            items = text.split(",")
    else:
        items = [value]
    return [str(item).strip() for item in items if str(item).strip()]


def validate_choice(value: Any, enum_class: Type[Enum], field: str) -> str:
    allowed = [member.value for member in enum_class]
    if value not in allowed:
        raise ValidationError(f"Invalid {field}. Allowed values: {', '.join(allowed)}", field=field)
    return value
