from enum import Enum
from typing import TypeVar

from salon_pos.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_positive_int(value, label: str = "Quantity") -> int:
    # bool is an int subclass; True is not a quantity
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ValidationError(f"{label} must be a positive integer")
    return value


def require_text(value: str | None, label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{label} is required")
    return value


def coerce_choice(enum_cls: type[E], value, label: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"Invalid {label} '{value}'. Expected one of: {choices}") from None
