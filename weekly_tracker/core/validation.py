"""Numeric input validation for targets and daily entries."""

import functools
import re
import threading
from decimal import Decimal, InvalidOperation
from typing import Callable, NamedTuple, Optional, Union

_DIGITS = re.compile(r"[0-9]+")

# Largest value the Integer columns hold (32-bit signed)
MAX_VALUE = 2_147_483_647


class ValidationResult(NamedTuple):
    """Outcome of strict validation."""

    valid: bool
    value: Optional[int]
    error: Optional[str] = None


def sanitize_number(raw: Optional[str]) -> Optional[int]:
    """
    Sanitize a keystroke-level numeric input.

    Only whole numbers from 0 to ``MAX_VALUE`` survive. Anything else (empty,
    negative, fractional, non-numeric, too large) comes back as ``None`` so
    the cell is cleared rather than coerced to zero.
    """
    if raw is None:
        return None
    text = str(raw).strip()
    if not _DIGITS.fullmatch(text):
        return None
    text = text.lstrip("0") or "0"
    if len(text) > len(str(MAX_VALUE)):
        return None
    value = int(text)
    if value > MAX_VALUE:
        return None
    return value


def validate_non_negative_integer(raw: Union[str, int, float, None]) -> ValidationResult:
    """Validate a value and classify why it was rejected."""
    if raw is None or isinstance(raw, bool):
        return ValidationResult(False, None, "Must be a valid number")
    try:
        number = Decimal(str(raw).strip())
    except InvalidOperation:
        return ValidationResult(False, None, "Must be a valid number")
    if not number.is_finite():
        return ValidationResult(False, None, "Must be a valid number")

    if number < 0:
        return ValidationResult(False, None, "Cannot be negative")

    if number != number.to_integral_value():
        return ValidationResult(False, None, "Must be a whole number")

    if number > MAX_VALUE:
        return ValidationResult(False, None, f"Must be at most {MAX_VALUE}")

    return ValidationResult(True, int(number))


def debounce(wait: float) -> Callable:
    """Delay calls until ``wait`` seconds pass without another call.

    Only the last call's arguments are used. Runs on a ``threading.Timer``.
    """

    def decorator(func: Callable) -> Callable:
        lock = threading.Lock()
        timer: Optional[threading.Timer] = None

        @functools.wraps(func)
        def debounced(*args, **kwargs):
            nonlocal timer
            with lock:
                if timer is not None:
                    timer.cancel()
                timer = threading.Timer(wait, func, args=args, kwargs=kwargs)
                timer.daemon = True
                timer.start()

        def cancel():
            nonlocal timer
            with lock:
                if timer is not None:
                    timer.cancel()
                    timer = None

        debounced.cancel = cancel
        return debounced

    return decorator
