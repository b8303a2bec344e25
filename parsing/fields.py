"""Numeric field coercion at the parse and format boundaries."""

import logging
import warnings
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Optional

import config
from core.errors import FieldCoercionWarning


def parse_decimal(text: Optional[str], default: str, context: str = "") -> Decimal:
    """Parses a decimal literal, falling back to ``default`` with a warning.

    Args:
        text: The raw field text, possibly None if the field was absent.
        default: The literal to use when ``text`` is missing or malformed.
        context: Description of the field for the diagnostic message.
    """
    if text is not None:
        try:
            value = Decimal(text.strip().strip('"'))
            if value.is_finite():
                return value
        except InvalidOperation:
            pass
    message = f"Invalid decimal {text!r} for {context or 'field'}, using {default}"
    logging.warning(message)
    warnings.warn(message, FieldCoercionWarning, stacklevel=2)
    return Decimal(default)


def is_decimal(text: str) -> bool:
    try:
        return Decimal(text.strip().strip('"')).is_finite()
    except InvalidOperation:
        return False


def format_decimal(value: Decimal, places: int = config.POP_SIZE_DECIMALS) -> str:
    """Formats a decimal with a fixed number of places (``0.00021`` -> ``0.00021``)."""
    value = Decimal(value)
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the places
        ctx.prec = max(ctx.prec, value.adjusted() + places + 2)
        return f"{value.quantize(quantum, rounding=ROUND_HALF_UP):f}"
