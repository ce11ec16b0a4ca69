"""Lenient numeric coercion shared by the value objects and calculators."""

from __future__ import annotations

import math
from decimal import Decimal
from numbers import Real
from typing import Annotated, Any

from pydantic import BeforeValidator


def coerce_number(value: Any) -> float:
    """Return ``value`` as a finite float, treating anything else as zero.

    Numeric strings are parsed; booleans, ``None``, NaN, infinities and
    unparsable values all collapse to ``0.0``.
    """

    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (Real, Decimal)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        return 0.0

    if not math.isfinite(number):
        return 0.0
    return number


def clamp_non_negative(value: Any) -> float:
    """Coerce ``value`` and floor the result at zero."""

    return max(0.0, coerce_number(value))


def _missing_as_true(value: Any) -> Any:
    return True if value is None else value


def _missing_as_false(value: Any) -> Any:
    return False if value is None else value


# Rebate switches: null means "use the default"; other values go through
# pydantic's bool parsing, so "false", "0" and "off" disable a rebate.
SelfRebateFlag = Annotated[bool, BeforeValidator(_missing_as_true)]
RebateFlag = Annotated[bool, BeforeValidator(_missing_as_false)]


__all__ = ["RebateFlag", "SelfRebateFlag", "clamp_non_negative", "coerce_number"]
