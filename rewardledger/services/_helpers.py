"""Shared utilities for the service layer."""

import json
import re
import time
from collections.abc import Mapping

Serializable = Mapping[str, object] | list[Mapping[str, object]]

INT32_MIN: int = -(2**31)
INT32_MAX: int = 2**31 - 1

_INT_RE = re.compile(r"^\s*[+-]?[0-9]+\s*$")


def now_ts() -> int:
    return int(time.time())


def format_amount(amount: int, decimals: int = 8) -> str:
    """Render smallest-unit ``amount`` as a decimal string of the base unit.

    Whole part by integer division, fraction from the remainder; the value is
    never reinterpreted as a float.
    """
    coin: int = 10**decimals
    sign: str = "-" if amount < 0 else ""
    whole, frac = divmod(abs(amount), coin)
    if not decimals:
        return f"{sign}{whole}"
    return f"{sign}{whole}.{frac:0{decimals}d}"


def format_percent(rate: float) -> float:
    """Fractional rate -> percent for display."""
    return rate * 100.0


def parse_int32(raw: object) -> int:
    """Parse a signed 32-bit integer; raise ValueError on any other input."""
    if not isinstance(raw, str) or not _INT_RE.match(raw):
        raise ValueError(f"not an integer: {raw!r}")
    value: int = int(raw)
    if value < INT32_MIN or value > INT32_MAX:
        raise OverflowError(f"integer out of range: {raw!r}")
    return value


def dump_json(obj: Serializable) -> str:
    return json.dumps(obj, default=str, indent=2)
