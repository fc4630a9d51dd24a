"""
Numeric encoding for store round-trips.

Scores are written in canonical positional decimal so the same float
always produces the same string, and replies are decoded back into
member/score mappings.
"""

from typing import Any, Sequence

import numpy as np

from forgettable.storage.base import DecodeError


def format_float(value: float) -> str:
    """
    Format a float in canonical decimal form.

    Uses the shortest digit string that round-trips, never exponent
    notation, and no trailing ".0" (1.0 -> "1", 1e-05 -> "0.00001").
    """
    if np.isnan(value):
        raise ValueError("NaN cannot be stored as a score")
    return np.format_float_positional(float(value), unique=True, trim="-")


def format_int(value: int) -> str:
    """Format an integer the same way everywhere."""
    return str(int(value))


def _to_str(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def parse_float(value: Any) -> float:
    """
    Parse a score returned by the store.

    Raises:
        DecodeError: value is not a number
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    try:
        return float(_to_str(value))
    except (TypeError, ValueError, UnicodeDecodeError) as e:
        raise DecodeError(f"Unparsable score {value!r}") from e


def float_map(values: Sequence[Any]) -> dict[str, float]:
    """
    Convert a flat [member, score, member, score, ...] reply into a mapping.

    Order of the reply is preserved.

    Raises:
        DecodeError: odd number of values or an unparsable score
    """
    if values is None:
        return {}
    if len(values) % 2 != 0:
        raise DecodeError("float_map expects an even number of values")

    result: dict[str, float] = {}
    for i in range(0, len(values), 2):
        member = values[i]
        if not isinstance(member, (str, bytes)):
            raise DecodeError(f"Member is not a string value: {member!r}")
        result[_to_str(member)] = parse_float(values[i + 1])
    return result
