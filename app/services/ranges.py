"""Parsing of size-chart cells.

A cell is either a single value (``"92"``) or a dash-delimited range
(``"92 - 96"``). Numbers are read leniently: a leading numeric prefix is used
and anything after it is ignored, so ``"92cm"`` reads as 92. Unreadable
numbers give a center of 0, which pushes a size's score up instead of raising,
and classify as loose.
"""
import re
from typing import Optional, Tuple

from ..schemas.sizing import MeasurementStatus


SINGLE_VALUE_TOLERANCE_CM = 2.0

_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _read_number(text: str) -> Optional[float]:
    match = _NUMBER_PREFIX.match(text.strip())
    if not match:
        return None
    return float(match.group(0))


def is_range(cell: str) -> bool:
    return "-" in cell.strip()


def parse_bounds(cell: str) -> Tuple[float, float]:
    """Return (min, max) of a range cell. A missing max falls back to min."""
    parts = [p.strip() for p in cell.strip().split("-")]
    low = _read_number(parts[0])
    high = _read_number(parts[1]) if len(parts) > 1 and parts[1] else low
    if low is None or high is None:
        return 0.0, 0.0
    return low, high


def parse_center(cell: str) -> float:
    trimmed = cell.strip()
    if is_range(trimmed):
        low, high = parse_bounds(trimmed)
        return (low + high) / 2
    value = _read_number(trimmed)
    return value if value is not None else 0.0


def _status_bounds(cell: str) -> Optional[Tuple[float, float]]:
    """Bounds used for classification. An unreadable or zero max falls back to min."""
    parts = cell.strip().split("-")
    low = _read_number(parts[0])
    if low is None:
        return None
    high = _read_number(parts[1]) if len(parts) > 1 else None
    return low, high or low


def classify(user_value: float, cell: str) -> MeasurementStatus:
    """ok/tight/loose for ``user_value`` against a cell; unreadable bounds read as loose."""
    trimmed = cell.strip()
    if is_range(trimmed):
        bounds = _status_bounds(trimmed)
        if bounds is None:
            return MeasurementStatus.LOOSE
        low, high = bounds
        if low <= user_value <= high:
            return MeasurementStatus.OK
        if user_value < low:
            return MeasurementStatus.TIGHT
        return MeasurementStatus.LOOSE

    target = _read_number(trimmed)
    if target is None:
        return MeasurementStatus.LOOSE
    if abs(user_value - target) <= SINGLE_VALUE_TOLERANCE_CM:
        return MeasurementStatus.OK
    if user_value < target:
        return MeasurementStatus.TIGHT
    return MeasurementStatus.LOOSE
