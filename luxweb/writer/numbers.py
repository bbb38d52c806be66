from __future__ import annotations

import math
from typing import Iterable, List


def format_number(value: float) -> str:
    """Shortest round-trip decimal; integral values carry no fractional part."""
    v = float(value)
    if v == 0.0:
        return "0"
    if v.is_integer() and abs(v) < 1e15:
        return str(int(v))
    return repr(v)


def clean_ratio(value: float, divisor: float) -> float:
    """
    ``value / divisor`` with division noise removed (12 significant digits),
    as long as multiplying back still gives ``value`` exactly.
    """
    v = float(value)
    d = float(divisor)
    if d == 1.0:
        return v
    q = v / d
    if not math.isfinite(q):
        return q
    cleaned = float(f"{q:.12g}")
    return cleaned if cleaned * d == v else q


def chunked_lines(values: Iterable[float], per_line: int) -> List[str]:
    tokens = [format_number(v) for v in values]
    return [" ".join(tokens[i : i + per_line]) for i in range(0, len(tokens), per_line)]
