from __future__ import annotations

from typing import Tuple

import numpy as np


def find_bracket(val: float, arr: np.ndarray) -> Tuple[int, int, float]:
    """Indices and weight of the two samples around ``val``; clamps at the ends."""
    n = len(arr)
    if n == 0:
        return 0, 0, 0.0
    if val <= arr[0]:
        return 0, 0, 0.0
    if val >= arr[-1]:
        return n - 1, n - 1, 0.0
    i = int(np.searchsorted(arr, val, side="right")) - 1
    if arr[i] == val:
        return i, i, 0.0
    d = float(arr[i + 1] - arr[i])
    t = (val - float(arr[i])) / d if d != 0.0 else 0.0
    return i, i + 1, t


def find_cyclic_bracket(val: float, arr: np.ndarray, period: float = 360.0) -> Tuple[int, int, float]:
    """Like find_bracket, but the gap after the last sample closes back onto the first."""
    n = len(arr)
    if n <= 1:
        return 0, 0, 0.0

    lo = float(arr[0])
    x = ((float(val) - lo) % period) + lo
    if x > float(arr[-1]):
        denom = (lo + period) - float(arr[-1])
        t = (x - float(arr[-1])) / denom if denom != 0.0 else 0.0
        return n - 1, 0, t
    return find_bracket(x, arr)


def bilinear(values: np.ndarray, h: Tuple[int, int, float], v: Tuple[int, int, float]) -> float:
    h_lo, h_hi, h_t = h
    v_lo, v_hi, v_t = v
    c00 = float(values[h_lo, v_lo])
    if h_t == 0.0 and v_t == 0.0:
        return c00
    c01 = float(values[h_lo, v_hi])
    c10 = float(values[h_hi, v_lo])
    c11 = float(values[h_hi, v_hi])
    v0 = c00 * (1.0 - v_t) + c01 * v_t
    v1 = c10 * (1.0 - v_t) + c11 * v_t
    return v0 * (1.0 - h_t) + v1 * h_t


def bilinear_grid(
    h_axis: np.ndarray,
    v_axis: np.ndarray,
    values: np.ndarray,
    hq: np.ndarray,
    vq: np.ndarray,
) -> np.ndarray:
    """
    Vectorised bilinear sampling of ``values[h, v]`` at query points ``(hq, vq)``.

    Queries must already lie inside the axes; a single-sample axis is constant.
    """
    hq = np.asarray(hq, dtype=float)
    vq = np.asarray(vq, dtype=float)
    h_lo, h_hi, h_t = _axis_weights(np.asarray(h_axis, dtype=float), hq)
    v_lo, v_hi, v_t = _axis_weights(np.asarray(v_axis, dtype=float), vq)
    c00 = values[h_lo, v_lo]
    c01 = values[h_lo, v_hi]
    c10 = values[h_hi, v_lo]
    c11 = values[h_hi, v_hi]
    v0 = c00 * (1.0 - v_t) + c01 * v_t
    v1 = c10 * (1.0 - v_t) + c11 * v_t
    return v0 * (1.0 - h_t) + v1 * h_t


def _axis_weights(axis: np.ndarray, q: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    n = axis.size
    if n == 1:
        zeros = np.zeros(q.shape, dtype=int)
        return zeros, zeros, np.zeros(q.shape, dtype=float)
    q = np.clip(q, axis[0], axis[-1])
    hi = np.clip(np.searchsorted(axis, q, side="right"), 1, n - 1)
    lo = hi - 1
    span = axis[hi] - axis[lo]
    t = np.where(span > 0.0, (q - axis[lo]) / np.where(span > 0.0, span, 1.0), 0.0)
    return lo, hi, np.clip(t, 0.0, 1.0)
