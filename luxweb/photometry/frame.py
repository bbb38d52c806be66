"""
Luminaire frame conventions for the three photometric types.

Local axes: +X luminaire length (major) axis, +Y width (minor) axis, +Z up,
so the photometric zero direction (nadir) is -Z.

    Type C  polar axis Z:  d = (sin g cos C, sin g sin C, -cos g)
    Type B  polar axis Y:  d = (cos V sin H, sin V, -cos V cos H)
    Type A  polar axis X:  d = (sin V, cos V sin H, -cos V cos H)

All functions are vectorised over leading array dimensions; angles in degrees.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from luxweb.errors import UnsupportedPhotometricType
from luxweb.models.photometry import PhotometricType


def type_c_directions(c_deg, g_deg) -> np.ndarray:
    c = np.radians(np.asarray(c_deg, dtype=float))
    g = np.radians(np.asarray(g_deg, dtype=float))
    return np.stack([np.sin(g) * np.cos(c), np.sin(g) * np.sin(c), -np.cos(g)], axis=-1)


def direction_to_type_c(d: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    d = _normalise(d)
    g = np.degrees(np.arccos(np.clip(-d[..., 2], -1.0, 1.0)))
    c = np.mod(np.degrees(np.arctan2(d[..., 1], d[..., 0])), 360.0)
    return c, g


def native_directions(ptype: PhotometricType, h_deg, v_deg) -> np.ndarray:
    ptype = PhotometricType.coerce(ptype)
    if ptype == PhotometricType.C:
        return type_c_directions(h_deg, v_deg)
    h = np.radians(np.asarray(h_deg, dtype=float))
    v = np.radians(np.asarray(v_deg, dtype=float))
    lateral = np.cos(v) * np.sin(h)
    down = -np.cos(v) * np.cos(h)
    if ptype == PhotometricType.B:
        return np.stack([lateral, np.sin(v), down], axis=-1)
    return np.stack([np.sin(v), lateral, down], axis=-1)


def direction_to_native(ptype: PhotometricType, d: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Native ``(H, V)`` of each direction; H in (-180, 180], V in [-90, 90] for A/B."""
    ptype = PhotometricType.coerce(ptype)
    if ptype == PhotometricType.C:
        return direction_to_type_c(d)
    d = _normalise(d)
    if ptype == PhotometricType.B:
        polar, lateral = d[..., 1], d[..., 0]
    elif ptype == PhotometricType.A:
        polar, lateral = d[..., 0], d[..., 1]
    else:
        raise UnsupportedPhotometricType(f"Unsupported photometric type: {ptype!r}")
    v = np.degrees(np.arcsin(np.clip(polar, -1.0, 1.0)))
    h = np.degrees(np.arctan2(lateral, -d[..., 2]))
    return h, v


def _normalise(d: np.ndarray) -> np.ndarray:
    d = np.asarray(d, dtype=float)
    n = np.linalg.norm(d, axis=-1, keepdims=True)
    return d / np.where(n > 0.0, n, 1.0)
