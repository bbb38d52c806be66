"""
EULUMDAT C-plane symmetry.

The symmetry indicator says which C-planes a file actually stores; the rest
are exact mirror copies. Indices below are 0-based into the file's full list
of Mc C-plane angles.

    0  no symmetry            all Mc planes stored
    1  about vertical axis    one plane stored
    2  about C0-C180          C0 .. C180        (Mc/2 + 1 planes)
    3  about C90-C270         C270 .. C0 .. C90 (Mc/2 + 1 planes, wrapping)
    4  about both planes      C0 .. C90         (Mc/4 + 1 planes)

Mirroring reconstructs planes by lookup, never by interpolation.
"""

from __future__ import annotations

from enum import IntEnum
from typing import List, Sequence, Tuple

import numpy as np

from luxweb.errors import InvalidGrid

ANGLE_TOL = 1e-6


class LdtSymmetry(IntEnum):
    NONE = 0
    VERTICAL_AXIS = 1
    C0_C180 = 2
    C90_C270 = 3
    C0_C180_C90_C270 = 4


# tightest first
DETECTION_ORDER: Tuple[LdtSymmetry, ...] = (
    LdtSymmetry.VERTICAL_AXIS,
    LdtSymmetry.C0_C180_C90_C270,
    LdtSymmetry.C0_C180,
    LdtSymmetry.C90_C270,
)


def stored_plane_indices(symmetry: LdtSymmetry, mc: int) -> List[int]:
    sym = LdtSymmetry(symmetry)
    if mc <= 0:
        raise InvalidGrid(f"Number of C-planes must be > 0, got {mc}")
    if sym == LdtSymmetry.NONE:
        return list(range(mc))
    if sym == LdtSymmetry.VERTICAL_AXIS:
        return [0]
    if sym == LdtSymmetry.C0_C180:
        if mc % 2:
            raise InvalidGrid(f"Symmetry {int(sym)} needs an even number of C-planes, got {mc}")
        return list(range(mc // 2 + 1))
    if mc % 4:
        raise InvalidGrid(f"Symmetry {int(sym)} needs a multiple of 4 C-planes, got {mc}")
    if sym == LdtSymmetry.C0_C180_C90_C270:
        return list(range(mc // 4 + 1))
    # C90-C270: Mc1 = 3*Mc/4 + 1, Mc2 = Mc1 + Mc/2 (1-based), wrapping through C0
    start = 3 * (mc // 4)
    return [(start + k) % mc for k in range(mc // 2 + 1)]


def mirror_angle(symmetry: LdtSymmetry, c_deg: float) -> float:
    """The stored-half angle whose plane equals plane ``c_deg``."""
    c = float(c_deg) % 360.0
    sym = LdtSymmetry(symmetry)
    if sym == LdtSymmetry.C0_C180:
        return c if c <= 180.0 else 360.0 - c
    if sym == LdtSymmetry.C90_C270:
        return (180.0 - c) % 360.0 if 90.0 < c < 270.0 else c
    if sym == LdtSymmetry.C0_C180_C90_C270:
        if c <= 90.0:
            return c
        if c <= 180.0:
            return 180.0 - c
        if c <= 270.0:
            return c - 180.0
        return 360.0 - c
    return c


def _lookup(angle: float, stored: Sequence[float]) -> int:
    for k, a in enumerate(stored):
        d = abs(float(a) - angle) % 360.0
        if min(d, 360.0 - d) <= ANGLE_TOL:
            return k
    return -1


def expand_planes(symmetry: LdtSymmetry, c_angles: Sequence[float], stored_rows: np.ndarray) -> np.ndarray:
    """Rebuild one row per entry of ``c_angles`` from the stored rows."""
    sym = LdtSymmetry(symmetry)
    idx = stored_plane_indices(sym, len(c_angles))
    stored_rows = np.asarray(stored_rows, dtype=float)
    if stored_rows.shape[0] != len(idx):
        raise InvalidGrid(f"Symmetry {int(sym)} stores {len(idx)} planes, got {stored_rows.shape[0]}")
    if sym == LdtSymmetry.VERTICAL_AXIS:
        return np.repeat(stored_rows[:1], len(c_angles), axis=0)

    stored_angles = [float(c_angles[i]) for i in idx]
    out = np.empty((len(c_angles), stored_rows.shape[1]), dtype=float)
    for i, c in enumerate(c_angles):
        k = _lookup(float(c), stored_angles)
        if k < 0:
            k = _lookup(mirror_angle(sym, c), stored_angles)
        if k < 0:
            raise InvalidGrid(f"C-plane {c:g} has no stored counterpart under symmetry {int(sym)}")
        out[i] = stored_rows[k]
    return out


def reduce_planes(symmetry: LdtSymmetry, full_rows: np.ndarray) -> np.ndarray:
    full_rows = np.asarray(full_rows, dtype=float)
    idx = stored_plane_indices(symmetry, full_rows.shape[0])
    return full_rows[idx]


def matches_symmetry(symmetry: LdtSymmetry, c_angles: Sequence[float], full_rows: np.ndarray) -> bool:
    """Exact test: reducing then mirroring must give back every plane bit for bit."""
    try:
        rebuilt = expand_planes(symmetry, c_angles, reduce_planes(symmetry, full_rows))
    except InvalidGrid:
        return False
    return bool(np.array_equal(rebuilt, np.asarray(full_rows, dtype=float)))


def detect_symmetry(c_angles: Sequence[float], full_rows: np.ndarray) -> LdtSymmetry:
    if len(c_angles) == 1:
        return LdtSymmetry.VERTICAL_AXIS
    for sym in DETECTION_ORDER:
        if matches_symmetry(sym, c_angles, full_rows):
            return sym
    return LdtSymmetry.NONE


def is_full_circle(c_angles: Sequence[float]) -> bool:
    """True for a single plane or Mc planes at C = k * 360/Mc, starting at C0."""
    mc = len(c_angles)
    if mc == 1:
        return True
    step = 360.0 / mc
    return all(abs(float(c) - k * step) <= ANGLE_TOL for k, c in enumerate(c_angles))
