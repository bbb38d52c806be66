from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

import numpy as np


def _as_angle_tuple(values: Iterable[float]) -> Tuple[float, ...]:
    return tuple(float(v) for v in values)


def is_strictly_increasing(values: Sequence[float]) -> bool:
    return all(values[i] < values[i + 1] for i in range(len(values) - 1))


@dataclass(frozen=True)
class AngularGrid:
    """
    Rectangular grid of photometric angles in degrees.

    Every horizontal plane shares the same vertical-angle sequence.
    Validation against the web invariants happens when a PhotometricWeb is built.
    """

    horizontal_deg: Tuple[float, ...]
    vertical_deg: Tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "horizontal_deg", _as_angle_tuple(self.horizontal_deg))
        object.__setattr__(self, "vertical_deg", _as_angle_tuple(self.vertical_deg))

    @property
    def shape(self) -> Tuple[int, int]:
        return len(self.horizontal_deg), len(self.vertical_deg)

    @property
    def is_single_plane(self) -> bool:
        return len(self.horizontal_deg) == 1

    def horizontal_array(self) -> np.ndarray:
        return np.asarray(self.horizontal_deg, dtype=float)

    def vertical_array(self) -> np.ndarray:
        return np.asarray(self.vertical_deg, dtype=float)

    @classmethod
    def regular(
        cls,
        horizontal_step: float,
        vertical_step: float,
        horizontal_range: Tuple[float, float] = (0.0, 360.0),
        vertical_range: Tuple[float, float] = (0.0, 180.0),
        include_horizontal_end: bool = False,
    ) -> "AngularGrid":
        """Evenly spaced grid; the vertical end is always included, the horizontal end only on request."""
        h0, h1 = horizontal_range
        v0, v1 = vertical_range
        n_h = int(round((h1 - h0) / horizontal_step))
        n_v = int(round((v1 - v0) / vertical_step))
        h_count = n_h + 1 if include_horizontal_end else n_h
        horizontal = [h0 + i * horizontal_step for i in range(max(h_count, 1))]
        vertical = [v0 + j * vertical_step for j in range(n_v + 1)]
        return cls(horizontal_deg=tuple(horizontal), vertical_deg=tuple(vertical))
