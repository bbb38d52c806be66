from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any, Optional

import numpy as np

from luxweb.errors import InvalidGrid, OutOfRange
from luxweb.models.angles import AngularGrid, is_strictly_increasing
from luxweb.models.photometry import PhotometricType, PhotometryMetadata
from luxweb.photometry.interp import bilinear, find_bracket, find_cyclic_bracket

_EPS = 1e-9

# (horizontal, vertical) admissible ranges per native photometric type
_ANGLE_RANGES = {
    PhotometricType.C: ((0.0, 360.0), (0.0, 180.0)),
    PhotometricType.B: ((-90.0, 90.0), (-90.0, 90.0)),
    PhotometricType.A: ((-90.0, 90.0), (-90.0, 90.0)),
}


@dataclass(frozen=True, eq=False)
class PhotometricWeb:
    """
    Luminous intensity distribution sampled on a rectangular angular grid.

    ``intensities[i, j]`` is the candela value at ``grid.horizontal_deg[i]`` and
    ``grid.vertical_deg[j]``, already scaled by the file's multiplier. The
    matrix is stored as a read-only float64 array; a web is never mutated,
    operations such as type conversion return a new instance.

    Two webs compare equal when their grids, intensities and photometric
    type match. The remaining metadata is provenance and does not take part.

    Type C horizontal angles lie in [0, 360]. The closed upper bound admits the
    360 plane many IES files repeat after C0; it is kept as its own plane and
    written back unchanged in both formats.
    """

    grid: AngularGrid
    intensities: np.ndarray
    metadata: PhotometryMetadata = field(default_factory=PhotometryMetadata)

    def __post_init__(self) -> None:
        if not isinstance(self.grid, AngularGrid):
            object.__setattr__(self, "grid", AngularGrid(*self.grid))
        try:
            values = np.array(self.intensities, dtype=float)
        except (TypeError, ValueError) as e:
            raise InvalidGrid(f"Intensities are not a numeric matrix: {e}") from e
        _validate(self.grid, values, self.metadata.photometric_type)
        values.setflags(write=False)
        object.__setattr__(self, "intensities", values)

    @property
    def photometric_type(self) -> PhotometricType:
        return self.metadata.photometric_type

    @property
    def shape(self):
        return self.grid.shape

    def with_metadata(self, **changes: Any) -> "PhotometricWeb":
        return PhotometricWeb(self.grid, self.intensities, replace(self.metadata, **changes))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PhotometricWeb):
            return NotImplemented
        return (
            self.grid == other.grid
            and self.photometric_type == other.photometric_type
            and np.array_equal(self.intensities, other.intensities)
        )

    __hash__ = None  # type: ignore[assignment]

    def intensity_at(self, h_angle: float, v_angle: float) -> float:
        """
        Intensity in candela at ``(h_angle, v_angle)`` degrees.

        Exact on grid points, bilinear in between. A single horizontal plane
        answers every azimuth. A Type C grid that starts at 0 and runs past 180
        is treated as closing the circle. Any other query outside the grid
        raises OutOfRange.
        """
        h = float(h_angle)
        v = float(v_angle)
        if not (math.isfinite(h) and math.isfinite(v)):
            raise OutOfRange(f"Non-finite query angle ({h_angle}, {v_angle})")

        v_axis = self.grid.vertical_array()
        if v < v_axis[0] - _EPS or v > v_axis[-1] + _EPS:
            raise OutOfRange(f"Vertical angle {v} outside [{v_axis[0]}, {v_axis[-1]}]")
        v_br = find_bracket(v, v_axis)

        if self.grid.is_single_plane:
            return bilinear(self.intensities, (0, 0, 0.0), v_br)

        h_axis = self.grid.horizontal_array()
        if h_axis[0] - _EPS <= h <= h_axis[-1] + _EPS:
            return bilinear(self.intensities, find_bracket(h, h_axis), v_br)
        if self._closes_circle(h_axis):
            return bilinear(self.intensities, find_cyclic_bracket(h, h_axis), v_br)
        raise OutOfRange(f"Horizontal angle {h} outside [{h_axis[0]}, {h_axis[-1]}]")

    def _closes_circle(self, h_axis: np.ndarray) -> bool:
        return self.photometric_type == PhotometricType.C and abs(h_axis[0]) <= _EPS and h_axis[-1] > 180.0


def _validate(grid: AngularGrid, values: np.ndarray, ptype: PhotometricType) -> None:
    n_h, n_v = grid.shape
    if n_h == 0 or n_v == 0:
        raise InvalidGrid(f"Angular grid must not be empty, got {n_h} horizontal x {n_v} vertical angles")
    if values.shape != (n_h, n_v):
        raise InvalidGrid(f"Invalid candela matrix shape: got {values.shape}, expected {(n_h, n_v)}")
    if not is_strictly_increasing(grid.horizontal_deg):
        raise InvalidGrid("Horizontal angles must be strictly increasing")
    if not is_strictly_increasing(grid.vertical_deg):
        raise InvalidGrid("Vertical angles must be strictly increasing")
    (h_min, h_max), (v_min, v_max) = _ANGLE_RANGES[ptype]
    if grid.horizontal_deg[0] < h_min or grid.horizontal_deg[-1] > h_max:
        raise InvalidGrid(f"Horizontal angles must lie in [{h_min:g}, {h_max:g}] for Type {ptype.value}")
    if grid.vertical_deg[0] < v_min or grid.vertical_deg[-1] > v_max:
        raise InvalidGrid(f"Vertical angles must lie in [{v_min:g}, {v_max:g}] for Type {ptype.value}")
    if not np.all(np.isfinite(values)):
        raise InvalidGrid("Intensities must be finite")


def make_web(
    horizontal_deg,
    vertical_deg,
    intensities,
    metadata: Optional[PhotometryMetadata] = None,
    **metadata_fields: Any,
) -> PhotometricWeb:
    """Convenience builder: ``make_web([0], [0, 90, 180], [[100, 200, 100]])``."""
    meta = metadata if metadata is not None else PhotometryMetadata()
    if metadata_fields:
        meta = replace(meta, **metadata_fields)
    return PhotometricWeb(AngularGrid(horizontal_deg, vertical_deg), intensities, meta)
