from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Union

import numpy as np

from luxweb.errors import ConversionUnimplemented
from luxweb.models.angles import AngularGrid
from luxweb.models.photometry import PhotometricType
from luxweb.models.web import PhotometricWeb
from luxweb.photometry.frame import direction_to_native, type_c_directions
from luxweb.photometry.interp import bilinear_grid

logger = logging.getLogger(__name__)

_EPS = 1e-9


def default_type_c_grid(horizontal_step: float = 5.0, vertical_step: float = 5.0) -> AngularGrid:
    return AngularGrid.regular(horizontal_step, vertical_step)


def convert_to_type_c(
    web: PhotometricWeb,
    *,
    source_type: Optional[Union[PhotometricType, str, int]] = None,
    resample: bool = False,
    target_grid: Optional[AngularGrid] = None,
    horizontal_step: float = 5.0,
    vertical_step: float = 5.0,
) -> PhotometricWeb:
    """
    Express ``web`` in the Type C convention.

    A Type C web is returned as is. Type A and B webs raise
    ConversionUnimplemented unless ``resample`` is set, in which case each
    direction of a regular Type C grid is rotated into the native frame and
    sampled bilinearly. ``source_type`` overrides the web's own type (an IES
    code or letter); an invalid one raises UnsupportedPhotometricType.
    """
    ptype = PhotometricType.coerce(source_type) if source_type is not None else web.photometric_type
    if ptype == PhotometricType.C:
        return web
    if not resample:
        raise ConversionUnimplemented(
            f"Type {ptype.value} to Type C conversion needs resampling onto a new grid; pass resample=True"
        )

    grid = target_grid if target_grid is not None else default_type_c_grid(horizontal_step, vertical_step)
    values = resample_native_to_type_c(web, ptype, grid)
    logger.debug("Resampled Type %s web onto %dx%d Type C grid", ptype.value, *grid.shape)
    return PhotometricWeb(grid, values, replace(web.metadata, photometric_type=PhotometricType.C))


def resample_native_to_type_c(web: PhotometricWeb, ptype: PhotometricType, grid: AngularGrid) -> np.ndarray:
    """
    Intensities of ``web`` (interpreted as ``ptype``) at every Type C grid direction.

    Native grids holding only non-negative angles are symmetric halves: the
    missing side is the mirror image. Directions outside the measured domain
    get 0 cd.
    """
    c, g = np.meshgrid(grid.horizontal_array(), grid.vertical_array(), indexing="ij")
    h, v = direction_to_native(ptype, type_c_directions(c, g))

    h_axis = web.grid.horizontal_array()
    v_axis = web.grid.vertical_array()
    if h_axis[0] >= 0.0:
        h = np.abs(h)
    if v_axis[0] >= 0.0:
        v = np.abs(v)

    inside = (v >= v_axis[0] - _EPS) & (v <= v_axis[-1] + _EPS)
    if not web.grid.is_single_plane:
        inside &= (h >= h_axis[0] - _EPS) & (h <= h_axis[-1] + _EPS)

    out = bilinear_grid(h_axis, v_axis, np.asarray(web.intensities, dtype=float), h, v)
    return np.where(inside, out, 0.0)
