from __future__ import annotations

from typing import Iterable

import numpy as np

from luxweb.errors import InvalidGrid
from luxweb.models.web import PhotometricWeb


def average_webs(webs: Iterable[PhotometricWeb]) -> PhotometricWeb:
    """
    Average the intensities of identically structured webs.

    Grids and photometric types must match exactly; nothing is interpolated.
    The result carries the first web's metadata.
    """
    items = list(webs)
    if not items:
        raise ValueError("average_webs needs at least one web")

    first = items[0]
    for i, web in enumerate(items[1:], start=1):
        if web.grid.shape != first.grid.shape:
            raise InvalidGrid(f"Web {i} has shape {web.grid.shape}, expected {first.grid.shape}")
        if web.grid != first.grid:
            raise InvalidGrid(f"Web {i} has different plane angles")
        if web.photometric_type != first.photometric_type:
            raise InvalidGrid(
                f"Web {i} is Type {web.photometric_type.value}, expected Type {first.photometric_type.value}"
            )

    mean = np.mean(np.stack([web.intensities for web in items]), axis=0)
    return PhotometricWeb(first.grid, mean, first.metadata)
