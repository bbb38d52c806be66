from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OpeningShape(str, Enum):
    POINT = "point"
    RECTANGULAR = "rectangular"
    RECTANGULAR_LUMINOUS_SIDES = "rectangular_luminous_sides"
    CIRCULAR = "circular"
    ELLIPSE = "ellipse"
    VERTICAL_CYLINDER = "vertical_cylinder"
    VERTICAL_ELLIPSOIDAL_CYLINDER = "vertical_ellipsoidal_cylinder"
    SPHERE = "sphere"
    ELLIPSOIDAL_SPHEROID = "ellipsoidal_spheroid"
    HORIZONTAL_CYLINDER_ALONG = "horizontal_cylinder_along"
    HORIZONTAL_ELLIPSOIDAL_CYLINDER_ALONG = "horizontal_ellipsoidal_cylinder_along"
    HORIZONTAL_CYLINDER_PERPENDICULAR = "horizontal_cylinder_perpendicular"
    HORIZONTAL_ELLIPSOIDAL_CYLINDER_PERPENDICULAR = "horizontal_ellipsoidal_cylinder_perpendicular"
    VERTICAL_CIRCLE = "vertical_circle"
    VERTICAL_ELLIPSE = "vertical_ellipse"


@dataclass(frozen=True)
class LuminousOpening:
    """Shape of the luminous opening; negative IES dimensions mark rounded sides."""

    shape: OpeningShape
    width: Optional[float] = None
    length: Optional[float] = None
    height: Optional[float] = None
    diameter: Optional[float] = None

    @classmethod
    def from_dimensions(cls, width: float, length: float, height: float) -> "LuminousOpening":
        w, l, h = float(width), float(length), float(height)
        if w == 0.0 and l == 0.0 and h == 0.0:
            return cls(OpeningShape.POINT)

        if w < 0.0:
            if l == 0.0:
                if w == h:
                    return cls(OpeningShape.VERTICAL_CIRCLE, diameter=-w)
                return cls(OpeningShape.VERTICAL_ELLIPSE, width=-w, height=-h)
            if l < 0.0:
                if h == 0.0:
                    if w == l:
                        return cls(OpeningShape.CIRCULAR, diameter=-w)
                    return cls(OpeningShape.ELLIPSE, width=-w, length=-l)
                if h < 0.0:
                    if w == l == h:
                        return cls(OpeningShape.SPHERE, diameter=-w)
                    return cls(OpeningShape.ELLIPSOIDAL_SPHEROID, width=-w, length=-l, height=-h)
                if w == l:
                    return cls(OpeningShape.VERTICAL_CYLINDER, diameter=-w, height=h)
                return cls(OpeningShape.VERTICAL_ELLIPSOIDAL_CYLINDER, width=-w, length=-l, height=h)
            if w == h:
                return cls(OpeningShape.HORIZONTAL_CYLINDER_ALONG, diameter=-w, length=l)
            return cls(OpeningShape.HORIZONTAL_ELLIPSOIDAL_CYLINDER_ALONG, width=-w, length=l, height=-h)

        if l < 0.0:
            if l == h:
                return cls(OpeningShape.HORIZONTAL_CYLINDER_PERPENDICULAR, width=w, diameter=-l)
            return cls(OpeningShape.HORIZONTAL_ELLIPSOIDAL_CYLINDER_PERPENDICULAR, width=w, length=-l, height=-h)
        if h == 0.0:
            return cls(OpeningShape.RECTANGULAR, width=w, length=l)
        return cls(OpeningShape.RECTANGULAR_LUMINOUS_SIDES, width=w, length=l, height=h)
