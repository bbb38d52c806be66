from luxweb.models.angles import AngularGrid
from luxweb.models.opening import LuminousOpening, OpeningShape
from luxweb.models.tilt import TiltData, TiltMode, TiltSpec
from luxweb.models.photometry import (
    KeywordLine,
    LampRecord,
    LdtFields,
    PhotometricType,
    PhotometryMetadata,
    SourceFormat,
    UnitsType,
)
from luxweb.models.web import PhotometricWeb, make_web

__all__ = [
    "AngularGrid",
    "LuminousOpening",
    "OpeningShape",
    "TiltData",
    "TiltMode",
    "TiltSpec",
    "KeywordLine",
    "LampRecord",
    "LdtFields",
    "PhotometricType",
    "PhotometryMetadata",
    "SourceFormat",
    "UnitsType",
    "PhotometricWeb",
    "make_web",
]
