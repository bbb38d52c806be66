"""
luxweb: read, write and convert luminaire photometric webs.

IES LM-63 (1986, 1991, 1995, 2002) and EULUMDAT files parse into a single
``PhotometricWeb`` model that can be written back in either format.
"""

from __future__ import annotations

import logging
from typing import Any

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "PhotometricWeb",
    "PhotometricType",
    "PhotometryMetadata",
    "AngularGrid",
    "make_web",
    "parse_ies_text",
    "parse_ldt_text",
    "parse_photometric_text",
    "load_canonical_web",
    "write_ies",
    "write_ldt",
    "write_photometric_text",
    "convert_to_type_c",
    "average_webs",
]

_MODELS = {"PhotometricWeb", "PhotometricType", "PhotometryMetadata", "AngularGrid", "make_web"}
_PARSERS = {"parse_ies_text", "parse_ldt_text", "parse_photometric_text", "load_canonical_web", "write_photometric_text"}
_WRITERS = {"write_ies", "write_ldt"}
_PHOTOMETRY = {"convert_to_type_c", "average_webs"}


def __getattr__(name: str) -> Any:
    if name in _MODELS:
        from luxweb import models
        return getattr(models, name)
    if name in _PARSERS:
        from luxweb import parser
        return getattr(parser, name)
    if name in _WRITERS:
        from luxweb import writer
        return getattr(writer, name)
    if name in _PHOTOMETRY:
        from luxweb import photometry
        return getattr(photometry, name)
    raise AttributeError(name)
