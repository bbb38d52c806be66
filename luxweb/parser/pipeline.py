from __future__ import annotations

import logging
import re
from pathlib import PurePath
from typing import Optional, Union

from luxweb.errors import UnknownDialect
from luxweb.models.photometry import SourceFormat
from luxweb.models.web import PhotometricWeb
from luxweb.parser.ies_dialect import IesDialect
from luxweb.parser.ies_parser import parse_ies_text
from luxweb.parser.ldt_parser import MIN_LINES, parse_ldt_text
from luxweb.parser.tilt_file import TiltLoader
from luxweb.photometry.convert import convert_to_type_c
from luxweb.writer.ies_writer import write_ies
from luxweb.writer.ldt_writer import write_ldt

logger = logging.getLogger(__name__)

_SUFFIXES = {".ies": SourceFormat.IES, ".ldt": SourceFormat.LDT, ".eul": SourceFormat.LDT}
_TILT_LINE = re.compile(r"^\s*TILT\s*=", re.IGNORECASE | re.MULTILINE)


def detect_format(text: str, source_name: Optional[str] = None) -> SourceFormat:
    """IES or EULUMDAT, from the file name suffix if known, else from the content."""
    if source_name:
        fmt = _SUFFIXES.get(PurePath(source_name).suffix.lower())
        if fmt is not None:
            return fmt
    head = text.lstrip("\ufeff \t\r\n")
    if head.upper().startswith("IESNA") or _TILT_LINE.search(text):
        return SourceFormat.IES
    if len(text.splitlines()) >= MIN_LINES:
        return SourceFormat.LDT
    raise UnknownDialect("Cannot determine photometric file format", filename=source_name)


def parse_photometric_text(
    text: str,
    *,
    fmt: Optional[Union[SourceFormat, str]] = None,
    source_name: Optional[str] = None,
    tilt_loader: Optional[TiltLoader] = None,
) -> PhotometricWeb:
    """Parse IES or EULUMDAT text into a web in its native photometric type."""
    resolved = SourceFormat(fmt) if fmt is not None else detect_format(text, source_name)
    logger.debug("Parsing %s as %s", source_name or "<text>", resolved.value)
    if resolved == SourceFormat.LDT:
        return parse_ldt_text(text, source_name=source_name)
    return parse_ies_text(text, tilt_loader=tilt_loader, source_name=source_name)


def load_canonical_web(
    text: str,
    *,
    fmt: Optional[Union[SourceFormat, str]] = None,
    source_name: Optional[str] = None,
    tilt_loader: Optional[TiltLoader] = None,
    resample: bool = False,
) -> PhotometricWeb:
    """Parse, then express the result in Type C (see ``convert_to_type_c``)."""
    web = parse_photometric_text(text, fmt=fmt, source_name=source_name, tilt_loader=tilt_loader)
    return convert_to_type_c(web, resample=resample)


def write_photometric_text(
    web: PhotometricWeb,
    fmt: Union[SourceFormat, str] = SourceFormat.IES,
    *,
    dialect: Optional[IesDialect] = None,
) -> str:
    if SourceFormat(fmt) == SourceFormat.LDT:
        return write_ldt(web)
    return write_ies(web, dialect)
