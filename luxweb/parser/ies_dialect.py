"""
IES LM-63 dialect table.

Four revisions are supported. Each carries its own signature line, the
keyword set it recognises (in canonical output order) and the names of the
thirteen positional header fields that follow the TILT specification.
LM-63-1986 inline tilt blocks carry no lamp-to-luminaire geometry line.
Dispatch is on the detected tag; there is no per-dialect class hierarchy.

    LM-63-1986   no signature line, free-text label lines, no keywords
    IESNA91      "IESNA91", [KEYWORD] lines
    LM-63-1995   "IESNA:LM-63-1995", [KEYWORD] lines
    LM-63-2002   "IESNA:LM-63-2002", [KEYWORD] lines, ballast-lamp factor retired
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from luxweb.errors import UnknownDialect

logger = logging.getLogger(__name__)


class IesDialect(str, Enum):
    LM63_1986 = "LM-63-1986"
    IESNA91 = "IESNA91"
    LM63_1995 = "LM-63-1995"
    LM63_2002 = "LM-63-2002"


@dataclass(frozen=True)
class DialectLayout:
    dialect: IesDialect
    signature: Optional[str]
    keywords: Tuple[str, ...]   # canonical order; MORE is a continuation marker
    header_fields: Tuple[str, ...]
    tilt_has_geometry: bool = True   # TILT=INCLUDE block opens with the lamp-to-luminaire geometry

    @property
    def uses_keywords(self) -> bool:
        return self.signature is not None

    def recognises(self, keyword: str) -> bool:
        return keyword.strip().upper() in self.keywords

    def canonical_index(self, keyword: str) -> int:
        return self.keywords.index(keyword.strip().upper())


MORE_KEYWORD = "MORE"

_PHOTOMETRIC_FIELDS: Tuple[str, ...] = (
    "num_lamps",
    "lumens_per_lamp",
    "candela_multiplier",
    "num_vertical_angles",
    "num_horizontal_angles",
    "photometric_type",
    "units_type",
    "width",
    "length",
    "height",
)

_LEGACY_HEADER = _PHOTOMETRIC_FIELDS + ("ballast_factor", "ballast_lamp_photometric_factor", "input_watts")
_LM63_2002_HEADER = _PHOTOMETRIC_FIELDS + ("ballast_factor", "future_use", "input_watts")

INTEGER_FIELDS = frozenset(
    {"num_lamps", "num_vertical_angles", "num_horizontal_angles", "photometric_type", "units_type"}
)

_IESNA91_KEYWORDS: Tuple[str, ...] = (
    "TEST",
    "DATE",
    "MANUFAC",
    "LUMCAT",
    "LUMINAIRE",
    "LAMPCAT",
    "LAMP",
    "BALLASTCAT",
    "BALLAST",
    "MAINTCAT",
    "DISTRIBUTION",
    "FLASHAREA",
    "COLORCONSTANT",
    "OTHER",
    MORE_KEYWORD,
)

_LM63_1995_KEYWORDS: Tuple[str, ...] = _IESNA91_KEYWORDS[:-1] + ("LAMPPOSITION", "SEARCH", MORE_KEYWORD)

_LM63_2002_KEYWORDS: Tuple[str, ...] = (
    "TEST",
    "TESTLAB",
    "TESTDATE",
    "NEARFIELD",
    "ISSUEDATE",
    "MANUFAC",
    "LUMCAT",
    "LUMINAIRE",
    "LAMPCAT",
    "LAMP",
    "BALLASTCAT",
    "BALLAST",
    "MAINTCAT",
    "DISTRIBUTION",
    "FLASHAREA",
    "COLORCONSTANT",
    "OTHER",
    "LAMPPOSITION",
    "SEARCH",
    MORE_KEYWORD,
)

LAYOUTS: Dict[IesDialect, DialectLayout] = {
    IesDialect.LM63_1986: DialectLayout(IesDialect.LM63_1986, None, (), _LEGACY_HEADER, tilt_has_geometry=False),
    IesDialect.IESNA91: DialectLayout(IesDialect.IESNA91, "IESNA91", _IESNA91_KEYWORDS, _LEGACY_HEADER),
    IesDialect.LM63_1995: DialectLayout(IesDialect.LM63_1995, "IESNA:LM-63-1995", _LM63_1995_KEYWORDS, _LEGACY_HEADER),
    IesDialect.LM63_2002: DialectLayout(IesDialect.LM63_2002, "IESNA:LM-63-2002", _LM63_2002_KEYWORDS, _LM63_2002_HEADER),
}


def layout_for(dialect: IesDialect) -> DialectLayout:
    return LAYOUTS[IesDialect(dialect)]


def detect_dialect(first_line: Optional[str], line_no: Optional[int] = None) -> IesDialect:
    """
    Identify the dialect from the first non-blank line of a document.

    A line that does not start with ``IESNA`` carries no signature, which
    implies LM-63-1986. A line that does but matches no supported revision
    raises UnknownDialect.
    """
    if first_line is None:
        return IesDialect.LM63_1986
    head = first_line.lstrip("\ufeff").strip()
    if not head.upper().startswith("IESNA"):
        logger.debug("No IES signature line; assuming %s", IesDialect.LM63_1986.value)
        return IesDialect.LM63_1986
    token = head.split()[0].upper()
    for layout in LAYOUTS.values():
        if layout.signature is not None and token == layout.signature:
            logger.debug("Detected IES dialect %s", layout.dialect.value)
            return layout.dialect
    raise UnknownDialect(f"Unsupported IES signature line: '{head}'", line_no=line_no, snippet=first_line)
