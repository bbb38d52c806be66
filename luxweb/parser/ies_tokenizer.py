"""
IES LM-63 tokenizer.

Splits a document into its signature line, label or keyword lines, the TILT
specification and a flat stream of numeric tokens (each remembering its line
number). No numeric header interpretation happens here.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from luxweb.errors import MalformedHeader, MalformedNumber, TruncatedData
from luxweb.models.photometry import KeywordLine
from luxweb.models.tilt import TiltData, TiltMode, TiltSpec
from luxweb.parser.ies_dialect import MORE_KEYWORD, DialectLayout, IesDialect, detect_dialect, layout_for

logger = logging.getLogger(__name__)

_NUM_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_KEYWORD_RE = re.compile(r"^\[([^\]]*)\](.*)$")
_TILT_RE = re.compile(r"^TILT\s*=\s*(.*)$", re.IGNORECASE)
_SEPARATORS = re.compile(r"[\s,]+")


def is_number(tok: str) -> bool:
    return bool(_NUM_RE.match(tok))


def split_values(line: str) -> List[str]:
    """Whitespace- or comma-separated value tokens of one line."""
    return [t for t in _SEPARATORS.split(line.strip()) if t]


@dataclass(frozen=True)
class NumericToken:
    text: str
    line_no: int

    def as_float(self, what: str = "value") -> float:
        if not is_number(self.text):
            raise MalformedNumber(f"Expected numeric {what}, got '{self.text}'", line_no=self.line_no, snippet=self.text)
        return float(self.text)


@dataclass(frozen=True)
class IesTokens:
    dialect: IesDialect
    signature_line: Optional[str]
    label_lines: Tuple[str, ...]
    keyword_lines: Tuple[KeywordLine, ...]
    tilt: TiltSpec
    tilt_line_no: int
    numbers: Tuple[NumericToken, ...]
    lines: Tuple[str, ...]

    def snippet(self, line_no: Optional[int]) -> Optional[str]:
        if line_no is None or not (1 <= line_no <= len(self.lines)):
            return None
        return self.lines[line_no - 1]


class TokenStream:
    """Sequential reader over numeric tokens; running dry raises TruncatedData."""

    def __init__(self, tokens: Sequence[NumericToken], last_line_no: Optional[int] = None) -> None:
        self._tokens = tokens
        self._pos = 0
        self._last_line_no = last_line_no

    @property
    def remaining(self) -> int:
        return len(self._tokens) - self._pos

    @property
    def position(self) -> int:
        return self._pos

    def take(self, count: int, what: str) -> List[NumericToken]:
        if count > self.remaining:
            line_no = self._tokens[-1].line_no if self._tokens else self._last_line_no
            raise TruncatedData(
                f"Expected {count} {what} but only {self.remaining} numeric values remain",
                line_no=line_no,
            )
        out = list(self._tokens[self._pos : self._pos + count])
        self._pos += count
        return out

    def take_floats(self, count: int, what: str) -> List[float]:
        return [tok.as_float(what) for tok in self.take(count, what)]

    def rest(self) -> List[NumericToken]:
        return list(self._tokens[self._pos :])


def _numeric_tokens(lines: Sequence[str], start_idx0: int) -> List[NumericToken]:
    out: List[NumericToken] = []
    for idx0 in range(start_idx0, len(lines)):
        for tok in split_values(lines[idx0]):
            out.append(NumericToken(tok, idx0 + 1))
    return out


def _parse_keyword_line(s: str) -> Tuple[str, str]:
    m = _KEYWORD_RE.match(s)
    assert m is not None
    return m.group(1).strip(), m.group(2).strip()


def _read_tilt_include(lines: Sequence[str], tilt_idx0: int, layout: DialectLayout) -> Tuple[TiltSpec, List[NumericToken]]:
    """
    Read an inline tilt block after ``TILT=INCLUDE`` and return it with the
    numeric tokens that follow it.

    LM-63-1986 blocks are ``n, angles, factors``; later dialects put the
    lamp-to-luminaire geometry first. The block is read from the same token
    stream as the header, so header values may share a line with the last
    tilt factor.
    """
    stream = TokenStream(_numeric_tokens(lines, tilt_idx0 + 1), last_line_no=len(lines))
    if not stream.remaining:
        raise MalformedHeader("Missing TILT=INCLUDE payload", line_no=tilt_idx0 + 1, snippet=lines[tilt_idx0])

    geometry: Optional[int] = None
    if layout.tilt_has_geometry:
        geometry = _integral(stream.take(1, "lamp-to-luminaire geometry")[0], "lamp-to-luminaire geometry")
    count_tok = stream.take(1, "TILT=INCLUDE angle count")[0]
    n = _integral(count_tok, "TILT=INCLUDE angle count")
    if n <= 0:
        raise MalformedHeader("Invalid TILT=INCLUDE count", line_no=count_tok.line_no, snippet=count_tok.text)
    angles = stream.take_floats(n, "tilt angles")
    factors = stream.take_floats(n, "tilt factors")
    data = TiltData(angles_deg=angles, factors=factors)
    try:
        data.validate()
    except ValueError as e:
        raise MalformedHeader(f"Invalid TILT=INCLUDE data: {e}", line_no=count_tok.line_no) from e

    spec = TiltSpec(mode=TiltMode.INCLUDE, data=data, lamp_to_luminaire_geometry=geometry)
    return spec, stream.rest()


def _integral(tok: NumericToken, what: str) -> int:
    v = tok.as_float(what)
    if abs(v - round(v)) > 1e-9:
        raise MalformedHeader(f"Expected integer for {what}, got {tok.text}", line_no=tok.line_no, snippet=tok.text)
    return int(round(v))


def tokenize_ies(text: str) -> IesTokens:
    if not text.strip():
        raise MalformedHeader("Empty file")

    lines = tuple(ln.rstrip("\r\n") for ln in text.splitlines())
    first_idx0 = 0
    while first_idx0 < len(lines) and not lines[first_idx0].strip():
        first_idx0 += 1

    dialect = detect_dialect(lines[first_idx0], line_no=first_idx0 + 1)
    layout = layout_for(dialect)
    signature_line: Optional[str] = None
    idx0 = first_idx0
    if layout.uses_keywords:
        signature_line = lines[first_idx0].lstrip("\ufeff").strip()
        idx0 += 1

    labels: List[str] = []
    keyword_lines: List[KeywordLine] = []
    tilt_idx0: Optional[int] = None
    tilt_value = ""
    for i in range(idx0, len(lines)):
        s = lines[i].strip()
        if not s:
            continue
        m = _TILT_RE.match(s)
        if m is not None:
            tilt_idx0 = i
            tilt_value = m.group(1).strip()
            break
        if not layout.uses_keywords:
            labels.append(s)
            continue
        if not _KEYWORD_RE.match(s):
            raise MalformedHeader(
                f"Expected [KEYWORD] line or TILT= in {dialect.value} header", line_no=i + 1, snippet=lines[i]
            )
        key, value = _parse_keyword_line(s)
        if not key:
            raise MalformedHeader("Empty keyword", line_no=i + 1, snippet=lines[i])
        if key.upper() == MORE_KEYWORD:
            if not keyword_lines:
                raise MalformedHeader("[MORE] line without a preceding keyword", line_no=i + 1, snippet=lines[i])
            prev = keyword_lines[-1]
            keyword_lines[-1] = KeywordLine(
                prev.keyword, prev.value, prev.continuations + (value,), raw_lines=prev.raw_lines + (lines[i],)
            )
            continue
        keyword_lines.append(KeywordLine(key, value, raw_lines=(lines[i],)))

    if tilt_idx0 is None:
        raise MalformedHeader("Missing TILT= line", line_no=len(lines))
    if not tilt_value:
        raise MalformedHeader("TILT= line has no value", line_no=tilt_idx0 + 1, snippet=lines[tilt_idx0])

    mode = tilt_value.upper()
    if mode == "INCLUDE":
        tilt, numbers = _read_tilt_include(lines, tilt_idx0, layout)
    else:
        tilt = TiltSpec.none() if mode == "NONE" else TiltSpec(mode=TiltMode.FILE, file_reference=tilt_value)
        numbers = _numeric_tokens(lines, tilt_idx0 + 1)
    logger.debug("TILT mode %s on line %d", tilt.mode.value, tilt_idx0 + 1)

    return IesTokens(
        dialect=dialect,
        signature_line=signature_line,
        label_lines=tuple(labels),
        keyword_lines=tuple(keyword_lines),
        tilt=tilt,
        tilt_line_no=tilt_idx0 + 1,
        numbers=tuple(numbers),
        lines=lines,
    )
