from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

import numpy as np

from luxweb.errors import (
    MalformedHeader,
    NonMonotonicAngles,
    ParseError,
    UnsupportedPhotometricType,
    UnsupportedPhotometricTypeCode,
)
from luxweb.models.angles import AngularGrid, is_strictly_increasing
from luxweb.models.photometry import (
    LampRecord,
    PhotometricType,
    PhotometryMetadata,
    SourceFormat,
    UnitsType,
)
from luxweb.models.web import PhotometricWeb
from luxweb.parser.ies_dialect import INTEGER_FIELDS, IesDialect, layout_for
from luxweb.parser.ies_tokenizer import IesTokens, NumericToken, TokenStream, tokenize_ies
from luxweb.parser.tilt_file import TiltLoader, resolve_tilt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IesHeader:
    """The thirteen positional values that follow the TILT specification."""

    num_lamps: int
    lumens_per_lamp: float
    candela_multiplier: float
    num_vertical_angles: int
    num_horizontal_angles: int
    photometric_type: int
    units_type: int
    width: float
    length: float
    height: float
    ballast_factor: float
    ballast_lamp_factor: float  # "future use" in LM-63-2002
    input_watts: float
    line_no: Optional[int] = None


@dataclass(frozen=True)
class IesRecord:
    """Dialect-neutral intermediate result of reading an IES document."""

    tokens: IesTokens
    header: IesHeader
    vertical_deg: Tuple[float, ...]
    horizontal_deg: Tuple[float, ...]
    candela_raw: np.ndarray  # [H, V], as written in the file
    trailing_tokens: int = 0

    @property
    def dialect(self) -> IesDialect:
        return self.tokens.dialect

    @property
    def candela_scaled(self) -> np.ndarray:
        return self.candela_raw * self.header.candela_multiplier


def _read_header(stream: TokenStream, dialect: IesDialect) -> IesHeader:
    layout = layout_for(dialect)
    toks = stream.take(len(layout.header_fields), "photometric header values")
    values: Dict[str, float] = {}
    for name, tok in zip(layout.header_fields, toks):
        v = tok.as_float(name)
        if name in INTEGER_FIELDS and abs(v - round(v)) > 1e-9:
            raise MalformedHeader(f"Expected integer for {name}, got {tok.text}", line_no=tok.line_no, snippet=tok.text)
        values[name] = v

    line_no = toks[0].line_no

    def _int(name: str) -> int:
        return int(round(values[name]))

    if _int("num_lamps") < 0:
        raise MalformedHeader("num_lamps must be >= 0", line_no=line_no)
    if values["candela_multiplier"] <= 0:
        raise MalformedHeader("candela_multiplier must be > 0", line_no=line_no)
    if _int("num_vertical_angles") <= 0 or _int("num_horizontal_angles") <= 0:
        raise MalformedHeader("Angle counts must be > 0", line_no=line_no)
    if _int("units_type") not in (1, 2):
        raise MalformedHeader(f"Unsupported units_type={_int('units_type')} (expected 1=feet, 2=meters)", line_no=line_no)

    twelfth = layout.header_fields[11]
    return IesHeader(
        num_lamps=_int("num_lamps"),
        lumens_per_lamp=values["lumens_per_lamp"],
        candela_multiplier=values["candela_multiplier"],
        num_vertical_angles=_int("num_vertical_angles"),
        num_horizontal_angles=_int("num_horizontal_angles"),
        photometric_type=_int("photometric_type"),
        units_type=_int("units_type"),
        width=values["width"],
        length=values["length"],
        height=values["height"],
        ballast_factor=values["ballast_factor"],
        ballast_lamp_factor=values[twelfth],
        input_watts=values["input_watts"],
        line_no=line_no,
    )


def _read_angles(stream: TokenStream, count: int, what: str) -> Tuple[float, ...]:
    toks: List[NumericToken] = stream.take(count, what)
    values = [tok.as_float(what) for tok in toks]
    if not is_strictly_increasing(values):
        raise NonMonotonicAngles(f"{what.capitalize()} are not strictly increasing", line_no=toks[0].line_no)
    return tuple(values)


def parse_ies_record(text: str, *, tilt_loader: Optional[TiltLoader] = None, source_name: Optional[str] = None) -> IesRecord:
    """
    Tokenize an IES document and read its numeric header, angle lists and
    candela matrix (horizontal-major).

    ``tilt_loader`` resolves a TILT file reference to its text; without it the
    reference is kept unresolved on the tilt specification.
    """
    try:
        tokens = tokenize_ies(text)
        if tilt_loader is not None:
            tokens = replace(tokens, tilt=resolve_tilt(tokens.tilt, tilt_loader))

        stream = TokenStream(tokens.numbers, last_line_no=len(tokens.lines))
        header = _read_header(stream, tokens.dialect)
        vertical = _read_angles(stream, header.num_vertical_angles, "vertical angles")
        horizontal = _read_angles(stream, header.num_horizontal_angles, "horizontal angles")

        n_h, n_v = header.num_horizontal_angles, header.num_vertical_angles
        flat = stream.take_floats(n_h * n_v, "candela values")
        candela = np.asarray(flat, dtype=float).reshape(n_h, n_v)

        trailing = stream.remaining
        if trailing:
            logger.warning("Ignoring %d trailing token(s) after the candela block", trailing)

        return IesRecord(
            tokens=tokens,
            header=header,
            vertical_deg=vertical,
            horizontal_deg=horizontal,
            candela_raw=candela,
            trailing_tokens=trailing,
        )
    except ParseError as e:
        if e.filename is None and source_name is not None:
            e.filename = source_name
        raise


def record_to_web(record: IesRecord, source_name: Optional[str] = None) -> PhotometricWeb:
    """Build a native-type PhotometricWeb from an IES record."""
    h = record.header
    try:
        ptype = PhotometricType.from_ies_code(h.photometric_type)
    except UnsupportedPhotometricType as e:
        raise UnsupportedPhotometricTypeCode(str(e), line_no=h.line_no, filename=source_name) from e

    keywords = {kl.keyword.upper(): kl.full_value for kl in record.tokens.keyword_lines}
    lamp = LampRecord(
        num_lamps=h.num_lamps,
        lumens_per_lamp=h.lumens_per_lamp,
        wattage=h.input_watts,
        ballast_factor=h.ballast_factor,
        ballast_lamp_factor=h.ballast_lamp_factor,
        lamp_type=keywords.get("LAMP", ""),
    )
    meta = PhotometryMetadata(
        photometric_type=ptype,
        units_type=UnitsType(h.units_type),
        candela_multiplier=h.candela_multiplier,
        width=h.width,
        length=h.length,
        height=h.height,
        lamps=(lamp,),
        tilt=record.tokens.tilt,
        source_format=SourceFormat.IES,
        dialect=record.dialect,
        keyword_lines=record.tokens.keyword_lines,
        label_lines=record.tokens.label_lines,
    )
    grid = AngularGrid(horizontal_deg=record.horizontal_deg, vertical_deg=record.vertical_deg)
    return PhotometricWeb(grid, record.candela_scaled, meta)


def parse_ies_text(text: str, *, tilt_loader: Optional[TiltLoader] = None, source_name: Optional[str] = None) -> PhotometricWeb:
    record = parse_ies_record(text, tilt_loader=tilt_loader, source_name=source_name)
    logger.debug(
        "Parsed %s document: %d horizontal x %d vertical angles, Type %d",
        record.dialect.value,
        record.header.num_horizontal_angles,
        record.header.num_vertical_angles,
        record.header.photometric_type,
    )
    return record_to_web(record, source_name=source_name)
