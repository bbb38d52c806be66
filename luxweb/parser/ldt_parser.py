"""
EULUMDAT (.ldt) parser.

EULUMDAT is the European photometric file format: fixed line positions, no
keyword tags.

Format structure (1-based line numbers):
- Line 1: Company identification
- Line 2: Type indicator
- Line 3: Symmetry indicator (0-4)
- Line 4: Number of C-planes (Mc)
- Line 5: Distance between C-planes (Dc)
- Line 6: Number of luminous intensities per C-plane (Ng)
- Line 7: Distance between luminous intensities (Dg)
- Line 8: Measurement report number
- Line 9: Luminaire name
- Line 10: Luminaire number
- Line 11: File name
- Line 12: Date/user
- Line 13-15: Length/diameter, width (0 for circular), height of luminaire (mm)
- Line 16-17: Length/diameter, width of luminous area (mm)
- Line 18-21: Height of luminous area at C0, C90, C180, C270 (mm)
- Line 22: Downward flux fraction (DFF) %
- Line 23: Light output ratio luminaire (LORL) %
- Line 24: Conversion factor for luminous intensities
- Line 25: Tilt of luminaire during measurement
- Line 26: Number of lamp sets (n)
- Next 6n lines: n lamp counts, n lamp types, n total fluxes, n colour
  temperatures, n colour rendering groups, n wattages
- Next 10 lines: Direct ratios DR for room indices k = 0.6 ... 5
- Next Mc lines: C-plane angles
- Next Ng lines: G angles
- Remaining: luminous intensities (cd/klm) of the stored planes Mc1..Mc2,
  Ng values per plane
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, TypeVar

import numpy as np

from luxweb.errors import (
    FieldCountMismatch,
    InvalidGrid,
    MalformedHeader,
    MalformedNumber,
    NonMonotonicAngles,
    ParseError,
    TruncatedData,
)
from luxweb.models.angles import AngularGrid, is_strictly_increasing
from luxweb.models.photometry import (
    KeywordLine,
    LampRecord,
    LdtFields,
    PhotometricType,
    PhotometryMetadata,
    SourceFormat,
    UnitsType,
)
from luxweb.models.web import PhotometricWeb
from luxweb.parser.ies_tokenizer import is_number
from luxweb.photometry.symmetry import LdtSymmetry, expand_planes, stored_plane_indices

logger = logging.getLogger(__name__)

T = TypeVar("T")

MIN_LINES = 26
N_DIRECT_RATIOS = 10

_DIMENSION_FIELDS = (
    "length_mm",
    "width_mm",
    "height_mm",
    "luminous_length_mm",
    "luminous_width_mm",
    "luminous_height_c0_mm",
    "luminous_height_c90_mm",
    "luminous_height_c180_mm",
    "luminous_height_c270_mm",
)


@dataclass(frozen=True)
class LdtRecord:
    """Positional content of an EULUMDAT document, intensities as stored (cd/klm)."""

    fields: LdtFields
    symmetry: LdtSymmetry
    lamps: Tuple[LampRecord, ...]
    c_angles_deg: Tuple[float, ...]
    g_angles_deg: Tuple[float, ...]
    stored_intensities: np.ndarray  # [stored planes, Ng]

    @property
    def num_c_planes(self) -> int:
        return len(self.c_angles_deg)


class _Lines:
    def __init__(self, lines: List[str]) -> None:
        self.lines = lines

    def text(self, idx: int) -> str:
        if idx >= len(self.lines):
            raise TruncatedData(f"Unexpected end of file at line {idx + 1}", line_no=len(self.lines))
        return self.lines[idx].strip()

    def scalar(self, idx: int, field: str, convert: Callable[[str], T]) -> T:
        s = self.text(idx)
        toks = s.split()
        if len(toks) != 1:
            raise FieldCountMismatch(
                f"Expected exactly 1 value for {field}, found {len(toks)}", line_no=idx + 1, snippet=self.lines[idx]
            )
        tok = toks[0].replace(",", ".")
        if not is_number(tok):
            raise MalformedNumber(f"Invalid number for {field}: '{toks[0]}'", line_no=idx + 1, snippet=self.lines[idx])
        return convert(tok)

    def number(self, idx: int, field: str) -> float:
        return self.scalar(idx, field, float)

    def integer(self, idx: int, field: str) -> int:
        def _to_int(tok: str) -> int:
            v = float(tok)
            if abs(v - round(v)) > 1e-9:
                raise MalformedHeader(f"Expected integer for {field}, got {tok}", line_no=idx + 1, snippet=self.lines[idx])
            return int(round(v))

        return self.scalar(idx, field, _to_int)


def _read_angle_list(src: _Lines, idx: int, count: int, what: str) -> Tuple[Tuple[float, ...], int]:
    values = [src.number(idx + i, f"{what} {i + 1}") for i in range(count)]
    if not is_strictly_increasing(values):
        raise NonMonotonicAngles(f"{what.capitalize()} angles are not strictly increasing", line_no=idx + 1)
    return tuple(values), idx + count


def _read_intensity_block(src: _Lines, idx: int, total: int) -> np.ndarray:
    flat: List[float] = []
    while len(flat) < total and idx < len(src.lines):
        for tok in src.lines[idx].split():
            if len(flat) >= total:
                break
            t = tok.replace(",", ".")
            if not is_number(t):
                raise MalformedNumber(f"Invalid luminous intensity '{tok}'", line_no=idx + 1, snippet=src.lines[idx])
            flat.append(float(t))
        idx += 1
    if len(flat) != total:
        raise TruncatedData(f"Expected {total} luminous intensities, got {len(flat)}", line_no=len(src.lines))
    extra = sum(len(ln.split()) for ln in src.lines[idx:])
    if extra:
        logger.warning("Ignoring %d trailing token(s) after the intensity block", extra)
    return np.asarray(flat, dtype=float)


def parse_ldt_record(text: str, *, source_name: Optional[str] = None) -> LdtRecord:
    try:
        if not text.strip():
            raise MalformedHeader("Empty file")
        lines = [ln.rstrip("\r\n") for ln in text.splitlines()]
        if len(lines) < MIN_LINES:
            raise TruncatedData(f"File too short - EULUMDAT requires at least {MIN_LINES} lines", line_no=len(lines))
        src = _Lines(lines)

        company = src.text(0)
        type_indicator = src.integer(1, "type_indicator")
        if type_indicator not in (0, 1, 2, 3, 4):
            raise MalformedHeader(f"Invalid type indicator: {type_indicator}", line_no=2, snippet=lines[1])
        sym_value = src.integer(2, "symmetry")
        if sym_value not in (0, 1, 2, 3, 4):
            raise MalformedHeader(f"Invalid symmetry: {sym_value} (expected 0-4)", line_no=3, snippet=lines[2])
        symmetry = LdtSymmetry(sym_value)

        num_c = src.integer(3, "num_c_planes")
        c_spacing = src.number(4, "c_plane_spacing")
        num_g = src.integer(5, "num_g_angles")
        g_spacing = src.number(6, "g_angle_spacing")
        if num_c <= 0 or num_g <= 0:
            raise MalformedHeader("Numbers of C-planes and G angles must be > 0", line_no=4)

        dims = [src.number(12 + i, name) for i, name in enumerate(_DIMENSION_FIELDS)]
        dff = src.number(21, "dff_percent")
        lorl = src.number(22, "lorl_percent")
        conversion = src.number(23, "conversion_factor")
        if conversion <= 0:
            raise MalformedHeader("Conversion factor must be > 0", line_no=24, snippet=lines[23])
        tilt = src.number(24, "tilt")
        n_sets = src.integer(25, "num_lamp_sets")
        if n_sets < 0:
            raise MalformedHeader("Number of lamp sets must be >= 0", line_no=26, snippet=lines[25])

        # parameter-major: all counts, then all types, ...
        base = 26
        lamps: List[LampRecord] = []
        for i in range(n_sets):
            num_lamps = src.integer(base + i, f"lamp_set_{i + 1}_num")
            flux = src.number(base + 2 * n_sets + i, f"lamp_set_{i + 1}_flux")
            lamps.append(
                LampRecord(
                    num_lamps=num_lamps,
                    lumens_per_lamp=flux / abs(num_lamps) if num_lamps else -1.0,
                    total_flux_lm=flux,
                    wattage=src.number(base + 5 * n_sets + i, f"lamp_set_{i + 1}_wattage"),
                    lamp_type=src.text(base + n_sets + i),
                    color_temperature=src.text(base + 3 * n_sets + i),
                    color_rendering=src.text(base + 4 * n_sets + i),
                )
            )
        idx = base + 6 * n_sets

        direct_ratios = tuple(src.number(idx + i, f"direct_ratio_{i + 1}") for i in range(N_DIRECT_RATIOS))
        idx += N_DIRECT_RATIOS

        c_angles, idx = _read_angle_list(src, idx, num_c, "C-plane")
        g_angles, idx = _read_angle_list(src, idx, num_g, "G")

        try:
            stored_idx = stored_plane_indices(symmetry, num_c)
        except InvalidGrid as e:
            raise MalformedHeader(str(e), line_no=3, snippet=lines[2]) from e
        flat = _read_intensity_block(src, idx, len(stored_idx) * num_g)

        fields = LdtFields(
            company=company,
            type_indicator=type_indicator,
            num_c_planes=num_c,
            c_plane_spacing=c_spacing,
            g_angle_spacing=g_spacing,
            report_number=src.text(7),
            luminaire_name=src.text(8),
            luminaire_number=src.text(9),
            filename=src.text(10),
            date_user=src.text(11),
            **dict(zip(_DIMENSION_FIELDS, dims)),
            dff_percent=dff,
            lorl_percent=lorl,
            conversion_factor=conversion,
            tilt_deg=tilt,
            direct_ratios=direct_ratios,
        )
        return LdtRecord(
            fields=fields,
            symmetry=symmetry,
            lamps=tuple(lamps),
            c_angles_deg=c_angles,
            g_angles_deg=g_angles,
            stored_intensities=flat.reshape(len(stored_idx), num_g),
        )
    except ParseError as e:
        if e.filename is None and source_name is not None:
            e.filename = source_name
        raise


def _keyword_lines(fields: LdtFields, lamps: Tuple[LampRecord, ...]) -> Tuple[KeywordLine, ...]:
    pairs = [
        ("TEST", fields.report_number),
        ("ISSUEDATE", fields.date_user),
        ("MANUFAC", fields.company),
        ("LUMCAT", fields.luminaire_number),
        ("LUMINAIRE", fields.luminaire_name),
        ("LAMP", lamps[0].lamp_type if lamps else ""),
    ]
    return tuple(KeywordLine(k, v) for k, v in pairs if v)


def record_to_web(record: LdtRecord, source_name: Optional[str] = None) -> PhotometricWeb:
    f = record.fields
    try:
        full = expand_planes(record.symmetry, record.c_angles_deg, record.stored_intensities)
    except InvalidGrid as e:
        raise MalformedHeader(str(e), line_no=3, filename=source_name) from e

    if f.luminous_width_mm == 0.0 and f.luminous_length_mm > 0.0:
        # circular luminous area: IES marks rounded sides with negative dimensions
        width = length = -f.luminous_length_mm / 1000.0
    else:
        width = f.luminous_width_mm / 1000.0
        length = f.luminous_length_mm / 1000.0

    meta = PhotometryMetadata(
        photometric_type=PhotometricType.C,
        units_type=UnitsType.METERS,
        candela_multiplier=1.0,
        width=width,
        length=length,
        height=f.luminous_height_c0_mm / 1000.0,
        lamps=record.lamps or (LampRecord(),),
        source_format=SourceFormat.LDT,
        keyword_lines=_keyword_lines(f, record.lamps),
        ldt=f,
    )
    grid = AngularGrid(horizontal_deg=record.c_angles_deg, vertical_deg=record.g_angles_deg)
    return PhotometricWeb(grid, full * f.conversion_factor, meta)


def parse_ldt_text(text: str, *, source_name: Optional[str] = None) -> PhotometricWeb:
    record = parse_ldt_record(text, source_name=source_name)
    logger.debug(
        "Parsed EULUMDAT document: symmetry %d, %d C-planes x %d G angles",
        int(record.symmetry),
        record.num_c_planes,
        len(record.g_angles_deg),
    )
    return record_to_web(record, source_name=source_name)
