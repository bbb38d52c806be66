from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from luxweb.errors import UnsupportedPhotometricType
from luxweb.models.photometry import LampRecord, LdtFields, PhotometricType, PhotometryMetadata
from luxweb.models.web import PhotometricWeb
from luxweb.photometry.symmetry import LdtSymmetry, detect_symmetry, is_full_circle, reduce_planes
from luxweb.writer.numbers import clean_ratio, format_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LdtWriteOptions:
    line_ending: str = "\n"


def _regular_spacing(angles: Sequence[float]) -> float:
    """Common step of an evenly spaced list, 0 when irregular or single."""
    if len(angles) < 2:
        return 0.0
    steps = np.diff(np.asarray(angles, dtype=float))
    if np.allclose(steps, steps[0], rtol=0.0, atol=1e-9):
        return float(f"{float(steps[0]):.12g}")
    return 0.0


def _fields_from_metadata(meta: PhotometryMetadata) -> LdtFields:
    """Derive EULUMDAT fields for a web that was not read from EULUMDAT."""
    kw = meta.keywords
    scale = meta.units_type.meters_per_unit * 1000.0
    width_mm = meta.width * scale
    length_mm = meta.length * scale
    if width_mm < 0.0 and length_mm < 0.0:
        # rounded IES opening: EULUMDAT marks circular areas with width 0
        luminous_length, luminous_width = abs(length_mm), 0.0
    else:
        luminous_length, luminous_width = abs(length_mm), abs(width_mm)
    height_mm = abs(meta.height * scale)
    return LdtFields(
        company=kw.get("MANUFAC", ""),
        report_number=kw.get("TEST", ""),
        luminaire_name=kw.get("LUMINAIRE", ""),
        luminaire_number=kw.get("LUMCAT", ""),
        date_user=kw.get("ISSUEDATE", kw.get("DATE", "")),
        luminous_length_mm=luminous_length,
        luminous_width_mm=luminous_width,
        luminous_height_c0_mm=height_mm,
        luminous_height_c90_mm=height_mm,
        luminous_height_c180_mm=height_mm,
        luminous_height_c270_mm=height_mm,
    )


def _lamp_lines(lamps: Sequence[LampRecord]) -> List[str]:
    out: List[str] = [format_number(len(lamps))]
    out.extend(format_number(lamp.num_lamps) for lamp in lamps)
    out.extend(lamp.lamp_type for lamp in lamps)
    for lamp in lamps:
        flux = lamp.rated_lumens
        out.append(format_number(flux if flux is not None else 0.0))
    out.extend(lamp.color_temperature for lamp in lamps)
    out.extend(lamp.color_rendering for lamp in lamps)
    out.extend(format_number(lamp.wattage) for lamp in lamps)
    return out


def write_ldt(
    web: PhotometricWeb,
    *,
    metadata: Optional[PhotometryMetadata] = None,
    options: Optional[LdtWriteOptions] = None,
) -> str:
    """
    Serialize a Type C web as EULUMDAT.

    The web's own C-planes are written as they are. When they cover the full
    circle, the tightest exactly matching symmetry decides which planes are
    stored; partial ranges and a closing 360 plane are written with symmetry 0.
    """
    if web.photometric_type != PhotometricType.C:
        raise UnsupportedPhotometricType(
            f"EULUMDAT stores Type C distributions only, got Type {web.photometric_type.value}; convert first"
        )
    opts = options or LdtWriteOptions()
    meta = metadata if metadata is not None else web.metadata
    fields = meta.ldt if meta.ldt is not None else _fields_from_metadata(meta)

    c_angles = web.grid.horizontal_deg
    g_angles = web.grid.vertical_deg
    rows = web.intensities
    symmetry = detect_symmetry(c_angles, rows) if is_full_circle(c_angles) else LdtSymmetry.NONE
    stored = reduce_planes(symmetry, rows)
    logger.debug("Writing EULUMDAT with symmetry %d (%d of %d planes stored)", int(symmetry), len(stored), len(c_angles))

    type_indicator = fields.type_indicator
    if meta.ldt is None:
        type_indicator = 1 if symmetry == LdtSymmetry.VERTICAL_AXIS else 3

    lines: List[str] = [
        fields.company,
        format_number(type_indicator),
        format_number(int(symmetry)),
        format_number(len(c_angles)),
        format_number(_regular_spacing(c_angles)),
        format_number(len(g_angles)),
        format_number(_regular_spacing(g_angles)),
        fields.report_number,
        fields.luminaire_name,
        fields.luminaire_number,
        fields.filename,
        fields.date_user,
    ]
    lines.extend(
        format_number(v)
        for v in (
            fields.length_mm,
            fields.width_mm,
            fields.height_mm,
            fields.luminous_length_mm,
            fields.luminous_width_mm,
            fields.luminous_height_c0_mm,
            fields.luminous_height_c90_mm,
            fields.luminous_height_c180_mm,
            fields.luminous_height_c270_mm,
            fields.dff_percent,
            fields.lorl_percent,
            fields.conversion_factor,
            fields.tilt_deg,
        )
    )
    lines.extend(_lamp_lines(meta.lamps))
    ratios = tuple(fields.direct_ratios) + (0.0,) * 10
    lines.extend(format_number(v) for v in ratios[:10])
    lines.extend(format_number(c) for c in c_angles)
    lines.extend(format_number(g) for g in g_angles)
    cf = float(fields.conversion_factor)
    for row in stored:
        lines.extend(format_number(clean_ratio(v, cf)) for v in row)
    return opts.line_ending.join(lines) + opts.line_ending
