from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from luxweb.models.photometry import KeywordLine, PhotometryMetadata
from luxweb.models.tilt import TiltMode, TiltSpec
from luxweb.models.web import PhotometricWeb
from luxweb.parser.ies_dialect import MORE_KEYWORD, DialectLayout, IesDialect, layout_for
from luxweb.writer.numbers import chunked_lines, clean_ratio, format_number

logger = logging.getLogger(__name__)

# lamp base up or down, the geometry assumed when the source dialect had none
DEFAULT_TILT_GEOMETRY = 1


@dataclass(frozen=True)
class IesWriteOptions:
    values_per_line: int = 10
    line_ending: str = "\n"


@dataclass(frozen=True)
class IesWriteResult:
    text: str
    dialect: IesDialect
    warnings: Tuple[str, ...] = ()


def _keyword_block(kl: KeywordLine, verbatim: bool = False) -> List[str]:
    if verbatim and len(kl.raw_lines) == 1 + len(kl.continuations):
        return list(kl.raw_lines)
    out = [f"[{kl.keyword}] {kl.value}" if kl.value else f"[{kl.keyword}]"]
    for more in kl.continuations:
        out.append(f"[{MORE_KEYWORD}] {more}" if more else f"[{MORE_KEYWORD}]")
    return out


def _metadata_lines(
    meta: PhotometryMetadata, target: DialectLayout, warnings: List[str]
) -> List[str]:
    source = meta.dialect
    source_layout = layout_for(source or IesDialect.LM63_2002)
    same_source = source is None or source == target.dialect
    lines: List[str] = []

    if not target.uses_keywords:
        if same_source:
            lines.extend(meta.label_lines)
        for kl in meta.keyword_lines:
            if not source_layout.recognises(kl.keyword):
                _drop(kl.keyword, target, warnings)
        return lines

    if meta.label_lines and not same_source:
        msg = f"Dropped {len(meta.label_lines)} {IesDialect.LM63_1986.value} label line(s) writing {target.dialect.value}"
        logger.warning(msg)
        warnings.append(msg)

    recognised = [kl for kl in meta.keyword_lines if target.recognises(kl.keyword)]
    recognised.sort(key=lambda kl: target.canonical_index(kl.keyword))
    for kl in recognised:
        lines.extend(_keyword_block(kl))

    for kl in meta.keyword_lines:
        if target.recognises(kl.keyword):
            continue
        if source_layout.recognises(kl.keyword):
            logger.debug("Omitting [%s]: not part of %s", kl.keyword, target.dialect.value)
            continue
        if same_source:
            lines.extend(_keyword_block(kl, verbatim=True))
        else:
            _drop(kl.keyword, target, warnings)
    return lines


def _drop(keyword: str, target: DialectLayout, warnings: List[str]) -> None:
    msg = f"Dropped pass-through keyword [{keyword}] writing {target.dialect.value}"
    logger.warning(msg)
    warnings.append(msg)


def _tilt_lines(tilt: TiltSpec, target: DialectLayout, per_line: int, warnings: List[str]) -> List[str]:
    if tilt.mode == TiltMode.NONE:
        return ["TILT=NONE"]
    if tilt.mode == TiltMode.FILE:
        return [f"TILT={tilt.file_reference}"]
    assert tilt.data is not None, "TILT=INCLUDE without data"
    out = ["TILT=INCLUDE"]
    geometry = tilt.lamp_to_luminaire_geometry
    if target.tilt_has_geometry:
        out.append(str(geometry if geometry is not None else DEFAULT_TILT_GEOMETRY))
    elif geometry is not None:
        msg = f"Dropped lamp-to-luminaire geometry {geometry} writing {target.dialect.value}"
        logger.warning(msg)
        warnings.append(msg)
    out.append(str(len(tilt.data.angles_deg)))
    out.extend(chunked_lines(tilt.data.angles_deg, per_line))
    out.extend(chunked_lines(tilt.data.factors, per_line))
    return out


def _header_lines(web: PhotometricWeb, meta: PhotometryMetadata) -> List[str]:
    n_h, n_v = web.shape
    lamp = meta.lamps[0] if meta.lamps else None
    num_lamps = lamp.num_lamps if lamp is not None else 1
    lumens = lamp.lumens_per_lamp if lamp is not None else -1.0
    first: Sequence[float] = (
        num_lamps,
        lumens,
        meta.candela_multiplier,
        n_v,
        n_h,
        web.photometric_type.ies_code,
        int(meta.units_type),
        meta.width,
        meta.length,
        meta.height,
    )
    second: Sequence[float] = (
        lamp.ballast_factor if lamp is not None else 1.0,
        lamp.ballast_lamp_factor if lamp is not None else 1.0,
        lamp.wattage if lamp is not None else 0.0,
    )
    return [" ".join(format_number(v) for v in first), " ".join(format_number(v) for v in second)]


def write_ies_result(
    web: PhotometricWeb,
    dialect: Optional[IesDialect] = None,
    *,
    metadata: Optional[PhotometryMetadata] = None,
    options: Optional[IesWriteOptions] = None,
) -> IesWriteResult:
    """
    Serialize ``web`` as an IES document.

    The target dialect defaults to the one the metadata was read from, else
    LM-63-2002. Output depends only on ``(web, metadata, dialect, options)``.
    """
    opts = options or IesWriteOptions()
    meta = metadata if metadata is not None else web.metadata
    target = layout_for(dialect or meta.dialect or IesDialect.LM63_2002)
    per_line = max(1, int(opts.values_per_line))
    warnings: List[str] = []

    lines: List[str] = []
    if target.signature is not None:
        lines.append(target.signature)
    lines.extend(_metadata_lines(meta, target, warnings))
    lines.extend(_tilt_lines(meta.tilt, target, per_line, warnings))
    lines.extend(_header_lines(web, meta))
    lines.extend(chunked_lines(web.grid.vertical_deg, per_line))
    lines.extend(chunked_lines(web.grid.horizontal_deg, per_line))
    m = float(meta.candela_multiplier)
    for row in web.intensities:
        lines.extend(chunked_lines([clean_ratio(v, m) for v in row], per_line))

    text = opts.line_ending.join(lines) + opts.line_ending
    return IesWriteResult(text=text, dialect=target.dialect, warnings=tuple(warnings))


def write_ies(
    web: PhotometricWeb,
    dialect: Optional[IesDialect] = None,
    *,
    metadata: Optional[PhotometryMetadata] = None,
    options: Optional[IesWriteOptions] = None,
) -> str:
    return write_ies_result(web, dialect, metadata=metadata, options=options).text
