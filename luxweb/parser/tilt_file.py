from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from luxweb.errors import MalformedHeader, MalformedNumber, ParseError, TruncatedData
from luxweb.models.tilt import TiltData, TiltMode, TiltSpec
from luxweb.parser.ies_tokenizer import is_number, split_values

# Resolves a TILT file reference to its text content
TiltLoader = Callable[[str], str]


@dataclass(frozen=True)
class TiltFilePayload:
    lamp_to_luminaire_geometry: Optional[int]
    data: TiltData


def _tokenize_numeric_lines(lines: List[str], start_idx: int, count: int, what: str) -> Tuple[List[float], int]:
    values: List[float] = []
    idx = start_idx
    while idx < len(lines) and len(values) < count:
        for tok in split_values(lines[idx]):
            if len(values) >= count:
                break
            if not is_number(tok):
                raise MalformedNumber(f"Invalid numeric token '{tok}' in tilt {what}", line_no=idx + 1, snippet=lines[idx])
            values.append(float(tok))
        idx += 1
    if len(values) != count:
        raise TruncatedData(f"Tilt {what} expected {count} values, found {len(values)}", line_no=idx)
    return values, idx


def parse_tilt_text(text: str, reference: Optional[str] = None) -> TiltFilePayload:
    """Parse the content of an external TILT file: geometry, count, angles, factors."""
    lines = [ln.rstrip("\r\n") for ln in text.splitlines()]
    try:
        idx = 0
        while idx < len(lines) and not lines[idx].strip():
            idx += 1
        if idx >= len(lines):
            raise MalformedHeader("Tilt file has no payload")

        geometry_tokens = split_values(lines[idx])
        if len(geometry_tokens) != 1 or not is_number(geometry_tokens[0]):
            raise MalformedHeader("Tilt file geometry line is invalid", line_no=idx + 1, snippet=lines[idx])
        geometry = int(round(float(geometry_tokens[0])))
        idx += 1

        counts, idx = _tokenize_numeric_lines(lines, idx, 1, "angle count")
        n = int(round(counts[0]))
        if n <= 0 or abs(counts[0] - n) > 1e-9:
            raise MalformedHeader("Tilt file angle count must be a positive integer", line_no=idx)

        angles, idx = _tokenize_numeric_lines(lines, idx, n, "angles")
        factors, _ = _tokenize_numeric_lines(lines, idx, n, "factors")
        data = TiltData(angles_deg=angles, factors=factors)
        try:
            data.validate()
        except ValueError as e:
            raise MalformedHeader(f"Invalid tilt data: {e}") from e
        return TiltFilePayload(lamp_to_luminaire_geometry=geometry, data=data)
    except ParseError as e:
        if e.filename is None:
            e.filename = reference
        raise


def resolve_tilt(spec: TiltSpec, loader: Optional[TiltLoader]) -> TiltSpec:
    """Load a FILE tilt reference through ``loader``; other specs pass through."""
    if spec.mode != TiltMode.FILE or loader is None or spec.file_reference is None:
        return spec
    payload = parse_tilt_text(loader(spec.file_reference), reference=spec.file_reference)
    return TiltSpec(
        mode=TiltMode.FILE,
        data=payload.data,
        lamp_to_luminaire_geometry=payload.lamp_to_luminaire_geometry,
        file_reference=spec.file_reference,
    )
