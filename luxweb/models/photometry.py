from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple, Union

from luxweb.errors import UnsupportedPhotometricType
from luxweb.models.opening import LuminousOpening
from luxweb.models.tilt import TiltSpec
from luxweb.parser.ies_dialect import IesDialect, layout_for


class PhotometricType(str, Enum):
    C = "C"
    B = "B"
    A = "A"

    @property
    def ies_code(self) -> int:
        return _IES_TYPE_CODES[self]

    @classmethod
    def from_ies_code(cls, code: int) -> "PhotometricType":
        for t, c in _IES_TYPE_CODES.items():
            if c == code:
                return t
        raise UnsupportedPhotometricType(f"Unsupported photometric type code {code} (expected 1=C, 2=B, 3=A)")

    @classmethod
    def coerce(cls, value: Union["PhotometricType", str, int]) -> "PhotometricType":
        if isinstance(value, PhotometricType):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls.from_ies_code(value)
        if isinstance(value, str) and value.strip().upper() in ("A", "B", "C"):
            return cls(value.strip().upper())
        raise UnsupportedPhotometricType(f"Unsupported photometric type: {value!r}")


_IES_TYPE_CODES = {PhotometricType.C: 1, PhotometricType.B: 2, PhotometricType.A: 3}


class UnitsType(int, Enum):
    FEET = 1
    METERS = 2

    @property
    def meters_per_unit(self) -> float:
        return 0.3048 if self is UnitsType.FEET else 1.0


class SourceFormat(str, Enum):
    IES = "IES"
    LDT = "LDT"


@dataclass(frozen=True)
class LampRecord:
    """Lamp/ballast description. Carried for round-trips; never used in computation."""

    num_lamps: int = 1
    lumens_per_lamp: float = -1.0  # -1: absolute photometry
    total_flux_lm: Optional[float] = None  # EULUMDAT lamp-set flux
    wattage: float = 0.0
    ballast_factor: float = 1.0
    ballast_lamp_factor: float = 1.0
    lamp_type: str = ""
    color_temperature: str = ""
    color_rendering: str = ""

    @property
    def rated_lumens(self) -> Optional[float]:
        if self.total_flux_lm is not None:
            return self.total_flux_lm
        if self.lumens_per_lamp < 0:
            return None
        return self.num_lamps * self.lumens_per_lamp


@dataclass(frozen=True)
class KeywordLine:
    """One ``[KEYWORD] value`` line plus the ``[MORE]`` lines that continue it."""

    keyword: str
    value: str = ""
    continuations: Tuple[str, ...] = ()
    # source text of the keyword line and its [MORE] lines, as read
    raw_lines: Tuple[str, ...] = field(default=(), compare=False)

    @property
    def full_value(self) -> str:
        parts = [self.value, *self.continuations]
        return " ".join(p.strip() for p in parts if p.strip())


def keyword_lines_from_mapping(mapping: Mapping[str, str]) -> Tuple[KeywordLine, ...]:
    """Build keyword lines from a plain mapping; newline-separated values become repeated lines."""
    lines = []
    for keyword, value in mapping.items():
        for part in str(value).split("\n"):
            lines.append(KeywordLine(keyword=str(keyword), value=part))
    return tuple(lines)


@dataclass(frozen=True)
class LdtFields:
    """EULUMDAT positional fields with no IES counterpart; lengths in mm."""

    company: str = ""
    type_indicator: int = 1
    num_c_planes: Optional[int] = None
    c_plane_spacing: Optional[float] = None
    g_angle_spacing: Optional[float] = None
    report_number: str = ""
    luminaire_name: str = ""
    luminaire_number: str = ""
    filename: str = ""
    date_user: str = ""
    length_mm: float = 0.0
    width_mm: float = 0.0
    height_mm: float = 0.0
    luminous_length_mm: float = 0.0
    luminous_width_mm: float = 0.0
    luminous_height_c0_mm: float = 0.0
    luminous_height_c90_mm: float = 0.0
    luminous_height_c180_mm: float = 0.0
    luminous_height_c270_mm: float = 0.0
    dff_percent: float = 100.0
    lorl_percent: float = 100.0
    conversion_factor: float = 1.0
    tilt_deg: float = 0.0
    direct_ratios: Tuple[float, ...] = (0.0,) * 10


@dataclass(frozen=True)
class PhotometryMetadata:
    photometric_type: PhotometricType = PhotometricType.C
    units_type: UnitsType = UnitsType.METERS
    candela_multiplier: float = 1.0
    width: float = 0.0
    length: float = 0.0
    height: float = 0.0
    lamps: Tuple[LampRecord, ...] = (LampRecord(),)
    tilt: TiltSpec = field(default_factory=TiltSpec.none)
    source_format: Optional[SourceFormat] = None
    dialect: Optional[IesDialect] = None
    keyword_lines: Tuple[KeywordLine, ...] = ()
    label_lines: Tuple[str, ...] = ()
    ldt: Optional[LdtFields] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "photometric_type", PhotometricType.coerce(self.photometric_type))
        object.__setattr__(self, "units_type", UnitsType(int(self.units_type)))
        object.__setattr__(self, "lamps", tuple(self.lamps))
        object.__setattr__(self, "keyword_lines", tuple(self.keyword_lines))
        object.__setattr__(self, "label_lines", tuple(self.label_lines))
        if self.dialect is not None:
            object.__setattr__(self, "dialect", IesDialect(self.dialect))

    def _reference_layout(self):
        return layout_for(self.dialect or IesDialect.LM63_2002)

    @property
    def keywords(self) -> Dict[str, str]:
        """Keywords recognised by the source dialect, [MORE] continuations joined."""
        layout = self._reference_layout()
        out: Dict[str, str] = {}
        for kl in self.keyword_lines:
            if layout.recognises(kl.keyword):
                key = kl.keyword.strip().upper()
                out[key] = f"{out[key]} {kl.full_value}" if key in out else kl.full_value
        return out

    @property
    def extra_keywords(self) -> Dict[str, str]:
        """Opaque keyword -> value map of everything the source dialect does not recognise."""
        layout = self._reference_layout()
        out: Dict[str, str] = {}
        for kl in self.keyword_lines:
            if layout.recognises(kl.keyword):
                continue
            out[kl.keyword] = f"{out[kl.keyword]}\n{kl.full_value}" if kl.keyword in out else kl.full_value
        return out

    @property
    def luminous_opening(self) -> LuminousOpening:
        return LuminousOpening.from_dimensions(self.width, self.length, self.height)

    @property
    def rated_lumens(self) -> Optional[float]:
        values = [lamp.rated_lumens for lamp in self.lamps]
        if not values or any(v is None for v in values):
            return None
        return float(sum(v for v in values if v is not None))
