from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class TiltMode(str, Enum):
    NONE = "NONE"
    INCLUDE = "INCLUDE"
    FILE = "FILE"


@dataclass(frozen=True)
class TiltData:
    angles_deg: Tuple[float, ...]
    factors: Tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "angles_deg", tuple(float(a) for a in self.angles_deg))
        object.__setattr__(self, "factors", tuple(float(f) for f in self.factors))

    def validate(self) -> None:
        if not self.angles_deg or not self.factors:
            raise ValueError("Tilt data must not be empty")
        if len(self.angles_deg) != len(self.factors):
            raise ValueError("Tilt angles/factors length mismatch")
        if any(self.angles_deg[i] >= self.angles_deg[i + 1] for i in range(len(self.angles_deg) - 1)):
            raise ValueError("Tilt angles must be strictly increasing")
        if any(f < 0.0 for f in self.factors):
            raise ValueError("Tilt factors must not be negative")

    def interpolate(self, angle_deg: float) -> float:
        self.validate()
        a = float(angle_deg)
        if a <= self.angles_deg[0]:
            return self.factors[0]
        if a >= self.angles_deg[-1]:
            return self.factors[-1]
        for i in range(len(self.angles_deg) - 1):
            lo = self.angles_deg[i]
            hi = self.angles_deg[i + 1]
            if lo <= a <= hi:
                t = (a - lo) / (hi - lo)
                return self.factors[i] * (1.0 - t) + self.factors[i + 1] * t
        return self.factors[-1]


@dataclass(frozen=True)
class TiltSpec:
    """
    The TILT specification of an IES document.

    For ``FILE`` the reference is surfaced as written; ``data`` is only set
    when a caller-supplied loader resolved it.
    """

    mode: TiltMode = TiltMode.NONE
    data: Optional[TiltData] = None
    lamp_to_luminaire_geometry: Optional[int] = None
    file_reference: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return self.mode == TiltMode.NONE or self.data is not None

    @classmethod
    def none(cls) -> "TiltSpec":
        return cls(mode=TiltMode.NONE)
