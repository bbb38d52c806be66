"""Exception taxonomy for parsing, building, sampling and converting photometric webs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class LuxwebError(Exception):
    """Base exception for all luxweb errors."""

    pass


@dataclass
class ParseError(LuxwebError):
    message: str
    line_no: Optional[int] = None
    snippet: Optional[str] = None
    filename: Optional[str] = None

    def __str__(self) -> str:
        prefix = f"{self.filename}: " if self.filename else ""
        if self.line_no is None:
            return f"{prefix}{self.message}"
        return f"{prefix}Line {self.line_no}: {self.message}"


class UnknownDialect(ParseError):
    """The signature line names an IES revision that is not supported."""


class MalformedHeader(ParseError):
    """The text before the numeric data is structurally invalid (e.g. no TILT= line)."""


class TruncatedData(ParseError):
    """Fewer numeric tokens remain than the header counts require."""


class FieldCountMismatch(ParseError):
    """A fixed-field line does not hold the expected number of tokens."""


class NonMonotonicAngles(ParseError):
    """An angle list is not strictly increasing."""


class MalformedNumber(ParseError):
    """A token where a number is required could not be read as one."""


class InvalidGrid(LuxwebError, ValueError):
    """The angular grid or intensity matrix violates the web invariants."""


class OutOfRange(LuxwebError, ValueError):
    """A sampling query falls outside the measured angular domain."""


class ConversionError(LuxwebError):
    """Base class for photometric type conversion failures."""


class UnsupportedPhotometricType(ConversionError, ValueError):
    """The photometric type code is not one of A, B or C."""


class ConversionUnimplemented(ConversionError, NotImplementedError):
    """Conversion of this photometric type to Type C is not enabled."""


class UnsupportedPhotometricTypeCode(MalformedHeader, UnsupportedPhotometricType):
    """An IES header names a photometric type code other than 1, 2 or 3."""
