"""Serializers from PhotometricWeb back to IES LM-63 and EULUMDAT text."""

from luxweb.writer.ies_writer import IesWriteOptions, IesWriteResult, write_ies, write_ies_result
from luxweb.writer.ldt_writer import LdtWriteOptions, write_ldt

__all__ = [
    "IesWriteOptions",
    "IesWriteResult",
    "write_ies",
    "write_ies_result",
    "LdtWriteOptions",
    "write_ldt",
]
