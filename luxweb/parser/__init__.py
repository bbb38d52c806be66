from __future__ import annotations

from typing import Any

__all__ = [
    "IesDialect",
    "detect_dialect",
    "parse_ies_text",
    "parse_ldt_text",
    "parse_tilt_text",
    "detect_format",
    "parse_photometric_text",
    "load_canonical_web",
    "write_photometric_text",
]


def __getattr__(name: str) -> Any:
    if name in {"IesDialect", "detect_dialect"}:
        from luxweb.parser.ies_dialect import IesDialect, detect_dialect
        return {"IesDialect": IesDialect, "detect_dialect": detect_dialect}[name]
    if name == "parse_ies_text":
        from luxweb.parser.ies_parser import parse_ies_text
        return parse_ies_text
    if name == "parse_ldt_text":
        from luxweb.parser.ldt_parser import parse_ldt_text
        return parse_ldt_text
    if name == "parse_tilt_text":
        from luxweb.parser.tilt_file import parse_tilt_text
        return parse_tilt_text
    if name in {"detect_format", "parse_photometric_text", "load_canonical_web", "write_photometric_text"}:
        from luxweb.parser import pipeline
        return getattr(pipeline, name)
    raise AttributeError(name)
