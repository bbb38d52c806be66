from __future__ import annotations

from typing import Any

__all__ = [
    "convert_to_type_c",
    "average_webs",
    "LdtSymmetry",
    "detect_symmetry",
    "expand_planes",
    "reduce_planes",
    "direction_to_native",
    "native_directions",
]


def __getattr__(name: str) -> Any:
    if name == "convert_to_type_c":
        from luxweb.photometry.convert import convert_to_type_c
        return convert_to_type_c
    if name == "average_webs":
        from luxweb.photometry.ops import average_webs
        return average_webs
    if name in {"LdtSymmetry", "detect_symmetry", "expand_planes", "reduce_planes"}:
        from luxweb.photometry import symmetry
        return getattr(symmetry, name)
    if name in {"direction_to_native", "native_directions"}:
        from luxweb.photometry import frame
        return getattr(frame, name)
    raise AttributeError(name)
