from __future__ import annotations

from .a1 import build_range_ref, column_index_to_label
from .io import PathPolicy, ensure_supported_extension, resolve_input_path
from .output_path import apply_conflict_policy, next_available_path, resolve_output_path

__all__ = [
    "PathPolicy",
    "apply_conflict_policy",
    "build_range_ref",
    "column_index_to_label",
    "ensure_supported_extension",
    "next_available_path",
    "resolve_input_path",
    "resolve_output_path",
]
