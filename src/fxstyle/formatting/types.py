from __future__ import annotations

from typing import Literal, TypeAlias

from fxstyle.shared.output_path import OnConflictPolicy

FontWeight = Literal["bold", "normal"]
FontStyle = Literal["italic", "normal"]
FontLine = Literal["underline", "line-through", "none"]
FormatBackend = Literal["openpyxl", "com"]
StyleAttribute = Literal[
    "font_weights",
    "font_styles",
    "font_lines",
    "font_colors",
    "backgrounds",
]

Coordinate: TypeAlias = tuple[int, int]
Grid: TypeAlias = list[list[str]]

DEFAULT_FONT_COLOR = "#000000"
DEFAULT_BACKGROUND = "#ffffff"

__all__ = [
    "DEFAULT_BACKGROUND",
    "DEFAULT_FONT_COLOR",
    "Coordinate",
    "FontLine",
    "FontStyle",
    "FontWeight",
    "FormatBackend",
    "Grid",
    "OnConflictPolicy",
    "StyleAttribute",
]
