from __future__ import annotations

from typing import Protocol, runtime_checkable

from fxstyle.formatting.models import GridContext, StyleGridSet
from fxstyle.formatting.types import Grid


@runtime_checkable
class StyleWriter(Protocol):
    """Protocol for bulk style writes over the whole target range."""

    def set_font_weights(self, grid: Grid) -> None:
        """Write font weights ("bold"/"normal")."""

    def set_font_styles(self, grid: Grid) -> None:
        """Write font styles ("italic"/"normal")."""

    def set_font_lines(self, grid: Grid) -> None:
        """Write font lines ("underline"/"line-through"/"none")."""

    def set_font_colors(self, grid: Grid) -> None:
        """Write font colors."""

    def set_backgrounds(self, grid: Grid) -> None:
        """Write background colors."""


@runtime_checkable
class SheetHost(StyleWriter, Protocol):
    """Protocol for the spreadsheet host that owns the target sheet."""

    def get_grid_context(self) -> GridContext:
        """Resolve the target sheet and its full extent."""

    def read_content_grid(self) -> list[list[object]]:
        """Read raw cell contents with formulas as text."""

    def read_style_grid_set(self) -> StyleGridSet:
        """Read the five style attributes of the whole range."""

    def flush(self) -> None:
        """Force pending host-side changes to commit."""


__all__ = ["SheetHost", "StyleWriter"]
