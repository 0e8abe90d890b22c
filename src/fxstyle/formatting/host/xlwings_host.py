from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any, Protocol

from fxstyle.formatting.colors import normalize_hex_input
from fxstyle.formatting.errors import HostIOError
from fxstyle.formatting.models import GridContext, StyleGridSet, grid_shape
from fxstyle.formatting.types import DEFAULT_BACKGROUND, DEFAULT_FONT_COLOR, Grid
from fxstyle.shared.a1 import build_range_ref

logger = logging.getLogger(__name__)

# Excel XlUnderlineStyle constants.
XL_UNDERLINE_NONE = -4142
XL_UNDERLINE_SINGLE = 2


class XlwingsFontProtocol(Protocol):
    """Protocol for xlwings font access."""

    bold: bool | None
    italic: bool | None
    color: Any


class XlwingsFontApiProtocol(Protocol):
    """Protocol for the COM font object behind ``range.api.Font``."""

    Underline: int
    Strikethrough: bool


class XlwingsRangeApiProtocol(Protocol):
    """Protocol for the COM range object."""

    Font: XlwingsFontApiProtocol


class XlwingsRangeProtocol(Protocol):
    """Protocol for xlwings single-cell or multi-cell ranges."""

    formula: Any
    color: Any
    font: XlwingsFontProtocol
    api: XlwingsRangeApiProtocol
    last_cell: XlwingsRangeProtocol
    row: int
    column: int

    def __getitem__(self, key: tuple[int, int]) -> XlwingsRangeProtocol: ...


class XlwingsAppProtocol(Protocol):
    """Protocol for xlwings app state."""

    screen_updating: bool


class XlwingsBookProtocol(Protocol):
    """Protocol for xlwings workbook access."""

    app: XlwingsAppProtocol


class XlwingsSheetProtocol(Protocol):
    """Protocol for xlwings worksheet access."""

    name: str
    book: XlwingsBookProtocol
    used_range: XlwingsRangeProtocol

    def range(self, address: str) -> XlwingsRangeProtocol: ...


class XlwingsSheetHost:
    """Sheet host that drives a live Excel worksheet through xlwings.

    The target range starts at A1 and ends at the last cell of the used
    range. Excel has no bulk setter for per-cell fonts, so each attribute is
    written in one pass that skips cells already carrying the target value.
    """

    def __init__(self, sheet: XlwingsSheetProtocol) -> None:
        self._sheet = sheet
        self.flush_count = 0

    def get_grid_context(self) -> GridContext:
        last_cell = self._sheet.used_range.last_cell
        return GridContext(
            sheet_name=self._sheet.name,
            num_rows=last_cell.row,
            num_cols=last_cell.column,
        )

    def read_content_grid(self) -> list[list[object]]:
        context = self.get_grid_context()
        formulas = self._target_range(context).formula
        return _as_matrix(formulas, context.num_rows, context.num_cols)

    def read_style_grid_set(self) -> StyleGridSet:
        context = self.get_grid_context()
        target = self._target_range(context)
        weights: Grid = []
        styles: Grid = []
        lines: Grid = []
        colors: Grid = []
        backgrounds: Grid = []
        for row in range(context.num_rows):
            cells = [target[row, col] for col in range(context.num_cols)]
            weights.append([_read_font_weight(cell) for cell in cells])
            styles.append([_read_font_style(cell) for cell in cells])
            lines.append([_read_font_line(cell) for cell in cells])
            colors.append([_read_font_color(cell) for cell in cells])
            backgrounds.append([_read_background(cell) for cell in cells])
        return StyleGridSet(
            font_weights=weights,
            font_styles=styles,
            font_lines=lines,
            font_colors=colors,
            backgrounds=backgrounds,
        )

    def set_font_weights(self, grid: Grid) -> None:
        self._write_grid("font_weights", grid, _read_font_weight, _write_font_weight)

    def set_font_styles(self, grid: Grid) -> None:
        self._write_grid("font_styles", grid, _read_font_style, _write_font_style)

    def set_font_lines(self, grid: Grid) -> None:
        self._write_grid("font_lines", grid, _read_font_line, _write_font_line)

    def set_font_colors(self, grid: Grid) -> None:
        self._write_grid("font_colors", grid, _read_font_color, _write_font_color)

    def set_backgrounds(self, grid: Grid) -> None:
        self._write_grid("backgrounds", grid, _read_background, _write_background)

    def flush(self) -> None:
        """Let Excel repaint pending changes, then restore screen updating."""
        app = self._sheet.book.app
        previous = app.screen_updating
        app.screen_updating = True
        app.screen_updating = previous
        self.flush_count += 1
        logger.debug("xlwings flush #%d on %s.", self.flush_count, self._sheet.name)

    def _target_range(self, context: GridContext) -> XlwingsRangeProtocol:
        return self._sheet.range(build_range_ref(context.num_rows, context.num_cols))

    def _write_grid(
        self,
        attribute: str,
        grid: Grid,
        read: Callable[[XlwingsRangeProtocol], str],
        write: Callable[[XlwingsRangeProtocol, str], None],
    ) -> None:
        context = self.get_grid_context()
        expected = (context.num_rows, context.num_cols)
        if grid_shape(grid) != expected:
            rows, cols = grid_shape(grid)
            raise HostIOError(
                f"{attribute} grid is {rows}x{cols}, expected "
                f"{expected[0]}x{expected[1]} for sheet {context.sheet_name}.",
                action=f"write_{attribute}",
            )
        target = self._target_range(context)
        for row_index, values in enumerate(grid):
            for col_index, value in enumerate(values):
                cell = target[row_index, col_index]
                if read(cell) != value:
                    write(cell, value)


def _as_matrix(values: Any, num_rows: int, num_cols: int) -> list[list[object]]:
    """Normalize xlwings range values (scalar, 1D or 2D) to a 2D list."""
    if num_rows == 1 and num_cols == 1 and not isinstance(values, (list, tuple)):
        return [[values]]
    rows = list(values)
    if rows and not isinstance(rows[0], (list, tuple)):
        rows = [rows] if num_rows == 1 else [[value] for value in rows]
    return [list(row) for row in rows]


def _rgb_tuple_to_hex(color: Any) -> str:
    red, green, blue = color
    return f"#{int(red):02x}{int(green):02x}{int(blue):02x}"


def _to_rgb_hex(value: str) -> str:
    """Normalize HEX input to #rrggbb, dropping any alpha channel."""
    return f"#{normalize_hex_input(value)[-6:].lower()}"


def _read_font_weight(cell: XlwingsRangeProtocol) -> str:
    return "bold" if cell.font.bold else "normal"


def _read_font_style(cell: XlwingsRangeProtocol) -> str:
    return "italic" if cell.font.italic else "normal"


def _read_font_line(cell: XlwingsRangeProtocol) -> str:
    font_api = cell.api.Font
    if font_api.Strikethrough:
        return "line-through"
    if font_api.Underline not in (None, XL_UNDERLINE_NONE):
        return "underline"
    return "none"


def _read_font_color(cell: XlwingsRangeProtocol) -> str:
    color = cell.font.color
    if color is None:
        return DEFAULT_FONT_COLOR
    return _rgb_tuple_to_hex(color)


def _read_background(cell: XlwingsRangeProtocol) -> str:
    color = cell.color
    if color is None:
        return DEFAULT_BACKGROUND
    return _rgb_tuple_to_hex(color)


def _write_font_weight(cell: XlwingsRangeProtocol, value: str) -> None:
    cell.font.bold = value == "bold"


def _write_font_style(cell: XlwingsRangeProtocol, value: str) -> None:
    cell.font.italic = value == "italic"


def _write_font_line(cell: XlwingsRangeProtocol, value: str) -> None:
    font_api = cell.api.Font
    font_api.Underline = (
        XL_UNDERLINE_SINGLE if value == "underline" else XL_UNDERLINE_NONE
    )
    font_api.Strikethrough = value == "line-through"


def _write_font_color(cell: XlwingsRangeProtocol, value: str) -> None:
    cell.font.color = _to_rgb_hex(value)


def _write_background(cell: XlwingsRangeProtocol, value: str) -> None:
    cell.color = _to_rgb_hex(value)


__all__ = ["XlwingsSheetHost"]
