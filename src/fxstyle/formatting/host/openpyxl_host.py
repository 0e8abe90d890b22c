from __future__ import annotations

from collections.abc import Callable, Iterator
from copy import copy
import logging

from openpyxl.cell.cell import Cell
from openpyxl.styles import PatternFill
from openpyxl.styles.colors import Color
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.formula import ArrayFormula
from openpyxl.worksheet.worksheet import Worksheet

from fxstyle.formatting.colors import argb_to_hex, same_color, to_argb
from fxstyle.formatting.errors import HostIOError
from fxstyle.formatting.models import GridContext, StyleGridSet, grid_shape
from fxstyle.formatting.types import DEFAULT_BACKGROUND, DEFAULT_FONT_COLOR, Grid

logger = logging.getLogger(__name__)


class OpenpyxlSheetHost:
    """Sheet host backed by an in-memory openpyxl worksheet.

    The target range always starts at A1 and spans the sheet's full extent
    (``max_row`` x ``max_column``). openpyxl keeps every change in memory
    until the workbook is saved, so ``flush`` only records the barrier.
    """

    def __init__(self, workbook: Workbook, *, sheet_name: str | None = None) -> None:
        self._sheet = _resolve_sheet(workbook, sheet_name)
        self.flush_count = 0

    @property
    def sheet(self) -> Worksheet:
        return self._sheet

    def get_grid_context(self) -> GridContext:
        return GridContext(
            sheet_name=self._sheet.title,
            num_rows=self._sheet.max_row,
            num_cols=self._sheet.max_column,
        )

    def read_content_grid(self) -> list[list[object]]:
        return [[_content_value(cell.value) for cell in row] for row in self._rows()]

    def read_style_grid_set(self) -> StyleGridSet:
        rows = [list(row) for row in self._rows()]
        return StyleGridSet(
            font_weights=[[_read_font_weight(cell) for cell in row] for row in rows],
            font_styles=[[_read_font_style(cell) for cell in row] for row in rows],
            font_lines=[[_read_font_line(cell) for cell in row] for row in rows],
            font_colors=[[_read_font_color(cell) for cell in row] for row in rows],
            backgrounds=[[_read_background(cell) for cell in row] for row in rows],
        )

    def set_font_weights(self, grid: Grid) -> None:
        self._write_grid("font_weights", grid, _write_font_weight)

    def set_font_styles(self, grid: Grid) -> None:
        self._write_grid("font_styles", grid, _write_font_style)

    def set_font_lines(self, grid: Grid) -> None:
        self._write_grid("font_lines", grid, _write_font_line)

    def set_font_colors(self, grid: Grid) -> None:
        self._write_grid("font_colors", grid, _write_font_color)

    def set_backgrounds(self, grid: Grid) -> None:
        self._write_grid("backgrounds", grid, _write_background)

    def flush(self) -> None:
        self.flush_count += 1
        logger.debug(
            "openpyxl flush barrier #%d on %s.", self.flush_count, self._sheet.title
        )

    def _rows(self) -> Iterator[tuple[Cell, ...]]:
        context = self.get_grid_context()
        return self._sheet.iter_rows(
            min_row=1,
            max_row=context.num_rows,
            min_col=1,
            max_col=context.num_cols,
        )

    def _write_grid(
        self, attribute: str, grid: Grid, write: Callable[[Cell, str], None]
    ) -> None:
        """Write one attribute grid over the whole range."""
        context = self.get_grid_context()
        expected = (context.num_rows, context.num_cols)
        if grid_shape(grid) != expected:
            rows, cols = grid_shape(grid)
            raise HostIOError(
                f"{attribute} grid is {rows}x{cols}, expected "
                f"{expected[0]}x{expected[1]} for sheet {context.sheet_name}.",
                action=f"write_{attribute}",
            )
        for cells, values in zip(self._rows(), grid, strict=True):
            for cell, value in zip(cells, values, strict=True):
                write(cell, value)


def _resolve_sheet(workbook: Workbook, sheet_name: str | None) -> Worksheet:
    """Return the named sheet, or the active sheet when no name is given."""
    if sheet_name is not None:
        if sheet_name not in workbook.sheetnames:
            raise HostIOError(f"Sheet not found: {sheet_name}", action="resolve_sheet")
        sheet = workbook[sheet_name]
    else:
        sheet = workbook.active
    if not isinstance(sheet, Worksheet):
        raise HostIOError(
            "Target sheet is not a worksheet (chartsheets cannot be formatted).",
            action="resolve_sheet",
        )
    return sheet


def _content_value(value: object) -> object:
    if isinstance(value, ArrayFormula):
        return value.text
    if value is None:
        return ""
    return value


def _color_hex(color: Color | None, default: str) -> str:
    """Return #rrggbb for RGB colors.

    Theme, indexed and auto colors read as ``"<type>:<value>"`` (for example
    ``"theme:1"``) so they never compare equal to a requested HEX color.
    """
    if color is None:
        return default
    if color.type == "rgb" and isinstance(color.rgb, str):
        return argb_to_hex(color.rgb)
    return f"{color.type}:{color.value}"


def _read_font_weight(cell: Cell) -> str:
    return "bold" if cell.font.bold else "normal"


def _read_font_style(cell: Cell) -> str:
    return "italic" if cell.font.italic else "normal"


def _read_font_line(cell: Cell) -> str:
    if cell.font.strike:
        return "line-through"
    if cell.font.underline not in (None, "none"):
        return "underline"
    return "none"


def _read_font_color(cell: Cell) -> str:
    return _color_hex(cell.font.color, DEFAULT_FONT_COLOR)


def _read_background(cell: Cell) -> str:
    fill = cell.fill
    if fill is None or fill.fill_type is None:
        return DEFAULT_BACKGROUND
    if fill.fill_type != "solid":
        return f"pattern:{fill.fill_type}"
    return _color_hex(fill.fgColor, DEFAULT_BACKGROUND)


def _write_font_weight(cell: Cell, value: str) -> None:
    target = value == "bold"
    if bool(cell.font.bold) == target:
        return
    font = copy(cell.font)
    font.bold = target
    cell.font = font


def _write_font_style(cell: Cell, value: str) -> None:
    target = value == "italic"
    if bool(cell.font.italic) == target:
        return
    font = copy(cell.font)
    font.italic = target
    cell.font = font


def _write_font_line(cell: Cell, value: str) -> None:
    if _read_font_line(cell) == value:
        return
    font = copy(cell.font)
    font.underline = "single" if value == "underline" else None
    font.strike = value == "line-through"
    cell.font = font


def _write_font_color(cell: Cell, value: str) -> None:
    if same_color(_read_font_color(cell), value):
        return
    font = copy(cell.font)
    font.color = to_argb(value)
    cell.font = font


def _write_background(cell: Cell, value: str) -> None:
    if same_color(_read_background(cell), value):
        return
    argb = to_argb(value)
    cell.fill = PatternFill(fill_type="solid", start_color=argb, end_color=argb)


__all__ = ["OpenpyxlSheetHost"]
