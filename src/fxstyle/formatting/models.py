from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, BaseModel, Field, model_validator

from .types import (
    DEFAULT_BACKGROUND,
    DEFAULT_FONT_COLOR,
    FormatBackend,
    Grid,
    OnConflictPolicy,
    StyleAttribute,
)


class StyleDelta(BaseModel):
    """Sparse set of requested style changes.

    ``None`` means the attribute is left untouched. Booleans overwrite even
    when ``False``; colors overwrite only when non-empty.
    """

    bold: bool | None = None
    italic: bool | None = None
    underline: bool | None = None
    strikethrough: bool | None = None
    text_color: str | None = Field(
        default=None,
        validation_alias=AliasChoices("text_color", "textColor"),
        description="Font color written verbatim, e.g. '#FF0000'.",
    )
    bg_color: str | None = Field(
        default=None,
        validation_alias=AliasChoices("bg_color", "bgColor"),
        description="Background color written verbatim, e.g. '#FFFF00'.",
    )

    def is_empty(self) -> bool:
        """Return True when no field would produce a mutation."""
        return (
            self.bold is None
            and self.italic is None
            and self.underline is None
            and self.strikethrough is None
            and not self.text_color
            and not self.bg_color
        )


class StyleGridSet(BaseModel):
    """Five parallel style grids covering the same target range."""

    font_weights: Grid
    font_styles: Grid
    font_lines: Grid
    font_colors: Grid
    backgrounds: Grid

    @model_validator(mode="after")
    def _validate_shapes(self) -> StyleGridSet:
        shapes = {name: grid_shape(grid) for name, grid in self.grids().items()}
        if len(set(shapes.values())) > 1:
            detail = ", ".join(
                f"{name}={rows}x{cols}" for name, (rows, cols) in shapes.items()
            )
            raise ValueError(f"Style grids must share one shape: {detail}")
        return self

    def grids(self) -> dict[StyleAttribute, Grid]:
        """Return the grids keyed by attribute name in commit order."""
        return {
            "font_weights": self.font_weights,
            "font_styles": self.font_styles,
            "font_lines": self.font_lines,
            "font_colors": self.font_colors,
            "backgrounds": self.backgrounds,
        }

    @property
    def shape(self) -> tuple[int, int]:
        return grid_shape(self.font_weights)

    @classmethod
    def filled(
        cls,
        num_rows: int,
        num_cols: int,
        *,
        font_weight: str = "normal",
        font_style: str = "normal",
        font_line: str = "none",
        font_color: str = DEFAULT_FONT_COLOR,
        background: str = DEFAULT_BACKGROUND,
    ) -> StyleGridSet:
        """Build a grid set where every cell carries the same style."""

        def _fill(value: str) -> Grid:
            return [[value] * num_cols for _ in range(num_rows)]

        return cls(
            font_weights=_fill(font_weight),
            font_styles=_fill(font_style),
            font_lines=_fill(font_line),
            font_colors=_fill(font_color),
            backgrounds=_fill(background),
        )


class GridContext(BaseModel):
    """Resolved target sheet and its full extent."""

    sheet_name: str
    num_rows: int = Field(ge=0)
    num_cols: int = Field(ge=0)


class FormatterConfig(BaseModel):
    """Tunables for one formatting operation."""

    batch_size: int = Field(
        default=1000, ge=1, description="Formatted cells between host flushes."
    )
    cancel_ttl_seconds: float = Field(
        default=600, gt=0, description="Lifetime of a cancellation request."
    )
    debug_preview_limit: int = Field(
        default=3, ge=0, description="Number of detected formulas logged at DEBUG."
    )


class FormatRequest(BaseModel):
    """Input model for formatting formula cells in a workbook file."""

    xlsx_path: Path
    styles: StyleDelta
    sheet: str | None = None
    out_dir: Path | None = None
    out_name: str | None = None
    on_conflict: OnConflictPolicy = "overwrite"
    dry_run: bool = False
    backend: FormatBackend = "openpyxl"


class FormatResult(BaseModel):
    """Outcome of one formatting operation."""

    sheet_name: str | None = None
    range: str | None = None
    num_rows: int = 0
    num_cols: int = 0
    formula_count: int = 0
    formatted_count: int = 0
    flush_count: int = 0
    out_path: str | None = None
    warnings: list[str] = Field(default_factory=list)


def grid_shape(grid: Grid) -> tuple[int, int]:
    """Return ``(rows, cols)`` of a rectangular grid.

    Raises:
        ValueError: If rows have different lengths.
    """
    if not grid:
        return 0, 0
    num_cols = len(grid[0])
    for index, row in enumerate(grid):
        if len(row) != num_cols:
            raise ValueError(
                f"Grid is not rectangular: row {index} has {len(row)} cells, "
                f"expected {num_cols}."
            )
    return len(grid), num_cols
