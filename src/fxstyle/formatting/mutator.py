from __future__ import annotations

from collections.abc import Callable, Sequence
import logging
from typing import Final

from .errors import FormattingCancelledError
from .models import StyleDelta, StyleGridSet
from .types import Coordinate, Grid

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE: Final[int] = 1000


def apply_styles_to_memory(
    positions: Sequence[Coordinate],
    current_styles: StyleGridSet,
    delta: StyleDelta,
    total_cols: int,
    *,
    cancel_check: Callable[[], bool],
    flush: Callable[[], None],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """Write ``delta`` into the style grids at every position.

    Cancellation is checked whenever the position index is a multiple of
    ``total_cols``; ``flush`` runs after every ``batch_size`` formatted cells.
    Grids are mutated in place and are not restored on cancellation.

    Args:
        positions: Formula coordinates in scan order.
        current_styles: Style grids to update.
        delta: Requested style changes.
        total_cols: Column count of the target range.
        cancel_check: Returns True when the user asked to stop.
        flush: Host commit point.
        batch_size: Formatted cells between flushes.

    Returns:
        Number of cells formatted.

    Raises:
        FormattingCancelledError: If ``cancel_check`` reports a cancellation.
        ValueError: If ``total_cols`` or ``batch_size`` is not positive.
    """
    if total_cols <= 0:
        raise ValueError("total_cols must be > 0.")
    if batch_size <= 0:
        raise ValueError("batch_size must be > 0.")
    assignments = _resolve_assignments(current_styles, delta)
    formatted_cells = 0
    for index, (row, col) in enumerate(positions):
        if index % total_cols == 0 and cancel_check():
            logger.warning(
                "Formatting stopped due to user cancellation after %d cells.",
                formatted_cells,
            )
            raise FormattingCancelledError()
        for grid, value in assignments:
            grid[row][col] = value
        formatted_cells += 1
        if formatted_cells % batch_size == 0:
            logger.debug("Flushing after %d formatted cells.", formatted_cells)
            flush()
    return formatted_cells


def _resolve_assignments(
    styles: StyleGridSet, delta: StyleDelta
) -> list[tuple[Grid, str]]:
    """Map present delta fields to (grid, value) pairs in evaluation order.

    Underline and strikethrough share the font-line grid, so a later
    strikethrough entry overwrites the underline one.
    """
    assignments: list[tuple[Grid, str]] = []
    if delta.bold is not None:
        assignments.append((styles.font_weights, "bold" if delta.bold else "normal"))
    if delta.italic is not None:
        assignments.append(
            (styles.font_styles, "italic" if delta.italic else "normal")
        )
    if delta.underline is not None:
        assignments.append(
            (styles.font_lines, "underline" if delta.underline else "none")
        )
    if delta.strikethrough is not None:
        assignments.append(
            (styles.font_lines, "line-through" if delta.strikethrough else "none")
        )
    if delta.text_color:
        assignments.append((styles.font_colors, delta.text_color))
    if delta.bg_color:
        assignments.append((styles.backgrounds, delta.bg_color))
    return assignments
