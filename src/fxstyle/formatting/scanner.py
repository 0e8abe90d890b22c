from __future__ import annotations

from collections.abc import Sequence
import logging

from .types import Coordinate

logger = logging.getLogger(__name__)


def find_formula_cells(
    content_grid: Sequence[Sequence[object]], *, preview_limit: int = 3
) -> list[Coordinate]:
    """Return ``(row, col)`` of every formula cell in row-major order.

    A cell counts as a formula when its value is non-empty and its string
    form starts with ``=``.

    Args:
        content_grid: Raw cell contents, formulas as text.
        preview_limit: Number of matches to log at DEBUG level.

    Returns:
        Zero-based coordinates in scan order.
    """
    positions: list[Coordinate] = []
    for row_index, row in enumerate(content_grid):
        for col_index, value in enumerate(row):
            if not value or not str(value).startswith("="):
                continue
            positions.append((row_index, col_index))
            if len(positions) <= preview_limit:
                logger.debug(
                    "Formula %d at [%d, %d]: %s",
                    len(positions),
                    row_index,
                    col_index,
                    value,
                )
    return positions
