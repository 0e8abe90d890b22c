"""fxstyle: apply bulk formatting to the formula cells of Excel worksheets."""

from __future__ import annotations

from .formatting import (
    CANCELLED_MESSAGE,
    CancellationFlag,
    FormatRequest,
    FormatResult,
    FormatterConfig,
    FormattingCancelledError,
    FormattingError,
    HostIOError,
    InvalidInputError,
    StyleDelta,
    StyleGridSet,
    cancel_formatting,
    find_formula_cells,
    format_formula_cells,
    is_valid_input,
    run_format,
)

__all__ = [
    "CANCELLED_MESSAGE",
    "CancellationFlag",
    "FormatRequest",
    "FormatResult",
    "FormatterConfig",
    "FormattingCancelledError",
    "FormattingError",
    "HostIOError",
    "InvalidInputError",
    "StyleDelta",
    "StyleGridSet",
    "cancel_formatting",
    "find_formula_cells",
    "format_formula_cells",
    "is_valid_input",
    "run_format",
]
