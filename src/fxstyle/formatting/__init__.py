"""Formula detection and style batching for spreadsheet formula cells."""

from __future__ import annotations

from .cancellation import (
    DEFAULT_CANCELLATION_FLAG,
    CancellationFlag,
    cancel_formatting,
    is_cancelled,
)
from .committer import write_styles_to_sheet
from .errors import (
    CANCELLED_MESSAGE,
    FormattingCancelledError,
    FormattingError,
    HostIOError,
    InvalidInputError,
)
from .models import (
    FormatRequest,
    FormatResult,
    FormatterConfig,
    GridContext,
    StyleDelta,
    StyleGridSet,
)
from .mutator import apply_styles_to_memory
from .scanner import find_formula_cells
from .service import format_formula_cells, run_format
from .validation import coerce_style_delta, is_valid_input

__all__ = [
    "CANCELLED_MESSAGE",
    "DEFAULT_CANCELLATION_FLAG",
    "CancellationFlag",
    "FormatRequest",
    "FormatResult",
    "FormatterConfig",
    "FormattingCancelledError",
    "FormattingError",
    "GridContext",
    "HostIOError",
    "InvalidInputError",
    "StyleDelta",
    "StyleGridSet",
    "apply_styles_to_memory",
    "cancel_formatting",
    "coerce_style_delta",
    "find_formula_cells",
    "format_formula_cells",
    "is_cancelled",
    "is_valid_input",
    "run_format",
    "write_styles_to_sheet",
]
