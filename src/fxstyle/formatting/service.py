from __future__ import annotations

from collections.abc import Callable
import logging
from pathlib import Path
from typing import TypeVar

from fxstyle.core.workbook import openpyxl_workbook, xlwings_workbook
from fxstyle.shared.a1 import build_range_ref
from fxstyle.shared.io import PathPolicy, resolve_input_path
from fxstyle.shared.output_path import apply_conflict_policy, resolve_output_path

from .cancellation import DEFAULT_CANCELLATION_FLAG, CancellationFlag
from .committer import write_styles_to_sheet
from .errors import FormattingError, HostIOError
from .host.base import SheetHost
from .host.openpyxl_host import OpenpyxlSheetHost
from .host.xlwings_host import XlwingsSheetHost
from .models import (
    FormatRequest,
    FormatResult,
    FormatterConfig,
    GridContext,
    StyleDelta,
)
from .mutator import apply_styles_to_memory
from .scanner import find_formula_cells

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_format(
    request: FormatRequest,
    *,
    policy: PathPolicy | None = None,
    flag: CancellationFlag | None = None,
    config: FormatterConfig | None = None,
) -> FormatResult:
    """Format the formula cells of a workbook file and save the result.

    Nothing is written when the operation is cancelled.

    Args:
        request: Workbook, target sheet, styles and output options.
        policy: Optional path policy for access control.
        flag: Cancellation flag to observe; defaults to the shared flag.
        config: Formatter tunables.

    Returns:
        Formatting result with counts and the output path.
    """
    input_path = resolve_input_path(request.xlsx_path, policy=policy)
    output_path = resolve_output_path(
        input_path,
        out_dir=request.out_dir,
        out_name=request.out_name,
        policy=policy,
        default_suffix=input_path.suffix,
    )
    warnings: list[str] = []
    output_path, warning, skipped = apply_conflict_policy(
        output_path, request.on_conflict
    )
    if warning:
        warnings.append(warning)
    if skipped and not request.dry_run:
        return FormatResult(out_path=str(output_path), warnings=warnings)
    if skipped:
        warnings.append(
            "Dry-run mode ignores on_conflict=skip and simulates without writing."
        )

    if request.backend == "com":
        result = _run_format_com(request, input_path, output_path, flag, config)
    else:
        result = _run_format_openpyxl(request, input_path, output_path, flag, config)
    result.warnings[:0] = warnings
    return result


def _run_format_openpyxl(
    request: FormatRequest,
    input_path: Path,
    output_path: Path,
    flag: CancellationFlag | None,
    config: FormatterConfig | None,
) -> FormatResult:
    """Apply formatting with openpyxl and save to ``output_path``."""
    with openpyxl_workbook(input_path) as workbook:
        host = OpenpyxlSheetHost(workbook, sheet_name=request.sheet)
        result = format_formula_cells(host, request.styles, flag=flag, config=config)
        if request.dry_run:
            return result
        output_path.parent.mkdir(parents=True, exist_ok=True)
        _call_host("save", workbook.save, output_path)
    result.out_path = str(output_path)
    return result


def _run_format_com(
    request: FormatRequest,
    input_path: Path,
    output_path: Path,
    flag: CancellationFlag | None,
    config: FormatterConfig | None,
) -> FormatResult:
    """Apply formatting through Excel COM and save to ``output_path``."""
    try:
        with xlwings_workbook(input_path) as book:
            sheet = (
                book.sheets[request.sheet]
                if request.sheet is not None
                else book.sheets.active
            )
            host = XlwingsSheetHost(sheet)
            result = format_formula_cells(
                host, request.styles, flag=flag, config=config
            )
            if request.dry_run:
                return result
            output_path.parent.mkdir(parents=True, exist_ok=True)
            book.save(str(output_path))
    except FormattingError:
        raise
    except Exception as exc:
        raise HostIOError(f"COM formatting failed: {exc}", action="com") from exc
    result.out_path = str(output_path)
    return result


def format_formula_cells(
    host: SheetHost,
    delta: StyleDelta,
    *,
    flag: CancellationFlag | None = None,
    config: FormatterConfig | None = None,
) -> FormatResult:
    """Run scan, mutate and commit against any sheet host.

    Raises:
        FormattingCancelledError: If cancellation is observed; styles are not
            committed in that case.
        HostIOError: If the host fails to read, flush or write.
    """
    settings = config or FormatterConfig()
    cancel_flag = DEFAULT_CANCELLATION_FLAG if flag is None else flag
    context = _call_host("get_grid_context", host.get_grid_context)
    content = _call_host("read_content_grid", host.read_content_grid)
    _log_debug_info(context, content)
    result = FormatResult(
        sheet_name=context.sheet_name,
        range=_range_ref(context),
        num_rows=context.num_rows,
        num_cols=context.num_cols,
    )

    positions = find_formula_cells(content, preview_limit=settings.debug_preview_limit)
    result.formula_count = len(positions)
    if not positions:
        logger.info("No formula cells found on %s.", context.sheet_name)
        result.warnings.append(f"No formula cells found on {context.sheet_name}.")
        return result
    if delta.is_empty():
        result.warnings.append("No style fields were provided; cells left unchanged.")

    styles = _call_host("read_style_grid_set", host.read_style_grid_set)
    if styles.shape != (context.num_rows, context.num_cols):
        rows, cols = styles.shape
        raise HostIOError(
            f"Style grids are {rows}x{cols} but the range is "
            f"{context.num_rows}x{context.num_cols}.",
            action="read_style_grid_set",
        )

    def _flush() -> None:
        _call_host("flush", host.flush)
        result.flush_count += 1

    result.formatted_count = apply_styles_to_memory(
        positions,
        styles,
        delta,
        context.num_cols,
        cancel_check=cancel_flag.get,
        flush=_flush,
        batch_size=settings.batch_size,
    )
    _call_host("write_styles", write_styles_to_sheet, host, styles)
    logger.info(
        "Formatted %d formula cells on %s (%d flushes).",
        result.formatted_count,
        context.sheet_name,
        result.flush_count,
    )
    return result


def _call_host(action: str, func: Callable[..., T], *args: object) -> T:
    """Invoke a host operation, surfacing failures as HostIOError."""
    try:
        return func(*args)
    except FormattingError:
        raise
    except Exception as exc:
        logger.error("Host %s failed: %s", action, exc)
        raise HostIOError(str(exc), action=action) from exc


def _log_debug_info(context: GridContext, content: list[list[object]]) -> None:
    logger.debug("Active sheet name: %s", context.sheet_name)
    logger.debug(
        "Data range dimensions: %d rows x %d cols", context.num_rows, context.num_cols
    )
    if not content or not content[0]:
        return
    first = content[0][0]
    if first and str(first).startswith("="):
        logger.debug("A1 formula: %s", first)
    else:
        logger.debug("A1 value: %r", first)


def _range_ref(context: GridContext) -> str | None:
    if context.num_rows < 1 or context.num_cols < 1:
        return None
    return build_range_ref(context.num_rows, context.num_cols)


__all__ = ["format_formula_cells", "run_format"]
