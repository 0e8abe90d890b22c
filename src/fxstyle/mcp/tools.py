from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from fxstyle.formatting.cancellation import (
    DEFAULT_CANCEL_TTL_SECONDS,
    CancellationFlag,
    cancel_formatting,
)
from fxstyle.formatting.models import FormatRequest, FormatResult, FormatterConfig
from fxstyle.formatting.service import run_format
from fxstyle.formatting.types import FormatBackend, OnConflictPolicy
from fxstyle.formatting.validation import coerce_style_delta
from fxstyle.shared.io import PathPolicy


class FormatToolInput(BaseModel):
    """MCP tool input for formatting formula cells."""

    xlsx_path: str
    styles: Any = None
    sheet: str | None = None
    out_dir: str | None = None
    out_name: str | None = None
    on_conflict: OnConflictPolicy | None = None
    dry_run: bool = False
    backend: FormatBackend = "openpyxl"


class FormatToolOutput(BaseModel):
    """MCP tool output for formatting formula cells."""

    out_path: str | None = None
    sheet_name: str | None = None
    range: str | None = None
    formula_count: int = 0
    formatted_count: int = 0
    flush_count: int = 0
    warnings: list[str] = Field(default_factory=list)


class CancelToolOutput(BaseModel):
    """MCP tool output for a cancellation request."""

    message: str
    ttl_seconds: float


def run_format_tool(
    payload: FormatToolInput,
    *,
    policy: PathPolicy | None = None,
    on_conflict: OnConflictPolicy | None = None,
    flag: CancellationFlag | None = None,
    config: FormatterConfig | None = None,
) -> FormatToolOutput:
    """Run the format tool handler.

    Args:
        payload: Tool input payload.
        policy: Optional path policy for access control.
        on_conflict: Server default conflict policy.
        flag: Cancellation flag shared with the cancel tool.
        config: Formatter tunables.

    Returns:
        Tool output payload.

    Raises:
        InvalidInputError: If ``styles`` is not a style record.
    """
    request = FormatRequest(
        xlsx_path=Path(payload.xlsx_path),
        styles=coerce_style_delta(payload.styles),
        sheet=payload.sheet,
        out_dir=Path(payload.out_dir) if payload.out_dir else None,
        out_name=payload.out_name,
        on_conflict=payload.on_conflict or on_conflict or "overwrite",
        dry_run=payload.dry_run,
        backend=payload.backend,
    )
    result = run_format(request, policy=policy, flag=flag, config=config)
    return _to_tool_output(result)


def run_cancel_tool(
    *,
    flag: CancellationFlag | None = None,
    ttl_seconds: float = DEFAULT_CANCEL_TTL_SECONDS,
) -> CancelToolOutput:
    """Run the cancel tool handler."""
    message = cancel_formatting(flag, ttl_seconds=ttl_seconds)
    return CancelToolOutput(message=message, ttl_seconds=ttl_seconds)


def _to_tool_output(result: FormatResult) -> FormatToolOutput:
    return FormatToolOutput(
        out_path=result.out_path,
        sheet_name=result.sheet_name,
        range=result.range,
        formula_count=result.formula_count,
        formatted_count=result.formatted_count,
        flush_count=result.flush_count,
        warnings=list(result.warnings),
    )
