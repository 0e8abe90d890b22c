"""MCP server integration for fxstyle."""

from __future__ import annotations

from .tools import (
    CancelToolOutput,
    FormatToolInput,
    FormatToolOutput,
    run_cancel_tool,
    run_format_tool,
)

__all__ = [
    "CancelToolOutput",
    "FormatToolInput",
    "FormatToolOutput",
    "run_cancel_tool",
    "run_format_tool",
]
