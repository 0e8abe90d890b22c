from __future__ import annotations

import argparse
import functools
import importlib
import logging
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any, cast

import anyio
from pydantic import BaseModel, Field

from fxstyle.formatting.cancellation import DEFAULT_CANCEL_TTL_SECONDS, CancellationFlag
from fxstyle.formatting.errors import FormattingCancelledError, FormattingError
from fxstyle.formatting.models import FormatterConfig
from fxstyle.formatting.types import FormatBackend, OnConflictPolicy
from fxstyle.shared.io import PathPolicy

from .tools import (
    CancelToolOutput,
    FormatToolInput,
    FormatToolOutput,
    run_cancel_tool,
    run_format_tool,
)

if TYPE_CHECKING:  # pragma: no cover - typing only
    from mcp.server.fastmcp import FastMCP

logger = logging.getLogger(__name__)


class ServerConfig(BaseModel):
    """Configuration for the MCP server process."""

    root: Path = Field(..., description="Root directory for file access.")
    deny_globs: list[str] = Field(default_factory=list, description="Denied glob list.")
    log_level: str = Field(default="INFO", description="Logging level.")
    log_file: Path | None = Field(default=None, description="Optional log file path.")
    on_conflict: OnConflictPolicy = Field(
        default="overwrite", description="Output conflict policy."
    )
    batch_size: int = Field(default=1000, ge=1, description="Cells per flush.")
    cancel_ttl_seconds: float = Field(
        default=DEFAULT_CANCEL_TTL_SECONDS,
        gt=0,
        description="Lifetime of a cancellation request.",
    )

    def formatter_config(self) -> FormatterConfig:
        return FormatterConfig(
            batch_size=self.batch_size,
            cancel_ttl_seconds=self.cancel_ttl_seconds,
        )


def main(argv: list[str] | None = None) -> int:
    """Run the MCP server entrypoint.

    Args:
        argv: Optional CLI arguments for testing.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    config = _parse_args(argv)
    _configure_logging(config)
    try:
        run_server(config)
    except Exception as exc:  # pragma: no cover - surface runtime errors
        logger.error("MCP server failed: %s", exc)
        return 1
    return 0


def run_server(config: ServerConfig) -> None:
    """Start the MCP server.

    Args:
        config: Server configuration.
    """
    _import_mcp()
    policy = PathPolicy(root=config.root, deny_globs=config.deny_globs)
    logger.info("MCP root: %s", policy.normalize_root())
    app = _create_app(
        policy,
        on_conflict=config.on_conflict,
        flag=CancellationFlag(),
        formatter_config=config.formatter_config(),
    )
    app.run()


def _parse_args(argv: list[str] | None) -> ServerConfig:
    """Parse CLI arguments into server config.

    Args:
        argv: Optional CLI argument list.

    Returns:
        Parsed server configuration.
    """
    parser = argparse.ArgumentParser(description="fxstyle MCP server (stdio).")
    parser.add_argument("--root", type=Path, required=True, help="Workspace root.")
    parser.add_argument(
        "--deny-glob",
        action="append",
        default=[],
        help="Glob pattern to deny (can be specified multiple times).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    )
    parser.add_argument("--log-file", type=Path, help="Optional log file path.")
    parser.add_argument(
        "--on-conflict",
        choices=["overwrite", "skip", "rename"],
        default="overwrite",
        help="Output conflict policy (overwrite/skip/rename).",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=1000,
        help="Formatted cells between host flushes.",
    )
    parser.add_argument(
        "--cancel-ttl",
        type=float,
        default=DEFAULT_CANCEL_TTL_SECONDS,
        help="Seconds a cancellation request stays active.",
    )
    args = parser.parse_args(argv)
    return ServerConfig(
        root=args.root,
        deny_globs=list(args.deny_glob),
        log_level=args.log_level,
        log_file=args.log_file,
        on_conflict=args.on_conflict,
        batch_size=args.batch_size,
        cancel_ttl_seconds=args.cancel_ttl,
    )


def _configure_logging(config: ServerConfig) -> None:
    """Configure logging for the server process.

    Args:
        config: Server configuration.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.log_file is not None:
        handlers.append(logging.FileHandler(config.log_file))
    logging.basicConfig(
        level=config.log_level.upper(),
        handlers=handlers,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _import_mcp() -> ModuleType:
    """Import the MCP SDK module or raise a helpful error.

    Returns:
        Imported MCP module.
    """
    try:
        return importlib.import_module("mcp")
    except ModuleNotFoundError as exc:
        raise RuntimeError(
            "MCP SDK is not installed. Install with `pip install fxstyle[mcp]`."
        ) from exc


def _create_app(
    policy: PathPolicy,
    *,
    on_conflict: OnConflictPolicy,
    flag: CancellationFlag,
    formatter_config: FormatterConfig,
) -> FastMCP:
    """Create the MCP FastMCP application.

    Args:
        policy: Path policy for filesystem access.
        on_conflict: Default output conflict policy.
        flag: Cancellation flag shared by the format and cancel tools.
        formatter_config: Formatter tunables.

    Returns:
        FastMCP application instance.
    """
    from mcp.server.fastmcp import FastMCP

    app = FastMCP("fxstyle MCP", json_response=True)
    _register_tools(
        app,
        policy,
        default_on_conflict=on_conflict,
        flag=flag,
        formatter_config=formatter_config,
    )
    return app


def _register_tools(
    app: FastMCP,
    policy: PathPolicy,
    *,
    default_on_conflict: OnConflictPolicy,
    flag: CancellationFlag,
    formatter_config: FormatterConfig,
) -> None:
    """Register MCP tools for the server.

    Args:
        app: FastMCP application instance.
        policy: Path policy for filesystem access.
        default_on_conflict: Conflict policy used when a call omits one.
        flag: Cancellation flag shared by the format and cancel tools.
        formatter_config: Formatter tunables.
    """

    async def _format_tool(
        xlsx_path: str,
        styles: dict[str, Any],
        sheet: str | None = None,
        out_dir: str | None = None,
        out_name: str | None = None,
        on_conflict: OnConflictPolicy | None = None,
        dry_run: bool = False,
        backend: FormatBackend = "openpyxl",
    ) -> FormatToolOutput:
        """Apply formatting to every formula cell of a worksheet.

        Scans the whole sheet (or the active sheet) for cells whose content
        starts with '=', then applies the requested styles to those cells only.
        Can be stopped with fxstyle_cancel_formatting while it runs.

        Args:
            xlsx_path: Path to the Excel workbook (.xlsx/.xlsm).
            styles: Style changes. Keys: 'bold', 'italic', 'underline',
                'strikethrough' (booleans), 'textColor' and 'bgColor'
                (HEX such as '#FF0000'). Omitted keys leave cells unchanged.
                When both underline and strikethrough are set, strikethrough wins.
            sheet: Sheet name. Defaults to the active sheet.
            out_dir: Output directory. Defaults to same directory as input.
            out_name: Output filename. Defaults to '{stem}_formatted{ext}'.
            on_conflict: Conflict policy when output file exists:
                'overwrite', 'skip' or 'rename'. Defaults to server setting.
            dry_run: When true, count formula cells without saving.
            backend: 'openpyxl' (file based) or 'com' (live Excel via xlwings).

        Returns:
            Output path, formula and formatted cell counts, and warnings.
        """
        payload = FormatToolInput(
            xlsx_path=xlsx_path,
            styles=styles,
            sheet=sheet,
            out_dir=out_dir,
            out_name=out_name,
            on_conflict=on_conflict,
            dry_run=dry_run,
            backend=backend,
        )
        work = functools.partial(
            run_format_tool,
            payload,
            policy=policy,
            on_conflict=on_conflict or default_on_conflict,
            flag=flag,
            config=formatter_config,
        )
        try:
            result = cast(FormatToolOutput, await anyio.to_thread.run_sync(work))
        except FormattingCancelledError as exc:
            logger.warning("Format of %s cancelled: %s", xlsx_path, exc)
            raise
        except FormattingError as exc:
            logger.error("Format of %s failed: %s", xlsx_path, exc)
            raise
        return result

    format_tool = app.tool(name="fxstyle_format_formulas")
    format_tool(_format_tool)

    async def _cancel_tool() -> CancelToolOutput:
        """Cancel a running fxstyle_format_formulas call.

        The request stays active for the server's cancel TTL, so formats
        started within that window stop at their first check.

        Returns:
            Confirmation message and TTL in seconds.
        """
        return run_cancel_tool(
            flag=flag, ttl_seconds=formatter_config.cancel_ttl_seconds
        )

    cancel_tool = app.tool(name="fxstyle_cancel_formatting")
    cancel_tool(_cancel_tool)
