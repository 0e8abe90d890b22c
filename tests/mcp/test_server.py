from __future__ import annotations

from collections.abc import Awaitable, Callable
import importlib
from pathlib import Path
from typing import Any, cast

import pytest

from fxstyle.formatting.cancellation import CancellationFlag
from fxstyle.formatting.errors import CANCELLED_MESSAGE, FormattingCancelledError
from fxstyle.formatting.models import FormatterConfig
from fxstyle.formatting.types import OnConflictPolicy
from fxstyle.mcp import server
from fxstyle.mcp.tools import CancelToolOutput, FormatToolInput, FormatToolOutput
from fxstyle.shared.io import PathPolicy

anyio: Any = pytest.importorskip("anyio")

ToolFunc = Callable[..., object] | Callable[..., Awaitable[object]]


class DummyApp:
    def __init__(self) -> None:
        self.tools: dict[str, ToolFunc] = {}

    def tool(self, *, name: str) -> Callable[[ToolFunc], ToolFunc]:
        def decorator(func: ToolFunc) -> ToolFunc:
            self.tools[name] = func
            return func

        return decorator


async def _call_async(
    func: Callable[..., Awaitable[object]],
    kwargs: dict[str, object],
) -> object:
    return await func(**kwargs)


def test_parse_args_defaults(tmp_path: Path) -> None:
    config = server._parse_args(["--root", str(tmp_path)])
    assert config.root == tmp_path
    assert config.deny_globs == []
    assert config.log_level == "INFO"
    assert config.log_file is None
    assert config.on_conflict == "overwrite"
    assert config.batch_size == 1000
    assert config.cancel_ttl_seconds == 600


def test_parse_args_with_options(tmp_path: Path) -> None:
    log_file = tmp_path / "log.txt"
    config = server._parse_args(
        [
            "--root",
            str(tmp_path),
            "--deny-glob",
            "**/*.tmp",
            "--log-level",
            "DEBUG",
            "--log-file",
            str(log_file),
            "--on-conflict",
            "rename",
            "--batch-size",
            "250",
            "--cancel-ttl",
            "30",
        ]
    )
    assert config.deny_globs == ["**/*.tmp"]
    assert config.log_level == "DEBUG"
    assert config.log_file == log_file
    assert config.on_conflict == "rename"
    assert config.formatter_config() == FormatterConfig(
        batch_size=250, cancel_ttl_seconds=30
    )


def test_parse_args_rejects_zero_batch(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        server._parse_args(["--root", str(tmp_path), "--batch-size", "0"])


def test_import_mcp_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    def _raise(_: str) -> None:
        raise ModuleNotFoundError("mcp")

    monkeypatch.setattr(importlib, "import_module", _raise)
    with pytest.raises(RuntimeError, match="fxstyle\\[mcp\\]"):
        server._import_mcp()


def _register(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    flag: CancellationFlag,
    fake_run_format_tool: Callable[..., FormatToolOutput],
) -> DummyApp:
    app = DummyApp()

    async def fake_run_sync(func: Callable[[], object]) -> object:
        return func()

    monkeypatch.setattr(server, "run_format_tool", fake_run_format_tool)
    monkeypatch.setattr(anyio.to_thread, "run_sync", fake_run_sync)
    server._register_tools(
        cast(Any, app),
        PathPolicy(root=tmp_path),
        default_on_conflict="rename",
        flag=flag,
        formatter_config=FormatterConfig(batch_size=10, cancel_ttl_seconds=45),
    )
    return app


def test_register_tools_passes_defaults(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    flag = CancellationFlag()
    calls: dict[str, tuple[object, ...]] = {}

    def fake_run_format_tool(
        payload: FormatToolInput,
        *,
        policy: PathPolicy,
        on_conflict: OnConflictPolicy,
        flag: CancellationFlag,
        config: FormatterConfig,
    ) -> FormatToolOutput:
        calls["format"] = (payload, policy, on_conflict, flag, config)
        return FormatToolOutput(out_path="out.xlsx", formatted_count=1)

    app = _register(monkeypatch, tmp_path, flag, fake_run_format_tool)
    assert set(app.tools) == {"fxstyle_format_formulas", "fxstyle_cancel_formatting"}
    format_tool = cast(
        Callable[..., Awaitable[object]], app.tools["fxstyle_format_formulas"]
    )
    result = anyio.run(
        _call_async,
        format_tool,
        {"xlsx_path": "in.xlsx", "styles": {"bold": True}},
    )
    assert isinstance(result, FormatToolOutput)
    payload, policy, on_conflict, passed_flag, config = calls["format"]
    assert isinstance(payload, FormatToolInput)
    assert payload.styles == {"bold": True}
    assert isinstance(policy, PathPolicy)
    assert on_conflict == "rename"
    assert passed_flag is flag
    assert isinstance(config, FormatterConfig)
    assert config.batch_size == 10


def test_register_tools_cancel_sets_shared_flag(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    flag = CancellationFlag()

    def fake_run_format_tool(payload: FormatToolInput, **_: object) -> FormatToolOutput:
        return FormatToolOutput()

    app = _register(monkeypatch, tmp_path, flag, fake_run_format_tool)
    cancel_tool = cast(
        Callable[..., Awaitable[object]], app.tools["fxstyle_cancel_formatting"]
    )
    result = anyio.run(_call_async, cancel_tool, {})
    assert result == CancelToolOutput(message=CANCELLED_MESSAGE, ttl_seconds=45)
    assert flag.get() is True


def test_register_tools_surfaces_cancellation(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    def fake_run_format_tool(payload: FormatToolInput, **_: object) -> FormatToolOutput:
        raise FormattingCancelledError()

    app = _register(monkeypatch, tmp_path, CancellationFlag(), fake_run_format_tool)
    format_tool = cast(
        Callable[..., Awaitable[object]], app.tools["fxstyle_format_formulas"]
    )
    with pytest.raises(FormattingCancelledError, match=CANCELLED_MESSAGE):
        anyio.run(
            _call_async,
            format_tool,
            {"xlsx_path": "in.xlsx", "styles": {"bold": True}},
        )
