from __future__ import annotations

from collections.abc import Iterator
from functools import lru_cache
import logging
import os
import sys

import pytest

from fxstyle.formatting.models import GridContext, StyleGridSet
from fxstyle.formatting.types import Grid

IS_WINDOWS = sys.platform == "win32"
SKIP_COM_TESTS = os.getenv("SKIP_COM_TESTS") == "1"
FORCE_COM_TESTS = os.getenv("FORCE_COM_TESTS") == "1"


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers to avoid pytest warnings."""
    config.addinivalue_line("markers", "com: requires Excel COM (Windows + Excel).")


@lru_cache(maxsize=1)
def _has_excel_com() -> bool:
    """Return True if Excel COM can be opened via xlwings."""
    try:
        import xlwings as xw

        app = xw.App(add_book=False, visible=False)
        app.quit()
        return True
    except Exception:
        return False


def _com_skip_reason() -> str | None:
    """
    Return a skip reason for COM-marked tests, or None when they should run.

    If FORCE_COM_TESTS=1 and COM is unavailable, raises RuntimeError to fail fast.
    """
    if SKIP_COM_TESTS:
        return "COM tests skipped via SKIP_COM_TESTS=1."
    if not IS_WINDOWS:
        return "COM tests require Windows."
    if not _has_excel_com():
        if FORCE_COM_TESTS:
            raise RuntimeError("Excel COM is unavailable but FORCE_COM_TESTS=1 is set.")
        return "Excel COM is unavailable."
    return None


def pytest_runtest_setup(item: pytest.Item) -> None:
    """Skip COM-marked tests when Excel is not available."""
    if item.get_closest_marker("com") is not None:
        reason = _com_skip_reason()
        if reason:
            pytest.skip(reason)


class FakeSheetHost:
    """In-memory SheetHost that records every host call."""

    def __init__(
        self,
        content: list[list[object]],
        *,
        sheet_name: str = "Sheet1",
        styles: StyleGridSet | None = None,
        fail_on: str | None = None,
    ) -> None:
        self.content = content
        self.sheet_name = sheet_name
        num_rows = len(content)
        num_cols = len(content[0]) if content else 0
        self.styles = styles or StyleGridSet.filled(num_rows, num_cols)
        self.fail_on = fail_on
        self.calls: list[str] = []
        self.written: dict[str, Grid] = {}

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_on == name:
            raise OSError(f"{name} failed")

    def get_grid_context(self) -> GridContext:
        self._record("get_grid_context")
        num_cols = len(self.content[0]) if self.content else 0
        return GridContext(
            sheet_name=self.sheet_name,
            num_rows=len(self.content),
            num_cols=num_cols,
        )

    def read_content_grid(self) -> list[list[object]]:
        self._record("read_content_grid")
        return [list(row) for row in self.content]

    def read_style_grid_set(self) -> StyleGridSet:
        self._record("read_style_grid_set")
        return self.styles.model_copy(deep=True)

    def set_font_weights(self, grid: Grid) -> None:
        self._record("set_font_weights")
        self.written["font_weights"] = grid

    def set_font_styles(self, grid: Grid) -> None:
        self._record("set_font_styles")
        self.written["font_styles"] = grid

    def set_font_lines(self, grid: Grid) -> None:
        self._record("set_font_lines")
        self.written["font_lines"] = grid

    def set_font_colors(self, grid: Grid) -> None:
        self._record("set_font_colors")
        self.written["font_colors"] = grid

    def set_backgrounds(self, grid: Grid) -> None:
        self._record("set_backgrounds")
        self.written["backgrounds"] = grid

    def flush(self) -> None:
        self._record("flush")


@pytest.fixture
def debug_logs(caplog: pytest.LogCaptureFixture) -> Iterator[pytest.LogCaptureFixture]:
    with caplog.at_level(logging.DEBUG, logger="fxstyle"):
        yield caplog


@pytest.fixture
def make_host() -> type[FakeSheetHost]:
    """Return the FakeSheetHost class so tests can build hosts per case."""
    return FakeSheetHost
