from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
import warnings

from openpyxl import load_workbook
from openpyxl.workbook.workbook import Workbook
import xlwings as xw


@contextmanager
def openpyxl_workbook(file_path: Path) -> Iterator[Workbook]:
    """Open a workbook for editing with formulas kept as text, then close it.

    Macro-enabled workbooks keep their VBA project so they can be saved back.

    Args:
        file_path: Workbook path.

    Yields:
        openpyxl workbook instance.
    """
    with warnings.catch_warnings():
        warnings.filterwarnings(
            "ignore",
            message="Unknown extension is not supported and will be removed",
            category=UserWarning,
            module="openpyxl",
        )
        warnings.filterwarnings(
            "ignore",
            message="Conditional Formatting extension is not supported and will be removed",
            category=UserWarning,
            module="openpyxl",
        )
        wb = load_workbook(
            file_path,
            data_only=False,
            keep_vba=file_path.suffix.lower() == ".xlsm",
        )
    try:
        yield wb
    finally:
        wb.close()


@contextmanager
def xlwings_workbook(file_path: Path, *, visible: bool = False) -> Iterator[xw.Book]:
    """Open a workbook in Excel via xlwings; close it only if we opened it.

    Screen updating is turned off while the workbook is held so that flushes
    control when Excel repaints.

    Args:
        file_path: Workbook path.
        visible: Whether to show the Excel application window.

    Yields:
        xlwings workbook instance.
    """
    existing = _find_open_workbook(file_path)
    if existing is not None:
        app = existing.app
        previous = app.screen_updating
        app.screen_updating = False
        try:
            yield existing
        finally:
            app.screen_updating = previous
        return

    app = xw.App(add_book=False, visible=visible)
    app.screen_updating = False
    try:
        wb = app.books.open(str(file_path))
        try:
            yield wb
        finally:
            wb.close()
    finally:
        app.quit()


def _find_open_workbook(file_path: Path) -> xw.Book | None:
    """Return the workbook if it is already open in a running Excel."""
    target = file_path.resolve()
    try:
        apps = list(xw.apps)
    except Exception:  # xw.apps raises when Excel is unavailable
        return None
    for app in apps:
        for wb in app.books:
            if Path(wb.fullname).resolve() == target:
                return wb
    return None
