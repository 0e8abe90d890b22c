from __future__ import annotations

from .base import SheetHost, StyleWriter
from .openpyxl_host import OpenpyxlSheetHost
from .xlwings_host import XlwingsSheetHost

__all__ = ["OpenpyxlSheetHost", "SheetHost", "StyleWriter", "XlwingsSheetHost"]
