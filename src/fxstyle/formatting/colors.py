from __future__ import annotations

import re

_HEX_COLOR_PATTERN = re.compile(r"^#?(?:[0-9A-F]{6}|[0-9A-F]{8})$")


def normalize_hex_input(value: str) -> str:
    """Normalize HEX input into #RRGGBB or #AARRGGBB form.

    Raises:
        ValueError: If the value is not valid HEX color text.
    """
    text = value.strip().upper()
    if not _HEX_COLOR_PATTERN.match(text):
        raise ValueError(
            f"Invalid color {value!r}. Use 'RRGGBB', 'AARRGGBB', "
            "'#RRGGBB', or '#AARRGGBB'."
        )
    return text if text.startswith("#") else f"#{text}"


def to_argb(value: str) -> str:
    """Normalize HEX input into AARRGGBB form for workbook internals."""
    raw = normalize_hex_input(value)[1:]
    return raw if len(raw) == 8 else f"FF{raw}"


def argb_to_hex(value: str) -> str:
    """Convert workbook AARRGGBB/RRGGBB text to lowercase #rrggbb."""
    return f"#{value[-6:].lower()}"


def same_color(left: str, right: str) -> bool:
    """Return True when two HEX colors denote the same RGB value."""
    try:
        return to_argb(left)[2:] == to_argb(right)[2:]
    except ValueError:
        return left == right
