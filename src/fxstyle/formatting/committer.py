from __future__ import annotations

from .host.base import StyleWriter
from .models import StyleGridSet


def write_styles_to_sheet(host: StyleWriter, styles: StyleGridSet) -> None:
    """Write all five style grids back with one bulk call per attribute."""
    host.set_font_weights(styles.font_weights)
    host.set_font_styles(styles.font_styles)
    host.set_font_lines(styles.font_lines)
    host.set_font_colors(styles.font_colors)
    host.set_backgrounds(styles.backgrounds)
