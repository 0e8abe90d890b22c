from __future__ import annotations

from collections.abc import Callable
from typing import Any

from fxstyle.formatting.committer import write_styles_to_sheet
from fxstyle.formatting.models import StyleGridSet


def test_write_styles_issues_one_call_per_attribute(
    make_host: Callable[..., Any],
) -> None:
    host = make_host([["=1", "a"], ["b", "=2"]])
    styles = StyleGridSet.filled(2, 2, font_weight="bold")
    write_styles_to_sheet(host, styles)
    assert host.calls == [
        "set_font_weights",
        "set_font_styles",
        "set_font_lines",
        "set_font_colors",
        "set_backgrounds",
    ]
    assert host.written["font_weights"] == [["bold", "bold"], ["bold", "bold"]]
    assert host.written["backgrounds"] == styles.backgrounds
