from __future__ import annotations

import pytest

from fxstyle.formatting.errors import CANCELLED_MESSAGE, FormattingCancelledError
from fxstyle.formatting.models import StyleDelta, StyleGridSet
from fxstyle.formatting.mutator import apply_styles_to_memory


def _never() -> bool:
    return False


def _noop() -> None:
    return None


def test_apply_bold_and_text_color_to_single_cell() -> None:
    styles = StyleGridSet.filled(1, 1)
    count = apply_styles_to_memory(
        [(0, 0)],
        styles,
        StyleDelta(bold=True, text_color="#FF0000"),
        1,
        cancel_check=_never,
        flush=_noop,
    )
    assert count == 1
    assert styles.font_weights == [["bold"]]
    assert styles.font_colors == [["#FF0000"]]
    assert styles.font_styles == [["normal"]]
    assert styles.font_lines == [["none"]]
    assert styles.backgrounds == [["#ffffff"]]


def test_apply_only_touches_positions() -> None:
    styles = StyleGridSet.filled(2, 2)
    apply_styles_to_memory(
        [(0, 1), (1, 0)],
        styles,
        StyleDelta(italic=True, bg_color="#FFFF00"),
        2,
        cancel_check=_never,
        flush=_noop,
    )
    assert styles.font_styles == [["normal", "italic"], ["italic", "normal"]]
    assert styles.backgrounds == [["#ffffff", "#FFFF00"], ["#FFFF00", "#ffffff"]]


def test_false_booleans_overwrite() -> None:
    styles = StyleGridSet.filled(
        1, 1, font_weight="bold", font_style="italic", font_line="underline"
    )
    apply_styles_to_memory(
        [(0, 0)],
        styles,
        StyleDelta(bold=False, italic=False, underline=False),
        1,
        cancel_check=_never,
        flush=_noop,
    )
    assert styles.font_weights == [["normal"]]
    assert styles.font_styles == [["normal"]]
    assert styles.font_lines == [["none"]]


def test_empty_colors_leave_grid_unchanged() -> None:
    styles = StyleGridSet.filled(1, 1, font_color="#123456", background="#abcdef")
    apply_styles_to_memory(
        [(0, 0)],
        styles,
        StyleDelta(text_color="", bg_color=""),
        1,
        cancel_check=_never,
        flush=_noop,
    )
    assert styles.font_colors == [["#123456"]]
    assert styles.backgrounds == [["#abcdef"]]


def test_strikethrough_wins_over_underline() -> None:
    styles = StyleGridSet.filled(1, 2)
    apply_styles_to_memory(
        [(0, 0), (0, 1)],
        styles,
        StyleDelta(underline=True, strikethrough=True),
        2,
        cancel_check=_never,
        flush=_noop,
    )
    assert styles.font_lines == [["line-through", "line-through"]]


def test_strikethrough_false_clears_underline() -> None:
    styles = StyleGridSet.filled(1, 1)
    apply_styles_to_memory(
        [(0, 0)],
        styles,
        StyleDelta(underline=True, strikethrough=False),
        1,
        cancel_check=_never,
        flush=_noop,
    )
    assert styles.font_lines == [["none"]]


def test_apply_twice_is_idempotent() -> None:
    delta = StyleDelta(bold=True, underline=True, text_color="#00FF00")
    positions = [(0, 0), (1, 2), (2, 1)]
    once = StyleGridSet.filled(3, 3)
    apply_styles_to_memory(
        positions, once, delta, 3, cancel_check=_never, flush=_noop
    )
    twice = once.model_copy(deep=True)
    apply_styles_to_memory(
        positions, twice, delta, 3, cancel_check=_never, flush=_noop
    )
    assert twice == once


def test_cancelled_before_start_mutates_nothing() -> None:
    styles = StyleGridSet.filled(2, 2)
    original = styles.model_copy(deep=True)
    with pytest.raises(FormattingCancelledError, match=CANCELLED_MESSAGE):
        apply_styles_to_memory(
            [(0, 0), (1, 1)],
            styles,
            StyleDelta(bold=True),
            2,
            cancel_check=lambda: True,
            flush=_noop,
        )
    assert styles == original


def test_cancellation_checked_every_total_cols_positions() -> None:
    checks: list[int] = []
    positions = [(0, col) for col in range(10)]
    styles = StyleGridSet.filled(1, 10)

    def _check() -> bool:
        checks.append(len(checks))
        return False

    apply_styles_to_memory(
        positions, styles, StyleDelta(bold=True), 4, cancel_check=_check, flush=_noop
    )
    # indices 0, 4 and 8
    assert len(checks) == 3


def test_cancellation_mid_run_keeps_partial_mutations() -> None:
    positions = [(0, col) for col in range(6)]
    styles = StyleGridSet.filled(1, 6)
    answers = iter([False, True])

    with pytest.raises(FormattingCancelledError):
        apply_styles_to_memory(
            positions,
            styles,
            StyleDelta(bold=True),
            3,
            cancel_check=lambda: next(answers),
            flush=_noop,
        )
    assert styles.font_weights == [
        ["bold", "bold", "bold", "normal", "normal", "normal"]
    ]


@pytest.mark.parametrize(
    ("count", "batch_size", "expected_flushes"),
    [(0, 1000, 0), (999, 1000, 0), (1000, 1000, 1), (2500, 1000, 2), (10, 3, 3)],
)
def test_flush_every_batch(count: int, batch_size: int, expected_flushes: int) -> None:
    flushes: list[int] = []
    num_cols = 50
    num_rows = max(1, -(-count // num_cols))
    positions = [(index // num_cols, index % num_cols) for index in range(count)]
    styles = StyleGridSet.filled(num_rows, num_cols)
    formatted = apply_styles_to_memory(
        positions,
        styles,
        StyleDelta(bold=True),
        num_cols,
        cancel_check=_never,
        flush=lambda: flushes.append(1),
        batch_size=batch_size,
    )
    assert formatted == count
    assert len(flushes) == expected_flushes


def test_flush_failure_propagates() -> None:
    def _fail() -> None:
        raise OSError("host unavailable")

    styles = StyleGridSet.filled(1, 2)
    with pytest.raises(OSError, match="host unavailable"):
        apply_styles_to_memory(
            [(0, 0), (0, 1)],
            styles,
            StyleDelta(bold=True),
            2,
            cancel_check=_never,
            flush=_fail,
            batch_size=1,
        )
    assert styles.font_weights == [["bold", "normal"]]


def test_rejects_non_positive_total_cols() -> None:
    with pytest.raises(ValueError, match="total_cols"):
        apply_styles_to_memory(
            [],
            StyleGridSet.filled(0, 0),
            StyleDelta(),
            0,
            cancel_check=_never,
            flush=_noop,
        )


def test_rejects_non_positive_batch_size() -> None:
    with pytest.raises(ValueError, match="batch_size"):
        apply_styles_to_memory(
            [],
            StyleGridSet.filled(1, 1),
            StyleDelta(),
            1,
            cancel_check=_never,
            flush=_noop,
            batch_size=0,
        )
