from __future__ import annotations


def column_index_to_label(index: int) -> str:
    """Convert 1-based column index to Excel-style column label."""
    if index < 1:
        raise ValueError("Column index must be positive.")
    chunks: list[str] = []
    current = index
    while current > 0:
        current -= 1
        chunks.append(chr(ord("A") + (current % 26)))
        current //= 26
    return "".join(reversed(chunks))


def build_range_ref(num_rows: int, num_cols: int) -> str:
    """Return the A1 range anchored at A1 covering ``num_rows`` x ``num_cols``."""
    if num_rows < 1 or num_cols < 1:
        raise ValueError("Range must span at least one row and one column.")
    return f"A1:{column_index_to_label(num_cols)}{num_rows}"
