"""Split engine package."""

from swiff.splits.engine import (
    build_participant_rows,
    calculate_percentage_split,
    compute_equal_split,
    get_split_method_summary,
    split_bill,
)

__all__ = [
    "build_participant_rows",
    "calculate_percentage_split",
    "compute_equal_split",
    "get_split_method_summary",
    "split_bill",
]
