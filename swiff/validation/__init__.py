"""Split validation package."""

from swiff.validation.validator import (
    SplitValidator,
    validate_custom_split,
    validate_percentage_split,
)

__all__ = [
    "SplitValidator",
    "validate_custom_split",
    "validate_percentage_split",
]
