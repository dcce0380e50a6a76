"""
Split Allocation Validation

Checks user-entered custom amounts and percentages before a split is
committed. Validators run on every keystroke in the split form, so they are:
- pure (no I/O, no state, inputs untouched)
- idempotent
- non-throwing for bad data

IMPORTANT: Validation NEVER silently fixes allocations.
It reports what is wrong and how much is left to allocate.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Sequence

from swiff.config import SplitSettings, get_split_settings
from swiff.models.bill import (
    CustomAmountEntry,
    PercentageEntry,
    SplitValidationResult,
)
from swiff.money import parse_amount, to_money


HUNDRED = Decimal("100")
PERCENT_PLACES = Decimal("0.01")

_MISSING = object()


def _raw_value(raw: Any) -> Any:
    """Missing and blank form values count as zero."""
    if raw is None:
        return Decimal("0")
    if isinstance(raw, str) and not raw.strip():
        return Decimal("0")
    value = parse_amount(raw)
    return _MISSING if value is None else value


class SplitValidator:
    """
    Validates custom and percentage allocations against their targets.

    Custom amounts must add up to the bill total (within a cent);
    percentages must add up to 100 (within a tenth of a percent).
    """

    def __init__(self, settings: Optional[SplitSettings] = None):
        self._settings = settings or get_split_settings()

    def validate_custom(
        self,
        entries: Sequence[CustomAmountEntry],
        total_amount: Any,
    ) -> SplitValidationResult:
        """
        Validate custom amounts against the bill total.

        Order of checks:
        1. every amount is a number
        2. the amounts reconcile with the total
        3. every amount is greater than zero
        """
        if entries is None:
            raise TypeError("entries must be a sequence, not None")

        values = [_raw_value(entry.amount) for entry in entries]
        if any(value is _MISSING for value in values):
            return SplitValidationResult(
                is_valid=False,
                error="All amounts must be valid numbers",
            )

        rounded_sum = to_money(sum(values, Decimal("0")))
        rounded_total = to_money(total_amount)

        difference = abs(rounded_sum - rounded_total)
        if difference > self._settings.custom_tolerance:
            return SplitValidationResult(
                is_valid=False,
                error=(
                    f"Total of custom amounts (${rounded_sum:.2f}) must equal "
                    f"bill total (${rounded_total:.2f})"
                ),
                difference=rounded_sum - rounded_total,
                remaining=rounded_total - rounded_sum,
            )

        # A participant who owes nothing should be left out of the split
        if any(value <= 0 for value in values):
            return SplitValidationResult(
                is_valid=False,
                error="All amounts must be greater than zero",
            )

        return SplitValidationResult(
            is_valid=True,
            total_allocated=rounded_sum,
        )

    def validate_percentage(
        self,
        entries: Sequence[PercentageEntry],
    ) -> SplitValidationResult:
        """
        Validate that percentages add up to 100.

        Order of checks:
        1. every percentage is a number
        2. the sum is within tolerance of 100
        3. every percentage is greater than zero
        4. no percentage exceeds 100
        """
        if entries is None:
            raise TypeError("entries must be a sequence, not None")

        values = [_raw_value(entry.percentage) for entry in entries]
        if any(value is _MISSING for value in values):
            return SplitValidationResult(
                is_valid=False,
                error="All percentages must be valid numbers",
            )

        rounded_sum = sum(values, Decimal("0")).quantize(
            PERCENT_PLACES, rounding=ROUND_HALF_UP
        )

        if abs(rounded_sum - HUNDRED) > self._settings.percentage_tolerance:
            return SplitValidationResult(
                is_valid=False,
                error=f"Total of percentages ({rounded_sum:.1f}%) must equal 100%",
                difference=rounded_sum - HUNDRED,
                remaining=HUNDRED - rounded_sum,
            )

        if any(value <= 0 for value in values):
            return SplitValidationResult(
                is_valid=False,
                error="All percentages must be greater than zero",
            )

        if any(value > HUNDRED for value in values):
            return SplitValidationResult(
                is_valid=False,
                error="Individual percentages cannot exceed 100%",
            )

        return SplitValidationResult(
            is_valid=True,
            total_percentage=rounded_sum,
        )


def validate_custom_split(
    entries: Sequence[CustomAmountEntry],
    total_amount: Any,
    settings: Optional[SplitSettings] = None,
) -> SplitValidationResult:
    """Validate custom split amounts. See SplitValidator.validate_custom."""
    return SplitValidator(settings).validate_custom(entries, total_amount)


def validate_percentage_split(
    entries: Sequence[PercentageEntry],
    settings: Optional[SplitSettings] = None,
) -> SplitValidationResult:
    """Validate percentages. See SplitValidator.validate_percentage."""
    return SplitValidator(settings).validate_percentage(entries)
