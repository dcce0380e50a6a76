"""
Split Engine

Divides a bill total among participants under a split policy.

GUARANTEES:
- Shares always add up to the bill total, to the cent
- Leftover cents go to the earliest-listed participants (equal split)
  or to the largest share (percentage split, and custom amounts accepted
  within tolerance), deterministically
- Nothing here raises for bad user input; invalid allocations come back
  as results with an error message
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Sequence, Union

from swiff.audit.logger import get_logger
from swiff.config import SplitSettings
from swiff.models.bill import (
    BillParticipantRow,
    BillShare,
    BillSplit,
    CustomAmountEntry,
    CustomSplit,
    EqualSplit,
    EqualSplitResult,
    Participant,
    PercentageEntry,
    PercentageSplit,
    PercentageSplitResult,
    SplitMethod,
)
from swiff.money import CENT, ZERO, from_cents, parse_amount, to_cents, to_money
from swiff.validation import SplitValidator


logger = get_logger(__name__)

HUNDRED = Decimal("100")


def compute_equal_split(total_amount: Any, participant_count: int) -> EqualSplitResult:
    """
    Split a total evenly among ``participant_count`` people.

    The base share is the total floored to the cent; the leftover cents are
    handed out one each to the first participants. ``10.00`` among 3 gives
    ``[3.34, 3.33, 3.33]``.

    Zero (or negative) participants gives an empty result.
    """
    if participant_count <= 0:
        return EqualSplitResult()

    total_cents = to_cents(total_amount)
    base_cents = total_cents // participant_count
    remainder_cents = total_cents - base_cents * participant_count

    shares = [
        from_cents(base_cents + (1 if i < remainder_cents else 0))
        for i in range(participant_count)
    ]

    return EqualSplitResult(
        amount_per_person=from_cents(base_cents),
        shares=shares,
        total_allocated=sum(shares, ZERO),
    )


def _reconcile_to_total(amounts: list[Decimal], total: Decimal) -> list[Decimal]:
    """Add whatever the amounts miss the total by to the first largest one."""
    amounts = list(amounts)
    difference = total - sum(amounts, ZERO)
    if difference != 0 and amounts:
        largest = 0
        for index, amount in enumerate(amounts):
            if amount > amounts[largest]:
                largest = index
        amounts[largest] = to_money(amounts[largest] + difference)
    return amounts


def calculate_percentage_split(
    total_amount: Any,
    entries: Sequence[PercentageEntry],
) -> PercentageSplitResult:
    """
    Turn percentages into amounts.

    Each share is rounded to the cent on its own. Whatever rounding leaves
    over (or short) is added to the largest share, the first one on a tie.
    Percentages are not validated here; see validate_percentage_split.
    """
    if entries is None:
        raise TypeError("entries must be a sequence, not None")

    total = to_money(total_amount)

    computed = []
    for entry in entries:
        percentage = parse_amount(entry.percentage) or Decimal("0")
        amount = (total * percentage / HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)
        computed.append([entry.participant_id, percentage, amount])

    amounts = _reconcile_to_total([row[2] for row in computed], total)

    shares = [
        BillShare(participant_id=pid, amount=amount, percentage=percentage)
        for (pid, percentage, _), amount in zip(computed, amounts)
    ]

    return PercentageSplitResult(
        shares=shares,
        total_allocated=sum((share.amount for share in shares), ZERO),
    )


def split_bill(
    total_amount: Any,
    participants: Sequence[Participant],
    policy: Union[EqualSplit, CustomSplit, PercentageSplit],
    settings: Optional[SplitSettings] = None,
) -> BillSplit:
    """
    Split a bill among participants according to a policy.

    Invalid custom/percentage allocations return a BillSplit with
    ``is_valid=False`` and no shares. Anything that is not a split policy
    is a caller bug and raises TypeError.
    """
    if participants is None:
        raise TypeError("participants must be a sequence, not None")

    if isinstance(policy, EqualSplit):
        return _split_equal(total_amount, participants)
    elif isinstance(policy, CustomSplit):
        return _split_custom(total_amount, participants, policy, settings)
    elif isinstance(policy, PercentageSplit):
        return _split_percentage(total_amount, participants, policy, settings)

    raise TypeError(f"Unsupported split policy: {type(policy).__name__}")


def _split_equal(
    total_amount: Any,
    participants: Sequence[Participant],
) -> BillSplit:
    result = compute_equal_split(total_amount, len(participants))

    shares = [
        BillShare(participant_id=participant.id, amount=amount)
        for participant, amount in zip(participants, result.shares)
    ]

    return BillSplit(
        method=SplitMethod.EQUAL,
        is_valid=True,
        shares=shares,
        total_allocated=result.total_allocated,
    )


def _split_custom(
    total_amount: Any,
    participants: Sequence[Participant],
    policy: CustomSplit,
    settings: Optional[SplitSettings],
) -> BillSplit:
    entries = [
        CustomAmountEntry(
            participant_id=participant.id,
            amount=policy.amounts.get(participant.id),
        )
        for participant in participants
    ]

    validation = SplitValidator(settings).validate_custom(entries, total_amount)
    if not validation.is_valid:
        return BillSplit(
            method=SplitMethod.CUSTOM,
            is_valid=False,
            error=validation.error,
            remaining=validation.remaining,
        )

    # Accepted within tolerance; the stored shares still have to add up
    amounts = _reconcile_to_total(
        [to_money(entry.amount) for entry in entries], to_money(total_amount)
    )
    shares = [
        BillShare(participant_id=entry.participant_id, amount=amount)
        for entry, amount in zip(entries, amounts)
    ]

    return BillSplit(
        method=SplitMethod.CUSTOM,
        is_valid=True,
        shares=shares,
        total_allocated=sum(amounts, ZERO),
    )


def _split_percentage(
    total_amount: Any,
    participants: Sequence[Participant],
    policy: PercentageSplit,
    settings: Optional[SplitSettings],
) -> BillSplit:
    entries = [
        PercentageEntry(
            participant_id=participant.id,
            percentage=policy.percentages.get(participant.id),
        )
        for participant in participants
    ]

    validation = SplitValidator(settings).validate_percentage(entries)
    if not validation.is_valid:
        return BillSplit(
            method=SplitMethod.PERCENTAGE,
            is_valid=False,
            error=validation.error,
            remaining=validation.remaining,
        )

    result = calculate_percentage_split(total_amount, entries)

    return BillSplit(
        method=SplitMethod.PERCENTAGE,
        is_valid=True,
        shares=result.shares,
        total_allocated=result.total_allocated,
    )


def build_participant_rows(
    bill_id: str,
    participants: Sequence[Participant],
    split: BillSplit,
) -> list[BillParticipantRow]:
    """
    Build the participant rows to persist for a freshly split bill.

    Participants without a share in the split get a zero share and a
    warning in the log.
    """
    if not split.is_valid:
        raise ValueError(f"Cannot build rows from an invalid split: {split.error}")

    rows = []
    for participant in participants:
        share = split.share_for(participant.id)
        if share is None:
            logger.warning(
                "participant_without_share",
                bill_id=bill_id,
                participant_id=participant.id,
            )

        rows.append(BillParticipantRow(
            bill_id=bill_id,
            user_id=participant.id,
            user_name=participant.name,
            share=share.amount if share else ZERO,
        ))

    return rows


def get_split_method_summary(
    method: Union[SplitMethod, str, None],
    participant_count: int,
) -> str:
    """Human-readable one-liner for the split form."""
    try:
        method = SplitMethod(method)
    except ValueError:
        return "Split method not specified"

    if method == SplitMethod.EQUAL:
        return f"Split equally among {participant_count} people"
    elif method == SplitMethod.CUSTOM:
        return f"Custom amounts for {participant_count} people"
    else:
        return f"Percentage-based split among {participant_count} people"
