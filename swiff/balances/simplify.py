"""
Debt Simplification

Turns "who paid what, who owes what" into a short list of transfers.

The algorithm is a greedy two-pointer match over creditors and debtors,
both kept in input order. It yields at most
``len(creditors) + len(debtors) - 1`` transfers. That is not always the
theoretical minimum (finding it is NP-hard) but the exact transfers it
suggests are what users see, so the matching order must not change.
"""

from decimal import Decimal
from typing import Any, Optional, Sequence

from swiff.audit.logger import get_logger
from swiff.config import BalanceSettings, get_balance_settings
from swiff.models.ledger import SettlementParticipant, Transfer
from swiff.money import ZERO, parse_amount, to_money


logger = get_logger(__name__)


def _amount_or_zero(raw: Any, participant_id: str, field: str) -> Decimal:
    """Missing values count as zero; unparseable ones too, with a warning."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return ZERO

    value = parse_amount(raw)
    if value is None:
        logger.warning(
            "invalid_amount_treated_as_zero",
            participant_id=participant_id,
            field=field,
            value=str(raw),
        )
        return ZERO
    return value


def calculate_balances(
    participants: Sequence[SettlementParticipant],
    payer_id: Optional[str] = None,
    settings: Optional[BalanceSettings] = None,
) -> list[Transfer]:
    """
    Work out who pays whom so everybody ends up even.

    Args:
        participants: Each person's share and what they actually paid
        payer_id: Who paid the bill. Only used for log context; the
            ``paid_amount`` values are authoritative.
        settings: Thresholds (defaults from configuration)

    Returns:
        Transfers in the order the greedy match produces them
    """
    if participants is None:
        raise TypeError("participants must be a sequence, not None")

    threshold = (settings or get_balance_settings()).settle_threshold

    # Net per person: positive is owed money, negative owes money.
    # A repeated id keeps its first position and its last values.
    nets: dict[str, Decimal] = {}
    for participant in participants:
        share = _amount_or_zero(participant.share, participant.id, "share")
        paid = _amount_or_zero(participant.paid_amount, participant.id, "paid_amount")
        nets[participant.id] = paid - share

    creditors: list[list] = []
    debtors: list[list] = []
    for participant_id, net in nets.items():
        if net > threshold:
            creditors.append([participant_id, net])
        elif net < -threshold:
            debtors.append([participant_id, -net])

    transfers = []
    creditor_index = 0
    debtor_index = 0

    while creditor_index < len(creditors) and debtor_index < len(debtors):
        creditor = creditors[creditor_index]
        debtor = debtors[debtor_index]

        amount = min(creditor[1], debtor[1])

        if amount > threshold:
            transfers.append(Transfer(
                from_id=debtor[0],
                to_id=creditor[0],
                amount=to_money(amount),
            ))

        creditor[1] -= amount
        debtor[1] -= amount

        if creditor[1] < threshold:
            creditor_index += 1
        if debtor[1] < threshold:
            debtor_index += 1

    logger.debug(
        "debts_simplified",
        payer_id=payer_id,
        creditors=len(creditors),
        debtors=len(debtors),
        transfers=len(transfers),
    )

    return transfers
