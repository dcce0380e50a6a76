"""
Balance Netting

Reduces per-bill participant shares to one net balance per counterparty.

Two input streams, for the two roles a user can play:
- participations: rows where the user holds a share of someone else's
  bill (the user owes the bill's creator)
- created entries: bills the user created; every other participant owes
  the user their share

CRITICAL: Only unpaid bills count. Once a bill is marked paid its
obligations are resolved out-of-band and it drops out of the computation.
That is why balances are always recomputed from the full current set of
bills and never patched incrementally.
"""

from decimal import Decimal
from typing import Any, Optional, Sequence

from swiff.audit.logger import get_logger
from swiff.models.ledger import (
    BalanceBillRef,
    BalanceDirection,
    BalanceReport,
    BalanceSummary,
    LedgerBill,
    LedgerEntry,
    NetBalance,
    ParticipationRecord,
    Settlement,
    SuggestedSettlement,
)
from swiff.money import ZERO, parse_amount, to_money


logger = get_logger(__name__)


class _Accumulator:
    """Running totals for one counterparty while scanning bills."""

    def __init__(self, counterparty: str, currency: str):
        self.counterparty = counterparty
        self.currency = currency
        self.you_owe = ZERO
        self.they_owe = ZERO
        self.settled_by_you = ZERO
        self.settled_by_them = ZERO
        self.bills: list[BalanceBillRef] = []

    def add(self, bill: LedgerBill, amount: Decimal, direction: BalanceDirection):
        if direction == BalanceDirection.OWE:
            self.you_owe += amount
        else:
            self.they_owe += amount

        self.bills.append(BalanceBillRef(
            bill_id=bill.id,
            bill_name=bill.name,
            amount=amount,
            due_date=bill.due_date,
            direction=direction,
        ))

    def to_balance(self) -> NetBalance:
        net = (self.they_owe - self.you_owe) + (self.settled_by_you - self.settled_by_them)

        if net > 0:
            direction = BalanceDirection.OWED
        elif net < 0:
            direction = BalanceDirection.OWE
        else:
            direction = BalanceDirection.EVEN

        return NetBalance(
            counterparty=self.counterparty,
            amount=abs(net),
            direction=direction,
            currency=self.currency,
            bills=self.bills,
            you_owe=self.you_owe,
            they_owe=self.they_owe,
            settled_by_you=self.settled_by_you,
            settled_by_them=self.settled_by_them,
        )


def _valid_share(raw: Any, bill_id: str, participant_id: str) -> Optional[Decimal]:
    """
    Parse a stored share. Missing, NaN, non-numeric and negative values are
    logged and rejected so one bad row cannot poison the whole aggregation.
    """
    share = parse_amount(raw)
    if share is None or share < 0:
        logger.warning(
            "invalid_share_skipped",
            bill_id=bill_id,
            participant_id=participant_id,
            share=str(raw),
        )
        return None
    return to_money(share)


def compute_balances(
    user_id: str,
    participations: Sequence[ParticipationRecord],
    created_entries: Sequence[LedgerEntry],
    settlements: Sequence[Settlement] = (),
) -> BalanceReport:
    """
    Compute the user's net balance with every counterparty.

    Args:
        user_id: The current user (email)
        participations: The user's participant rows on any bill
        created_entries: Split bills the user created, with participants
        settlements: Optional payments to net against the bill totals.
            Only settlements between the user and a counterparty that
            already has unpaid bills, in that balance's currency, are
            applied.

    Returns:
        BalanceReport with the summary, the non-even balances and all
        balances including even ones.
    """
    if participations is None or created_entries is None:
        raise TypeError("participations and created_entries must be sequences")

    accumulators: dict[str, _Accumulator] = {}

    def accumulator_for(counterparty: str, currency: str) -> _Accumulator:
        if counterparty not in accumulators:
            accumulators[counterparty] = _Accumulator(counterparty, currency)
        return accumulators[counterparty]

    # Bills where the user owes the creator
    for record in participations:
        bill = record.bill
        if bill is None or bill.paid:
            continue

        share = _valid_share(record.share, bill.id, user_id)
        if share is None:
            continue

        if bill.creator_id == user_id:
            continue

        accumulator_for(bill.creator_id, bill.currency).add(
            bill, share, BalanceDirection.OWE
        )

    # Bills the user created, where everybody else owes the user
    for entry in created_entries:
        if entry.paid or not entry.participants:
            continue

        for participant in entry.participants:
            if participant.participant_id == user_id:
                continue

            share = _valid_share(participant.share, entry.id, participant.participant_id)
            if share is None:
                continue

            accumulator_for(participant.participant_id, entry.currency).add(
                entry, share, BalanceDirection.OWED
            )

    for settlement in settlements:
        if settlement.payer_id == user_id:
            counterparty, paid_by_user = settlement.payee_id, True
        elif settlement.payee_id == user_id:
            counterparty, paid_by_user = settlement.payer_id, False
        else:
            continue

        acc = accumulators.get(counterparty)
        if acc is None:
            continue

        if settlement.currency != acc.currency:
            logger.warning(
                "settlement_currency_mismatch",
                settlement_id=str(settlement.id),
                counterparty=counterparty,
                settlement_currency=settlement.currency,
                balance_currency=acc.currency,
            )
            continue

        if paid_by_user:
            acc.settled_by_you += settlement.amount
        else:
            acc.settled_by_them += settlement.amount

    all_balances = [acc.to_balance() for acc in accumulators.values()]

    total_owed = sum(
        (b.amount for b in all_balances if b.direction == BalanceDirection.OWED), ZERO
    )
    total_owe = sum(
        (b.amount for b in all_balances if b.direction == BalanceDirection.OWE), ZERO
    )

    return BalanceReport(
        summary=BalanceSummary(
            total_owed=total_owed,
            total_owe=total_owe,
            net_balance=total_owed - total_owe,
        ),
        balances=[b for b in all_balances if b.direction != BalanceDirection.EVEN],
        all_balances=all_balances,
    )


def balance_with(
    report: BalanceReport,
    counterparty: str,
    currency: str = "USD",
) -> NetBalance:
    """Balance with one person, or an even zero balance if there is none."""
    for balance in report.balances:
        if balance.counterparty == counterparty:
            return balance

    return NetBalance(
        counterparty=counterparty,
        amount=ZERO,
        direction=BalanceDirection.EVEN,
        currency=currency,
    )


def suggest_settlement(user_id: str, balance: NetBalance) -> SuggestedSettlement:
    """
    Suggest the payment that squares a balance.

    When the user owes, the user pays the counterparty; otherwise
    (owed or even) the counterparty pays the user.
    """
    if balance.direction == BalanceDirection.OWE:
        from_id, to_id = user_id, balance.counterparty
    else:
        from_id, to_id = balance.counterparty, user_id

    return SuggestedSettlement(
        from_id=from_id,
        to_id=to_id,
        amount=balance.amount,
        currency=balance.currency,
    )
