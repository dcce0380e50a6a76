"""Tests for balance netting and debt simplification."""

import pytest
from datetime import date
from decimal import Decimal

from swiff.balances import (
    balance_with,
    calculate_balances,
    compute_balances,
    suggest_settlement,
)
from swiff.config import BalanceSettings
from swiff.models.ledger import (
    BalanceDirection,
    LedgerBill,
    LedgerEntry,
    ParticipantShare,
    ParticipationRecord,
    Settlement,
    SettlementParticipant,
)


def _dinner(paid=False):
    """A created a $30 bill split equally with B."""
    return LedgerEntry(
        id="dinner",
        name="Dinner",
        amount=Decimal("30.00"),
        creator_id="A",
        due_date=date(2024, 12, 20),
        paid=paid,
        participants=[
            ParticipantShare(participant_id="A", share="15.00"),
            ParticipantShare(participant_id="B", share="15.00"),
        ],
    )


def _taxi_participation(paid=False):
    """B created a $10 bill split equally with A; this is A's row."""
    return ParticipationRecord(
        user_id="A",
        share="5.00",
        bill=LedgerBill(
            id="taxi",
            name="Taxi",
            amount=Decimal("10.00"),
            creator_id="B",
            paid=paid,
        ),
    )


class TestComputeBalances:
    """Tests for compute_balances."""

    def test_simple_netting(self):
        report = compute_balances("A", [_taxi_participation()], [_dinner()])

        assert len(report.balances) == 1
        balance = report.balances[0]
        assert balance.counterparty == "B"
        assert balance.you_owe == Decimal("5.00")
        assert balance.they_owe == Decimal("15.00")
        assert balance.amount == Decimal("10.00")
        assert balance.direction == BalanceDirection.OWED

        assert report.summary.total_owed == Decimal("10.00")
        assert report.summary.total_owe == Decimal("0")
        assert report.summary.net_balance == Decimal("10.00")

    def test_contributing_bills_listed(self):
        report = compute_balances("A", [_taxi_participation()], [_dinner()])
        bills = report.balances[0].bills

        assert [(b.bill_id, b.direction) for b in bills] == [
            ("taxi", BalanceDirection.OWE),
            ("dinner", BalanceDirection.OWED),
        ]
        assert bills[1].due_date == date(2024, 12, 20)

    def test_paid_participation_excluded(self):
        report = compute_balances("A", [_taxi_participation(paid=True)], [_dinner()])
        balance = report.balances[0]

        assert balance.you_owe == Decimal("0")
        assert balance.they_owe == Decimal("15.00")
        assert balance.amount == Decimal("15.00")
        assert balance.direction == BalanceDirection.OWED

    def test_paid_created_bill_excluded(self):
        report = compute_balances("A", [_taxi_participation()], [_dinner(paid=True)])
        balance = report.balances[0]

        assert balance.direction == BalanceDirection.OWE
        assert balance.amount == Decimal("5.00")
        assert report.summary.total_owe == Decimal("5.00")
        assert report.summary.net_balance == Decimal("-5.00")

    def test_even_balance_hidden_but_kept(self):
        participation = ParticipationRecord(
            user_id="A",
            share="15.00",
            bill=LedgerBill(id="tickets", amount=Decimal("30"), creator_id="B"),
        )
        report = compute_balances("A", [participation], [_dinner()])

        assert report.balances == []
        assert len(report.all_balances) == 1
        assert report.all_balances[0].direction == BalanceDirection.EVEN
        assert report.all_balances[0].amount == Decimal("0")
        assert report.summary.net_balance == Decimal("0")

    def test_malformed_shares_skipped(self):
        entry = LedgerEntry(
            id="groceries",
            amount=Decimal("60"),
            creator_id="A",
            participants=[
                ParticipantShare(participant_id="B", share="not-a-number"),
                ParticipantShare(participant_id="C", share=float("nan")),
                ParticipantShare(participant_id="D", share="-5"),
                ParticipantShare(participant_id="E", share=None),
                ParticipantShare(participant_id="F", share="20.00"),
            ],
        )
        report = compute_balances("A", [], [entry])

        assert [b.counterparty for b in report.all_balances] == ["F"]
        assert report.summary.total_owed == Decimal("20.00")

    def test_missing_bill_skipped(self):
        orphan = ParticipationRecord(user_id="A", share="5.00", bill=None)
        report = compute_balances("A", [orphan], [])
        assert report.all_balances == []

    def test_own_bill_participation_ignored(self):
        own = ParticipationRecord(
            user_id="A",
            share="15.00",
            bill=LedgerBill(id="dinner", amount=Decimal("30"), creator_id="A"),
        )
        report = compute_balances("A", [own], [_dinner()])
        assert report.balances[0].you_owe == Decimal("0")

    def test_multiple_counterparties(self):
        entry = LedgerEntry(
            id="cabin",
            amount=Decimal("90"),
            currency="EUR",
            creator_id="A",
            participants=[
                ParticipantShare(participant_id="A", share="30"),
                ParticipantShare(participant_id="B", share="30"),
                ParticipantShare(participant_id="C", share="30"),
            ],
        )
        participation = ParticipationRecord(
            user_id="A",
            share="45",
            bill=LedgerBill(id="boat", amount=Decimal("90"), creator_id="C"),
        )
        report = compute_balances("A", [participation], [entry])

        by_person = {b.counterparty: b for b in report.balances}
        assert by_person["B"].direction == BalanceDirection.OWED
        assert by_person["B"].amount == Decimal("30.00")
        assert by_person["B"].currency == "EUR"
        assert by_person["C"].direction == BalanceDirection.OWE
        assert by_person["C"].amount == Decimal("15.00")

        assert report.summary.total_owed == Decimal("30.00")
        assert report.summary.total_owe == Decimal("15.00")
        assert report.summary.net_balance == Decimal("15.00")

    def test_settlements_adjust_existing_balances(self):
        settlements = [
            Settlement(payer_id="B", payee_id="A", amount=Decimal("4")),
            Settlement(payer_id="A", payee_id="Z", amount=Decimal("100")),
        ]
        report = compute_balances(
            "A", [_taxi_participation()], [_dinner()], settlements
        )

        balance = report.balances[0]
        assert balance.settled_by_them == Decimal("4.00")
        assert balance.amount == Decimal("6.00")
        # Nobody named Z has unpaid bills with A
        assert [b.counterparty for b in report.all_balances] == ["B"]

    def test_settlement_in_other_currency_skipped(self):
        """A yen payment must not be netted against a dollar balance."""
        settlements = [
            Settlement(
                payer_id="B", payee_id="A", amount=Decimal("1000"), currency="JPY"
            ),
        ]
        report = compute_balances("A", [], [_dinner()], settlements)

        balance = report.balances[0]
        assert balance.counterparty == "B"
        assert balance.currency == "USD"
        assert balance.settled_by_them == Decimal("0")
        assert balance.direction == BalanceDirection.OWED
        assert balance.amount == Decimal("15.00")

    def test_inputs_not_mutated(self):
        created = [_dinner()]
        before = [entry.model_dump() for entry in created]
        compute_balances("A", [_taxi_participation()], created)
        assert [entry.model_dump() for entry in created] == before

    def test_none_input_is_a_contract_violation(self):
        with pytest.raises(TypeError):
            compute_balances("A", None, [])


class TestBalanceLookup:
    """Tests for balance_with and suggest_settlement."""

    def test_balance_with_known_person(self):
        report = compute_balances("A", [_taxi_participation()], [_dinner()])
        assert balance_with(report, "B").amount == Decimal("10.00")

    def test_balance_with_stranger_is_even(self):
        report = compute_balances("A", [], [])
        balance = balance_with(report, "Z", "GBP")
        assert balance.direction == BalanceDirection.EVEN
        assert balance.amount == Decimal("0")
        assert balance.currency == "GBP"
        assert balance.bills == []

    def test_suggestion_when_owed(self):
        report = compute_balances("A", [_taxi_participation()], [_dinner()])
        suggestion = suggest_settlement("A", balance_with(report, "B"))
        assert suggestion.from_id == "B"
        assert suggestion.to_id == "A"
        assert suggestion.amount == Decimal("10.00")

    def test_suggestion_when_owing(self):
        report = compute_balances("A", [_taxi_participation()], [])
        suggestion = suggest_settlement("A", balance_with(report, "B"))
        assert suggestion.from_id == "A"
        assert suggestion.to_id == "B"
        assert suggestion.amount == Decimal("5.00")


class TestDebtSimplification:
    """Tests for calculate_balances."""

    def test_two_creditors_one_debtor(self):
        """Nets of +10, +5, -15 settle in two transfers, larger creditor first."""
        participants = [
            SettlementParticipant(id="A", share="5", paid_amount="15"),
            SettlementParticipant(id="B", share="5", paid_amount="10"),
            SettlementParticipant(id="C", share="15", paid_amount="0"),
        ]
        transfers = calculate_balances(participants, "A")

        assert [(t.from_id, t.to_id, t.amount) for t in transfers] == [
            ("C", "A", Decimal("10.00")),
            ("C", "B", Decimal("5.00")),
        ]

    def test_one_creditor_two_debtors(self):
        participants = [
            SettlementParticipant(id="A", share="10", paid_amount="30"),
            SettlementParticipant(id="B", share="10", paid_amount="0"),
            SettlementParticipant(id="C", share="10", paid_amount="0"),
        ]
        transfers = calculate_balances(participants, "A")

        assert [(t.from_id, t.to_id, t.amount) for t in transfers] == [
            ("B", "A", Decimal("10.00")),
            ("C", "A", Decimal("10.00")),
        ]

    def test_input_order_drives_matching(self):
        participants = [
            SettlementParticipant(id="D1", share="7", paid_amount="0"),
            SettlementParticipant(id="C1", share="0", paid_amount="4"),
            SettlementParticipant(id="D2", share="3", paid_amount="0"),
            SettlementParticipant(id="C2", share="0", paid_amount="6"),
        ]
        transfers = calculate_balances(participants)

        assert [(t.from_id, t.to_id, t.amount) for t in transfers] == [
            ("D1", "C1", Decimal("4.00")),
            ("D1", "C2", Decimal("3.00")),
            ("D2", "C2", Decimal("3.00")),
        ]

    def test_transfer_count_bound(self):
        participants = [
            SettlementParticipant(id="A", share="25", paid_amount="100"),
            SettlementParticipant(id="B", share="25", paid_amount="0"),
            SettlementParticipant(id="C", share="25", paid_amount="0"),
            SettlementParticipant(id="D", share="25", paid_amount="0"),
        ]
        transfers = calculate_balances(participants, "A")
        assert len(transfers) <= 1 + 3 - 1
        assert sum(t.amount for t in transfers) == Decimal("75.00")

    def test_near_zero_nets_ignored(self):
        participants = [
            SettlementParticipant(id="A", share="10.00", paid_amount="10.01"),
            SettlementParticipant(id="B", share="10.01", paid_amount="10.00"),
        ]
        assert calculate_balances(participants, "A") == []

    def test_everyone_even(self):
        participants = [
            SettlementParticipant(id="A", share="10", paid_amount="10"),
            SettlementParticipant(id="B", share="10", paid_amount="10"),
        ]
        assert calculate_balances(participants, "A") == []

    def test_empty(self):
        assert calculate_balances([], None) == []

    def test_missing_and_garbage_amounts_count_as_zero(self):
        participants = [
            SettlementParticipant(id="A", share=None, paid_amount="10"),
            SettlementParticipant(id="B", share="10", paid_amount="garbage"),
        ]
        transfers = calculate_balances(participants, "A")
        assert [(t.from_id, t.to_id, t.amount) for t in transfers] == [
            ("B", "A", Decimal("10.00")),
        ]

    def test_threshold_from_settings(self):
        participants = [
            SettlementParticipant(id="A", share="0", paid_amount="0.50"),
            SettlementParticipant(id="B", share="0.50", paid_amount="0"),
        ]
        settings = BalanceSettings(settle_threshold=Decimal("1.00"))
        assert calculate_balances(participants, "A", settings=settings) == []
        assert len(calculate_balances(participants, "A")) == 1

    def test_none_is_a_contract_violation(self):
        with pytest.raises(TypeError):
            calculate_balances(None, "A")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
