"""Tests for the split engine."""

import pytest
from decimal import Decimal

from swiff.models.bill import (
    BillSplit,
    CustomSplit,
    EqualSplit,
    Participant,
    PercentageEntry,
    PercentageSplit,
    SplitMethod,
)
from swiff.splits import (
    build_participant_rows,
    calculate_percentage_split,
    compute_equal_split,
    get_split_method_summary,
    split_bill,
)


def _people(*ids):
    return [Participant(id=pid, name=pid.upper()) for pid in ids]


class TestEqualSplit:
    """Tests for compute_equal_split."""

    def test_ten_among_three(self):
        """The first participant absorbs the leftover cent."""
        result = compute_equal_split(Decimal("10.00"), 3)
        assert result.shares == [Decimal("3.34"), Decimal("3.33"), Decimal("3.33")]
        assert result.amount_per_person == Decimal("3.33")
        assert result.total_allocated == Decimal("10.00")

    def test_remainder_goes_to_earliest(self):
        result = compute_equal_split(Decimal("100.00"), 7)
        assert result.shares[:4] == [Decimal("14.29")] * 4
        assert result.shares[4:] == [Decimal("14.28")] * 3

    def test_even_division(self):
        result = compute_equal_split("30", 2)
        assert result.shares == [Decimal("15.00"), Decimal("15.00")]

    def test_single_cent(self):
        result = compute_equal_split(Decimal("0.01"), 3)
        assert result.shares == [Decimal("0.01"), Decimal("0.00"), Decimal("0.00")]

    def test_zero_participants_is_empty(self):
        result = compute_equal_split(Decimal("10.00"), 0)
        assert result.shares == []
        assert result.amount_per_person == Decimal("0")
        assert result.total_allocated == Decimal("0")

    def test_shares_always_reconcile(self):
        """Sum of shares equals the total for a spread of inputs."""
        totals = ["0.01", "0.99", "1.00", "10.00", "33.33", "99.99", "1234.57"]
        for total in totals:
            for count in range(1, 13):
                result = compute_equal_split(Decimal(total), count)
                assert len(result.shares) == count
                assert sum(result.shares) == Decimal(total)
                assert result.total_allocated == Decimal(total)
                assert max(result.shares) - min(result.shares) <= Decimal("0.01")

    def test_none_count_is_a_contract_violation(self):
        with pytest.raises(TypeError):
            compute_equal_split(Decimal("10"), None)


class TestPercentageSplit:
    """Tests for calculate_percentage_split."""

    def test_exact_percentages(self):
        entries = [
            PercentageEntry(participant_id="a", percentage="33.33"),
            PercentageEntry(participant_id="b", percentage="33.33"),
            PercentageEntry(participant_id="c", percentage="33.34"),
        ]
        result = calculate_percentage_split(Decimal("100.00"), entries)
        assert [s.amount for s in result.shares] == [
            Decimal("33.33"), Decimal("33.33"), Decimal("33.34"),
        ]
        assert result.total_allocated == Decimal("100.00")

    def test_one_decimal_percentages(self):
        entries = [
            PercentageEntry(participant_id="a", percentage=33.3),
            PercentageEntry(participant_id="b", percentage=33.3),
            PercentageEntry(participant_id="c", percentage=33.4),
        ]
        result = calculate_percentage_split(Decimal("10.00"), entries)
        assert [s.amount for s in result.shares] == [
            Decimal("3.33"), Decimal("3.33"), Decimal("3.34"),
        ]
        assert result.total_allocated == Decimal("10.00")

    def test_shortfall_goes_to_first_largest(self):
        entries = [
            PercentageEntry(participant_id="a", percentage="33.33"),
            PercentageEntry(participant_id="b", percentage="33.33"),
            PercentageEntry(participant_id="c", percentage="33.34"),
        ]
        result = calculate_percentage_split(Decimal("10.00"), entries)
        # Raw shares are 3.33 each (sum 9.99); the tie goes to the first
        assert [s.amount for s in result.shares] == [
            Decimal("3.34"), Decimal("3.33"), Decimal("3.33"),
        ]
        assert result.total_allocated == Decimal("10.00")

    def test_overshoot_taken_from_largest(self):
        entries = [
            PercentageEntry(participant_id="a", percentage=50),
            PercentageEntry(participant_id="b", percentage=50),
        ]
        result = calculate_percentage_split(Decimal("0.05"), entries)
        # 0.025 rounds up to 0.03 twice; the extra cent comes off the first
        assert [s.amount for s in result.shares] == [Decimal("0.02"), Decimal("0.03")]
        assert result.total_allocated == Decimal("0.05")

    def test_correction_targets_largest_share(self):
        entries = [
            PercentageEntry(participant_id="a", percentage="16.665"),
            PercentageEntry(participant_id="b", percentage="66.67"),
            PercentageEntry(participant_id="c", percentage="16.665"),
        ]
        result = calculate_percentage_split(Decimal("1.00"), entries)
        assert sum(s.amount for s in result.shares) == Decimal("1.00")
        assert result.shares[1].amount == Decimal("0.66")

    def test_shares_carry_percentages(self):
        entries = [PercentageEntry(participant_id="a", percentage="100")]
        result = calculate_percentage_split(Decimal("42.00"), entries)
        assert result.shares[0].percentage == Decimal("100")
        assert result.shares[0].amount == Decimal("42.00")

    def test_empty_entries(self):
        result = calculate_percentage_split(Decimal("42.00"), [])
        assert result.shares == []
        assert result.total_allocated == Decimal("0")


class TestSplitBill:
    """Tests for policy dispatch."""

    def test_equal_policy(self):
        result = split_bill(Decimal("10.00"), _people("a", "b", "c"), EqualSplit())
        assert result.is_valid
        assert result.method == SplitMethod.EQUAL
        assert [(s.participant_id, s.amount) for s in result.shares] == [
            ("a", Decimal("3.34")),
            ("b", Decimal("3.33")),
            ("c", Decimal("3.33")),
        ]

    def test_custom_policy(self):
        policy = CustomSplit(amounts={"a": "12.50", "b": "7.50"})
        result = split_bill(Decimal("20.00"), _people("a", "b"), policy)
        assert result.is_valid
        assert result.share_for("a").amount == Decimal("12.50")
        assert result.total_allocated == Decimal("20.00")

    def test_custom_policy_within_tolerance_reconciles(self):
        """A cent short is accepted, and the largest share absorbs it."""
        policy = CustomSplit(amounts={"a": "39.99", "b": "60.00"})
        result = split_bill(Decimal("100.00"), _people("a", "b"), policy)
        assert result.is_valid
        assert result.share_for("a").amount == Decimal("39.99")
        assert result.share_for("b").amount == Decimal("60.01")
        assert sum(s.amount for s in result.shares) == Decimal("100.00")
        assert result.total_allocated == Decimal("100.00")

    def test_custom_policy_rejected(self):
        policy = CustomSplit(amounts={"a": "12.50", "b": "5.00"})
        result = split_bill(Decimal("20.00"), _people("a", "b"), policy)
        assert not result.is_valid
        assert result.shares == []
        assert result.remaining == Decimal("2.50")

    def test_custom_policy_missing_participant_counts_as_zero(self):
        policy = CustomSplit(amounts={"a": "20.00"})
        result = split_bill(Decimal("20.00"), _people("a", "b"), policy)
        assert not result.is_valid
        assert result.error == "All amounts must be greater than zero"

    def test_percentage_policy(self):
        policy = PercentageSplit(percentages={"a": "60", "b": "40"})
        result = split_bill(Decimal("25.00"), _people("a", "b"), policy)
        assert result.is_valid
        assert result.share_for("a").amount == Decimal("15.00")
        assert result.share_for("b").amount == Decimal("10.00")

    def test_percentage_policy_rejected(self):
        policy = PercentageSplit(percentages={"a": "60", "b": "30"})
        result = split_bill(Decimal("25.00"), _people("a", "b"), policy)
        assert not result.is_valid
        assert result.remaining == Decimal("10")

    def test_not_a_policy(self):
        with pytest.raises(TypeError):
            split_bill(Decimal("10"), _people("a"), "equal")

    def test_inputs_not_mutated(self):
        participants = _people("a", "b")
        policy = CustomSplit(amounts={"a": "5", "b": "5"})
        split_bill(Decimal("10"), participants, policy)
        assert policy.amounts == {"a": "5", "b": "5"}
        assert [p.id for p in participants] == ["a", "b"]


class TestParticipantRows:
    """Tests for building persisted participant rows."""

    def test_rows_from_split(self):
        participants = _people("a", "b", "c")
        split = split_bill(Decimal("10.00"), participants, EqualSplit())
        rows = build_participant_rows("bill-1", participants, split)

        assert [r.user_id for r in rows] == ["a", "b", "c"]
        assert rows[0].share == Decimal("3.34")
        assert rows[0].user_name == "A"
        assert all(r.bill_id == "bill-1" for r in rows)
        assert all(r.paid is False for r in rows)
        assert all(r.paid_amount == Decimal("0") for r in rows)

    def test_invalid_split_rejected(self):
        split = BillSplit(method=SplitMethod.CUSTOM, is_valid=False, error="nope")
        with pytest.raises(ValueError):
            build_participant_rows("bill-1", _people("a"), split)


class TestSplitMethodSummary:
    """Tests for the human summary line."""

    def test_summaries(self):
        assert get_split_method_summary("equal", 3) == "Split equally among 3 people"
        assert get_split_method_summary(SplitMethod.CUSTOM, 2) == "Custom amounts for 2 people"
        assert get_split_method_summary("percentage", 4) == (
            "Percentage-based split among 4 people"
        )

    def test_unknown_method(self):
        assert get_split_method_summary("shares", 3) == "Split method not specified"
        assert get_split_method_summary(None, 3) == "Split method not specified"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
