"""
Ledger Models for Swiff

Bills as they come back from persistence, the balances derived from them,
and the settlements users record.

CRITICAL: NetBalance and BalanceReport are derived values. They are never
stored and never updated incrementally; they are recomputed from the full
set of unpaid bills on every query.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from swiff.models.bill import SplitMethod
from swiff.money import to_money


class BalanceDirection(str, Enum):
    """Which way money flows between the user and a counterparty."""
    OWED = "owed"   # They owe you
    OWE = "owe"     # You owe them
    EVEN = "even"   # Nothing outstanding


# =============================================================================
# PERSISTED BILL ROWS (input to the netting engine)
# =============================================================================

class LedgerBill(BaseModel):
    """Bill header as stored by the persistence layer."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    name: str = Field(default="", max_length=200)
    amount: Decimal = Field(default=Decimal("0.00"))
    currency: str = Field(default="USD", min_length=3, max_length=3)
    creator_id: str = Field(
        ...,
        min_length=1,
        description="Who created (and paid) the bill"
    )
    due_date: Optional[date] = None
    paid: bool = False
    is_split: bool = True
    split_method: Optional[SplitMethod] = None

    @field_validator('amount')
    @classmethod
    def round_amount(cls, v: Decimal) -> Decimal:
        return to_money(v)

    @field_validator('currency')
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()


class ParticipantShare(BaseModel):
    """
    A participant row of a stored bill.

    ``share`` and ``paid_amount`` are kept raw: stored data can be malformed
    and the netting engine decides what to do with bad rows.
    """

    participant_id: str
    participant_name: Optional[str] = None
    share: Any = None
    paid: bool = False
    paid_amount: Any = 0


class LedgerEntry(LedgerBill):
    """A bill together with all of its participant rows."""

    participants: list[ParticipantShare] = Field(default_factory=list)

    @property
    def header(self) -> LedgerBill:
        """The bill without its participants."""
        return LedgerBill(**self.model_dump(exclude={"participants"}))


class ParticipationRecord(BaseModel):
    """
    One row saying "this user holds a share of that bill".

    ``bill`` may be missing when the bill row was deleted underneath.
    """

    user_id: str
    share: Any = None
    bill: Optional[LedgerBill] = None


# =============================================================================
# DERIVED BALANCES
# =============================================================================

class BalanceBillRef(BaseModel):
    """A bill contributing to a balance with one counterparty."""

    bill_id: str
    bill_name: str = ""
    amount: Decimal
    due_date: Optional[date] = None
    direction: BalanceDirection


class NetBalance(BaseModel):
    """
    Net position between the current user and one counterparty.

    ``amount`` is always non-negative; ``direction`` says who owes whom.
    """

    counterparty: str
    amount: Decimal = Field(default=Decimal("0.00"), ge=0)
    direction: BalanceDirection = BalanceDirection.EVEN
    currency: str = "USD"
    bills: list[BalanceBillRef] = Field(default_factory=list)

    you_owe: Decimal = Field(default=Decimal("0.00"))
    they_owe: Decimal = Field(default=Decimal("0.00"))

    # Settlements applied on top of the bill totals
    settled_by_you: Decimal = Field(default=Decimal("0.00"))
    settled_by_them: Decimal = Field(default=Decimal("0.00"))

    @property
    def net_amount(self) -> Decimal:
        """Signed net: positive when they owe you."""
        if self.direction == BalanceDirection.OWE:
            return -self.amount
        return self.amount


class BalanceSummary(BaseModel):
    """Totals across all counterparties."""

    total_owed: Decimal = Field(default=Decimal("0.00"))
    total_owe: Decimal = Field(default=Decimal("0.00"))
    net_balance: Decimal = Field(default=Decimal("0.00"))


class BalanceReport(BaseModel):
    """
    Everything the balances view needs.

    ``balances`` hides counterparties that are even; ``all_balances``
    keeps them.
    """

    summary: BalanceSummary = Field(default_factory=BalanceSummary)
    balances: list[NetBalance] = Field(default_factory=list)
    all_balances: list[NetBalance] = Field(default_factory=list)


# =============================================================================
# SETTLEMENTS AND TRANSFERS
# =============================================================================

class Settlement(BaseModel):
    """
    A real-world payment between two people.

    CRITICAL: Settlements are only ever created by explicit user action.
    The engine suggests amounts; it never records them on its own.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    payer_id: str = Field(..., min_length=1)
    payee_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    notes: Optional[str] = Field(default=None, max_length=1000)
    settled_at: datetime = Field(default_factory=datetime.utcnow)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator('amount')
    @classmethod
    def round_amount(cls, v: Decimal) -> Decimal:
        """Sub-cent amounts round to zero, which is not a payment."""
        rounded = to_money(v)
        if rounded <= 0:
            raise ValueError("Settlement amount must be at least one cent")
        return rounded

    @field_validator('currency')
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode='after')
    def validate_parties(self) -> 'Settlement':
        """Nobody settles with themselves."""
        if self.payer_id == self.payee_id:
            raise ValueError("Payer and payee must be different people")
        return self

    def involves(self, user_id: str) -> bool:
        return user_id in (self.payer_id, self.payee_id)


class SuggestedSettlement(BaseModel):
    """What the user should pay (or receive) to get even with someone."""

    from_id: str
    to_id: str
    amount: Decimal
    currency: str = "USD"


class SettlementParticipant(BaseModel):
    """Input row for debt simplification: what someone owes vs. has paid."""

    id: str
    name: Optional[str] = None
    share: Any = 0
    paid_amount: Any = 0


class Transfer(BaseModel):
    """One payment that moves money from a debtor to a creditor."""
    model_config = ConfigDict(frozen=True)

    from_id: str
    to_id: str
    amount: Decimal
