"""
Bill Split Models for Swiff

These models describe a bill being split: who takes part, which split
policy applies, and what each participant ends up owing.

DESIGN DECISION: The split policy is a tagged union discriminated on
``method``. Code dispatches on the variant type, so a policy with a
missing or unknown method cannot be constructed in the first place.

Money fields are Decimal with two places. Raw user input (strings from
form fields) is kept as-is on the entry models and parsed by the engine.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
)

from swiff.money import to_money


# =============================================================================
# ENUMS
# =============================================================================

class SplitMethod(str, Enum):
    """Ways a bill amount can be divided among participants."""
    EQUAL = "equal"
    CUSTOM = "custom"
    PERCENTAGE = "percentage"


# =============================================================================
# PARTICIPANTS AND SHARES
# =============================================================================

class Participant(BaseModel):
    """
    A person sharing a bill.

    The id is opaque and stable per person; the source system uses the
    email address as the natural key.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Stable participant identifier (e.g. email)"
    )
    name: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Display name"
    )


class BillShare(BaseModel):
    """One participant's portion of a bill."""
    model_config = ConfigDict(frozen=True)

    participant_id: str
    amount: Decimal = Field(
        ...,
        description="Share of the bill, rounded to the cent"
    )
    percentage: Optional[Decimal] = Field(
        default=None,
        description="Percentage that produced this share (percentage splits only)"
    )

    @field_validator('amount')
    @classmethod
    def round_to_cent(cls, v: Decimal) -> Decimal:
        return to_money(v)


class CustomAmountEntry(BaseModel):
    """
    A user-entered amount for one participant.

    ``amount`` is the raw value from the form (string or number);
    blank means zero.
    """
    participant_id: str
    amount: Any = None


class PercentageEntry(BaseModel):
    """A user-entered percentage for one participant (raw value)."""
    participant_id: str
    percentage: Any = None


# =============================================================================
# SPLIT POLICY (tagged union)
# =============================================================================

class EqualSplit(BaseModel):
    """Divide the total evenly; earliest participants absorb leftover cents."""
    model_config = ConfigDict(frozen=True)

    method: Literal["equal"] = "equal"


class CustomSplit(BaseModel):
    """Each participant pays an explicitly entered amount."""
    model_config = ConfigDict(frozen=True)

    method: Literal["custom"] = "custom"
    amounts: dict[str, Any] = Field(
        default_factory=dict,
        description="participant id -> raw entered amount"
    )


class PercentageSplit(BaseModel):
    """Each participant pays a percentage of the total."""
    model_config = ConfigDict(frozen=True)

    method: Literal["percentage"] = "percentage"
    percentages: dict[str, Any] = Field(
        default_factory=dict,
        description="participant id -> raw entered percentage"
    )


SplitPolicy = Annotated[
    Union[EqualSplit, CustomSplit, PercentageSplit],
    Field(discriminator="method"),
]

_split_policy_adapter: TypeAdapter = TypeAdapter(SplitPolicy)


def parse_split_policy(data: Any) -> Union[EqualSplit, CustomSplit, PercentageSplit]:
    """
    Build a split policy from a raw mapping such as
    ``{"method": "custom", "amounts": {"a@x.com": "12.50"}}``.

    Raises pydantic.ValidationError for a missing or unknown method.
    """
    return _split_policy_adapter.validate_python(data)


# =============================================================================
# RESULTS
# =============================================================================

class EqualSplitResult(BaseModel):
    """Result of an equal split. Shares are in participant order."""

    amount_per_person: Decimal = Field(
        default=Decimal("0.00"),
        description="Base amount before remainder cents are handed out"
    )
    shares: list[Decimal] = Field(default_factory=list)
    total_allocated: Decimal = Field(default=Decimal("0.00"))


class PercentageSplitResult(BaseModel):
    """Result of a percentage split, after rounding correction."""

    shares: list[BillShare] = Field(default_factory=list)
    total_allocated: Decimal = Field(default=Decimal("0.00"))


class SplitValidationResult(BaseModel):
    """
    Outcome of validating a custom or percentage allocation.

    Never raised: the message is meant to be shown to the user as-is,
    together with how much is left to allocate.
    """

    is_valid: bool
    error: Optional[str] = None

    # For custom splits these are money; for percentage splits, percent points
    remaining: Optional[Decimal] = Field(
        default=None,
        description="How much still needs allocating (negative = over-allocated)"
    )
    difference: Optional[Decimal] = Field(
        default=None,
        description="Entered sum minus the target"
    )

    total_allocated: Optional[Decimal] = None
    total_percentage: Optional[Decimal] = None


class BillSplit(BaseModel):
    """
    The full result of splitting one bill under a policy.

    When ``is_valid`` is False, ``shares`` is empty and ``error`` explains why.
    """

    method: SplitMethod
    is_valid: bool
    error: Optional[str] = None
    remaining: Optional[Decimal] = None
    shares: list[BillShare] = Field(default_factory=list)
    total_allocated: Decimal = Field(default=Decimal("0.00"))

    def share_for(self, participant_id: str) -> Optional[BillShare]:
        """Find the share of a participant, if any."""
        for share in self.shares:
            if share.participant_id == participant_id:
                return share
        return None


class BillParticipantRow(BaseModel):
    """
    A participant row ready to be persisted alongside its bill.

    New rows always start unpaid.
    """

    bill_id: str
    user_id: str
    user_name: Optional[str] = None
    share: Decimal
    paid: bool = False
    paid_amount: Decimal = Field(default=Decimal("0.00"))
