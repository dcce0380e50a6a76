"""
Data Models Package

This package contains all Pydantic models used by Swiff.
All data flowing in and out of the engines conforms to these schemas.
"""

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
    SplitPolicy,
    SplitValidationResult,
    parse_split_policy,
)
from swiff.models.ledger import (
    BalanceBillRef,
    BalanceDirection,
    BalanceReport,
    BalanceSummary,
    LedgerBill,
    LedgerEntry,
    NetBalance,
    ParticipantShare,
    ParticipationRecord,
    Settlement,
    SettlementParticipant,
    SuggestedSettlement,
    Transfer,
)
from swiff.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Bill split models
    "BillParticipantRow",
    "BillShare",
    "BillSplit",
    "CustomAmountEntry",
    "CustomSplit",
    "EqualSplit",
    "EqualSplitResult",
    "Participant",
    "PercentageEntry",
    "PercentageSplit",
    "PercentageSplitResult",
    "SplitMethod",
    "SplitPolicy",
    "SplitValidationResult",
    "parse_split_policy",
    # Ledger models
    "BalanceBillRef",
    "BalanceDirection",
    "BalanceReport",
    "BalanceSummary",
    "LedgerBill",
    "LedgerEntry",
    "NetBalance",
    "ParticipantShare",
    "ParticipationRecord",
    "Settlement",
    "SettlementParticipant",
    "SuggestedSettlement",
    "Transfer",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
