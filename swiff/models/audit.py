"""
Audit Models for Swiff

Every flow step that touches money (splitting a bill, computing balances,
recording a settlement) leaves an audit event behind.
This provides:
1. Traceability of who recorded which payment
2. Debugging information when balances look wrong
3. A history the user can be shown

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Splitting
    SPLIT_COMPUTED = "split_computed"
    SPLIT_REJECTED = "split_rejected"

    # Balances
    BALANCES_COMPUTED = "balances_computed"
    SETTLEMENT_SUGGESTED = "settlement_suggested"

    # Settlements
    SETTLEMENT_RECORDED = "settlement_recorded"

    # System events
    SYSTEM_ERROR = "system_error"
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'bill', 'settlement', 'user')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one settle-up action)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.split_computed(bill_id, "equal", 3, "30.00")
        event = AuditEventBuilder.settlement_recorded(settlement_id, ...)
    """

    @staticmethod
    def split_computed(
        bill_id: str,
        method: str,
        participant_count: int,
        total: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPLIT_COMPUTED,
            entity_type="bill",
            entity_id=bill_id,
            correlation_id=correlation_id,
            description=f"Bill split {method} among {participant_count} people",
            details={
                "method": method,
                "participant_count": participant_count,
                "total_allocated": total,
            },
        )

    @staticmethod
    def split_rejected(
        bill_id: str,
        method: str,
        error: Optional[str],
        remaining: Optional[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPLIT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="bill",
            entity_id=bill_id,
            correlation_id=correlation_id,
            description=f"{method.capitalize()} split rejected",
            details={
                "method": method,
                "error": error,
                "remaining": remaining,
            },
            is_user_action=True,
        )

    @staticmethod
    def balances_computed(
        user_id: str,
        counterparty_count: int,
        net_balance: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCES_COMPUTED,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"Balances computed against {counterparty_count} people",
            details={
                "counterparty_count": counterparty_count,
                "net_balance": net_balance,
            },
        )

    @staticmethod
    def settlement_suggested(
        from_id: str,
        to_id: str,
        amount: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTLEMENT_SUGGESTED,
            entity_type="user",
            entity_id=from_id,
            correlation_id=correlation_id,
            description=f"Suggested {from_id} pays {to_id} {amount}",
            details={
                "from": from_id,
                "to": to_id,
                "amount": amount,
            },
        )

    @staticmethod
    def settlement_recorded(
        settlement_id: UUID,
        payer_id: str,
        payee_id: str,
        amount: str,
        currency: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTLEMENT_RECORDED,
            entity_type="settlement",
            entity_id=str(settlement_id),
            correlation_id=correlation_id,
            description=f"Settlement recorded: {payer_id} paid {payee_id} {amount} {currency}",
            details={
                "payer": payer_id,
                "payee": payee_id,
                "amount": amount,
                "currency": currency,
            },
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={
                "operation": operation,
            },
            correlation_id=correlation_id,
        )
