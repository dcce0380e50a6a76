"""
Audit Logger

DESIGN DECISION: Every flow step that touches money is logged.
This provides:
1. Complete traceability
2. Debugging capability
3. User can see history of their settlements

The audit logger:
- Is async to match the storage interfaces
- Gracefully handles failures (a broken audit store never breaks a flow)
- Supports correlation IDs to trace related events

The engines themselves are synchronous and only use plain structlog
loggers obtained through get_logger().
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from swiff.models.audit import AuditEvent, AuditEventBuilder
from swiff.services.storage.interface import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def get_logger(name: Optional[str] = None):
    """Get a structlog logger bound to the given module name."""
    return structlog.get_logger(name)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_split_computed(
        self,
        bill_id: str,
        method: str,
        participant_count: int,
        total: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.split_computed(
            bill_id=bill_id,
            method=method,
            participant_count=participant_count,
            total=total,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_split_rejected(
        self,
        bill_id: str,
        method: str,
        error: Optional[str],
        remaining: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.split_rejected(
            bill_id=bill_id,
            method=method,
            error=error,
            remaining=remaining,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_balances_computed(
        self,
        user_id: str,
        counterparty_count: int,
        net_balance: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.balances_computed(
            user_id=user_id,
            counterparty_count=counterparty_count,
            net_balance=net_balance,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_settlement_suggested(
        self,
        from_id: str,
        to_id: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.settlement_suggested(
            from_id=from_id,
            to_id=to_id,
            amount=amount,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_settlement_recorded(
        self,
        settlement_id: UUID,
        payer_id: str,
        payee_id: str,
        amount: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a user-recorded settlement."""
        event = AuditEventBuilder.settlement_recorded(
            settlement_id=settlement_id,
            payer_id=payer_id,
            payee_id=payee_id,
            amount=amount,
            currency=currency,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed storage call."""
        event = AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., settling up).
    Pass it through all subsequent operations.
    """
    return uuid4()
