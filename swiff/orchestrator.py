"""
Main Orchestrator for Swiff

This module ties the pure engines to storage and the audit trail and
defines the end-to-end flows for:
1. Bill splitting (policy → shares → participant rows)
2. Balances (load unpaid bills → net balances → suggested settlement)
3. Settling up (user records a payment → persisted → audited)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Engines never touch storage; flows fetch and hand them plain data
- Balances are recomputed from storage on every call, never cached
- Settlements are only recorded on explicit request, never inferred
- Every step is audited
"""

from typing import Any, Optional, Sequence, Union
from uuid import UUID

from swiff.audit import AuditLogger, create_correlation_id
from swiff.balances import balance_with, compute_balances, suggest_settlement
from swiff.config import get_settings
from swiff.models.bill import (
    BillParticipantRow,
    BillSplit,
    CustomSplit,
    EqualSplit,
    Participant,
    PercentageSplit,
)
from swiff.models.ledger import (
    BalanceReport,
    NetBalance,
    Settlement,
    SuggestedSettlement,
)
from swiff.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    LedgerStorageInterface,
    StorageError,
)
from swiff.splits import build_participant_rows, split_bill


class SplitRejectedError(Exception):
    """The requested allocation does not reconcile with the bill total."""

    def __init__(self, split: BillSplit):
        self.split = split
        super().__init__(split.error or "Split rejected")


class BillSplitFlow:
    """
    Orchestrates splitting a bill.

    Flow:
    1. Split → run the policy through the split engine
    2. Audit → computed or rejected
    3. Rows → participant rows for the caller to persist

    Rejected splits are returned (or raised as SplitRejectedError when
    rows were asked for); nothing is persisted here. Anything the engine
    raises is audited as a system error and re-raised.
    """

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        self._audit_logger = audit_logger

    async def split(
        self,
        bill_id: str,
        total_amount: Any,
        participants: Sequence[Participant],
        policy: Union[EqualSplit, CustomSplit, PercentageSplit],
        correlation_id: Optional[UUID] = None,
    ) -> BillSplit:
        """Split a bill and audit the outcome."""
        correlation_id = correlation_id or create_correlation_id()

        try:
            result = split_bill(total_amount, participants, policy)
        except Exception as e:
            if self._audit_logger:
                await self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    details={"bill_id": bill_id, "operation": "split_bill"},
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            if result.is_valid:
                await self._audit_logger.log_split_computed(
                    bill_id=bill_id,
                    method=result.method.value,
                    participant_count=len(result.shares),
                    total=str(result.total_allocated),
                    correlation_id=correlation_id,
                )
            else:
                await self._audit_logger.log_split_rejected(
                    bill_id=bill_id,
                    method=result.method.value,
                    error=result.error,
                    remaining=str(result.remaining) if result.remaining is not None else None,
                    correlation_id=correlation_id,
                )

        return result

    async def participant_rows(
        self,
        bill_id: str,
        total_amount: Any,
        participants: Sequence[Participant],
        policy: Union[EqualSplit, CustomSplit, PercentageSplit],
        correlation_id: Optional[UUID] = None,
    ) -> list[BillParticipantRow]:
        """
        Split a bill and build its participant rows.

        Raises:
            SplitRejectedError: If the allocation is invalid
        """
        result = await self.split(
            bill_id, total_amount, participants, policy, correlation_id
        )
        if not result.is_valid:
            raise SplitRejectedError(result)

        return build_participant_rows(bill_id, participants, result)


class BalanceFlow:
    """
    Orchestrates balances and settling up.

    Every read goes back to storage and recomputes from scratch, so a
    bill marked paid a moment ago is already excluded.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._default_currency = get_settings().app.default_currency

    async def _storage_call(self, operation: str, awaitable, correlation_id: UUID):
        """Await a storage call, auditing and normalizing failures."""
        try:
            return await awaitable
        except Exception as e:
            if self._audit_logger:
                await self._audit_logger.log_storage_error(
                    operation=operation,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            if isinstance(e, StorageError):
                raise
            raise StorageError(f"{operation} failed: {e}") from e

    async def get_user_balances(
        self,
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> BalanceReport:
        """Net balances of a user against everybody they share bills with."""
        correlation_id = correlation_id or create_correlation_id()

        participations = await self._storage_call(
            "list_participations",
            self._storage.list_participations(user_id),
            correlation_id,
        )
        created_entries = await self._storage_call(
            "list_created_entries",
            self._storage.list_created_entries(user_id, split_only=True),
            correlation_id,
        )

        report = compute_balances(user_id, participations, created_entries)

        if self._audit_logger:
            await self._audit_logger.log_balances_computed(
                user_id=user_id,
                counterparty_count=len(report.balances),
                net_balance=str(report.summary.net_balance),
                correlation_id=correlation_id,
            )

        return report

    async def get_balance_with_person(
        self,
        user_id: str,
        other_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> NetBalance:
        """Balance with one person; an even zero balance if nothing is open."""
        report = await self.get_user_balances(user_id, correlation_id)
        return balance_with(report, other_id, self._default_currency)

    async def get_suggested_settlement(
        self,
        user_id: str,
        other_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> SuggestedSettlement:
        """What should change hands to get even with another person."""
        correlation_id = correlation_id or create_correlation_id()

        balance = await self.get_balance_with_person(user_id, other_id, correlation_id)
        suggestion = suggest_settlement(user_id, balance)

        if self._audit_logger:
            await self._audit_logger.log_settlement_suggested(
                from_id=suggestion.from_id,
                to_id=suggestion.to_id,
                amount=str(suggestion.amount),
                correlation_id=correlation_id,
            )

        return suggestion

    async def record_settlement(
        self,
        payer_id: str,
        payee_id: str,
        amount: Any,
        currency: Optional[str] = None,
        notes: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Settlement:
        """
        Record a payment the user made (or received).

        Raises:
            pydantic.ValidationError: If the amount or parties are invalid
            StorageError: If the settlement could not be saved
        """
        correlation_id = correlation_id or create_correlation_id()

        settlement = Settlement(
            payer_id=payer_id,
            payee_id=payee_id,
            amount=amount,
            currency=currency or self._default_currency,
            notes=notes or None,
        )

        await self._storage_call(
            "save_settlement",
            self._storage.save_settlement(settlement),
            correlation_id,
        )

        if self._audit_logger:
            await self._audit_logger.log_settlement_recorded(
                settlement_id=settlement.id,
                payer_id=settlement.payer_id,
                payee_id=settlement.payee_id,
                amount=str(settlement.amount),
                currency=settlement.currency,
                correlation_id=correlation_id,
            )

        return settlement

    async def get_settlement_history(
        self,
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> list[Settlement]:
        """Settlements the user paid or received, newest first."""
        correlation_id = correlation_id or create_correlation_id()

        return await self._storage_call(
            "list_settlements",
            self._storage.list_settlements(user_id),
            correlation_id,
        )


def create_app_components(
    ledger_storage: Optional[LedgerStorageInterface] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
) -> tuple[BillSplitFlow, BalanceFlow]:
    """
    Factory function to create all application components.

    Args:
        ledger_storage: Backend for bills and settlements.
                        Defaults to an empty in-memory store.
        audit_storage: Backend for the audit trail.
                       Defaults to an in-memory store.

    Returns:
        (bill_split_flow, balance_flow)
    """
    audit_logger = AuditLogger(audit_storage or InMemoryAuditStorage())

    bill_split_flow = BillSplitFlow(audit_logger=audit_logger)
    balance_flow = BalanceFlow(
        storage=ledger_storage or InMemoryLedgerStorage(),
        audit_logger=audit_logger,
    )

    return bill_split_flow, balance_flow
