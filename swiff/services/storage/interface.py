"""
Abstract Storage Interface

DESIGN DECISION: The engines never talk to storage. Flows do, and only
through these interfaces. This allows us to:
1. Plug in whatever backend the app uses (hosted Postgres, SQLite, ...)
2. Use in-memory storage for testing
3. Keep the split and balance logic free of I/O

The interface is intentionally small - just the reads the balance views
need and the writes that settling up needs.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from swiff.models.audit import AuditEvent
from swiff.models.ledger import (
    LedgerEntry,
    ParticipationRecord,
    Settlement,
)


class LedgerStorageInterface(ABC):
    """
    Abstract interface for bill and settlement storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def save_entry(self, entry: LedgerEntry) -> bool:
        """
        Save a bill together with its participant rows.

        Args:
            entry: The bill to save

        Returns:
            True if saved successfully

        Raises:
            DuplicateError: If a bill with the same id exists
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def get_entry(self, bill_id: str) -> Optional[LedgerEntry]:
        """
        Retrieve a bill by its ID.

        Returns:
            The bill if found, None otherwise
        """
        pass

    @abstractmethod
    async def mark_entry_paid(self, bill_id: str, paid: bool = True) -> bool:
        """
        Flip the paid flag of a bill.

        Paid bills drop out of every later balance computation.

        Raises:
            NotFoundError: If bill doesn't exist
        """
        pass

    @abstractmethod
    async def list_participations(
        self,
        user_id: str,
    ) -> list[ParticipationRecord]:
        """
        List every participant row belonging to a user, with its bill.

        Args:
            user_id: The participant identifier (email)

        Returns:
            One record per bill the user takes part in
        """
        pass

    @abstractmethod
    async def list_created_entries(
        self,
        user_id: str,
        split_only: bool = True,
    ) -> list[LedgerEntry]:
        """
        List bills created by a user, with all their participants.

        Args:
            user_id: The creator identifier
            split_only: Only return bills that are split with others
        """
        pass

    @abstractmethod
    async def save_settlement(self, settlement: Settlement) -> bool:
        """
        Persist a settlement record.

        Returns:
            True if saved successfully
        """
        pass

    @abstractmethod
    async def list_settlements(self, user_id: str) -> list[Settlement]:
        """
        List settlements where the user paid or was paid.

        Returns:
            Settlements, newest first
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one settle-up action).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity.

        Args:
            entity_type: Type of entity (e.g., 'bill', 'settlement')
            entity_id: The entity's ID

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
