"""
In-Memory Storage

Dictionary-backed implementations of the storage interfaces.
Used by the test suite and by callers that keep their own persistence
outside of Swiff and just want to run the flows over a snapshot.

Not safe to share across event loops or threads.
"""

from typing import Optional
from uuid import UUID

from swiff.models.audit import AuditEvent
from swiff.models.ledger import (
    LedgerEntry,
    ParticipationRecord,
    Settlement,
)
from swiff.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
)


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Bills and settlements kept in insertion order."""

    def __init__(self, entries: Optional[list[LedgerEntry]] = None):
        self._entries: dict[str, LedgerEntry] = {}
        self._settlements: list[Settlement] = []

        for entry in entries or []:
            if entry.id in self._entries:
                raise DuplicateError(f"Bill {entry.id} already exists")
            self._entries[entry.id] = entry

    async def save_entry(self, entry: LedgerEntry) -> bool:
        if entry.id in self._entries:
            raise DuplicateError(f"Bill {entry.id} already exists")
        self._entries[entry.id] = entry
        return True

    async def get_entry(self, bill_id: str) -> Optional[LedgerEntry]:
        return self._entries.get(bill_id)

    async def mark_entry_paid(self, bill_id: str, paid: bool = True) -> bool:
        entry = self._entries.get(bill_id)
        if entry is None:
            raise NotFoundError(f"Bill {bill_id} not found")

        # Entries are value objects; store a copy with the new flag
        self._entries[bill_id] = entry.model_copy(update={"paid": paid})
        return True

    async def list_participations(
        self,
        user_id: str,
    ) -> list[ParticipationRecord]:
        records = []
        for entry in self._entries.values():
            for participant in entry.participants:
                if participant.participant_id == user_id:
                    records.append(ParticipationRecord(
                        user_id=user_id,
                        share=participant.share,
                        bill=entry.header,
                    ))
        return records

    async def list_created_entries(
        self,
        user_id: str,
        split_only: bool = True,
    ) -> list[LedgerEntry]:
        return [
            entry for entry in self._entries.values()
            if entry.creator_id == user_id and (entry.is_split or not split_only)
        ]

    async def save_settlement(self, settlement: Settlement) -> bool:
        self._settlements.append(settlement)
        return True

    async def list_settlements(self, user_id: str) -> list[Settlement]:
        # Insertion order breaks timestamp ties
        matching = [
            (s.created_at, position, s)
            for position, s in enumerate(self._settlements)
            if s.involves(user_id)
        ]
        matching.sort(key=lambda item: (item[0], item[1]), reverse=True)
        return [s for _, _, s in matching]


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
