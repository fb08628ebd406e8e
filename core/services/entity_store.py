# =============================================================================
# core/services/entity_store.py - Document Store Access
# =============================================================================
# Read / field-level update / delete primitives for media-owning entities.
#
# Implementations:
# - SupabaseEntityStore: Supabase tables (sync client run in a worker thread)
# - InMemoryEntityStore: dict-backed, for development and tests
#
# No concurrency control beyond the atomicity of a single update: two
# concurrent writers to one row resolve as last-write-wins.
# =============================================================================

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable
from uuid import uuid4

from supabase import Client

from app.exceptions import EntityStoreError
from core.models.entities import EntityKind

logger = logging.getLogger(__name__)


class EntityStore(ABC):
    """Async document store used by the media lifecycle coordinator."""

    @abstractmethod
    async def get(self, kind: EntityKind, entity_id: str) -> dict[str, Any] | None:
        """Fetch one entity row, or None if it doesn't exist."""

    @abstractmethod
    async def insert(self, kind: EntityKind, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a row and return it with its assigned id."""

    @abstractmethod
    async def update_fields(
        self,
        kind: EntityKind,
        entity_id: str,
        fields: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Atomically set `fields` on one row. Returns the updated row, or None if missing."""

    @abstractmethod
    async def delete(self, kind: EntityKind, entity_id: str) -> bool:
        """Delete one row. Returns False if it was already gone."""

    @abstractmethod
    async def list_before(
        self,
        kind: EntityKind,
        field: str,
        cutoff: datetime,
    ) -> list[dict[str, Any]]:
        """Rows whose `field` timestamp is earlier than `cutoff`."""


# =============================================================================
# Supabase Implementation
# =============================================================================

class SupabaseEntityStore(EntityStore):
    """
    EntityStore backed by Supabase tables.

    Table per kind: users, posts, stories, events, businesses.
    """

    def __init__(self, client_factory: Callable[[], Client]):
        self._client_factory = client_factory

    async def _execute(self, operation: str, kind: EntityKind, build_query: Callable[[Client], Any]):
        def run():
            return build_query(self._client_factory()).execute()

        try:
            response = await asyncio.to_thread(run)
        except Exception as e:
            logger.error(f"Failed to {operation} {kind.value}: {e}")
            raise EntityStoreError(operation, kind.value, str(e))
        return response.data or []

    async def get(self, kind: EntityKind, entity_id: str) -> dict[str, Any] | None:
        rows = await self._execute(
            "fetch", kind,
            lambda client: client.table(kind.table).select("*").eq("id", entity_id).limit(1),
        )
        return rows[0] if rows else None

    async def insert(self, kind: EntityKind, data: dict[str, Any]) -> dict[str, Any]:
        rows = await self._execute(
            "create", kind,
            lambda client: client.table(kind.table).insert(data),
        )
        if not rows:
            raise EntityStoreError("create", kind.value, "insert returned no data")
        logger.info(f"Created {kind.value}: {rows[0].get('id')}")
        return rows[0]

    async def update_fields(
        self,
        kind: EntityKind,
        entity_id: str,
        fields: dict[str, Any],
    ) -> dict[str, Any] | None:
        rows = await self._execute(
            "update", kind,
            lambda client: client.table(kind.table).update(fields).eq("id", entity_id),
        )
        return rows[0] if rows else None

    async def delete(self, kind: EntityKind, entity_id: str) -> bool:
        rows = await self._execute(
            "delete", kind,
            lambda client: client.table(kind.table).delete().eq("id", entity_id),
        )
        logger.info(f"Deleted {kind.value}: {entity_id}")
        return bool(rows)

    async def list_before(
        self,
        kind: EntityKind,
        field: str,
        cutoff: datetime,
    ) -> list[dict[str, Any]]:
        return await self._execute(
            "list", kind,
            lambda client: client.table(kind.table).select("*").lt(field, cutoff.isoformat()),
        )


# =============================================================================
# In-Memory Implementation
# =============================================================================

class InMemoryEntityStore(EntityStore):
    """
    Dict-backed EntityStore.

    Writes are appended to `journal` (shared with InMemoryAssetStore in tests)
    so the order of store and asset calls can be asserted.
    """

    def __init__(self, journal: list[tuple[Any, ...]] | None = None):
        self.rows: dict[EntityKind, dict[str, dict[str, Any]]] = {kind: {} for kind in EntityKind}
        self.journal = journal if journal is not None else []
        self.fail_writes = False

    def _check_writable(self, operation: str, kind: EntityKind) -> None:
        if self.fail_writes:
            raise EntityStoreError(operation, kind.value, "in-memory store configured to fail writes")

    async def get(self, kind: EntityKind, entity_id: str) -> dict[str, Any] | None:
        row = self.rows[kind].get(str(entity_id))
        return dict(row) if row is not None else None

    async def insert(self, kind: EntityKind, data: dict[str, Any]) -> dict[str, Any]:
        self._check_writable("create", kind)
        row = {"id": str(uuid4()), **data}
        row["id"] = str(row["id"])
        self.rows[kind][row["id"]] = row
        self.journal.append(("entity.insert", kind, row["id"]))
        return dict(row)

    async def update_fields(
        self,
        kind: EntityKind,
        entity_id: str,
        fields: dict[str, Any],
    ) -> dict[str, Any] | None:
        self._check_writable("update", kind)
        row = self.rows[kind].get(str(entity_id))
        if row is None:
            return None
        row.update(fields)
        self.journal.append(("entity.update", kind, str(entity_id), tuple(sorted(fields))))
        return dict(row)

    async def delete(self, kind: EntityKind, entity_id: str) -> bool:
        self._check_writable("delete", kind)
        self.journal.append(("entity.delete", kind, str(entity_id)))
        return self.rows[kind].pop(str(entity_id), None) is not None

    async def list_before(
        self,
        kind: EntityKind,
        field: str,
        cutoff: datetime,
    ) -> list[dict[str, Any]]:
        expired = []
        for row in self.rows[kind].values():
            value = row.get(field)
            if isinstance(value, str):
                value = datetime.fromisoformat(value)
            if value is not None and value < cutoff:
                expired.append(dict(row))
        return expired
