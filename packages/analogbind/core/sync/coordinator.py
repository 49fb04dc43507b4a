"""Keeps a sub-profile's mapping records in step with the backend store.

The coordinator owns the record collection of the active sub-profile and the
pending override store. It:
- reloads records and reconciles them with pending overrides
- flags duplicate source keys and routes conflicted edits to pending
- pushes committed edits, removing a renamed record's old key first
- debounces batch pushes from the curve editor
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, timedelta

from analogbind.core.config.models import SyncConfig
from analogbind.core.mapping.conflicts import (
    ConflictDetector,
    key_claimed_by_other,
    shared_output_records,
)
from analogbind.core.mapping.models import MappingRecord, MappingScope
from analogbind.core.mapping.pending import PendingOverrideStore
from analogbind.core.mapping.reconcile import ReconciliationResult, reconcile
from analogbind.core.notifications.models import Notice
from analogbind.core.notifications.notifiers import Notifier, NullNotifier
from analogbind.core.sync.backends.memory import utc_now
from analogbind.core.sync.debounce import Debouncer
from analogbind.core.sync.errors import BackendError
from analogbind.core.sync.protocols import MappingBackend
from analogbind.core.utils.logging import get_logger

logger = logging.getLogger(__name__)


class SyncCoordinator:
    """Sync coordinator for one active sub-profile at a time.

    All methods run on a single event loop; the only suspension points are
    backend calls and the debounce timer. Backend failures are logged and
    reported as notices and never raised: the local record stays dirty (or
    its override stays pending) and a later sync retries.

    Args:
        backend: Authoritative mapping store.
        config: Debounce settings.
        pending: Pending override store (shared across scopes).
        notifier: Sink for user-facing notices.
        clock: Time source for new records.

    Example:
        >>> coordinator = SyncCoordinator(InMemoryMappingBackend())
        >>> await coordinator.load(MappingScope(profile_id="p", sub_profile_id="s"))
        >>> record = coordinator.add_record()
        >>> record.source_key, record.output_control = "W", "LeftStickUp"
        >>> await coordinator.request_sync(record)
        True
    """

    def __init__(
        self,
        backend: MappingBackend,
        config: SyncConfig | None = None,
        pending: PendingOverrideStore | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.backend = backend
        self.config = config or SyncConfig()
        self.pending = pending or PendingOverrideStore()
        self.notifier = notifier or NullNotifier()
        self.detector = ConflictDetector()

        self.scope: MappingScope | None = None
        self.records: list[MappingRecord] = []

        self._clock = clock or utc_now
        self._creation_counter = 0
        self._dirty: dict[datetime, MappingRecord] = {}
        self._push_locks: dict[datetime, asyncio.Lock] = {}
        self._debouncer = Debouncer(self.config.debounce_seconds, self._push_dirty)
        self._log = logger

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self, scope: MappingScope) -> ReconciliationResult:
        """Reload a sub-profile from the backend and reconcile pending edits.

        Queued batch pushes are flushed first so no edit is lost to the
        reload.

        Returns:
            The reconciliation result (empty if the listing failed).
        """
        await self.flush()

        if scope != self.scope:
            self.records = []
        self.scope = scope
        self._log = get_logger(__name__, scope=str(scope))

        try:
            listing = await self.backend.list_mappings(scope)
        except BackendError as e:
            self._log.error(f"Failed to load mappings: {e}")
            self.notifier.notify(Notice.error("Loading Error", "Failed to load mappings"))
            return ReconciliationResult()

        result = reconcile(listing, self.pending, scope)
        self.records = result.records
        self._log.info(f"Loaded {len(self.records)} mappings")

        await self.rescan()
        return result

    # ------------------------------------------------------------------
    # Collection edits
    # ------------------------------------------------------------------

    def _next_created_at(self) -> datetime:
        self._creation_counter += 1
        created_at = self._clock() + timedelta(microseconds=self._creation_counter % 1000)
        used = {r.created_at for r in self.records}
        while created_at in used or created_at in self.pending:
            created_at += timedelta(microseconds=1)
        return created_at

    def add_record(self) -> MappingRecord | None:
        """Append an empty record (client-only until its first push).

        Refused while any record is still incomplete.
        """
        if any(not r.is_valid for r in self.records):
            self.notifier.notify(
                Notice.warning("Mapping In Progress", "Complete current mapping first")
            )
            return None

        record = MappingRecord(created_at=self._next_created_at())
        self.records.append(record)
        self._log.debug(f"Added mapping with identity {record.created_at.isoformat()}")
        return record

    def _removal_key(self, record: MappingRecord) -> str | None:
        if self.scope is not None and self.pending.in_scope(record.created_at, self.scope):
            return self.pending.removal_key(record, self.scope)
        if record.is_valid:
            return record.source_key
        return record.original_source_key

    async def _remove_one(self, record: MappingRecord) -> bool:
        if record not in self.records:
            return False
        self.records = [r for r in self.records if r is not record]
        self._dirty.pop(record.created_at, None)
        self._push_locks.pop(record.created_at, None)

        key = self._removal_key(record)
        if key and self.scope is not None:
            try:
                removed = await self.backend.remove_mapping(self.scope, key)
                self._log.info(f"Removed mapping {key}: {removed}")
            except BackendError as e:
                self._log.error(f"Failed to remove mapping {key}: {e}")
                self.notifier.notify(Notice.error("Sync Error", f"Failed to remove {key}"))
        else:
            self._log.info("Removed incomplete mapping locally (not in backend)")

        self.pending.pop(record.created_at)
        return True

    async def remove_record(self, record: MappingRecord) -> bool:
        """Remove a record locally and from the backend."""
        removed = await self._remove_one(record)
        if removed:
            await self.rescan()
        return removed

    async def remove_records(self, records: Iterable[MappingRecord]) -> int:
        """Remove several records; returns how many were removed."""
        count = 0
        for record in list(records):
            if await self._remove_one(record):
                count += 1
        if count:
            await self.rescan()
        return count

    def cleanup_profile(self, profile_id: str) -> int:
        """Cascade a profile deletion to pending overrides and the open collection."""
        removed = self.pending.cleanup_profile(profile_id)
        if self.scope is not None and self.scope.profile_id == profile_id:
            self._close_scope()
        return removed

    def cleanup_sub_profile(self, profile_id: str, sub_profile_id: str) -> int:
        """Cascade a sub-profile deletion to pending overrides and the open collection."""
        removed = self.pending.cleanup_sub_profile(profile_id, sub_profile_id)
        if self.scope == MappingScope(profile_id=profile_id, sub_profile_id=sub_profile_id):
            self._close_scope()
        return removed

    def _close_scope(self) -> None:
        self._debouncer.cancel()
        self._dirty.clear()
        self._push_locks.clear()
        self.records = []
        self.scope = None

    # ------------------------------------------------------------------
    # Conflicts
    # ------------------------------------------------------------------

    def scan(self) -> set[str]:
        """Recompute duplicate-key flags without pushing anything."""
        return self.detector.scan(self.records)

    async def rescan(self) -> set[str]:
        """Recompute conflict flags, then flush every resolved pending override."""
        duplicated = self.scan()
        if self.scope is None:
            return duplicated

        for key in self.pending.keys_for_scope(self.scope):
            record = next((r for r in self.records if r.created_at == key), None)
            if record is None or record.has_warning or not record.is_valid:
                continue
            self._log.info(f"Flushing resolved pending mapping for {record.source_key}")
            if await self._push(record):
                self.pending.pop(key)
        return duplicated

    # ------------------------------------------------------------------
    # Pushing
    # ------------------------------------------------------------------

    async def _push(self, record: MappingRecord) -> bool:
        """Push one record, removing its previous backend key first when renamed.

        Pushes of the same record run one at a time, so a later push sees the
        key confirmed by an earlier one.
        """
        lock = self._push_locks.setdefault(record.created_at, asyncio.Lock())
        async with lock:
            return await self._push_locked(record)

    async def _push_locked(self, record: MappingRecord) -> bool:
        if self.scope is None or not record.is_valid:
            return False

        scope = self.scope
        payload = record.to_payload()
        original = record.original_source_key
        try:
            if original and original != payload.source_key:
                if key_claimed_by_other(self.records, record, original):
                    self._log.info(f"Original key now used by another mapping: {original}")
                else:
                    await self.backend.remove_mapping(scope, original)
                    self._log.info(f"Removed original mapping: {original}")

            await self.backend.upsert_mapping(scope, payload)
        except BackendError as e:
            self._log.error(f"Failed to sync mapping {payload.source_key}: {e}")
            self.notifier.notify(
                Notice.error("Sync Error", f"Failed to sync {payload.source_key}")
            )
            return False

        record.mark_as_original(payload)
        self._log.info(f"Synced mapping {payload.source_key} -> {payload.output_control}")
        return True

    async def request_sync(self, record: MappingRecord) -> bool:
        """Validate and sync a committed edit of one record.

        A conflicted record is buffered as a pending override and not pushed.
        Otherwise it is pushed, and its pending override (if any) is cleared.

        Returns:
            True if the record was pushed.
        """
        if self.scope is None:
            return False
        if not record.has_been_modified and record.created_at not in self.pending:
            return False
        if not record.is_valid:
            return False

        pushed = False
        self.scan()
        if record.has_warning:
            self.pending.upsert(record, self.scope)
            self._log.warning(f"Duplicate key detected; stored as pending: {record.source_key}")
            self.notifier.notify(
                Notice.warning("Duplicate Key", f"Key {record.source_key} is already mapped")
            )
        else:
            if shared_output_records(self.records, record):
                self._log.info(
                    f"Multiple keys mapped to {record.output_control}: values combine by max"
                )
                message = f"Keys for {record.output_control} will be combined"
                self.notifier.notify(Notice.info("Multiple Keys", message))
            pushed = await self._push(record)
            if pushed:
                self.pending.pop(record.created_at)

        await self.rescan()
        return pushed

    def schedule_push(self, records: Sequence[MappingRecord]) -> None:
        """Queue records for the next debounced batch push and restart the timer."""
        for record in records:
            self._dirty[record.created_at] = record
        self._debouncer.trigger()

    @property
    def push_scheduled(self) -> bool:
        return self._debouncer.armed

    @property
    def dirty(self) -> list[MappingRecord]:
        return list(self._dirty.values())

    async def _push_dirty(self) -> None:
        batch, self._dirty = self._dirty, {}
        if not batch:
            return

        self.scan()
        for key, record in batch.items():
            if not any(r is record for r in self.records):
                continue
            if not (record.is_valid and not record.has_warning and record.is_analog):
                continue
            if not await self._push(record):
                # Retry on the next cycle unless a newer edit already queued it
                self._dirty.setdefault(key, record)

    async def flush(self) -> None:
        """Run any queued batch push now and wait for in-flight pushes."""
        await self._debouncer.flush()

    async def aclose(self) -> None:
        await self.flush()
        self._debouncer.cancel()
