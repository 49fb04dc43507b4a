"""In-memory mapping store."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from analogbind.core.mapping.models import (
    UNSET_CREATED_AT,
    ListedMapping,
    MappingPayload,
    MappingScope,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def to_store_time(value: datetime) -> datetime:
    """Whole-second UTC, the resolution the store keeps."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).replace(microsecond=0)


def upsert_entry(
    entries: list[MappingPayload], payload: MappingPayload, now: datetime
) -> list[MappingPayload]:
    """Insert or replace by source key.

    A replaced entry keeps its stored created_at. A new entry keeps the
    client's created_at (truncated to seconds) or gets ``now``; the list is
    then re-sorted by created_at (stable).
    """
    for i, existing in enumerate(entries):
        if existing.source_key == payload.source_key:
            entries[i] = payload.model_copy(update={"created_at": existing.created_at})
            return entries

    created_at = to_store_time(payload.created_at) if payload.created_at else to_store_time(now)
    entries.append(payload.model_copy(update={"created_at": created_at}))
    entries.sort(key=lambda p: p.created_at or UNSET_CREATED_AT)
    return entries


def remove_entry(entries: list[MappingPayload], source_key: str) -> bool:
    for i, existing in enumerate(entries):
        if existing.source_key == source_key:
            del entries[i]
            return True
    return False


def listing(entries: Iterable[MappingPayload]) -> list[ListedMapping]:
    return [ListedMapping(payload=p, index=i) for i, p in enumerate(entries)]


class InMemoryMappingBackend:
    """
    Mapping store held in process memory.

    Useful for tests and for running the editor without a persistent store.

    Args:
        clock: Time source for new records (defaults to UTC now).
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or utc_now
        self._data: dict[MappingScope, list[MappingPayload]] = {}

    def seed(self, scope: MappingScope, payloads: Iterable[MappingPayload]) -> None:
        """Replace a sub-profile's entries verbatim (no timestamp assignment)."""
        self._data[scope] = list(payloads)

    def entries(self, scope: MappingScope) -> list[MappingPayload]:
        """Current entries for a sub-profile (copy)."""
        return list(self._data.get(scope, []))

    async def list_mappings(self, scope: MappingScope) -> list[ListedMapping]:
        """List entries in store order (async)."""
        return listing(self._data.get(scope, []))

    async def upsert_mapping(self, scope: MappingScope, payload: MappingPayload) -> None:
        """Insert or replace by source key (async)."""
        entries = self._data.setdefault(scope, [])
        upsert_entry(entries, payload, self._clock())
        logger.debug(f"Stored {payload.source_key} -> {payload.output_control} in {scope}")

    async def remove_mapping(self, scope: MappingScope, source_key: str) -> bool:
        """Remove by source key (async)."""
        removed = remove_entry(self._data.get(scope, []), source_key)
        logger.debug(f"Remove {source_key} from {scope}: {removed}")
        return removed

    async def delete_profile(self, profile_id: str) -> None:
        for scope in [s for s in self._data if s.profile_id == profile_id]:
            del self._data[scope]

    async def delete_sub_profile(self, scope: MappingScope) -> None:
        self._data.pop(scope, None)
