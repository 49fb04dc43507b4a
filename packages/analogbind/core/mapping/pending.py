"""Buffer of edits that cannot be committed to the backend yet."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime

from analogbind.core.mapping.models import MappingRecord, MappingScope, PendingOverride

logger = logging.getLogger(__name__)


class PendingOverrideStore:
    """Pending overrides keyed by the owning record's ``created_at``.

    Mutated only by the reconciliation pass and the sync coordinator, both on
    the same event loop.
    """

    def __init__(self) -> None:
        self._entries: dict[datetime, PendingOverride] = {}

    def __contains__(self, created_at: object) -> bool:
        return created_at in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[datetime]:
        return iter(list(self._entries))

    def items(self) -> list[tuple[datetime, PendingOverride]]:
        return list(self._entries.items())

    def get(self, created_at: datetime) -> PendingOverride | None:
        return self._entries.get(created_at)

    def put(self, created_at: datetime, override: PendingOverride) -> None:
        self._entries[created_at] = override

    def upsert(self, record: MappingRecord, scope: MappingScope) -> PendingOverride:
        """Create or refresh the override for a record.

        A new override remembers the record's backend-confirmed key; an
        existing one keeps the key it already holds.
        """
        existing = self._entries.get(record.created_at)
        if existing is not None:
            existing.update_from(record)
            return existing

        override = PendingOverride.capture(record, scope)
        self._entries[record.created_at] = override
        return override

    def pop(self, created_at: datetime) -> PendingOverride | None:
        return self._entries.pop(created_at, None)

    def move(self, old: datetime, new: datetime) -> bool:
        """Re-key an override. Returns False if nothing was stored under ``old``."""
        if old == new or old not in self._entries:
            return False
        self._entries[new] = self._entries.pop(old)
        return True

    def in_scope(self, created_at: datetime, scope: MappingScope) -> PendingOverride | None:
        """The override for ``created_at`` if it belongs to ``scope``."""
        override = self._entries.get(created_at)
        if override is not None and override.scope == scope:
            return override
        return None

    def keys_for_scope(self, scope: MappingScope) -> list[datetime]:
        return [key for key, override in self._entries.items() if override.scope == scope]

    def removal_key(self, record: MappingRecord, scope: MappingScope) -> str | None:
        """Key to delete from the backend when ``record`` is removed.

        An in-scope override knows the key the backend still holds; otherwise
        the record's own key is used.
        """
        override = self.in_scope(record.created_at, scope)
        if override is not None:
            return override.original_key_in_backend
        return record.source_key

    def cleanup_profile(self, profile_id: str) -> int:
        """Drop every override owned by a deleted profile."""
        keys = [k for k, o in self._entries.items() if o.scope.profile_id == profile_id]
        for key in keys:
            del self._entries[key]
        if keys:
            logger.info(f"Removed {len(keys)} pending mapping(s) for deleted profile {profile_id}")
        return len(keys)

    def cleanup_sub_profile(self, profile_id: str, sub_profile_id: str) -> int:
        """Drop every override owned by a deleted sub-profile."""
        scope = MappingScope(profile_id=profile_id, sub_profile_id=sub_profile_id)
        keys = self.keys_for_scope(scope)
        for key in keys:
            del self._entries[key]
        if keys:
            logger.info(f"Removed {len(keys)} pending mapping(s) for deleted sub-profile {scope}")
        return len(keys)
