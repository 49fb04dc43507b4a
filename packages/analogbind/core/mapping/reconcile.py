"""Reconciliation of backend listings with pending overrides.

Backend records carry ``created_at`` as their identity, but timestamps may
collide (the store keeps whole seconds). A reload therefore:

1. orders the listing by (unset, created_at, backend index)
2. bumps colliding timestamps until unique
3. finds the pending override for each record, following it across a bump
4. lets in-scope pending edits overwrite the loaded fields
5. materializes unclaimed in-scope overrides as orphan records
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from analogbind.core.mapping.models import (
    TIMESTAMP_BUMP,
    UNSET_CREATED_AT,
    ListedMapping,
    MappingRecord,
    MappingScope,
)
from analogbind.core.mapping.pending import PendingOverrideStore

logger = logging.getLogger(__name__)


class ReconciliationEventKind(str, Enum):
    """What a reconciliation step did."""

    TIMESTAMP_REMAP = "timestamp_remap"
    PENDING_FOLLOWED = "pending_followed"
    PENDING_APPLIED = "pending_applied"
    ORPHAN_MATERIALIZED = "orphan_materialized"


class ReconciliationEvent(BaseModel):
    """A logged, deterministic resolution made during reload."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: ReconciliationEventKind
    created_at: datetime
    previous_created_at: datetime | None = None
    source_key: str | None = None


class ReconciliationResult(BaseModel):
    """Records for the collection plus what was resolved to build them."""

    model_config = ConfigDict(extra="forbid")

    records: list[MappingRecord] = Field(default_factory=list)
    events: list[ReconciliationEvent] = Field(default_factory=list)

    def of_kind(self, kind: ReconciliationEventKind) -> list[ReconciliationEvent]:
        return [e for e in self.events if e.kind == kind]


def _unique_timestamp(value: datetime, used: set[datetime]) -> datetime:
    while value in used:
        value = value + TIMESTAMP_BUMP
    return value


def _ts(value: datetime) -> str:
    if value == UNSET_CREATED_AT:
        return "unset"
    return value.strftime("%H:%M:%S.%f")[:-3]


def reconcile(
    listing: Sequence[ListedMapping],
    pending: PendingOverrideStore,
    scope: MappingScope,
) -> ReconciliationResult:
    """Merge a backend listing with the pending overrides for ``scope``.

    Loaded records are marked original before pending edits are applied, so
    an applied edit shows as modified and is pushed once its conflict clears.

    Args:
        listing: Backend entries for ``scope``.
        pending: Override store; entries may be re-keyed.
        scope: Profile / sub-profile being loaded.

    Returns:
        The reconciled records and the events that produced them.
    """
    result = ReconciliationResult()

    ordered = sorted(
        listing,
        key=lambda entry: (
            entry.payload.created_at is None,
            entry.payload.created_at or UNSET_CREATED_AT,
            entry.index,
        ),
    )

    used: set[datetime] = set()
    claimed: set[datetime] = set()

    for entry in ordered:
        record = MappingRecord.from_payload(entry.payload)
        loaded_at = record.created_at

        record.created_at = _unique_timestamp(loaded_at, used)
        used.add(record.created_at)
        if record.created_at != loaded_at:
            logger.info(
                f"Resolved timestamp collision for {record.source_key}: "
                f"{_ts(loaded_at)} -> {_ts(record.created_at)}"
            )
            result.events.append(
                ReconciliationEvent(
                    kind=ReconciliationEventKind.TIMESTAMP_REMAP,
                    created_at=record.created_at,
                    previous_created_at=loaded_at,
                    source_key=record.source_key,
                )
            )

        record.mark_as_original()

        override = pending.get(record.created_at)
        # An override already applied to an earlier record in this pass stays put
        if (
            override is None
            and loaded_at not in claimed
            and pending.move(loaded_at, record.created_at)
        ):
            override = pending.get(record.created_at)
            logger.info(f"Remapped pending state: {_ts(loaded_at)} -> {_ts(record.created_at)}")
            result.events.append(
                ReconciliationEvent(
                    kind=ReconciliationEventKind.PENDING_FOLLOWED,
                    created_at=record.created_at,
                    previous_created_at=loaded_at,
                    source_key=record.source_key,
                )
            )

        if override is not None and override.scope == scope:
            override.apply_to(record)
            claimed.add(record.created_at)
            logger.debug(f"Applied pending edit to {record.original_source_key}")
            result.events.append(
                ReconciliationEvent(
                    kind=ReconciliationEventKind.PENDING_APPLIED,
                    created_at=record.created_at,
                    source_key=record.source_key,
                )
            )

        result.records.append(record)

    for key in pending.keys_for_scope(scope):
        if key in claimed:
            continue

        orphan_at = key
        while orphan_at in used or (orphan_at != key and orphan_at in pending):
            orphan_at = orphan_at + TIMESTAMP_BUMP
        used.add(orphan_at)
        if orphan_at != key:
            pending.move(key, orphan_at)
            logger.info(f"Resolved orphan timestamp collision: {_ts(key)} -> {_ts(orphan_at)}")

        override = pending.get(orphan_at)
        record = override.to_record(orphan_at)
        logger.info(f"Restored pending mapping not yet in backend: {record.source_key}")
        result.events.append(
            ReconciliationEvent(
                kind=ReconciliationEventKind.ORPHAN_MATERIALIZED,
                created_at=orphan_at,
                previous_created_at=key if orphan_at != key else None,
                source_key=record.source_key,
            )
        )
        result.records.append(record)

    return result
