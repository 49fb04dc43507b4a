"""Mapping records, conflict detection, pending overrides and reconciliation."""

from analogbind.core.mapping.conflicts import (
    ConflictDetector,
    key_claimed_by_other,
    shared_output_records,
)
from analogbind.core.mapping.models import (
    TIMESTAMP_BUMP,
    UNSET_CREATED_AT,
    ListedMapping,
    MappingPayload,
    MappingRecord,
    MappingScope,
    PendingOverride,
    ValidationState,
)
from analogbind.core.mapping.pending import PendingOverrideStore
from analogbind.core.mapping.reconcile import (
    ReconciliationEvent,
    ReconciliationEventKind,
    ReconciliationResult,
    reconcile,
)
from analogbind.core.mapping.selection import (
    MixedFlags,
    MultiSelectAggregator,
    SelectionStatus,
    mixed_flags,
    points_equal,
)

__all__ = [
    # Models
    "TIMESTAMP_BUMP",
    "UNSET_CREATED_AT",
    "ListedMapping",
    "MappingPayload",
    "MappingRecord",
    "MappingScope",
    "PendingOverride",
    "ValidationState",
    # Conflicts
    "ConflictDetector",
    "key_claimed_by_other",
    "shared_output_records",
    # Pending overrides
    "PendingOverrideStore",
    # Reconciliation
    "ReconciliationEvent",
    "ReconciliationEventKind",
    "ReconciliationResult",
    "reconcile",
    # Selection
    "MixedFlags",
    "MultiSelectAggregator",
    "SelectionStatus",
    "mixed_flags",
    "points_equal",
]
