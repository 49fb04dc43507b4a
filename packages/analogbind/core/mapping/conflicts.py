"""Duplicate source key detection."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence

from analogbind.core.mapping.models import MappingRecord

logger = logging.getLogger(__name__)


class ConflictDetector:
    """Flags records whose source key is shared by another valid record.

    Several source keys driving one output control is legal (their values
    combine by maximum) and is never flagged.
    """

    def scan(self, records: Iterable[MappingRecord]) -> set[str]:
        """Reset and recompute ``has_warning`` on every record.

        Args:
            records: The full collection of one sub-profile.

        Returns:
            Source keys that are currently duplicated.
        """
        records = list(records)
        groups: dict[str, list[MappingRecord]] = defaultdict(list)

        for record in records:
            record.has_warning = False
            if record.is_valid and record.source_key:
                groups[record.source_key].append(record)

        duplicated: set[str] = set()
        for key, members in groups.items():
            if len(members) > 1:
                duplicated.add(key)
                for record in members:
                    record.has_warning = True

        if duplicated:
            logger.debug(f"Duplicate source keys: {sorted(duplicated)}")
        return duplicated


def shared_output_records(
    records: Sequence[MappingRecord], record: MappingRecord
) -> list[MappingRecord]:
    """Other valid records driving the same output control as ``record``."""
    if not record.output_control:
        return []
    return [
        other
        for other in records
        if other is not record and other.is_valid and other.output_control == record.output_control
    ]


def key_claimed_by_other(
    records: Sequence[MappingRecord], record: MappingRecord, key: str
) -> bool:
    """Whether a valid record other than ``record`` currently uses ``key``."""
    return any(
        other is not record and other.is_valid and other.source_key == key for other in records
    )
