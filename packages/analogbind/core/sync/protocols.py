"""Protocol for mapping backend stores.

Defines the async-first MappingBackend protocol consumed by the sync
coordinator.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from analogbind.core.mapping.models import ListedMapping, MappingPayload, MappingScope


@runtime_checkable
class MappingBackend(Protocol):
    """
    Protocol for the authoritative mapping store (async-first).

    All implementations must support:
    - Upsert by source key (an existing key keeps its created_at)
    - A timestamp for new records that arrive without one
    - Listing ordered by created_at

    Every call is fallible and raises BackendError on failure.
    """

    async def list_mappings(self, scope: MappingScope) -> list[ListedMapping]:
        """
        List the stored mappings of a sub-profile (async).

        Args:
            scope: Profile / sub-profile to list

        Returns:
            Entries with their backend index

        Raises:
            BackendError: On read failure
        """
        ...

    async def upsert_mapping(self, scope: MappingScope, payload: MappingPayload) -> None:
        """
        Insert or replace the mapping for payload.source_key (async).

        Args:
            scope: Owning profile / sub-profile
            payload: Mapping to store

        Raises:
            BackendError: On write failure
        """
        ...

    async def remove_mapping(self, scope: MappingScope, source_key: str) -> bool:
        """
        Remove the mapping for a source key (async).

        Args:
            scope: Owning profile / sub-profile
            source_key: Key to remove

        Returns:
            True if a mapping was removed

        Raises:
            BackendError: On write failure
        """
        ...
