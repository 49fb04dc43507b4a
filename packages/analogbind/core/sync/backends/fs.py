"""Filesystem-backed mapping store.

One JSON document per profile, written atomically (temp file + os.replace).
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from pathlib import Path
from tempfile import NamedTemporaryFile

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from analogbind.core.mapping.models import ListedMapping, MappingPayload, MappingScope
from analogbind.core.sync.backends.memory import (
    Clock,
    listing,
    remove_entry,
    upsert_entry,
    utc_now,
)
from analogbind.core.sync.errors import BackendUnavailableError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_path_component(value: str) -> str:
    """Make a profile id safe to use as a file name."""
    cleaned = _UNSAFE_CHARS.sub("_", value).strip(".")
    return cleaned or "_"


class StoredProfile(BaseModel):
    """On-disk document for one profile."""

    model_config = ConfigDict(extra="ignore")

    profile_id: str
    sub_profiles: dict[str, list[MappingPayload]] = Field(default_factory=dict)


class FileMappingBackend:
    """
    Async filesystem-backed mapping store.

    Each profile lives in ``<root>/<profile_id>.json``. Writes go to a temp
    file in the same directory and are moved into place with os.replace, so
    a reader never sees a partial document.

    Args:
        root: Directory holding the profile documents.
        clock: Time source for new records (defaults to UTC now).
    """

    def __init__(self, root: Path | str, clock: Clock | None = None) -> None:
        self.root = Path(root)
        self._clock = clock or utc_now
        self._lock = asyncio.Lock()

    def _profile_path(self, profile_id: str) -> Path:
        return self.root / f"{sanitize_path_component(profile_id)}.json"

    async def _read(self, profile_id: str) -> StoredProfile:
        path = self._profile_path(profile_id)
        if not await aiofiles.os.path.exists(path):
            return StoredProfile(profile_id=profile_id)
        try:
            async with aiofiles.open(path, encoding="utf-8") as f:
                content = await f.read()
            return StoredProfile.model_validate_json(content)
        except (OSError, ValidationError, ValueError) as e:
            raise BackendUnavailableError(
                message=f"Cannot read profile document {path}",
                operation="read",
                scope=profile_id,
                cause=e,
            ) from e

    async def _write(self, document: StoredProfile) -> None:
        path = self._profile_path(document.profile_id)
        content = document.model_dump_json(indent=2)
        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)

            def create_temp_file() -> str:
                tmp = NamedTemporaryFile(
                    mode="w", encoding="utf-8", dir=path.parent, suffix=".tmp", delete=False
                )
                tmp_path = tmp.name
                tmp.close()
                return tmp_path

            tmp_path = await asyncio.to_thread(create_temp_file)
            try:
                async with aiofiles.open(tmp_path, mode="w", encoding="utf-8") as f:
                    await f.write(content)
                await asyncio.to_thread(os.replace, tmp_path, str(path))
            except OSError:
                if await aiofiles.os.path.exists(tmp_path):
                    await aiofiles.os.unlink(tmp_path)
                raise
        except OSError as e:
            raise BackendUnavailableError(
                message=f"Cannot write profile document {path}",
                operation="write",
                scope=document.profile_id,
                cause=e,
            ) from e

    async def list_mappings(self, scope: MappingScope) -> list[ListedMapping]:
        """List entries in store order (async)."""
        document = await self._read(scope.profile_id)
        return listing(document.sub_profiles.get(scope.sub_profile_id, []))

    async def upsert_mapping(self, scope: MappingScope, payload: MappingPayload) -> None:
        """Insert or replace by source key, then persist (async)."""
        async with self._lock:
            document = await self._read(scope.profile_id)
            entries = document.sub_profiles.setdefault(scope.sub_profile_id, [])
            upsert_entry(entries, payload, self._clock())
            await self._write(document)
        logger.debug(f"Stored {payload.source_key} -> {payload.output_control} in {scope}")

    async def remove_mapping(self, scope: MappingScope, source_key: str) -> bool:
        """Remove by source key, persisting only when something changed (async)."""
        async with self._lock:
            document = await self._read(scope.profile_id)
            entries = document.sub_profiles.get(scope.sub_profile_id, [])
            removed = remove_entry(entries, source_key)
            if removed:
                await self._write(document)
        logger.debug(f"Remove {source_key} from {scope}: {removed}")
        return removed

    async def delete_profile(self, profile_id: str) -> None:
        """Delete a profile document (async)."""
        async with self._lock:
            path = self._profile_path(profile_id)
            if await aiofiles.os.path.exists(path):
                await aiofiles.os.unlink(path)

    async def delete_sub_profile(self, scope: MappingScope) -> None:
        """Drop one sub-profile from its profile document (async)."""
        async with self._lock:
            document = await self._read(scope.profile_id)
            if document.sub_profiles.pop(scope.sub_profile_id, None) is not None:
                await self._write(document)
