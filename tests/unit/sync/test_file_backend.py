"""Tests for the filesystem-backed mapping store."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from analogbind.core.mapping.models import MappingPayload, MappingScope
from analogbind.core.sync.backends.fs import FileMappingBackend, sanitize_path_component
from analogbind.core.sync.errors import BackendError, BackendUnavailableError

from tests.conftest import BASE_TIME


@pytest.fixture
def file_backend(tmp_path: Path, clock) -> FileMappingBackend:
    return FileMappingBackend(tmp_path / "profiles", clock=clock)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("racing", "racing"),
        ("my profile/v2", "my_profile_v2"),
        ("..", "_"),
        ("", "_"),
    ],
)
def test_sanitize_path_component(value: str, expected: str) -> None:
    assert sanitize_path_component(value) == expected


class TestFileMappingBackend:
    @pytest.mark.asyncio
    async def test_missing_profile_lists_empty(
        self, file_backend: FileMappingBackend, scope: MappingScope
    ) -> None:
        assert await file_backend.list_mappings(scope) == []

    @pytest.mark.asyncio
    async def test_upsert_persists_across_instances(
        self,
        file_backend: FileMappingBackend,
        scope: MappingScope,
        make_payload: Callable[..., MappingPayload],
        tmp_path: Path,
    ) -> None:
        await file_backend.upsert_mapping(
            scope, make_payload("W", custom_points=[(0.0, 0.0), (0.5, 0.8), (1.0, 1.0)])
        )

        reopened = FileMappingBackend(tmp_path / "profiles")
        [entry] = await reopened.list_mappings(scope)
        assert entry.payload.source_key == "W"
        assert entry.payload.created_at == BASE_TIME
        assert entry.payload.custom_points == [(0.0, 0.0), (0.5, 0.8), (1.0, 1.0)]

        document = json.loads((tmp_path / "profiles" / "racing.json").read_text())
        assert document["profile_id"] == "racing"
        assert list(document["sub_profiles"]) == ["default"]

    @pytest.mark.asyncio
    async def test_no_temp_files_left_behind(
        self,
        file_backend: FileMappingBackend,
        scope: MappingScope,
        make_payload: Callable[..., MappingPayload],
    ) -> None:
        await file_backend.upsert_mapping(scope, make_payload("W"))
        await file_backend.upsert_mapping(scope, make_payload("S"))
        assert sorted(p.name for p in file_backend.root.iterdir()) == ["racing.json"]

    @pytest.mark.asyncio
    async def test_remove(
        self,
        file_backend: FileMappingBackend,
        scope: MappingScope,
        make_payload: Callable[..., MappingPayload],
    ) -> None:
        await file_backend.upsert_mapping(scope, make_payload("W"))
        assert await file_backend.remove_mapping(scope, "W")
        assert not await file_backend.remove_mapping(scope, "W")
        assert await file_backend.list_mappings(scope) == []

    @pytest.mark.asyncio
    async def test_corrupt_document_raises_backend_error(
        self, file_backend: FileMappingBackend, scope: MappingScope
    ) -> None:
        file_backend.root.mkdir(parents=True)
        (file_backend.root / "racing.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(BackendUnavailableError) as exc_info:
            await file_backend.list_mappings(scope)

        assert isinstance(exc_info.value, BackendError)
        assert exc_info.value.operation == "read"
        assert exc_info.value.cause is not None

    @pytest.mark.asyncio
    async def test_delete_sub_profile_keeps_siblings(
        self,
        file_backend: FileMappingBackend,
        scope: MappingScope,
        other_scope: MappingScope,
        make_payload: Callable[..., MappingPayload],
    ) -> None:
        await file_backend.upsert_mapping(scope, make_payload("W"))
        await file_backend.upsert_mapping(other_scope, make_payload("S"))

        await file_backend.delete_sub_profile(scope)

        assert await file_backend.list_mappings(scope) == []
        [entry] = await file_backend.list_mappings(other_scope)
        assert entry.payload.source_key == "S"

    @pytest.mark.asyncio
    async def test_delete_profile_removes_document(
        self,
        file_backend: FileMappingBackend,
        scope: MappingScope,
        make_payload: Callable[..., MappingPayload],
    ) -> None:
        await file_backend.upsert_mapping(scope, make_payload("W"))
        await file_backend.delete_profile("racing")
        assert not (file_backend.root / "racing.json").exists()
        await file_backend.delete_profile("racing")
