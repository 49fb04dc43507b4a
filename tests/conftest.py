"""Shared pytest fixtures for analogbind tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from analogbind.core.config.models import SyncConfig
from analogbind.core.mapping.models import MappingPayload, MappingRecord, MappingScope
from analogbind.core.mapping.pending import PendingOverrideStore
from analogbind.core.notifications.notifiers import CollectingNotifier
from analogbind.core.sync.backends.memory import InMemoryMappingBackend
from analogbind.core.sync.coordinator import SyncCoordinator

BASE_TIME = datetime(2026, 1, 15, 12, 0, 0, tzinfo=UTC)

# ============================================================================
# Path Fixtures
# ============================================================================


@pytest.fixture
def project_root() -> Path:
    """Get project root directory."""
    return Path(__file__).parent.parent


# ============================================================================
# Clock Fixtures
# ============================================================================


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, start: datetime = BASE_TIME) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    """Clock frozen at BASE_TIME until advanced."""
    return FakeClock()


# ============================================================================
# Mapping Fixtures
# ============================================================================


@pytest.fixture
def scope() -> MappingScope:
    """Default profile / sub-profile."""
    return MappingScope(profile_id="racing", sub_profile_id="default")


@pytest.fixture
def other_scope() -> MappingScope:
    """Sibling sub-profile of the same profile."""
    return MappingScope(profile_id="racing", sub_profile_id="drift")


@pytest.fixture
def make_record() -> Callable[..., MappingRecord]:
    """Factory for backend-confirmed records."""

    def _make(
        source_key: str | None = "W",
        output_control: str | None = "LeftStickUp",
        created_at: datetime = BASE_TIME,
        original: bool = True,
        **fields,
    ) -> MappingRecord:
        record = MappingRecord(
            source_key=source_key,
            output_control=output_control,
            created_at=created_at,
            **fields,
        )
        if original:
            record.mark_as_original()
        return record

    return _make


@pytest.fixture
def make_payload() -> Callable[..., MappingPayload]:
    """Factory for stored payloads."""

    def _make(
        source_key: str = "W",
        output_control: str = "LeftStickUp",
        created_at: datetime | None = BASE_TIME,
        **fields,
    ) -> MappingPayload:
        return MappingPayload(
            source_key=source_key,
            output_control=output_control,
            created_at=created_at,
            **fields,
        )

    return _make


# ============================================================================
# Sync Fixtures
# ============================================================================


@pytest.fixture
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture
def backend(clock: FakeClock) -> InMemoryMappingBackend:
    return InMemoryMappingBackend(clock=clock)


@pytest.fixture
def pending() -> PendingOverrideStore:
    return PendingOverrideStore()


@pytest.fixture
def coordinator(
    backend: InMemoryMappingBackend,
    pending: PendingOverrideStore,
    notifier: CollectingNotifier,
    clock: FakeClock,
) -> SyncCoordinator:
    """Coordinator with a short debounce window."""
    return SyncCoordinator(
        backend,
        config=SyncConfig(debounce_seconds=0.01),
        pending=pending,
        notifier=notifier,
        clock=clock,
    )
