"""Backend synchronization: stores, debounced pushes and the sync coordinator."""

from analogbind.core.sync.backends import FileMappingBackend, InMemoryMappingBackend
from analogbind.core.sync.coordinator import SyncCoordinator
from analogbind.core.sync.debounce import Debouncer
from analogbind.core.sync.errors import (
    BackendError,
    BackendErrorData,
    BackendUnavailableError,
    MappingConflictError,
    MappingNotFoundError,
)
from analogbind.core.sync.protocols import MappingBackend

__all__ = [
    # Protocols
    "MappingBackend",
    # Backends
    "FileMappingBackend",
    "InMemoryMappingBackend",
    # Coordination
    "Debouncer",
    "SyncCoordinator",
    # Errors
    "BackendError",
    "BackendErrorData",
    "BackendUnavailableError",
    "MappingConflictError",
    "MappingNotFoundError",
]
