"""Mapping store backends."""

from analogbind.core.sync.backends.fs import FileMappingBackend
from analogbind.core.sync.backends.memory import InMemoryMappingBackend

__all__ = ["FileMappingBackend", "InMemoryMappingBackend"]
