"""Persistence backends."""

from adminflow.storage.backend import FileBackend, InMemoryBackend, PersistenceBackend

__all__ = ["FileBackend", "InMemoryBackend", "PersistenceBackend"]
