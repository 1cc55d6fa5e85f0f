"""String key-value persistence backends.

The report history and workflow stores only need `get/set/remove` over string
values. The file backend keeps one file per key in a state directory so the history
survives restarts.

There is no cross-process locking: two processes sharing a state directory can
overwrite each other's writes.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class PersistenceBackend(Protocol):
    """Minimal durable string store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...  # noqa: A003 (store API)

    def remove(self, key: str) -> None: ...


@dataclass
class InMemoryBackend:
    """Process-local backend, mainly for tests and throwaway runs."""

    data: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:  # noqa: A003
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


@dataclass
class FileBackend:
    """Store each key as `<root>/<key>.json`."""

    root: Path

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.root / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        with self._lock:
            if not path.exists():
                return None
            return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:  # noqa: A003
        path = self._path(key)
        with self._lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".json.tmp")
            tmp.write_text(value, encoding="utf-8")
            tmp.replace(path)
        logger.debug("Stored key", extra={"key": key, "path": str(path)})

    def remove(self, key: str) -> None:
        path = self._path(key)
        with self._lock:
            path.unlink(missing_ok=True)
