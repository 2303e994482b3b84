"""RocksDB-backed key/value store standing in for browser local storage."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator

from rocksdict import Rdict

logger = logging.getLogger(__name__)

CHAT_HISTORY_KEY = "talbot-chat-history"
PROFILE_KEY = "talbot-profile"
DOCUMENTS_KEY = "talbot-documents"
CONVERSATION_MEMORY_KEY = "talbot-conversation-memory"
ELEVENLABS_CALLS_KEY = "talbot-elevenlabs-calls"
VOICE_MODE_KEY = "talbot-voice-mode"
NAME_USAGE_KEY = "talbot-name-usage"

BACKEND_ROCKSDICT = "rocksdict"
BACKEND_MEMORY = "dict"

# RocksDB allows one handle per directory; sessions in one process share it.
_OPEN_STORES: Dict[str, "LocalStore"] = {}


@dataclass
class LocalStore:
    """JSON values under string keys, held in RocksDB when opened on a path.

    Every failure is logged and reported through the return value so the
    in-memory conversation keeps working without durable storage.
    """

    store: Any = field(default_factory=dict)
    backend: str = BACKEND_MEMORY
    path: Path | None = None

    @classmethod
    def in_memory(cls) -> "LocalStore":
        return cls()

    @classmethod
    def open(cls, path: str | os.PathLike[str]) -> "LocalStore":
        root = Path(path).resolve()
        existing = _OPEN_STORES.get(str(root))
        if existing is not None:
            return existing
        try:
            root.mkdir(parents=True, exist_ok=True)
            db = Rdict(str(root))
        except Exception as exc:
            logger.warning("Local store unavailable at %s (%s); using memory only.", root, exc)
            return cls.in_memory()
        opened = cls(store=db, backend=BACKEND_ROCKSDICT, path=root)
        _OPEN_STORES[str(root)] = opened
        return opened

    @property
    def durable(self) -> bool:
        return self.backend == BACKEND_ROCKSDICT

    def _read(self, key: str) -> str | None:
        if self.backend == BACKEND_ROCKSDICT:
            raw = self.store.get(key.encode("utf-8"))
            return raw.decode("utf-8") if raw else None
        return self.store.get(key)

    def get(self, key: str, default: Any = None) -> Any:
        try:
            raw = self._read(key)
        except Exception as exc:
            logger.warning("Failed to read %s: %s", key, exc)
            return default
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Discarding unreadable value for %s: %s", key, exc)
            return default

    def put(self, key: str, value: Any) -> bool:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as exc:
            logger.warning("Value for %s is not JSON serialisable: %s", key, exc)
            return False
        try:
            if self.backend == BACKEND_ROCKSDICT:
                self.store[key.encode("utf-8")] = payload.encode("utf-8")
            else:
                self.store[key] = payload
        except Exception as exc:
            logger.warning("Failed to persist %s: %s", key, exc)
            return False
        return True

    def remove(self, key: str) -> bool:
        try:
            if self.backend == BACKEND_ROCKSDICT:
                raw_key = key.encode("utf-8")
                if raw_key in self.store:
                    del self.store[raw_key]
            else:
                self.store.pop(key, None)
        except Exception as exc:
            logger.warning("Failed to remove %s: %s", key, exc)
            return False
        return True

    def keys(self) -> Iterator[str]:
        try:
            if self.backend == BACKEND_ROCKSDICT:
                names = [raw.decode("utf-8") for raw in self.store.keys()]
            else:
                names = list(self.store)
        except Exception as exc:
            logger.warning("Failed to list local store: %s", exc)
            return
        yield from sorted(names)

    def items(self) -> Iterator[tuple[str, Any]]:
        for key in list(self.keys()):
            yield key, self.get(key)

    def clear(self) -> None:
        for key in list(self.keys()):
            self.remove(key)

    def close(self) -> None:
        """Release the RocksDB handle; the store is unusable afterwards."""

        if self.backend != BACKEND_ROCKSDICT:
            return
        if _OPEN_STORES.get(str(self.path)) is self:
            del _OPEN_STORES[str(self.path)]
            try:
                self.store.close()
            except Exception as exc:
                logger.warning("Failed to close local store at %s: %s", self.path, exc)


__all__ = [
    "CHAT_HISTORY_KEY",
    "CONVERSATION_MEMORY_KEY",
    "DOCUMENTS_KEY",
    "ELEVENLABS_CALLS_KEY",
    "LocalStore",
    "NAME_USAGE_KEY",
    "PROFILE_KEY",
    "VOICE_MODE_KEY",
]
