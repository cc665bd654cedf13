"""Per-device memory of which vote option was cast on each fact.

Records live in an injected key-value store keyed by fact id, so the same
logic works against an in-process dict (tests, demos) or a JSON file on disk
that survives restarts.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol

import structlog

from .models import VOTE_OPTIONS

logger = structlog.get_logger()


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def set_many(self, items: dict[str, str]) -> None: ...


@dataclass
class MemoryKV:
    data: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def set_many(self, items: dict[str, str]) -> None:
        self.data.update(items)


@dataclass
class JsonFileKV:
    """Key-value store persisted as one JSON object in a file.

    Every write rewrites the whole file through a uniquely named temp file and
    ``os.replace``; the lock keeps the cache and the file in step when called
    from several threads.
    """

    path: str
    _cache: dict[str, str] | None = field(default=None, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def _read(self) -> dict[str, str]:
        # loaded once; this process is the only writer
        if self._cache is not None:
            return self._cache
        p = os.path.expanduser(self.path)
        data: Any = {}
        if os.path.exists(p):
            with open(p, encoding="utf-8") as fh:
                try:
                    data = json.load(fh)
                except json.JSONDecodeError:
                    logger.warning("votes.file_corrupt", path=p)
        self._cache = data if isinstance(data, dict) else {}
        return self._cache

    def _write(self, data: dict[str, str]) -> None:
        p = os.path.expanduser(self.path)
        parent = os.path.dirname(p) or "."
        os.makedirs(parent, exist_ok=True)
        with tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=parent, suffix=".tmp", delete=False) as fh:
            json.dump(data, fh)
        try:
            os.replace(fh.name, p)
        except OSError:
            os.unlink(fh.name)
            raise

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, items: dict[str, str]) -> None:
        if not items:
            return
        with self._lock:
            data = {**self._read(), **items}
            self._write(data)
            self._cache = data


@dataclass
class VoteRecord:
    votes_love: bool = False
    votes_interesting: bool = False
    votes_false: bool = False

    @classmethod
    def only(cls, option: str) -> "VoteRecord":
        rec = cls()
        setattr(rec, VOTE_OPTIONS[option], True)
        return rec

    def is_chosen(self, option: str) -> bool:
        return bool(getattr(self, VOTE_OPTIONS[option]))

    def chosen(self) -> str | None:
        for opt in VOTE_OPTIONS:
            if self.is_chosen(opt):
                return opt
        return None

    def to_dict(self) -> dict[str, bool]:
        return {opt: self.is_chosen(opt) for opt in VOTE_OPTIONS}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VoteRecord":
        return cls(**{attr: bool(data.get(opt, False)) for opt, attr in VOTE_OPTIONS.items()})


@dataclass
class VoteMemory:
    kv: KeyValueStore

    def get(self, fact_id: Any) -> VoteRecord:
        raw = self.kv.get(str(fact_id))
        if not raw:
            return VoteRecord()
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("votes.record_corrupt", fact_id=str(fact_id))
            return VoteRecord()
        if not isinstance(data, dict):
            return VoteRecord()
        return VoteRecord.from_dict(data)

    def ensure(self, fact_id: Any) -> VoteRecord:
        """Load the record for a fact, writing all-false defaults on first sight."""
        key = str(fact_id)
        if self.kv.get(key) is None:
            rec = VoteRecord()
            self.kv.set(key, json.dumps(rec.to_dict()))
            return rec
        return self.get(fact_id)

    def ensure_all(self, fact_ids: Iterable[Any]) -> None:
        """Write all-false defaults for every unseen fact in one store write."""
        defaults = json.dumps(VoteRecord().to_dict())
        missing = {}
        for fid in fact_ids:
            key = str(fid)
            if key not in missing and self.kv.get(key) is None:
                missing[key] = defaults
        if missing:
            self.kv.set_many(missing)

    def set(self, fact_id: Any, record: VoteRecord) -> None:
        self.kv.set(str(fact_id), json.dumps(record.to_dict()))
