"""
JSON-file document store.

Each collection is one file, ``<data_dir>/<name>.json``, holding a JSON array
of records. Writes are atomic (temp file + rename) and serialized per
collection; reads never lock and always see either the old or the new file.

All public operations are coroutines. File work runs in a worker thread, so a
caller waiting on a busy collection suspends only itself.
"""

import asyncio
import json
import logging
import math
import os
import re
import threading
import time
from dataclasses import dataclass, field
from functools import cmp_to_key
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from docstore.query import PredicateLike, Record, SortSpec, compare

logger = logging.getLogger("act_tutor.store")

_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class DuplicateIdError(ValueError):
    """A record with this id already exists in the collection."""


@dataclass
class Page:
    items: List[Record]
    page: int
    limit: int
    total: int
    total_pages: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": self.items,
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
        }


def _match_all(record: Record) -> bool:
    return True


def _as_predicate(predicate: PredicateLike) -> Callable[[Record], bool]:
    return _match_all if predicate is None else predicate


@dataclass
class DocumentStore:
    """
    Collections of JSON records under one data directory.

    One lock per collection name, shared by every caller of this instance.
    Create one store per data directory per process.
    """
    data_dir: Path
    _locks: Dict[str, threading.Lock] = field(default_factory=dict, init=False, repr=False)
    _registry_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)

    # ---- paths and locks ----

    def collection_path(self, name: str) -> Path:
        if not isinstance(name, str) or not _NAME_RE.match(name):
            raise ValueError(f"Invalid collection name: {name!r}")
        return self.data_dir / f"{name}.json"

    def _lock_for(self, name: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(name)
            if lock is None:
                lock = threading.Lock()
                self._locks[name] = lock
            return lock

    # ---- synchronous core (runs in worker threads) ----

    def _read_sync(self, name: str, default: Optional[List[Record]]) -> List[Record]:
        path = self.collection_path(name)
        fallback = [] if default is None else default
        if not path.exists():
            return fallback
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not read collection %s: %s", name, e)
            return fallback
        if not isinstance(data, list):
            logger.warning("Collection %s is not a JSON array; treating as empty", name)
            return fallback
        return data

    def _write_unlocked(self, name: str, records: Sequence[Record]) -> None:
        path = self.collection_path(name)
        # Serialize before touching disk so a bad record leaves the file alone.
        payload = json.dumps(list(records), ensure_ascii=False, indent=2)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(f"{path.name}.tmp.{time.time_ns()}")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            tmp.replace(path)
        except Exception:
            logger.error("Failed to write collection %s", name, exc_info=True)
            if tmp.exists():
                tmp.unlink()
            raise

    def _write_sync(self, name: str, records: Sequence[Record]) -> None:
        with self._lock_for(name):
            self._write_unlocked(name, records)

    def _insert_sync(self, name: str, record: Mapping[str, Any]) -> Record:
        if "id" not in record:
            raise ValueError("Record must have an 'id'")
        item = dict(record)
        with self._lock_for(name):
            data = self._read_sync(name, None)
            if any(r.get("id") == item["id"] for r in data):
                raise DuplicateIdError(f"Duplicate id in {name}: {item['id']!r}")
            data.append(item)
            self._write_unlocked(name, data)
        return item

    def _update_sync(self, name: str, predicate, changes: Mapping[str, Any]) -> Optional[Record]:
        with self._lock_for(name):
            data = self._read_sync(name, None)
            for i, r in enumerate(data):
                if predicate(r):
                    merged = {**r, **changes}
                    if merged.get("id") != r.get("id") and any(
                        o.get("id") == merged.get("id") for j, o in enumerate(data) if j != i
                    ):
                        raise DuplicateIdError(f"Duplicate id in {name}: {merged.get('id')!r}")
                    data[i] = merged
                    self._write_unlocked(name, data)
                    return merged
        return None

    def _remove_sync(self, name: str, predicate) -> bool:
        with self._lock_for(name):
            data = self._read_sync(name, None)
            for i, r in enumerate(data):
                if predicate(r):
                    del data[i]
                    self._write_unlocked(name, data)
                    return True
        return False

    def _remove_many_sync(self, name: str, predicate) -> int:
        with self._lock_for(name):
            data = self._read_sync(name, None)
            kept = [r for r in data if not predicate(r)]
            removed = len(data) - len(kept)
            if removed:
                self._write_unlocked(name, kept)
        return removed

    # ---- public API ----

    async def read(self, name: str, default: Optional[List[Record]] = None) -> List[Record]:
        """Whole collection, or ``default`` (``[]``) if absent or unreadable."""
        return await asyncio.to_thread(self._read_sync, name, default)

    async def write(self, name: str, records: Sequence[Record]) -> None:
        """Replace the whole collection atomically. Raises on failure."""
        await asyncio.to_thread(self._write_sync, name, records)

    async def find_one(self, name: str, predicate: PredicateLike = None) -> Optional[Record]:
        pred = _as_predicate(predicate)
        for r in await self.read(name):
            if pred(r):
                return r
        return None

    async def find_many(self, name: str, predicate: PredicateLike = None) -> List[Record]:
        pred = _as_predicate(predicate)
        return [r for r in await self.read(name) if pred(r)]

    async def insert(self, name: str, record: Mapping[str, Any]) -> Record:
        """Append a record; ``id`` is required and must be unique."""
        return await asyncio.to_thread(self._insert_sync, name, record)

    async def update(self, name: str, predicate: PredicateLike, changes: Mapping[str, Any]) -> Optional[Record]:
        """Shallow-merge ``changes`` into the first match. None (and no write) if nothing matches."""
        return await asyncio.to_thread(self._update_sync, name, _as_predicate(predicate), dict(changes))

    async def remove(self, name: str, predicate: PredicateLike) -> bool:
        """Delete the first match only."""
        return await asyncio.to_thread(self._remove_sync, name, _as_predicate(predicate))

    async def remove_many(self, name: str, predicate: PredicateLike) -> int:
        """Delete every match in one write; returns how many were removed."""
        return await asyncio.to_thread(self._remove_many_sync, name, _as_predicate(predicate))

    async def paginate(
        self,
        name: str,
        predicate: PredicateLike = None,
        page: int = 1,
        limit: int = 10,
        sort: Optional[SortSpec] = None,
    ) -> Page:
        """Filter, optionally sort, then slice one page."""
        if limit < 1:
            raise ValueError("limit must be >= 1")
        items = await self.find_many(name, predicate)
        if sort is not None:
            items.sort(key=cmp_to_key(compare(sort)))
        total = len(items)
        total_pages = math.ceil(total / limit)
        if page < 1:
            return Page(items=[], page=page, limit=limit, total=total, total_pages=total_pages)
        start = (page - 1) * limit
        return Page(
            items=items[start:start + limit],
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
        )
