"""
In-process locks keyed by entity ("auction", "match:<id>").
SQLite's BEGIN IMMEDIATE already serializes writers across processes; the
lock keeps threads of one server from queueing on the database busy timeout.
"""
from __future__ import annotations

import threading
import weakref
from contextlib import contextmanager
from typing import Iterator

_registry_lock = threading.Lock()
# entries drop out once no caller holds the lock
_locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()


def _lock_for(key: str) -> threading.Lock:
    with _registry_lock:
        lock = _locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _locks[key] = lock
        return lock


@contextmanager
def entity_lock(key: str) -> Iterator[None]:
    lock = _lock_for(key)
    with lock:
        yield


def match_key(match_id: str) -> str:
    return f"match:{match_id}"


AUCTION_KEY = "auction"
