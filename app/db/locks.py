"""
Per-record write serialization.

Progress and reward-ledger updates are read-modify-write cycles. Within
one process, callers take the lock for the record key before reading;
across processes the row is also read ``FOR UPDATE`` (ignored by SQLite).
Lock order is always progress -> ledger.
"""
import threading
import weakref

_registry_lock = threading.Lock()

# Entries disappear once no caller holds a reference to the lock
_locks: "weakref.WeakValueDictionary[tuple, threading.RLock]" = weakref.WeakValueDictionary()


def record_lock(*key) -> threading.RLock:
    """Return the shared lock for *key*, e.g. ("progress", user_id, level)."""
    with _registry_lock:
        lock = _locks.get(key)
        if lock is None:
            lock = threading.RLock()
            _locks[key] = lock
        return lock


def progress_lock(user_id: int, level_number: int) -> threading.RLock:
    return record_lock("progress", user_id, level_number)


def ledger_lock(user_id: int) -> threading.RLock:
    return record_lock("ledger", user_id)
