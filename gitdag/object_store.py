"""
In-memory object store for gitdag.

Each object kind lives in its own append-only ObjectStore: records are
addressed by a stable integer index, and a hash -> index map gives
lookup by object id. Every record sits behind its own ReadWriteLock so
that concurrent linkers can mutate different records without ever
locking a whole store.

Example:
    container = ObjectContainer()
    index = container.commits.insert(commit_hash, Commit(size=120, size_on_disk=80))

    handle = container.commits.get(commit_hash)
    with handle.write() as commit:
        commit.add_tree_dep(0)
"""

import threading
from contextlib import contextmanager
from typing import Dict, Generic, Iterator, List, Optional, TypeVar
import logging

from .domain.objects import ObjectKind, Commit, Tree, Blob, Tag

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ReadWriteLock:
    """
    Many readers or one writer.

    Waiting writers block new readers, so a steady stream of readers
    cannot starve a writer. Not reentrant.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self):
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self):
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class RecordHandle(Generic[T]):
    """A record together with the lock that guards it."""

    __slots__ = ('_record', '_lock')

    def __init__(self, record: T):
        self._record = record
        self._lock = ReadWriteLock()

    @contextmanager
    def read(self) -> Iterator[T]:
        """Shared access. Callers must not mutate the yielded record."""
        with self._lock.read_locked():
            yield self._record

    @contextmanager
    def write(self) -> Iterator[T]:
        """Exclusive access for mutation."""
        with self._lock.write_locked():
            yield self._record


class ObjectStore(Generic[T]):
    """
    Append-only, indexed container for one object kind.

    The hash -> index map is a bijection onto 0..count-1. Indices are
    assigned at insertion and never change; nothing is ever removed.
    """

    def __init__(self, kind: ObjectKind):
        self.kind = kind
        self._items: List[RecordHandle[T]] = []
        self._lookup: Dict[str, int] = {}
        self._insert_lock = threading.Lock()

    def insert(self, object_hash: str, record: T) -> int:
        """
        Append a record and register its hash.

        The record's index is set to the next sequential index. Inserting
        a hash that is already known leaves the store untouched and
        returns the existing index.
        """
        with self._insert_lock:
            existing = self._lookup.get(object_hash)
            if existing is not None:
                logger.debug(f"Duplicate {self.kind.value} {object_hash} ignored")
                return existing

            index = len(self._items)
            record.index = index
            self._items.append(RecordHandle(record))
            self._lookup[object_hash] = index
            return index

    def lookup_index(self, object_hash: str) -> Optional[int]:
        return self._lookup.get(object_hash)

    def get(self, object_hash: str) -> Optional[RecordHandle[T]]:
        index = self._lookup.get(object_hash)
        if index is None:
            return None
        return self._items[index]

    def get_by_index(self, index: int) -> RecordHandle[T]:
        return self._items[index]

    def count(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, object_hash: str) -> bool:
        return object_hash in self._lookup

    def __iter__(self) -> Iterator[RecordHandle[T]]:
        """Handles in index order."""
        return iter(list(self._items))

    def hashes(self) -> List[str]:
        """All known hashes, in insertion order."""
        return list(self._lookup)

    def reverse_lookup(self, index: int) -> Optional[str]:
        """
        Find the hash registered for an index.

        This is a linear scan over the whole store; use it for
        diagnostics and report output, never inside a loop.
        """
        for object_hash, value in self._lookup.items():
            if value == index:
                return object_hash
        return None


class ObjectContainer:
    """The four object stores of one repository."""

    def __init__(self):
        self.commits: ObjectStore[Commit] = ObjectStore(ObjectKind.COMMIT)
        self.trees: ObjectStore[Tree] = ObjectStore(ObjectKind.TREE)
        self.blobs: ObjectStore[Blob] = ObjectStore(ObjectKind.BLOB)
        self.tags: ObjectStore[Tag] = ObjectStore(ObjectKind.TAG)

    def store_for(self, kind: ObjectKind) -> ObjectStore:
        return {
            ObjectKind.COMMIT: self.commits,
            ObjectKind.TREE: self.trees,
            ObjectKind.BLOB: self.blobs,
            ObjectKind.TAG: self.tags,
        }[kind]

    def counts(self) -> Dict[str, int]:
        return {
            'commits': len(self.commits),
            'trees': len(self.trees),
            'blobs': len(self.blobs),
            'tags': len(self.tags),
        }
