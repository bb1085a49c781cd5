"""
Generic CSV-backed repository.

The in-memory map is the source of truth for every read; the CSV file is a
snapshot target rewritten in full on every write. One ReadWriteLock per
repository guards the map:

- find_* / exists_by_id / count take the shared (read) lock
- save / delete_by_id / apply take the exclusive (write) lock

A write builds the next snapshot, writes it to disk atomically and only
then swaps it into the cache. If the write fails the cache keeps its old
contents and a PersistenceError is raised.

Entities go in and come out as deep copies, so code outside the
repository cannot change cached state without calling save().
"""

import csv
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Generic, Iterable, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, ValidationError

from app.core.errors import PersistenceError
from app.db.csv_codec import read_records, write_records
from app.db.locks import ReadWriteLock

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class CsvRepository(Generic[T]):
    #: Short name used in logs, errors and for lock ordering.
    entity_name: str = ""
    #: Header row, in column order.
    headers: Sequence[str] = ()

    def __init__(self, csv_path: Path):
        self.csv_path = Path(csv_path)
        self.lock = ReadWriteLock()
        self._cache: Dict[str, T] = {}

    # -------------------------
    # Mapping hooks
    # -------------------------
    def entity_id(self, entity: T) -> str:
        raise NotImplementedError

    def from_record(self, record: Dict[str, str]) -> T:
        raise NotImplementedError

    def to_row(self, entity: T) -> List[str]:
        raise NotImplementedError

    # -------------------------
    # Loading
    # -------------------------
    def load(self) -> int:
        """
        (Re)populate the cache from the CSV file.

        Not fatal on bad input: a missing file gives an empty cache, an
        unreadable file is logged and gives an empty cache, and rows that
        cannot be mapped are logged and skipped. Returns the entity count.
        """
        with self.lock.write_locked():
            try:
                records = read_records(self.csv_path)
            except (OSError, csv.Error, UnicodeDecodeError) as exc:
                logger.error("Could not read %s from %s: %s", self.entity_name, self.csv_path, exc)
                self._cache = {}
                return 0

            cache: Dict[str, T] = {}
            # line 1 is the header
            for line_no, record in enumerate(records, start=2):
                try:
                    entity = self.from_record(record)
                except (ValueError, ValidationError) as exc:
                    logger.warning("Skipping %s row %d in %s: %s", self.entity_name, line_no, self.csv_path, exc)
                    continue
                key = self.entity_id(entity)
                if not key:
                    logger.warning("Skipping %s row %d in %s: missing ID", self.entity_name, line_no, self.csv_path)
                    continue
                cache[key] = entity

            self._cache = cache
            logger.info("Loaded %d %s from %s", len(cache), self.entity_name, self.csv_path)
            return len(cache)

    # -------------------------
    # Locking
    # -------------------------
    @contextmanager
    def read_locked(self):
        with self.lock.read_locked():
            yield

    @contextmanager
    def write_locked(self):
        with self.lock.write_locked():
            yield

    # -------------------------
    # Writes
    # -------------------------
    def save(self, entity: T) -> T:
        """Insert or replace by ID, then rewrite the whole file."""
        with self.lock.write_locked():
            self.apply([entity])
        return entity.model_copy(deep=True)

    def delete_by_id(self, entity_id: str) -> bool:
        with self.lock.write_locked():
            if entity_id not in self._cache:
                return False
            self.apply((), [entity_id])
            return True

    def apply(self, upserts: Iterable[T], deletes: Iterable[str] = ()) -> None:
        """
        Apply a batch of upserts and deletes as one file rewrite.

        The caller must already hold the write lock (save/delete_by_id do;
        workflows do through UnitOfWork).
        """
        if not self.lock.held_for_write():
            raise RuntimeError(f"{self.entity_name}: apply() requires the write lock")

        snapshot = dict(self._cache)
        for key in deletes:
            snapshot.pop(key, None)
        for entity in upserts:
            snapshot[self.entity_id(entity)] = entity.model_copy(deep=True)

        self._write(snapshot)
        self._cache = snapshot

    def _write(self, snapshot: Dict[str, T]) -> None:
        try:
            write_records(self.csv_path, self.headers, [self.to_row(e) for e in snapshot.values()])
        except (OSError, csv.Error) as exc:
            logger.error("Failed to persist %s to %s: %s", self.entity_name, self.csv_path, exc)
            raise PersistenceError(
                self.entity_name,
                self.csv_path,
                f"Failed to persist {self.entity_name} to {self.csv_path}: {exc}",
            ) from exc

    # -------------------------
    # Reads
    # -------------------------
    def find_by_id(self, entity_id: str) -> Optional[T]:
        with self.lock.read_locked():
            entity = self._cache.get(entity_id)
            return entity.model_copy(deep=True) if entity is not None else None

    def find_all(self) -> List[T]:
        with self.lock.read_locked():
            return [e.model_copy(deep=True) for e in self._cache.values()]

    def exists_by_id(self, entity_id: str) -> bool:
        with self.lock.read_locked():
            return entity_id in self._cache

    def count(self) -> int:
        with self.lock.read_locked():
            return len(self._cache)

    def _filter(self, predicate: Callable[[T], bool]) -> List[T]:
        """Linear scan under the read lock."""
        with self.lock.read_locked():
            return [e.model_copy(deep=True) for e in self._cache.values() if predicate(e)]
