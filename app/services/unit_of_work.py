"""
Unit of work for workflows that touch more than one entity type.

Usage:

    with UnitOfWork(students, internships, applications) as uow:
        ...read state, run rules...
        uow.stage(applications, application)
        uow.stage(internships, internship)
        uow.commit()

Entering takes the write lock of every repository involved, always in
LOCK_ORDER, so two workflows can never deadlock on each other. Exiting
releases them in reverse. Changes that were staged but never committed
(e.g. a rule raised halfway through) are dropped.

commit() persists the repositories one by one in LOCK_ORDER. Each cache is
committed right after its own file is replaced, so a failure part way
through leaves the earlier types durably updated. That is reported as a
PartialPersistenceError naming both sides.
"""

import logging
from typing import Dict, List, Optional, TypeVar

from pydantic import BaseModel

from app.core.errors import PartialPersistenceError, PersistenceError
from app.db.repository import CsvRepository

logger = logging.getLogger(__name__)

# Global lock-acquisition order for cross-entity workflows
LOCK_ORDER = ("students", "representatives", "staff", "internships", "applications", "withdrawals")

T = TypeVar("T", bound=BaseModel)


def _lock_rank(repository: CsvRepository) -> int:
    try:
        return LOCK_ORDER.index(repository.entity_name)
    except ValueError:
        raise ValueError(f"Repository {repository.entity_name!r} has no place in LOCK_ORDER") from None


class UnitOfWork:

    def __init__(self, *repositories: CsvRepository):
        unique = {id(r): r for r in repositories}
        self._repositories: List[CsvRepository] = sorted(unique.values(), key=_lock_rank)
        self._upserts: Dict[int, Dict[str, BaseModel]] = {}
        self._deletes: Dict[int, List[str]] = {}
        self._locked: List[CsvRepository] = []

    def __enter__(self) -> "UnitOfWork":
        try:
            for repository in self._repositories:
                repository.lock.acquire_write()
                self._locked.append(repository)
        except BaseException:
            self._release()
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._has_changes():
            logger.debug("Discarding uncommitted changes for %s", self._touched_names())
        self._upserts.clear()
        self._deletes.clear()
        self._release()

    def _release(self) -> None:
        while self._locked:
            self._locked.pop().lock.release_write()

    # -------------------------
    # Staging
    # -------------------------
    def _check_member(self, repository: CsvRepository) -> None:
        if repository not in self._repositories:
            raise RuntimeError(f"{repository.entity_name} is not part of this unit of work")

    def stage(self, repository: CsvRepository[T], entity: T) -> None:
        """Queue an insert/replace. Staging the same ID twice keeps the last one."""
        self._check_member(repository)
        self._upserts.setdefault(id(repository), {})[repository.entity_id(entity)] = entity

    def stage_delete(self, repository: CsvRepository, entity_id: str) -> None:
        self._check_member(repository)
        self._deletes.setdefault(id(repository), []).append(entity_id)
        self._upserts.get(id(repository), {}).pop(entity_id, None)

    def get(self, repository: CsvRepository[T], entity_id: str) -> Optional[T]:
        """Read through the staged changes, falling back to the cache."""
        self._check_member(repository)
        if entity_id in self._deletes.get(id(repository), ()):
            return None
        staged = self._upserts.get(id(repository), {}).get(entity_id)
        if staged is not None:
            return staged
        return repository.find_by_id(entity_id)

    # -------------------------
    # Commit
    # -------------------------
    def _has_changes(self) -> bool:
        return any(self._upserts.values()) or any(self._deletes.values())

    def _touched(self) -> List[CsvRepository]:
        return [
            r for r in self._repositories
            if self._upserts.get(id(r)) or self._deletes.get(id(r))
        ]

    def _touched_names(self) -> List[str]:
        return [r.entity_name for r in self._touched()]

    def commit(self) -> None:
        if not self._locked:
            raise RuntimeError("commit() outside of a `with UnitOfWork(...)` block")

        touched = self._touched()
        persisted: List[str] = []
        for index, repository in enumerate(touched):
            upserts = list(self._upserts.get(id(repository), {}).values())
            deletes = self._deletes.get(id(repository), [])
            try:
                repository.apply(upserts, deletes)
            except PersistenceError as exc:
                self._upserts.clear()
                self._deletes.clear()
                if not persisted:
                    raise
                failed = [r.entity_name for r in touched[index:]]
                logger.error("Partial persistence: wrote %s, failed on %s", persisted, failed)
                raise PartialPersistenceError(persisted, failed, exc) from exc
            persisted.append(repository.entity_name)

        self._upserts.clear()
        self._deletes.clear()
