"""In-memory storage backend for registry records."""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Any, TypeVar

from pydantic import BaseModel

from bluecarbon.models import (
    LedgerEvent,
    Project,
    ProjectStatus,
    User,
    VerificationHistoryEntry,
)
from bluecarbon.storage.base import ProjectStore
from bluecarbon.utils import ConflictError, InvalidInput, NotFound, utc_now

logger = logging.getLogger(__name__)

_M = TypeVar("_M", bound=BaseModel)


class InMemoryProjectStore(ProjectStore):
    """Thread-safe dict-based store.

    Records are kept per table keyed by id, and copied on the way in and
    out so callers never share mutable state with the store. A single lock
    serialises every read and write, which makes ``expected_status`` checks
    and ``commit_verification`` atomic.
    """

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, BaseModel]] = {
            "users": {},
            "projects": {},
            "events": {},
            "verification_history": {},
        }
        # Insertion order breaks created_at ties
        self._seq: dict[tuple[str, str], int] = {}
        self._counter = itertools.count()
        self._lock = threading.Lock()

    # -- Internal helpers (caller holds the lock) -----------------------------

    def _put(self, table: str, record: _M) -> _M:
        record_id = record.id  # type: ignore[attr-defined]
        self._tables[table][record_id] = record.model_copy(deep=True)
        self._seq.setdefault((table, record_id), next(self._counter))
        return record.model_copy(deep=True)

    def _insert(self, table: str, record: _M) -> _M:
        if record.id in self._tables[table]:  # type: ignore[attr-defined]
            raise InvalidInput(f"Duplicate id in {table}: {record.id}")  # type: ignore[attr-defined]
        return self._put(table, record)

    def _newest_first(self, table: str, records: list[_M]) -> list[_M]:
        return sorted(
            records,
            key=lambda r: (r.created_at, self._seq[(table, r.id)]),  # type: ignore[attr-defined]
            reverse=True,
        )

    def _updated_project(
        self,
        project_id: str,
        updates: dict[str, Any],
        expected_status: ProjectStatus | None,
    ) -> Project:
        current = self._tables["projects"].get(project_id)
        if current is None:
            raise NotFound(f"Project not found: {project_id}")
        if expected_status is not None and current.status != expected_status:  # type: ignore[attr-defined]
            raise ConflictError(
                f"Project {project_id} status is '{current.status.value}', "  # type: ignore[attr-defined]
                f"expected '{ProjectStatus(expected_status).value}'"
            )
        merged = {**current.model_dump(), **updates, "updated_at": utc_now()}
        return Project.model_validate(merged)

    # -- Users ----------------------------------------------------------------

    def insert_user(self, user: User) -> User:
        with self._lock:
            return self._insert("users", user)

    def get_user(self, user_id: str) -> User | None:
        with self._lock:
            record = self._tables["users"].get(user_id)
            return record.model_copy(deep=True) if record is not None else None

    # -- Projects -------------------------------------------------------------

    def insert_project(self, project: Project) -> Project:
        with self._lock:
            return self._insert("projects", project)

    def get_project(self, project_id: str) -> Project | None:
        with self._lock:
            record = self._tables["projects"].get(project_id)
            return record.model_copy(deep=True) if record is not None else None

    def list_projects(
        self,
        status: ProjectStatus | None = None,
        owner_id: str | None = None,
    ) -> list[Project]:
        with self._lock:
            matches = [
                p.model_copy(deep=True)
                for p in self._tables["projects"].values()
                if (status is None or p.status == status)  # type: ignore[attr-defined]
                and (owner_id is None or p.owner_id == owner_id)  # type: ignore[attr-defined]
            ]
            return self._newest_first("projects", matches)

    def update_project(
        self,
        project_id: str,
        updates: dict[str, Any],
        expected_status: ProjectStatus | None = None,
    ) -> Project:
        with self._lock:
            updated = self._updated_project(project_id, updates, expected_status)
            return self._put("projects", updated)

    def commit_verification(
        self,
        project_id: str,
        expected_status: ProjectStatus,
        updates: dict[str, Any],
        events: list[LedgerEvent],
        history: VerificationHistoryEntry,
    ) -> Project:
        with self._lock:
            # Validate everything before the first write
            updated = self._updated_project(project_id, updates, expected_status)
            for event in events:
                if event.id in self._tables["events"]:
                    raise InvalidInput(f"Duplicate id in events: {event.id}")
            if history.id in self._tables["verification_history"]:
                raise InvalidInput(f"Duplicate id in verification_history: {history.id}")

            for event in events:
                self._put("events", event)
            self._put("verification_history", history)
            committed = self._put("projects", updated)

        logger.info(
            "Committed %s -> %s for project %s",
            history.from_status.value, history.to_status.value, project_id,
        )
        return committed

    # -- Events and history ---------------------------------------------------

    def insert_event(self, event: LedgerEvent) -> LedgerEvent:
        with self._lock:
            return self._insert("events", event)

    def list_events(self, project_id: str | None = None) -> list[LedgerEvent]:
        with self._lock:
            matches = [
                e.model_copy(deep=True)
                for e in self._tables["events"].values()
                if project_id is None or e.project_id == project_id  # type: ignore[attr-defined]
            ]
            return self._newest_first("events", matches)

    def list_verification_history(self, project_id: str) -> list[VerificationHistoryEntry]:
        with self._lock:
            matches = [
                h.model_copy(deep=True)
                for h in self._tables["verification_history"].values()
                if h.project_id == project_id  # type: ignore[attr-defined]
            ]
            return self._newest_first("verification_history", matches)

    def count(self, table: str | None = None) -> int:
        """Count records, optionally for one table."""
        with self._lock:
            if table is None:
                return sum(len(t) for t in self._tables.values())
            return len(self._tables[table])

    def clear(self) -> None:
        """Remove all records."""
        with self._lock:
            for t in self._tables.values():
                t.clear()
            self._seq.clear()
