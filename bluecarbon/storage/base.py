"""Storage collaborator interface.

Any backend (a hosted relational store with row-level policies, or the
in-memory store used in tests and demo mode) implements this contract.
Backends raise ``CollaboratorUnavailable`` when they cannot be reached and
``ConflictError`` when an ``expected_status`` guard fails.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from bluecarbon.models import (
    LedgerEvent,
    Project,
    ProjectStatus,
    User,
    VerificationHistoryEntry,
)


class ProjectStore(ABC):
    """Users, projects, verification history and ledger events keyed by id."""

    # -- Users ----------------------------------------------------------------

    @abstractmethod
    def insert_user(self, user: User) -> User: ...

    @abstractmethod
    def get_user(self, user_id: str) -> User | None: ...

    # -- Projects -------------------------------------------------------------

    @abstractmethod
    def insert_project(self, project: Project) -> Project: ...

    @abstractmethod
    def get_project(self, project_id: str) -> Project | None: ...

    @abstractmethod
    def list_projects(
        self,
        status: ProjectStatus | None = None,
        owner_id: str | None = None,
    ) -> list[Project]:
        """Projects matching all given filters, newest first."""

    @abstractmethod
    def update_project(
        self,
        project_id: str,
        updates: dict[str, Any],
        expected_status: ProjectStatus | None = None,
    ) -> Project:
        """Apply field updates by id.

        When ``expected_status`` is given the update only applies if the
        stored status still matches; otherwise ConflictError is raised.
        """

    @abstractmethod
    def commit_verification(
        self,
        project_id: str,
        expected_status: ProjectStatus,
        updates: dict[str, Any],
        events: list[LedgerEvent],
        history: VerificationHistoryEntry,
    ) -> Project:
        """Apply a decision atomically: project update, events and history row
        are all written, or none are."""

    # -- Events and history ---------------------------------------------------

    @abstractmethod
    def insert_event(self, event: LedgerEvent) -> LedgerEvent: ...

    @abstractmethod
    def list_events(self, project_id: str | None = None) -> list[LedgerEvent]:
        """Ledger events, newest first."""

    @abstractmethod
    def list_verification_history(self, project_id: str) -> list[VerificationHistoryEntry]:
        """Verification history for a project, newest first."""
