"""Project registration and recalculation.

Registration computes the forward-mode calculation, scores the submission
with the anomaly detector, stores the project as ``pending`` and logs a
``registration`` event on the ledger.

The project's ``area_history`` always ends with its current area, so the
detector's growth rule compares the latest declared area to the one before.
Credibility is derived from the configured starting score minus the
detector's penalty each time the project is scored; penalties never stack
across recalculations.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from bluecarbon.carbon.anomaly import apply_credibility_impact, detect_anomalies
from bluecarbon.carbon.calculator import build_calculation_record
from bluecarbon.carbon.models import AnomalyReport, AreaSnapshot, BufferSet
from bluecarbon.config import get_config
from bluecarbon.ledger.base import LedgerReceipt, LedgerService
from bluecarbon.models import (
    OPEN_STATUSES,
    BlockchainEventRef,
    EventType,
    LedgerEvent,
    Project,
    ProjectSubmission,
)
from bluecarbon.storage.base import ProjectStore
from bluecarbon.utils import InvalidStateTransition, NotFound, utc_now
from bluecarbon.workflow.common import LedgerEventSummary, call_collaborator

logger = logging.getLogger(__name__)


class RegistrationOutcome(BaseModel):
    project: Project
    anomalies: AnomalyReport
    ledger_event: LedgerEventSummary


def assess_project(project: Project) -> AnomalyReport:
    """Run the anomaly detector on a stored project and its area history."""
    return detect_anomalies(project.snapshot(), project.area_history)


class RegistrationWorkflow:
    """Creates projects and keeps their carbon calculation current."""

    def __init__(self, store: ProjectStore, ledger: LedgerService) -> None:
        self._store = store
        self._ledger = ledger

    def _log(
        self,
        event_type: EventType,
        project: Project,
        data: dict[str, Any],
        user_id: str,
    ) -> tuple[LedgerReceipt, LedgerEvent]:
        receipt = call_collaborator(
            f"log {event_type} event",
            self._ledger.log_event,
            event_type,
            project.id,
            data,
            user_id,
        )
        event = LedgerEvent(
            project_id=project.id,
            event_type=event_type,
            transaction_hash=receipt.transaction_hash,
            block_number=receipt.block_number,
            data=data,
        )
        call_collaborator(
            f"store {event_type} event",
            self._store.insert_event,
            event,
            ledger_transactions=[receipt.transaction_hash],
        )
        return receipt, event

    def _summary(self, event: LedgerEvent) -> LedgerEventSummary:
        return LedgerEventSummary(
            event_type=event.event_type,
            transaction_hash=event.transaction_hash,
            block_number=event.block_number,
            explorer_url=self._ledger.explorer_url(event.transaction_hash),
        )

    def register(
        self,
        owner_id: str,
        submission: ProjectSubmission,
        years: int | None = None,
        buffers: BufferSet | dict | None = None,
    ) -> RegistrationOutcome:
        """Register a new project on behalf of ``owner_id``.

        Raises InvalidInput for a non-positive area or degenerate buffers
        before anything is stored. If the ledger fails after the insert the
        project stays stored without a registration event and
        CollaboratorUnavailable is raised.
        """
        cfg = get_config()
        years = cfg.default_horizon_years if years is None else years
        calculation = build_calculation_record(
            submission.area_m2, submission.ecosystem_type, years, buffers
        )

        project = Project(
            owner_id=owner_id,
            carbon_calculations=calculation,
            credibility_score=cfg.initial_credibility_score,
            **submission.model_dump(exclude={"area_history"}),
        )
        project.area_history = [
            *submission.area_history,
            AreaSnapshot(area_m2=submission.area_m2, recorded_at=project.created_at),
        ]
        report = assess_project(project)
        project.credibility_score = apply_credibility_impact(
            cfg.initial_credibility_score, report.credibility_impact
        )
        project.anomaly_flags = report.flags
        if report.is_suspicious:
            logger.warning("Project '%s' flagged at registration: %s", project.name, "; ".join(report.flags))

        stored = call_collaborator("insert project", self._store.insert_project, project)

        _, event = self._log(
            "registration",
            stored,
            {
                "project_name": stored.name,
                "ecosystem_type": stored.ecosystem_type.value,
                "area_m2": stored.area_m2,
                "calculated_absorption": calculation.annual_co2_absorption,
            },
            owner_id,
        )
        stored = call_collaborator(
            "attach registration event",
            self._store.update_project,
            stored.id,
            {"blockchain_events": [
                BlockchainEventRef(event_type="registration", transaction_hash=event.transaction_hash)
            ]},
            ledger_transactions=[event.transaction_hash],
        )

        logger.info(
            "Registered project %s (%s, %.0f m2, credibility=%d)",
            stored.id, stored.ecosystem_type.value, stored.area_m2, stored.credibility_score,
        )
        return RegistrationOutcome(project=stored, anomalies=report, ledger_event=self._summary(event))

    def record_calculation(
        self,
        project_id: str,
        user_id: str,
        area_m2: float | None = None,
        years: int | None = None,
        buffers: BufferSet | dict | None = None,
    ) -> RegistrationOutcome:
        """Recompute a project's calculation, optionally with a revised area.

        Only open projects (pending or under review) can be recalculated;
        a revised area is appended to the area history and rescored.
        """
        project = call_collaborator("load project", self._store.get_project, project_id)
        if project is None:
            raise NotFound(f"Project not found: {project_id}")
        if project.status not in OPEN_STATUSES:
            raise InvalidStateTransition(
                f"Cannot recalculate project {project_id} in status '{project.status.value}'"
            )

        cfg = get_config()
        years = cfg.default_horizon_years if years is None else years
        new_area = project.area_m2 if area_m2 is None else area_m2
        calculation = build_calculation_record(new_area, project.ecosystem_type, years, buffers)

        history = list(project.area_history)
        if new_area != project.area_m2:
            history.append(AreaSnapshot(area_m2=new_area, recorded_at=utc_now()))
        project = project.model_copy(update={
            "area_m2": new_area,
            "carbon_calculations": calculation,
            "area_history": history,
        })
        report = assess_project(project)

        _, event = self._log(
            "calculation",
            project,
            {
                "area_m2": new_area,
                "years": years,
                "annual_co2_absorption": calculation.annual_co2_absorption,
                "cumulative_co2_absorption": calculation.cumulative_co2_absorption,
                "anomaly_flags": report.flags,
            },
            user_id,
        )
        stored = call_collaborator(
            "store recalculation",
            self._store.update_project,
            project_id,
            {
                "area_m2": new_area,
                "carbon_calculations": calculation,
                "area_history": history,
                "anomaly_flags": report.flags,
                "credibility_score": apply_credibility_impact(
                    cfg.initial_credibility_score, report.credibility_impact
                ),
                "blockchain_events": project.blockchain_events + [
                    BlockchainEventRef(event_type="calculation", transaction_hash=event.transaction_hash)
                ],
            },
            expected_status=project.status,
            ledger_transactions=[event.transaction_hash],
        )
        return RegistrationOutcome(project=stored, anomalies=report, ledger_event=self._summary(event))
