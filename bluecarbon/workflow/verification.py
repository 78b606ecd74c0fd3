"""Verification workflow: a verifier approves or rejects a project.

Collaborator calls run strictly in order:

1. mint a credit token (approve only)
2. log a ``verification`` event on the ledger
3. commit status, decision record, ledger events and history row to the
   store in one atomic call, guarded by the status read in step 0

Nothing is persisted unless steps 1-2 succeed. The ledger is append-only,
so when step 3 fails (conflict or store outage) the transactions already
accepted cannot be undone; their hashes are logged and attached to the
raised error as ``ledger_transactions`` for the caller to reconcile.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from bluecarbon.ledger.base import LedgerService, MintReceipt
from bluecarbon.models import (
    OPEN_STATUSES,
    BlockchainEventRef,
    LedgerEvent,
    Project,
    ProjectStatus,
    VerificationDecision,
    VerificationDetails,
    VerificationHistoryEntry,
)
from bluecarbon.storage.base import ProjectStore
from bluecarbon.utils import (
    ConflictError,
    InvalidInput,
    InvalidStateTransition,
    NotFound,
    WorkflowFailed,
)
from bluecarbon.workflow.common import LedgerEventSummary, call_collaborator

logger = logging.getLogger(__name__)

_DECISION_STATUS = {
    VerificationDecision.approve: ProjectStatus.approved,
    VerificationDecision.reject: ProjectStatus.rejected,
}


class VerificationOutcome(BaseModel):
    project: Project
    decision: VerificationDecision
    verification_details: VerificationDetails
    ledger_events: list[LedgerEventSummary]


class VerificationWorkflow:
    """Coordinates a verifier decision with minting, logging and persistence."""

    def __init__(self, store: ProjectStore, ledger: LedgerService) -> None:
        self._store = store
        self._ledger = ledger

    def _load(self, project_id: str) -> Project:
        project = call_collaborator("load project", self._store.get_project, project_id)
        if project is None:
            raise NotFound(f"Project not found: {project_id}")
        return project

    def start_review(self, project_id: str, reviewer_id: str) -> Project:
        """Move a pending project to under_review."""
        project = self._load(project_id)
        if project.status != ProjectStatus.pending:
            raise InvalidStateTransition(
                f"Cannot start review of project {project_id} in status '{project.status.value}'"
            )
        history = VerificationHistoryEntry(
            project_id=project_id,
            verifier_id=reviewer_id,
            action="review",
            from_status=project.status,
            to_status=ProjectStatus.under_review,
        )
        updated = call_collaborator(
            "commit review",
            self._store.commit_verification,
            project_id,
            expected_status=project.status,
            updates={"status": ProjectStatus.under_review},
            events=[],
            history=history,
        )
        logger.info("Project %s under review by %s", project_id, reviewer_id)
        return updated

    def verify(
        self,
        project_id: str,
        verifier_id: str,
        decision: VerificationDecision | str,
        comments: str = "",
    ) -> VerificationOutcome:
        """Approve or reject a project that is pending or under review.

        Raises InvalidStateTransition for approved/rejected projects,
        CollaboratorUnavailable when the ledger or store fails, and
        ConflictError when another verifier changed the status first.
        """
        try:
            decision = VerificationDecision(decision)
        except ValueError:
            raise InvalidInput(f"Unknown decision '{decision}'; expected approve or reject") from None

        project = self._load(project_id)
        if project.status not in OPEN_STATUSES:
            raise InvalidStateTransition(
                f"Cannot {decision.value} project {project_id}: status is already '{project.status.value}'"
            )

        accepted: list[str] = []
        mint: MintReceipt | None = None
        if decision == VerificationDecision.approve:
            mint = call_collaborator("mint credit token", self._ledger.mint, project)
            accepted.append(mint.transaction_hash)

        payload: dict[str, Any] = {
            "action": decision.value,
            "verifier_id": verifier_id,
            "comments": comments,
        }
        if mint is not None:
            payload["nft_token_id"] = mint.nft_token_id
            payload["nft_transaction_hash"] = mint.transaction_hash

        receipt = call_collaborator(
            "log verification event",
            self._ledger.log_event,
            "verification",
            project_id,
            payload,
            verifier_id,
            ledger_transactions=accepted,
        )
        accepted.append(receipt.transaction_hash)

        details = VerificationDetails(
            verifier_id=verifier_id,
            comments=comments,
            nft_token_id=mint.nft_token_id if mint else None,
            nft_transaction_hash=mint.transaction_hash if mint else None,
        )

        events: list[LedgerEvent] = []
        if mint is not None:
            events.append(LedgerEvent(
                project_id=project_id,
                event_type="nft_mint",
                transaction_hash=mint.transaction_hash,
                data={"nft_token_id": mint.nft_token_id},
            ))
        events.append(LedgerEvent(
            project_id=project_id,
            event_type="verification",
            transaction_hash=receipt.transaction_hash,
            block_number=receipt.block_number,
            data=payload,
        ))

        new_status = _DECISION_STATUS[decision]
        history = VerificationHistoryEntry(
            project_id=project_id,
            verifier_id=verifier_id,
            action=decision.value,
            from_status=project.status,
            to_status=new_status,
            comments=comments,
        )
        updates = {
            "status": new_status,
            "verification_details": details,
            "blockchain_events": project.blockchain_events + [
                BlockchainEventRef(event_type=e.event_type, transaction_hash=e.transaction_hash)
                for e in events
            ],
        }

        try:
            committed = call_collaborator(
                "commit verification",
                self._store.commit_verification,
                project_id,
                expected_status=project.status,
                updates=updates,
                events=events,
                history=history,
                ledger_transactions=accepted,
            )
        except NotFound as exc:
            self._log_orphans(project_id, accepted)
            raise ConflictError(f"Project {project_id} disappeared during verification", accepted) from exc
        except WorkflowFailed as exc:
            self._log_orphans(project_id, accepted)
            exc.ledger_transactions = list(accepted)
            raise

        logger.info(
            "Project %s %s by %s (tx=%s)",
            project_id, new_status.value, verifier_id, receipt.transaction_hash,
        )
        return VerificationOutcome(
            project=committed,
            decision=decision,
            verification_details=details,
            ledger_events=[
                LedgerEventSummary(
                    event_type=e.event_type,
                    transaction_hash=e.transaction_hash,
                    block_number=e.block_number,
                    explorer_url=self._ledger.explorer_url(e.transaction_hash),
                )
                for e in events
            ],
        )

    @staticmethod
    def _log_orphans(project_id: str, transactions: list[str]) -> None:
        logger.warning(
            "Verification of project %s not persisted; ledger transactions %s have no committed decision",
            project_id, ", ".join(transactions),
        )
