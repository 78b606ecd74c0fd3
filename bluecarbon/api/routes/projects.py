"""Project endpoints - registration, listing, anomaly reports, verification."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from bluecarbon.api.auth import get_acting_user, rate_limit_default, require_verifier, validate_record_id
from bluecarbon.api.deps import get_registration, get_store, get_verification
from bluecarbon.api.models import (
    ProjectAnomaliesResponse,
    ProjectEventsResponse,
    ProjectListResponse,
    RecalculateRequest,
    RegisterProjectRequest,
    VerifyRequest,
)
from bluecarbon.models import Project, ProjectStatus, ProjectSubmission, User
from bluecarbon.storage.base import ProjectStore
from bluecarbon.workflow.registration import RegistrationOutcome, RegistrationWorkflow, assess_project
from bluecarbon.workflow.stats import PortfolioStats, portfolio_stats
from bluecarbon.workflow.verification import VerificationOutcome, VerificationWorkflow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["projects"], dependencies=[Depends(rate_limit_default)])


def _get_project(project_id: str, store: ProjectStore) -> Project:
    validate_record_id(project_id)
    project = store.get_project(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail=f"Project '{project_id}' not found")
    return project


@router.post("/projects", response_model=RegistrationOutcome, status_code=201)
def register_project(
    request: RegisterProjectRequest,
    user: User = Depends(get_acting_user),
    workflow: RegistrationWorkflow = Depends(get_registration),
):
    """Register a project for the acting user and log it on the ledger."""
    submission = ProjectSubmission.model_validate(request.model_dump(exclude={"years"}))
    return workflow.register(user.id, submission, years=request.years)


@router.get("/projects", response_model=ProjectListResponse)
def list_projects(
    status: ProjectStatus | None = Query(default=None),
    owner_id: str | None = Query(default=None, max_length=64),
    store: ProjectStore = Depends(get_store),
):
    """List projects, newest first, optionally filtered by status and owner."""
    projects = store.list_projects(status=status, owner_id=owner_id)
    return ProjectListResponse(projects=projects, count=len(projects))


@router.get("/projects/{project_id}", response_model=Project)
def get_project(project_id: str, store: ProjectStore = Depends(get_store)):
    return _get_project(project_id, store)


@router.get("/projects/{project_id}/anomalies", response_model=ProjectAnomaliesResponse)
def get_project_anomalies(project_id: str, store: ProjectStore = Depends(get_store)):
    """Re-run the anomaly detector against the stored project and its history."""
    project = _get_project(project_id, store)
    return ProjectAnomaliesResponse(
        project_id=project.id,
        credibility_score=project.credibility_score,
        report=assess_project(project),
    )


@router.get("/projects/{project_id}/events", response_model=ProjectEventsResponse)
def get_project_events(project_id: str, store: ProjectStore = Depends(get_store)):
    """Ledger events recorded for a project, newest first."""
    project = _get_project(project_id, store)
    return ProjectEventsResponse(project_id=project.id, events=store.list_events(project.id))


@router.post("/projects/{project_id}/calculation", response_model=RegistrationOutcome)
def recalculate_project(
    project_id: str,
    request: RecalculateRequest,
    user: User = Depends(get_acting_user),
    workflow: RegistrationWorkflow = Depends(get_registration),
):
    """Recompute the calculation, optionally for a revised area."""
    validate_record_id(project_id)
    return workflow.record_calculation(project_id, user.id, area_m2=request.area_m2, years=request.years)


@router.post("/projects/{project_id}/review", response_model=Project)
def start_review(
    project_id: str,
    user: User = Depends(require_verifier),
    workflow: VerificationWorkflow = Depends(get_verification),
):
    """Move a pending project to under_review."""
    validate_record_id(project_id)
    return workflow.start_review(project_id, user.id)


@router.post("/projects/{project_id}/verify", response_model=VerificationOutcome)
def verify_project(
    project_id: str,
    request: VerifyRequest,
    user: User = Depends(require_verifier),
    workflow: VerificationWorkflow = Depends(get_verification),
):
    """Approve (mints a credit token) or reject a project."""
    validate_record_id(project_id)
    return workflow.verify(project_id, user.id, request.decision, request.comments)


@router.get("/stats", response_model=PortfolioStats)
def stats(
    owner_id: str | None = Query(default=None, max_length=64),
    store: ProjectStore = Depends(get_store),
):
    """Dashboard totals, optionally for a single owner."""
    return portfolio_stats(store.list_projects(owner_id=owner_id))
