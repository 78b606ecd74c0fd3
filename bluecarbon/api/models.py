"""Pydantic request/response models for the Blue Carbon API."""

from pydantic import BaseModel, ConfigDict, Field

from bluecarbon.carbon.constants import DEFAULT_HORIZON_YEARS
from bluecarbon.carbon.models import (
    AnomalyReport,
    BufferSet,
    CalculationResult,
    EcosystemType,
)
from bluecarbon.models import LedgerEvent, Project, ProjectSubmission, VerificationDecision


# ---------------------------------------------------------------------------
# Calculator
# ---------------------------------------------------------------------------

class CalculateRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    area_m2: float = Field(..., gt=0)
    ecosystem_type: EcosystemType
    years: int = Field(default=DEFAULT_HORIZON_YEARS, ge=1, le=200)
    buffers: BufferSet = Field(default_factory=BufferSet)


class PolicyCalculateRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    target_co2_reduction: float = Field(..., gt=0)
    ecosystem_type: EcosystemType
    years: int = Field(default=DEFAULT_HORIZON_YEARS, ge=1, le=200)
    buffers: BufferSet = Field(default_factory=BufferSet)


class CalculateResponse(CalculationResult):
    ecosystem_type: EcosystemType
    years: int
    sequestration_factor: float
    buffer_factor: float


class ReferenceResponse(BaseModel):
    sequestration_factors: dict[str, float]
    default_buffers: dict[str, float]
    impact_equivalences: dict[str, float]
    hotspots: list[dict]


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

class RegisterProjectRequest(ProjectSubmission):
    years: int | None = Field(default=None, ge=1, le=200)


class RecalculateRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    area_m2: float | None = None
    years: int | None = Field(default=None, ge=1, le=200)


class VerifyRequest(BaseModel):
    decision: VerificationDecision
    comments: str = Field(default="", max_length=2000)


class ProjectAnomaliesResponse(BaseModel):
    project_id: str
    credibility_score: int
    report: AnomalyReport


class ProjectEventsResponse(BaseModel):
    project_id: str
    events: list[LedgerEvent] = []


class ProjectListResponse(BaseModel):
    projects: list[Project] = []
    count: int = 0


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

class HealthResponse(BaseModel):
    status: str = "healthy"
    store_available: bool = False
    ledger_available: bool = False
    project_count: int = 0
