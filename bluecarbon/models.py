"""Pydantic v2 record models for projects, users and ledger events.

These are the shapes exchanged with the storage collaborator.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from bluecarbon.carbon.models import (
    AreaSnapshot,
    CarbonCalculationRecord,
    EcosystemType,
    ProjectSnapshot,
)
from bluecarbon.utils import new_id, utc_now


class ProjectStatus(str, Enum):
    pending = "pending"
    under_review = "under_review"
    approved = "approved"
    rejected = "rejected"


# Statuses from which a verifier may still approve or reject
OPEN_STATUSES = frozenset({ProjectStatus.pending, ProjectStatus.under_review})


class VerificationDecision(str, Enum):
    approve = "approve"
    reject = "reject"


EventType = Literal["registration", "verification", "calculation", "nft_mint"]
UserRole = Literal["project_owner", "verifier", "admin"]


class Location(BaseModel):
    coordinates: tuple[float, float] = (0.0, 0.0)  # (longitude, latitude)
    address: str = ""
    state: str = ""
    district: str = ""


class ProjectOwner(BaseModel):
    organization: str = ""
    contact_name: str = ""
    email: str = ""
    phone: str = ""


class Stakeholder(BaseModel):
    name: str
    role: str = ""
    organization: str = ""


class VerificationDetails(BaseModel):
    verifier_id: str
    verified_at: str = Field(default_factory=utc_now)
    comments: str = ""
    nft_token_id: str | None = None
    nft_transaction_hash: str | None = None


class BlockchainEventRef(BaseModel):
    """Ledger event summary embedded on the project record."""

    event_type: EventType
    transaction_hash: str
    timestamp: str = Field(default_factory=utc_now)


class ProjectSubmission(BaseModel):
    """Owner-supplied fields of a new project."""

    model_config = ConfigDict(allow_inf_nan=False)

    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    location: Location = Field(default_factory=Location)
    area_m2: float
    ecosystem_type: EcosystemType
    project_owner: ProjectOwner = Field(default_factory=ProjectOwner)
    stakeholders: list[Stakeholder] = Field(default_factory=list)
    area_history: list[AreaSnapshot] = Field(default_factory=list)


class Project(BaseModel):
    id: str = Field(default_factory=new_id)
    owner_id: str
    name: str
    description: str = ""
    location: Location = Field(default_factory=Location)
    area_m2: float
    ecosystem_type: EcosystemType
    project_owner: ProjectOwner = Field(default_factory=ProjectOwner)
    stakeholders: list[Stakeholder] = Field(default_factory=list)
    status: ProjectStatus = ProjectStatus.pending
    verification_details: VerificationDetails | None = None
    credibility_score: int = 100
    carbon_calculations: CarbonCalculationRecord
    blockchain_events: list[BlockchainEventRef] = Field(default_factory=list)
    area_history: list[AreaSnapshot] = Field(default_factory=list)
    anomaly_flags: list[str] = Field(default_factory=list)
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)

    def snapshot(self) -> ProjectSnapshot:
        """Detector input for the current project state."""
        return ProjectSnapshot(
            area_m2=self.area_m2,
            ecosystem_type=self.ecosystem_type,
            carbon_calculations=self.carbon_calculations,
        )


class LedgerEvent(BaseModel):
    """A ledger transaction persisted in the store."""

    id: str = Field(default_factory=new_id)
    project_id: str
    event_type: EventType
    transaction_hash: str
    block_number: int | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    created_at: str = Field(default_factory=utc_now)


class VerificationHistoryEntry(BaseModel):
    id: str = Field(default_factory=new_id)
    project_id: str
    verifier_id: str
    action: Literal["review", "approve", "reject"]
    from_status: ProjectStatus
    to_status: ProjectStatus
    comments: str = ""
    created_at: str = Field(default_factory=utc_now)


class UserProfile(BaseModel):
    name: str = ""
    organization: str | None = None
    phone: str | None = None


class User(BaseModel):
    id: str = Field(default_factory=new_id)
    email: str
    role: UserRole = "project_owner"
    profile: UserProfile = Field(default_factory=UserProfile)
    created_at: str = Field(default_factory=utc_now)
