"""Pydantic v2 models for carbon calculation and anomaly scoring.

Importable without the API, the ledger, or any running service.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from bluecarbon.carbon.constants import DEFAULT_BUFFERS


class EcosystemType(str, Enum):
    """Coastal ecosystem tag; every factor table is keyed by these values."""
    mangrove = "mangrove"
    seagrass = "seagrass"
    salt_marsh = "salt_marsh"
    kelp_forest = "kelp_forest"


class BufferSet(BaseModel):
    """Percentage discounts applied to gross absorption.

    Range checks live in the calculator so that every entry point rejects a
    degenerate set with the same error.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    uncertainty: float = DEFAULT_BUFFERS["uncertainty"]
    mortality: float = DEFAULT_BUFFERS["mortality"]
    verification: float = DEFAULT_BUFFERS["verification"]

    @property
    def total(self) -> float:
        return self.uncertainty + self.mortality + self.verification


class ImpactEquivalences(BaseModel):
    cars_removed: int = 0
    homes_powered: int = 0
    trees_planted: int = 0


class CalculationResult(BaseModel):
    annual_absorption: float
    cumulative_absorption: float
    equivalences: ImpactEquivalences
    policy_area_needed: int | None = None  # policy mode only (m2)


class CarbonCalculationRecord(BaseModel):
    """Calculation stored alongside a project."""

    annual_co2_absorption: float
    cumulative_co2_absorption: float = 0.0
    sequestration_factor: float = 0.0
    buffer_percentage: float = 0.0


class AreaSnapshot(BaseModel):
    """A historical record of a project's declared area."""

    area_m2: float
    recorded_at: str | None = None


class ProjectSnapshot(BaseModel):
    area_m2: float
    ecosystem_type: EcosystemType
    carbon_calculations: CarbonCalculationRecord


class AnomalyReport(BaseModel):
    is_suspicious: bool = False
    flags: list[str] = Field(default_factory=list)
    credibility_impact: int = 0
