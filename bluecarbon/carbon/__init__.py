"""Carbon sequestration calculator and credibility/anomaly detector.

Pure functions over pydantic value objects; no I/O, no shared state.
"""

from bluecarbon.carbon.models import (
    AnomalyReport,
    AreaSnapshot,
    BufferSet,
    CalculationResult,
    CarbonCalculationRecord,
    EcosystemType,
    ImpactEquivalences,
    ProjectSnapshot,
)
from bluecarbon.carbon.calculator import (
    buffer_factor,
    build_calculation_record,
    calculate_required_area,
    calculate_sequestration,
    sequestration_factor,
)
from bluecarbon.carbon.anomaly import apply_credibility_impact, detect_anomalies

__all__ = [
    "AnomalyReport",
    "AreaSnapshot",
    "BufferSet",
    "CalculationResult",
    "CarbonCalculationRecord",
    "EcosystemType",
    "ImpactEquivalences",
    "ProjectSnapshot",
    "buffer_factor",
    "build_calculation_record",
    "calculate_required_area",
    "calculate_sequestration",
    "sequestration_factor",
    "apply_credibility_impact",
    "detect_anomalies",
]
