"""Calculator endpoints - forward and policy (inverse) mode, reference data."""

import logging

from fastapi import APIRouter, Depends

from bluecarbon.api.auth import rate_limit_calculate
from bluecarbon.api.models import (
    CalculateRequest,
    CalculateResponse,
    PolicyCalculateRequest,
    ReferenceResponse,
)
from bluecarbon.carbon.calculator import (
    buffer_factor,
    calculate_required_area,
    calculate_sequestration,
    sequestration_factor,
)
from bluecarbon.carbon.constants import (
    DEFAULT_BUFFERS,
    DEMO_HOTSPOTS,
    IMPACT_EQUIVALENCES,
    SEQUESTRATION_FACTORS,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["calculator"], dependencies=[Depends(rate_limit_calculate)])


@router.post("/calculate", response_model=CalculateResponse)
def calculate(request: CalculateRequest):
    """Annual and cumulative absorption for a project area."""
    result = calculate_sequestration(
        request.area_m2, request.ecosystem_type, request.years, request.buffers
    )
    return CalculateResponse(
        **result.model_dump(),
        ecosystem_type=request.ecosystem_type,
        years=request.years,
        sequestration_factor=sequestration_factor(request.ecosystem_type),
        buffer_factor=buffer_factor(request.buffers),
    )


@router.post("/calculate/policy", response_model=CalculateResponse)
def calculate_policy(request: PolicyCalculateRequest):
    """Area required to reach a cumulative CO2 reduction target."""
    result = calculate_required_area(
        request.target_co2_reduction, request.ecosystem_type, request.years, request.buffers
    )
    return CalculateResponse(
        **result.model_dump(),
        ecosystem_type=request.ecosystem_type,
        years=request.years,
        sequestration_factor=sequestration_factor(request.ecosystem_type),
        buffer_factor=buffer_factor(request.buffers),
    )


@router.get("/reference", response_model=ReferenceResponse)
def reference():
    """Sequestration factors, default buffers, equivalence ratios and map hotspots."""
    return ReferenceResponse(
        sequestration_factors=SEQUESTRATION_FACTORS,
        default_buffers=DEFAULT_BUFFERS,
        impact_equivalences=IMPACT_EQUIVALENCES,
        hotspots=DEMO_HOTSPOTS,
    )
