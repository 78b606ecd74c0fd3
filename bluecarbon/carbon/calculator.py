"""Carbon sequestration calculator for coastal blue carbon ecosystems.

Forward mode converts a project area into annual and cumulative CO2
absorption. Policy mode solves the inverse problem: the land area required
to reach a cumulative reduction target. Both modes share one buffer-factor
function.

All functions are pure and safe to call concurrently.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from pydantic import ValidationError

from bluecarbon.carbon.constants import (
    IMPACT_EQUIVALENCES,
    SEQUESTRATION_FACTORS,
    SQUARE_METERS_PER_HECTARE,
    DEFAULT_HORIZON_YEARS,
)
from bluecarbon.carbon.models import (
    BufferSet,
    CalculationResult,
    CarbonCalculationRecord,
    EcosystemType,
    ImpactEquivalences,
)
from bluecarbon.utils import InvalidInput

logger = logging.getLogger(__name__)


def _round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with halves away from zero for non-negative values.

    Python's round() uses banker's rounding, which would turn 4.5 cars into 4.
    """
    scale = 10 ** ndigits
    return math.floor(value * scale + 0.5) / scale


def resolve_ecosystem(ecosystem_type: EcosystemType | str) -> EcosystemType:
    """Coerce a tag into an EcosystemType. Unknown tags raise InvalidInput."""
    if isinstance(ecosystem_type, EcosystemType):
        return ecosystem_type
    try:
        return EcosystemType(ecosystem_type)
    except ValueError:
        raise InvalidInput(
            f"Unknown ecosystem type '{ecosystem_type}'. "
            f"Expected one of: {', '.join(e.value for e in EcosystemType)}"
        ) from None


def sequestration_factor(ecosystem_type: EcosystemType | str) -> float:
    """Base sequestration rate in tCO2/ha/yr for an ecosystem."""
    return SEQUESTRATION_FACTORS[resolve_ecosystem(ecosystem_type).value]


def resolve_buffers(buffers: BufferSet | dict[str, Any] | None) -> BufferSet:
    if buffers is None:
        return BufferSet()
    if isinstance(buffers, BufferSet):
        return buffers
    try:
        return BufferSet(**buffers)
    except ValidationError as exc:
        raise InvalidInput(f"Invalid buffers: {exc}") from exc


def buffer_factor(buffers: BufferSet | dict[str, Any] | None = None) -> float:
    """Fraction of gross absorption retained after buffers.

    ``(100 - (uncertainty + mortality + verification)) / 100``. Negative
    buffers and a total of 100 or more raise InvalidInput.
    """
    buffers = resolve_buffers(buffers)
    for name in ("uncertainty", "mortality", "verification"):
        value = getattr(buffers, name)
        if not math.isfinite(value) or value < 0:
            raise InvalidInput(f"Buffer '{name}' must be a finite, non-negative percentage")
    if buffers.total >= 100:
        raise InvalidInput(
            f"Buffer percentages sum to {buffers.total:g}; total must stay below 100"
        )
    return (100 - buffers.total) / 100


def _check_years(years: int) -> None:
    if not math.isfinite(years) or years <= 0:
        raise InvalidInput(f"Projection horizon must be positive, got {years}")


def calculate_sequestration(
    area_m2: float,
    ecosystem_type: EcosystemType | str,
    years: int = DEFAULT_HORIZON_YEARS,
    buffers: BufferSet | dict[str, Any] | None = None,
) -> CalculationResult:
    """Estimate net CO2 absorption for a project area.

    Parameters
    ----------
    area_m2 : float
        Project area in square metres. Must be positive and finite.
    ecosystem_type : EcosystemType or str
        One of mangrove, seagrass, salt_marsh, kelp_forest.
    years : int
        Projection horizon for the cumulative figure.
    buffers : BufferSet, dict or None
        Conservative discounts; defaults to 10/15/5 percent.

    Returns
    -------
    CalculationResult with annual and cumulative absorption (tons, 2 dp)
    and impact equivalences. Cars and homes scale with annual absorption,
    trees with cumulative absorption. Cumulative and equivalences are
    derived from the unrounded annual figure; only reported values are
    rounded.

    Validation anchor (mangrove, 10 ha, 20 yr, default buffers):
    10 * 10.15 * 0.70 = 71.05 t/yr, 1421.0 t cumulative,
    32 cars, 9 homes, 22736 trees.
    """
    if not math.isfinite(area_m2) or area_m2 <= 0:
        raise InvalidInput(f"Area must be a positive finite number, got {area_m2}")
    _check_years(years)
    base_rate = sequestration_factor(ecosystem_type)
    factor = buffer_factor(buffers)

    area_hectares = area_m2 / SQUARE_METERS_PER_HECTARE
    gross_annual_absorption = area_hectares * base_rate

    net_annual_absorption = gross_annual_absorption * factor
    net_cumulative_absorption = net_annual_absorption * years
    if not math.isfinite(net_cumulative_absorption):
        raise InvalidInput(f"Area {area_m2} is too large to project over {years} years")

    equivalences = ImpactEquivalences(
        cars_removed=int(_round_half_up(net_annual_absorption * IMPACT_EQUIVALENCES["cars_removed_per_year"])),
        homes_powered=int(_round_half_up(net_annual_absorption * IMPACT_EQUIVALENCES["homes_powered_per_year"])),
        trees_planted=int(_round_half_up(net_cumulative_absorption * IMPACT_EQUIVALENCES["trees_planted"])),
    )

    return CalculationResult(
        annual_absorption=_round_half_up(net_annual_absorption, 2),
        cumulative_absorption=_round_half_up(net_cumulative_absorption, 2),
        equivalences=equivalences,
    )


def calculate_required_area(
    target_co2_reduction: float,
    ecosystem_type: EcosystemType | str,
    years: int = DEFAULT_HORIZON_YEARS,
    buffers: BufferSet | dict[str, Any] | None = None,
) -> CalculationResult:
    """Solve for the area needed to reach a cumulative CO2 reduction target.

    Equivalences are derived from the target itself, not from the computed
    area: cars and homes scale with ``target / years``, trees with the full
    target.

    Validation anchor (seagrass, 1000 t, 20 yr, default buffers):
    1000 / (8.7 * 0.70 * 20) = 8.2102 ha -> 82102 m2.
    """
    if not math.isfinite(target_co2_reduction) or target_co2_reduction <= 0:
        raise InvalidInput(f"Target CO2 reduction must be positive, got {target_co2_reduction}")
    _check_years(years)
    base_rate = sequestration_factor(ecosystem_type)
    factor = buffer_factor(buffers)

    effective_sequestration = base_rate * factor
    denominator = effective_sequestration * years
    if denominator <= 0:
        raise InvalidInput("Effective sequestration over the horizon is zero")

    required_hectares = target_co2_reduction / denominator
    required_m2 = required_hectares * SQUARE_METERS_PER_HECTARE
    if not math.isfinite(required_m2):
        raise InvalidInput(f"Target {target_co2_reduction} is too large to solve for an area")

    annual_target = target_co2_reduction / years
    equivalences = ImpactEquivalences(
        cars_removed=int(_round_half_up(annual_target * IMPACT_EQUIVALENCES["cars_removed_per_year"])),
        homes_powered=int(_round_half_up(annual_target * IMPACT_EQUIVALENCES["homes_powered_per_year"])),
        trees_planted=int(_round_half_up(target_co2_reduction * IMPACT_EQUIVALENCES["trees_planted"])),
    )

    return CalculationResult(
        annual_absorption=_round_half_up(annual_target, 2),
        cumulative_absorption=_round_half_up(target_co2_reduction, 2),
        equivalences=equivalences,
        policy_area_needed=int(_round_half_up(required_m2)),
    )


def build_calculation_record(
    area_m2: float,
    ecosystem_type: EcosystemType | str,
    years: int = DEFAULT_HORIZON_YEARS,
    buffers: BufferSet | dict[str, Any] | None = None,
) -> CarbonCalculationRecord:
    """Forward-mode calculation in the shape stored on a project."""
    buffers = resolve_buffers(buffers)
    result = calculate_sequestration(area_m2, ecosystem_type, years, buffers)
    record = CarbonCalculationRecord(
        annual_co2_absorption=result.annual_absorption,
        cumulative_co2_absorption=result.cumulative_absorption,
        sequestration_factor=sequestration_factor(ecosystem_type),
        buffer_percentage=buffers.total,
    )
    logger.debug(
        "Calculated %s project of %.0f m2: %.2f t/yr over %d yr",
        resolve_ecosystem(ecosystem_type).value, area_m2, record.annual_co2_absorption, years,
    )
    return record
