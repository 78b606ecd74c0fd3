"""Project credibility scoring from heuristic anomaly rules.

A linear, explainable model: each rule that fires appends a flag and adds
a fixed penalty. Rules are evaluated in a fixed order and are not mutually
exclusive:

1. Area growth      - area more than doubled between the two most recent
                      historical snapshots (+25)
2. Theoretical max  - recorded annual absorption above 1.5x the ecosystem
                      rate for the declared area (+30)
3. Minimum area     - declared area under 0.1 ha (+10)

The detector never clamps; callers subtract ``credibility_impact`` from a
running score with :func:`apply_credibility_impact`.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from bluecarbon.carbon.calculator import sequestration_factor
from bluecarbon.carbon.constants import (
    ANOMALY_RULES,
    CREDIBILITY_MAX,
    CREDIBILITY_MIN,
    SQUARE_METERS_PER_HECTARE,
)
from bluecarbon.carbon.models import AnomalyReport, AreaSnapshot, ProjectSnapshot
from bluecarbon.utils import InvalidInput


def _area_growth_rate(historical_data: Sequence[AreaSnapshot | ProjectSnapshot]) -> float | None:
    """Growth between the two most recent snapshots, or None if undefined."""
    if len(historical_data) < 2:
        return None
    previous = historical_data[-2].area_m2
    latest = historical_data[-1].area_m2
    if previous <= 0:
        return None
    return (latest - previous) / previous


def detect_anomalies(
    project: ProjectSnapshot,
    historical_data: Sequence[AreaSnapshot | ProjectSnapshot] = (),
) -> AnomalyReport:
    """Score a project snapshot against its history and theoretical bounds.

    Args:
        project: Current area, ecosystem and stored carbon calculation.
        historical_data: Area snapshots ordered oldest to newest; may be empty.

    Returns an AnomalyReport whose flags follow rule-evaluation order.
    A non-positive or non-finite area raises InvalidInput.
    """
    if not math.isfinite(project.area_m2) or project.area_m2 <= 0:
        raise InvalidInput(f"Area must be a positive finite number, got {project.area_m2}")

    flags: list[str] = []
    credibility_impact = 0

    # 1. Unrealistic growth
    rule = ANOMALY_RULES["area_growth"]
    growth_rate = _area_growth_rate(historical_data)
    if growth_rate is not None and growth_rate > rule["max_growth_rate"]:
        flags.append(rule["flag"])
        credibility_impact += rule["penalty"]

    # 2. Impossible sequestration
    rule = ANOMALY_RULES["theoretical_max"]
    theoretical_max = sequestration_factor(project.ecosystem_type) * rule["multiplier"]
    area_hectares = project.area_m2 / SQUARE_METERS_PER_HECTARE
    if project.carbon_calculations.annual_co2_absorption > theoretical_max * area_hectares:
        flags.append(rule["flag"])
        credibility_impact += rule["penalty"]

    # 3. Undersized project
    rule = ANOMALY_RULES["minimum_area"]
    if project.area_m2 < rule["min_area_m2"]:
        flags.append(rule["flag"])
        credibility_impact += rule["penalty"]

    return AnomalyReport(
        is_suspicious=bool(flags),
        flags=flags,
        credibility_impact=credibility_impact,
    )


def apply_credibility_impact(score: float, credibility_impact: int) -> int:
    """Subtract a penalty from a credibility score, clamped to [0, 100]."""
    return int(max(CREDIBILITY_MIN, min(CREDIBILITY_MAX, score - credibility_impact)))
