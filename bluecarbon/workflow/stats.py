"""Portfolio statistics for dashboards."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel

from bluecarbon.models import Project, ProjectStatus


class PortfolioStats(BaseModel):
    total_projects: int = 0
    approved_projects: int = 0
    pending_projects: int = 0
    under_review_projects: int = 0
    rejected_projects: int = 0
    total_co2_absorbed: float = 0.0  # cumulative tCO2 of approved projects
    flagged_projects: int = 0


def portfolio_stats(projects: Iterable[Project]) -> PortfolioStats:
    """Count projects by status and total the approved cumulative absorption."""
    stats = PortfolioStats()
    counters = {
        ProjectStatus.approved: "approved_projects",
        ProjectStatus.pending: "pending_projects",
        ProjectStatus.under_review: "under_review_projects",
        ProjectStatus.rejected: "rejected_projects",
    }
    total_co2 = 0.0
    for project in projects:
        stats.total_projects += 1
        field = counters[project.status]
        setattr(stats, field, getattr(stats, field) + 1)
        if project.anomaly_flags:
            stats.flagged_projects += 1
        if project.status == ProjectStatus.approved:
            total_co2 += project.carbon_calculations.cumulative_co2_absorption
    stats.total_co2_absorbed = round(total_co2, 2)
    return stats
