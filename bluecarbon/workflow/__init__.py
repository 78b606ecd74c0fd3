"""Workflows that combine the calculator and detector with the store and ledger."""

from bluecarbon.workflow.registration import (
    RegistrationOutcome,
    RegistrationWorkflow,
    assess_project,
)
from bluecarbon.workflow.stats import PortfolioStats, portfolio_stats
from bluecarbon.workflow.verification import VerificationOutcome, VerificationWorkflow

__all__ = [
    "RegistrationOutcome",
    "RegistrationWorkflow",
    "assess_project",
    "PortfolioStats",
    "portfolio_stats",
    "VerificationOutcome",
    "VerificationWorkflow",
]
