"""
Blue Carbon Registry
Coastal ecosystem carbon sequestration, credibility scoring and verification
"""

__version__ = "1.0.0"

from bluecarbon.config import Config, get_config
from bluecarbon.carbon import (
    calculate_required_area,
    calculate_sequestration,
    detect_anomalies,
)
from bluecarbon.workflow import RegistrationWorkflow, VerificationWorkflow

__all__ = [
    "Config",
    "get_config",
    "calculate_required_area",
    "calculate_sequestration",
    "detect_anomalies",
    "RegistrationWorkflow",
    "VerificationWorkflow",
]
