"""
Utility functions for the Blue Carbon registry

Provides logging setup, identifier helpers, and the shared exception hierarchy
"""

import logging
import secrets
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


# ═══════════════════════════════════════════════════════════════════
# LOGGING
# ═══════════════════════════════════════════════════════════════════

def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure logging for the registry"""
    level = getattr(logging, log_level.upper())

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers
    )


def get_logger(name: str) -> logging.Logger:
    """Get logger instance for module"""
    return logging.getLogger(name)


# ═══════════════════════════════════════════════════════════════════
# ID GENERATION
# ═══════════════════════════════════════════════════════════════════

def new_id() -> str:
    """Random identifier for stored records"""
    return str(uuid.uuid4())


def random_tx_hash() -> str:
    """0x-prefixed 64 hex digit transaction hash"""
    return "0x" + secrets.token_hex(32)


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string"""
    return datetime.now(timezone.utc).isoformat()


# ═══════════════════════════════════════════════════════════════════
# EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════

class BlueCarbonError(Exception):
    """Base exception for the registry"""
    pass


class InvalidInput(BlueCarbonError, ValueError):
    """Non-positive area/target/horizon, degenerate buffers or unknown ecosystem"""
    pass


class InvalidStateTransition(BlueCarbonError):
    """Workflow action attempted from a status that does not allow it"""
    pass


class NotFound(BlueCarbonError):
    """Requested record does not exist in the store"""
    pass


class PermissionDenied(BlueCarbonError):
    """Acting user lacks the role required for the action"""
    pass


class WorkflowFailed(BlueCarbonError):
    """A collaborator call failed while running a workflow.

    ``ledger_transactions`` lists transaction hashes the ledger accepted
    before the failure, so the caller can reconcile the audit trail.
    """

    def __init__(self, message: str, ledger_transactions: Optional[list[str]] = None):
        super().__init__(message)
        self.ledger_transactions: list[str] = list(ledger_transactions or [])


class CollaboratorUnavailable(WorkflowFailed):
    """Storage or ledger collaborator call failed or timed out"""
    pass


class ConflictError(WorkflowFailed):
    """Concurrent update detected by the storage collaborator"""
    pass
