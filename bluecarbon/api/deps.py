"""Lazy service singletons shared by the API routes.

Tests swap collaborators with :func:`set_services` and clear them with
:func:`reset_services`.
"""

from __future__ import annotations

import logging

from bluecarbon.ledger.base import LedgerService
from bluecarbon.storage.base import ProjectStore

logger = logging.getLogger(__name__)

_store: ProjectStore | None = None
_ledger: LedgerService | None = None


def get_store() -> ProjectStore:
    """Get or create the store singleton (in-memory backend)."""
    global _store
    if _store is None:
        from bluecarbon.storage.memory import InMemoryProjectStore

        _store = InMemoryProjectStore()
        logger.info("Project store using InMemoryProjectStore")
    return _store


def get_ledger() -> LedgerService:
    """Get or create the ledger singleton (mock testnet)."""
    global _ledger
    if _ledger is None:
        from bluecarbon.ledger.mock import MockLedgerService

        _ledger = MockLedgerService()
        logger.info("Ledger using MockLedgerService")
    return _ledger


def get_registration():
    from bluecarbon.workflow.registration import RegistrationWorkflow
    return RegistrationWorkflow(get_store(), get_ledger())


def get_verification():
    from bluecarbon.workflow.verification import VerificationWorkflow
    return VerificationWorkflow(get_store(), get_ledger())


def set_services(store: ProjectStore | None = None, ledger: LedgerService | None = None) -> None:
    global _store, _ledger
    if store is not None:
        _store = store
    if ledger is not None:
        _ledger = ledger


def reset_services() -> None:
    global _store, _ledger
    _store = None
    _ledger = None
