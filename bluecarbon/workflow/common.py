"""Shared helpers for workflows that call the store and ledger."""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from pydantic import BaseModel

from bluecarbon.utils import BlueCarbonError, CollaboratorUnavailable, WorkflowFailed

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


def call_collaborator(
    action: str,
    func: Callable[..., _T],
    *args: Any,
    ledger_transactions: list[str] | None = None,
    **kwargs: Any,
) -> _T:
    """Invoke a collaborator, translating unexpected failures.

    Domain errors pass through untouched. Anything else becomes
    CollaboratorUnavailable carrying the ledger transactions accepted so far.
    No retries: retry policy belongs to the caller.
    """
    try:
        return func(*args, **kwargs)
    except WorkflowFailed as exc:
        if ledger_transactions and not exc.ledger_transactions:
            exc.ledger_transactions = list(ledger_transactions)
        raise
    except BlueCarbonError:
        raise
    except Exception as exc:
        logger.exception("Collaborator call failed: %s", action)
        raise CollaboratorUnavailable(
            f"{action} failed: {exc}", ledger_transactions=ledger_transactions
        ) from exc


class LedgerEventSummary(BaseModel):
    event_type: str
    transaction_hash: str
    block_number: int | None = None
    explorer_url: str = ""
