"""Transaction-logging collaborator: interface plus the mock testnet ledger."""

from bluecarbon.ledger.base import LedgerReceipt, LedgerService, MintReceipt
from bluecarbon.ledger.mock import MockLedgerService

__all__ = ["LedgerReceipt", "LedgerService", "MintReceipt", "MockLedgerService"]
