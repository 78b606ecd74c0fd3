"""Transaction-logging collaborator interface.

Workflows depend on this contract only, so a real chain client or a
deterministic test double can replace the mock without touching them.
Implementations raise ``CollaboratorUnavailable`` on failure or timeout.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any

from bluecarbon.models import EventType, Project


@dataclass(frozen=True)
class LedgerReceipt:
    transaction_hash: str
    block_number: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class MintReceipt:
    nft_token_id: str
    transaction_hash: str

    def to_dict(self) -> dict:
        return asdict(self)


class LedgerService(ABC):
    """Append-only event log with NFT minting for approved projects."""

    @abstractmethod
    def log_event(
        self,
        event_type: EventType,
        project_id: str,
        data: dict[str, Any],
        user_id: str,
    ) -> LedgerReceipt:
        """Record an event; returns its transaction hash and block number."""

    @abstractmethod
    def mint(self, project: Project) -> MintReceipt:
        """Mint a credit token for an approved project."""

    @abstractmethod
    def explorer_url(self, transaction_hash: str) -> str:
        """Public explorer link for a transaction."""
