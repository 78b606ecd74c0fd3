"""Mock Polygon testnet ledger.

Stands in for a real chain integration: transaction hashes, block numbers
and token ids are random, and each call sleeps to model confirmation
latency (2 s per event, 3 s per mint by default).
"""

from __future__ import annotations

import logging
import random
import time
from typing import Any

from bluecarbon.config import get_config
from bluecarbon.ledger.base import LedgerReceipt, LedgerService, MintReceipt
from bluecarbon.models import EventType, Project
from bluecarbon.utils import random_tx_hash

logger = logging.getLogger(__name__)

_BLOCK_BASE = 5_000_000
_BLOCK_SPAN = 1_000_000
_TOKEN_SPAN = 1_000_000


class MockLedgerService(LedgerService):
    """In-process ledger with random identifiers and simulated latency."""

    def __init__(
        self,
        log_delay_seconds: float | None = None,
        mint_delay_seconds: float | None = None,
        explorer_base_url: str | None = None,
        rng: random.Random | None = None,
    ) -> None:
        cfg = get_config()
        self._log_delay = cfg.ledger_log_delay_seconds if log_delay_seconds is None else log_delay_seconds
        self._mint_delay = cfg.ledger_mint_delay_seconds if mint_delay_seconds is None else mint_delay_seconds
        self._explorer = (explorer_base_url or cfg.ledger_explorer_url).rstrip("/")
        # A seeded rng makes every identifier reproducible
        self._seeded = rng is not None
        self._rng = rng or random.Random()

    def _tx_hash(self) -> str:
        if self._seeded:
            return "0x" + "".join(self._rng.choice("0123456789abcdef") for _ in range(64))
        return random_tx_hash()

    def log_event(
        self,
        event_type: EventType,
        project_id: str,
        data: dict[str, Any],
        user_id: str,
    ) -> LedgerReceipt:
        if self._log_delay:
            time.sleep(self._log_delay)

        receipt = LedgerReceipt(
            transaction_hash=self._tx_hash(),
            block_number=_BLOCK_BASE + self._rng.randrange(_BLOCK_SPAN),
        )
        logger.info(
            "Ledger event logged: type=%s project=%s user=%s tx=%s block=%d",
            event_type, project_id, user_id, receipt.transaction_hash, receipt.block_number,
        )
        return receipt

    def mint(self, project: Project) -> MintReceipt:
        if self._mint_delay:
            time.sleep(self._mint_delay)

        receipt = MintReceipt(
            nft_token_id=str(self._rng.randrange(_TOKEN_SPAN)),
            transaction_hash=self._tx_hash(),
        )
        metadata = {
            "name": f"Blue Carbon Credits - {project.name}",
            "description": f"Carbon credits for {project.ecosystem_type.value} conservation project",
            "location": project.location.address,
            "co2_absorbed": project.carbon_calculations.cumulative_co2_absorption,
        }
        logger.info(
            "Credit token minted: project=%s token=%s tx=%s metadata=%s",
            project.id, receipt.nft_token_id, receipt.transaction_hash, metadata,
        )
        return receipt

    def explorer_url(self, transaction_hash: str) -> str:
        return f"{self._explorer}/tx/{transaction_hash}"
