"""Health check endpoint."""

import logging

from fastapi import APIRouter

from bluecarbon.api.deps import get_ledger, get_store
from bluecarbon.api.models import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health():
    """Check the store and ledger collaborators can be reached."""
    store_ok = False
    ledger_ok = False
    project_count = 0

    try:
        project_count = len(get_store().list_projects())
        store_ok = True
    except Exception:
        logger.warning("Store health check failed", exc_info=True)

    try:
        get_ledger()
        ledger_ok = True
    except Exception:
        logger.warning("Ledger health check failed", exc_info=True)

    if store_ok and ledger_ok:
        status = "healthy"
    elif store_ok or ledger_ok:
        status = "degraded"
    else:
        status = "offline"

    return HealthResponse(
        status=status,
        store_available=store_ok,
        ledger_available=ledger_ok,
        project_count=project_count,
    )
