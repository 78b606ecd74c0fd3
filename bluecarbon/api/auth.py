"""API authentication, rate limiting, and request tracing middleware.

Provides:
- Bearer token authentication via ``BLUECARBON_API_KEY``
- Acting-user resolution from the ``X-User-Id`` header (identities are
  issued upstream; this service only checks the stored role)
- Per-key in-memory sliding-window rate limiting
- ``X-Request-ID`` response header for tracing
- Request logging with hashed client IP
"""

import hashlib
import logging
import re
import threading
import time
import uuid
from collections import defaultdict

from fastapi import Depends, Header, HTTPException, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from bluecarbon.api.deps import get_store
from bluecarbon.config import get_config
from bluecarbon.models import User
from bluecarbon.storage.base import ProjectStore
from bluecarbon.utils import PermissionDenied

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------------
# Input validation helpers
# ---------------------------------------------------------------------------

_ID_RE = re.compile(r"^[A-Za-z0-9\-_]{1,64}$")


def validate_record_id(record_id: str) -> str:
    """Validate a path identifier: letters, digits, hyphens, underscores."""
    if not _ID_RE.match(record_id):
        raise HTTPException(status_code=400, detail="Invalid identifier.")
    return record_id


# ---------------------------------------------------------------------------
# API key authentication
# ---------------------------------------------------------------------------

def require_api_key(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> str:
    """Validate the Bearer token against ``BLUECARBON_API_KEY``.

    Raises 401 if the key is missing or invalid.  Skipped entirely when
    ``BLUECARBON_DEMO_MODE=true`` (demo mode allows unauthenticated access).
    """
    cfg = get_config()

    if cfg.demo_mode:
        return "demo"

    if not cfg.api_key:
        raise HTTPException(
            status_code=500,
            detail="Server misconfiguration: BLUECARBON_API_KEY is not set.",
        )

    if credentials is None or credentials.credentials != cfg.api_key:
        raise HTTPException(
            status_code=401,
            detail="Invalid or missing API key. Provide 'Authorization: Bearer <key>' header.",
        )
    return credentials.credentials


# ---------------------------------------------------------------------------
# Acting user
# ---------------------------------------------------------------------------

def get_acting_user(
    x_user_id: str | None = Header(default=None),
    store: ProjectStore = Depends(get_store),
) -> User:
    """Resolve the ``X-User-Id`` header to a stored user (401 if unknown)."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header.")
    user = store.get_user(x_user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user.")
    return user


def require_verifier(user: User = Depends(get_acting_user)) -> User:
    """Only verifiers (and admins) may review, approve or reject projects."""
    if user.role not in ("verifier", "admin"):
        raise PermissionDenied("Verifier role required.")
    return user


# ---------------------------------------------------------------------------
# Rate limiting (in-memory sliding window)
# ---------------------------------------------------------------------------

_rate_buckets: dict[str, list[float]] = defaultdict(list)
_rate_lock = threading.Lock()

def _check_rate_limit(key: str, max_requests: int, window_seconds: int = 60):
    """Enforce a sliding-window rate limit per key.

    Raises 429 if the caller has exceeded ``max_requests`` within the
    rolling ``window_seconds`` window.
    """
    with _rate_lock:
        now = time.monotonic()
        bucket = _rate_buckets[key]
        # Prune expired entries
        _rate_buckets[key] = [ts for ts in bucket if now - ts < window_seconds]
        bucket = _rate_buckets[key]

        if len(bucket) >= max_requests:
            raise HTTPException(
                status_code=429,
                detail=f"Rate limit exceeded. Max {max_requests} requests per {window_seconds}s.",
            )
        bucket.append(now)


def rate_limit_calculate(request: Request, api_key: str = Depends(require_api_key)):
    """Rate limit for the stateless calculator endpoints."""
    _check_rate_limit(f"calculate:{api_key}", max_requests=get_config().rate_limit_calculate_per_minute)


def rate_limit_default(request: Request, api_key: str = Depends(require_api_key)):
    """Rate limit for project endpoints."""
    _check_rate_limit(f"default:{api_key}", max_requests=get_config().rate_limit_per_minute)


# ---------------------------------------------------------------------------
# Request-ID and logging middleware
# ---------------------------------------------------------------------------

def _hash_ip(ip: str | None) -> str:
    """Return a one-way hash of the client IP for privacy-safe logging."""
    if not ip:
        return "unknown"
    return hashlib.sha256(ip.encode()).hexdigest()[:12]


async def request_logging_middleware(request: Request, call_next):
    """Add X-Request-ID header and log every request with timing."""
    request_id = str(uuid.uuid4())
    start = time.monotonic()

    response: Response = await call_next(request)

    elapsed_ms = int((time.monotonic() - start) * 1000)
    response.headers["X-Request-ID"] = request_id

    logger.info(
        "request_id=%s ip=%s method=%s path=%s status=%d duration_ms=%d",
        request_id,
        _hash_ip(request.client.host if request.client else None),
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response
