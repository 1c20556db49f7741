"""
In-memory rate limiter for the public registration endpoint.

The registration form is the only endpoint reachable without an admin token,
so it is throttled per client IP.
"""
import logging
import time
from collections import defaultdict
from typing import Dict, List
from fastapi import Request, HTTPException, status

from app.core.config import REGISTRATION_RATE_LIMIT, REGISTRATION_RATE_WINDOW_SEC

logger = logging.getLogger(__name__)

# {ip: [request timestamps]}
rate_limit_store: Dict[str, List[float]] = defaultdict(list)


def get_client_ip(request: Request) -> str:
    """Extract client IP address from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # First IP in the chain is the original client
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"


def _prune(cutoff: float) -> None:
    """Drop timestamps older than ``cutoff`` and forget IPs with none left."""
    for ip in list(rate_limit_store):
        recent = [ts for ts in rate_limit_store[ip] if ts > cutoff]
        if recent:
            rate_limit_store[ip] = recent
        else:
            del rate_limit_store[ip]


def check_rate_limit(request: Request, max_requests: int, window_seconds: int) -> None:
    """
    Record a request for the client IP and reject it if the window is full.

    Raises:
        HTTPException: 429 if rate limit exceeded
    """
    ip = get_client_ip(request)
    now = time.time()

    cutoff = now - window_seconds
    _prune(cutoff)

    request_count = len(rate_limit_store[ip])
    if request_count >= max_requests:
        logger.warning(f"Registration rate limit exceeded for IP: {ip} ({request_count} requests in {window_seconds}s)")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many registrations. Maximum {max_requests} requests per {window_seconds} seconds."
        )

    rate_limit_store[ip].append(now)
    logger.debug(f"Rate limit check passed for IP: {ip} ({request_count + 1}/{max_requests})")


def registration_rate_limit(request: Request) -> None:
    """FastAPI dependency applying the configured registration limit."""
    check_rate_limit(request, REGISTRATION_RATE_LIMIT, REGISTRATION_RATE_WINDOW_SEC)


def reset_rate_limits() -> None:
    rate_limit_store.clear()
