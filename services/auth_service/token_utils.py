"""
Client-side JWT helpers.

The expiry check here is a UX hint only: it decodes the token WITHOUT
verifying its signature, so it must never be used to decide whether a user
is who they claim to be. The backend is the only authority on that.
"""

import time
from typing import Any, Dict, Optional

import jwt


def decode_token_payload(token: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Read the claims of a JWT without signature verification

    Returns:
        The claims dict, or None for a missing or malformed token
    """
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False},
            algorithms=["HS256", "HS384", "HS512", "RS256", "ES256"],
        )
    except jwt.InvalidTokenError:
        return None
    return payload if isinstance(payload, dict) else None


def is_token_expired(token: Optional[str], now: Optional[float] = None) -> bool:
    """
    Check the `exp` claim of a token against the current time

    Missing or malformed tokens count as expired. A well-formed token without
    an `exp` claim never expires on the client side.
    """
    if not token:
        return True

    payload = decode_token_payload(token)
    if payload is None:
        return True

    exp = payload.get("exp")
    if exp is None:
        return False

    try:
        exp_value = float(exp)
    except (TypeError, ValueError):
        return True

    current = time.time() if now is None else now
    return exp_value < current


def token_expires_at(token: Optional[str]) -> Optional[float]:
    """Epoch seconds of the `exp` claim, if any"""
    payload = decode_token_payload(token)
    if not payload or payload.get("exp") is None:
        return None
    try:
        return float(payload["exp"])
    except (TypeError, ValueError):
        return None
