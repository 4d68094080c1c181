"""Issuing and checking the JSON Web Tokens that identify users."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

import jwt

JWT_SIGN_KEY = "secret"
JWT_EXPIRED = 60 * 60

_HMAC_ALGORITHMS = ["HS256", "HS384", "HS512"]

_log = logging.getLogger(__name__)


class TokenError(Exception):
    """Raised when a token cannot be verified or carries no usable data."""


def parse_token(token_key: str, token_string: str) -> dict[str, Any]:
    """Verify ``token_string`` with ``token_key`` and return its claims."""
    try:
        claims = jwt.decode(token_string, token_key, algorithms=_HMAC_ALGORITHMS)
    except jwt.InvalidTokenError as exc:
        _log.error("Server failed to convert Token, err: %s", exc)
        raise TokenError(str(exc) or "invalid JWT token") from exc
    if not isinstance(claims, Mapping):
        raise TokenError("invalid JWT token")
    return dict(claims)


def get_token_data(claims: Any) -> dict[str, Any]:
    """Return the user data held in decoded token claims."""
    if not isinstance(claims, Mapping):
        raise TokenError("failed to extract claims from JWT token")
    if "user_id" not in claims:
        raise TokenError("the token does not carry critical data")
    return dict(claims)


def produce_token(user_id: int) -> str:
    """Sign a token for ``user_id`` that expires after ``JWT_EXPIRED`` seconds."""
    claims = {
        "user_id": user_id,
        "exp": int(time.time()) + JWT_EXPIRED,
    }
    return jwt.encode(claims, JWT_SIGN_KEY, algorithm="HS256")