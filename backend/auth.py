"""User identity — signed session tokens from headers or cookies.

Tokens look like ``<user_id>.<hmac>``; the identity provider mints them with
the shared HANDOFF_SECRET_KEY and this module only verifies them.
"""

import hashlib
import hmac
import secrets

from fastapi import HTTPException, Request

from config import SECRET_KEY, TRUST_PROXY_HEADERS

COOKIE_NAME = "handoff_session"
HEADER_NAME = "X-Session-Token"


def _sign(user_id: str) -> str:
    return hmac.new(SECRET_KEY.encode(), user_id.encode(), hashlib.sha256).hexdigest()


def create_session_token(user_id: str) -> str:
    return f"{user_id}.{_sign(user_id)}"


def _verify_token(token: str) -> str | None:
    """Return the user id a token was signed for, or None."""
    user_id, sep, signature = token.rpartition(".")
    if not sep or not user_id:
        return None
    if not secrets.compare_digest(signature, _sign(user_id)):
        return None
    return user_id


def get_user_id(request: Request) -> str | None:
    """Check the session token header (API / curl), then the cookie (browser)."""
    token = request.headers.get(HEADER_NAME, "") or request.cookies.get(COOKIE_NAME, "")
    if not token:
        return None
    return _verify_token(token)


def require_user(request: Request) -> str:
    user_id = get_user_id(request)
    if not user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user_id


def client_id(request: Request) -> str:
    """Identifier the abuse guard counts failures against."""
    if TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("X-Forwarded-For", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"
