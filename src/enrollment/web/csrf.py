"""
Session-bound anti-forgery tokens.

The server hands out a random session id in a cookie; the matching token is
an HMAC of that id. A token is only valid together with its own session.
"""

import hashlib
import hmac
import secrets


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


def token_for(session_id: str, secret: str) -> str:
    """Derive the CSRF token for a session."""
    return hmac.new(secret.encode(), session_id.encode(), hashlib.sha256).hexdigest()


def is_token_valid(session_id: str | None, token: str | None, secret: str) -> bool:
    if not session_id or not token:
        return False
    return hmac.compare_digest(token_for(session_id, secret), token)
