# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Session JWT auth for the management API, bearer-key extraction for the
# deployed endpoints.
# =============================================================================

from app.auth.dependencies import decode_session_token, get_api_key, get_current_user
from app.auth.models import AuthUser

__all__ = [
    "decode_session_token",
    "get_api_key",
    "get_current_user",
    "AuthUser",
]
