# =============================================================================
# app/auth/models.py - Authenticated Builder Identity
# =============================================================================

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Project owner taken from a verified Supabase session JWT.

    Built from the token claims alone. ``id`` is the value every owned row is
    filtered on (``projects.user_id``).
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None
    role: str = "authenticated"
