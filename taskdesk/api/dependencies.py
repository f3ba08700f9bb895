"""
Name: FastAPI Dependencies

Responsibilities:
  - Resolve the caller's Identity from `Authorization: Bearer <token>`

Collaborators:
  - identity.auth_users: IdentityVerifier, extract_bearer_token
  - container.get_identity_verifier
"""

from __future__ import annotations

from fastapi import Depends, Header

from ..container import get_identity_verifier
from ..domain.entities import Identity
from ..identity.auth_users import IdentityVerifier, extract_bearer_token


def require_identity(
    authorization: str | None = Header(default=None),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> Identity:
    """
    R: Authenticated caller or 401.

    Raises:
        Unauthenticated: mapped to 401 by the exception handlers
    """
    return verifier.resolve(extract_bearer_token(authorization))
