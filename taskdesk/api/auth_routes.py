"""
Name: Auth Routes

Responsibilities:
  - Public registration and login (returns a bearer token)
  - Self profile read/update for the authenticated caller

Collaborators:
  - application.user_accounts.UserAccountService
  - identity.auth_users.IdentityVerifier: token issuing
  - api.dependencies.require_identity
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..application.user_accounts import UserAccountService
from ..container import get_identity_verifier, get_user_account_service
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES, unauthorized
from ..domain.entities import Identity
from ..identity.auth_users import IdentityVerifier
from .dependencies import require_identity
from .schemas import (
    AuthResponse,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    UserMessageResponse,
    UserResponse,
    changes_of,
    to_user_out,
)

router = APIRouter(prefix="/auth", tags=["auth"], responses=OPENAPI_ERROR_RESPONSES)


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(
    req: RegisterRequest,
    accounts: UserAccountService = Depends(get_user_account_service),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
):
    user = accounts.register(
        name=req.name, email=req.email, password=req.password, role=req.role
    )
    token, _ = verifier.issue(user)
    return AuthResponse(
        message="User registered successfully", user=to_user_out(user), token=token
    )


@router.post("/login", response_model=AuthResponse)
def login(
    req: LoginRequest,
    accounts: UserAccountService = Depends(get_user_account_service),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
):
    user = accounts.authenticate(req.email, req.password)
    if user is None:
        raise unauthorized("Invalid credentials")

    token, _ = verifier.issue(user)
    return AuthResponse(message="Login successful", user=to_user_out(user), token=token)


@router.get("/profile", response_model=UserResponse)
def get_profile(
    identity: Identity = Depends(require_identity),
    accounts: UserAccountService = Depends(get_user_account_service),
):
    return UserResponse(user=to_user_out(accounts.get_profile(identity)))


@router.put("/profile", response_model=UserMessageResponse)
def update_profile(
    req: ProfileUpdateRequest,
    identity: Identity = Depends(require_identity),
    accounts: UserAccountService = Depends(get_user_account_service),
):
    user = accounts.update_profile(identity, changes_of(req))
    return UserMessageResponse(
        message="Profile updated successfully", user=to_user_out(user)
    )
