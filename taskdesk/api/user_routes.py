"""
Name: User Roster Routes (admin)

Responsibilities:
  - List, read, create, update and delete users

Collaborators:
  - application.user_accounts.UserAccountService (enforces the admin rules)
  - api.dependencies.require_identity

Notes:
  - An admin deleting their own id gets 400 "Cannot delete your own account"
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..application.user_accounts import UserAccountService
from ..container import get_user_account_service
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..domain.entities import Identity
from .dependencies import require_identity
from .schemas import (
    CreateUserRequest,
    UpdateUserRequest,
    UserMessageResponse,
    UserResponse,
    UsersResponse,
    changes_of,
    to_user_out,
)

router = APIRouter(prefix="/users", tags=["users"], responses=OPENAPI_ERROR_RESPONSES)


@router.get("", response_model=UsersResponse)
def list_users(
    identity: Identity = Depends(require_identity),
    accounts: UserAccountService = Depends(get_user_account_service),
):
    return UsersResponse(users=[to_user_out(u) for u in accounts.list_users(identity)])


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    identity: Identity = Depends(require_identity),
    accounts: UserAccountService = Depends(get_user_account_service),
):
    return UserResponse(user=to_user_out(accounts.get_user(identity, user_id)))


@router.post("", response_model=UserMessageResponse, status_code=201)
def create_user(
    req: CreateUserRequest,
    identity: Identity = Depends(require_identity),
    accounts: UserAccountService = Depends(get_user_account_service),
):
    user = accounts.create_user(
        identity,
        name=req.name,
        email=req.email,
        password=req.password,
        role=req.role,
    )
    return UserMessageResponse(
        message="User created successfully", user=to_user_out(user)
    )


@router.put("/{user_id}", response_model=UserMessageResponse)
def update_user(
    user_id: int,
    req: UpdateUserRequest,
    identity: Identity = Depends(require_identity),
    accounts: UserAccountService = Depends(get_user_account_service),
):
    user = accounts.update_user(identity, user_id, changes_of(req))
    return UserMessageResponse(
        message="User updated successfully", user=to_user_out(user)
    )


@router.delete("/{user_id}", response_model=UserMessageResponse)
def delete_user(
    user_id: int,
    identity: Identity = Depends(require_identity),
    accounts: UserAccountService = Depends(get_user_account_service),
):
    user = accounts.delete_user(identity, user_id)
    return UserMessageResponse(
        message="User deleted successfully", user=to_user_out(user)
    )
