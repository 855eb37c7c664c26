"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from crm.api.dependencies import get_credential_store, get_current_user, get_project_repository
from crm.exceptions import UnauthorizedError
from crm.schemas.auth import AuthData, UserLogin, UserRegister, UserResponse, UserUpdate
from crm.schemas.common import ApiResponse
from crm.services.auth import CurrentUser, create_access_token
from crm.services.credentials import CredentialStore
from crm.services.projects import ProjectRepository

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=ApiResponse[AuthData], status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    store: Annotated[CredentialStore, Depends(get_credential_store)],
):
    """Register a new user."""
    user = store.create(user_data.email, user_data.password)

    return ApiResponse[AuthData](
        data=AuthData(user=UserResponse.model_validate(user), token=create_access_token(user.id)),
    )


@router.post("/login", response_model=ApiResponse[AuthData])
async def login(
    credentials: UserLogin,
    store: Annotated[CredentialStore, Depends(get_credential_store)],
):
    """Login with email and password."""
    user = store.authenticate(credentials.email, credentials.password)

    return ApiResponse[AuthData](
        data=AuthData(user=UserResponse.model_validate(user), token=create_access_token(user.id)),
    )


@router.get("/me", response_model=ApiResponse[UserResponse])
async def get_me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
):
    """Get current user information."""
    return ApiResponse[UserResponse](data=UserResponse(id=current_user.id, email=current_user.email))


@router.put("/me", response_model=ApiResponse[UserResponse])
async def update_me(
    user_data: UserUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
):
    """Change the current user's email and/or password."""
    user = store.update(current_user.id, email=user_data.email, password=user_data.password)
    if user is None:
        raise UnauthorizedError("Invalid token.")

    return ApiResponse[UserResponse](data=UserResponse.model_validate(user))


@router.delete("/me", response_model=ApiResponse)
async def delete_me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    projects: Annotated[ProjectRepository, Depends(get_project_repository)],
):
    """Delete the current account together with all of its projects."""
    # Projects first: if this fails the account still exists and the call can be retried
    projects.delete_all_for_user(current_user.id)
    store.delete(current_user.id)

    return ApiResponse(message="Account deleted successfully")
