"""Project API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from crm.api.dependencies import get_current_user, get_project_repository
from crm.exceptions import NotFoundError
from crm.schemas.common import ApiResponse
from crm.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from crm.services.auth import CurrentUser
from crm.services.projects import ProjectRepository

router = APIRouter(prefix="/projects", tags=["projects"])

PROJECT_NOT_FOUND = "Project not found"


@router.get("", response_model=ApiResponse[list[ProjectResponse]])
async def get_projects(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    repository: Annotated[ProjectRepository, Depends(get_project_repository)],
):
    """Get all projects for the current user, newest first."""
    projects = repository.list_for_user(current_user.id)
    return ApiResponse[list[ProjectResponse]](
        data=[ProjectResponse.from_document(project) for project in projects],
    )


@router.post("", response_model=ApiResponse[ProjectResponse], status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    repository: Annotated[ProjectRepository, Depends(get_project_repository)],
):
    """Create a new project."""
    project = repository.create(current_user.id, project_data)
    return ApiResponse[ProjectResponse](data=ProjectResponse.from_document(project))


@router.get("/{project_id}", response_model=ApiResponse[ProjectResponse])
async def get_project(
    project_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    repository: Annotated[ProjectRepository, Depends(get_project_repository)],
):
    """Get a specific project."""
    project = repository.get(current_user.id, project_id)
    if project is None:
        raise NotFoundError(PROJECT_NOT_FOUND)
    return ApiResponse[ProjectResponse](data=ProjectResponse.from_document(project))


@router.put("/{project_id}", response_model=ApiResponse[ProjectResponse])
async def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    repository: Annotated[ProjectRepository, Depends(get_project_repository)],
):
    """Update a project."""
    project = repository.update(current_user.id, project_id, project_data)
    if project is None:
        raise NotFoundError(PROJECT_NOT_FOUND)
    return ApiResponse[ProjectResponse](data=ProjectResponse.from_document(project))


@router.delete("/{project_id}", response_model=ApiResponse)
async def delete_project(
    project_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    repository: Annotated[ProjectRepository, Depends(get_project_repository)],
):
    """Delete a project."""
    if not repository.delete(current_user.id, project_id):
        raise NotFoundError(PROJECT_NOT_FOUND)
    return ApiResponse(message="Project deleted successfully")
