"""GitHub import API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from crm.api.dependencies import get_current_user, get_project_repository
from crm.schemas.common import ApiResponse
from crm.schemas.github import GitHubImportRequest, RepositoryCheck
from crm.schemas.project import ProjectResponse
from crm.services.auth import CurrentUser
from crm.services.projects import ProjectRepository

router = APIRouter(prefix="/github", tags=["github"])


@router.post("", response_model=ApiResponse[ProjectResponse], status_code=status.HTTP_201_CREATED)
async def import_repository(
    import_data: GitHubImportRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    repository: Annotated[ProjectRepository, Depends(get_project_repository)],
):
    """Add a GitHub repository to the current user's projects."""
    project = await repository.create_from_github_import(current_user.id, import_data.repo_path)
    return ApiResponse[ProjectResponse](
        data=ProjectResponse.from_document(project),
        message="GitHub repository added successfully",
    )


@router.get("/check/{repo_path:path}", response_model=ApiResponse[RepositoryCheck])
async def check_repository(
    repo_path: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    repository: Annotated[ProjectRepository, Depends(get_project_repository)],
):
    """Check whether a repository is already imported and whether it exists on GitHub."""
    result = await repository.check_exists(current_user.id, repo_path.strip())

    if result.exists_locally:
        message = "Repository already exists in your projects"
    elif result.exists_on_remote:
        message = "Repository found on GitHub and can be added"
    else:
        message = "Repository not found on GitHub"

    return ApiResponse[RepositoryCheck](
        data=RepositoryCheck(
            exists_locally=result.exists_locally,
            exists_on_remote=result.exists_on_remote,
        ),
        message=message,
    )
