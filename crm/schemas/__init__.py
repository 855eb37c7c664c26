"""Pydantic schemas for API requests and responses."""

from crm.schemas.auth import AuthData, UserLogin, UserRegister, UserResponse, UserUpdate
from crm.schemas.common import ApiResponse, HealthStatus
from crm.schemas.github import GitHubImportRequest, RepositoryCheck
from crm.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate

__all__ = [
    "ApiResponse",
    "HealthStatus",
    "UserRegister",
    "UserLogin",
    "UserUpdate",
    "UserResponse",
    "AuthData",
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectResponse",
    "GitHubImportRequest",
    "RepositoryCheck",
]
