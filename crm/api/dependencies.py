"""FastAPI dependencies for authentication and data access."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from crm.database import get_db
from crm.documents import DocumentStore, get_document_store
from crm.exceptions import UnauthorizedError
from crm.services.ai_comments import CommentService, get_comment_service
from crm.services.auth import CurrentUser, verify_access_token
from crm.services.credentials import CredentialStore
from crm.services.github import GitHubService, get_github_service
from crm.services.projects import ProjectRepository

# Missing headers are reported through our own error envelope
security = HTTPBearer(auto_error=False)


def get_credential_store(
    db: Annotated[Session, Depends(get_db)],
) -> CredentialStore:
    """Get credential store bound to the request's session."""
    return CredentialStore(db)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> CurrentUser:
    """Resolve the bearer token to the user it was issued for."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()

    user_id = verify_access_token(credentials.credentials)

    user = store.find_by_id(user_id)
    if user is None:
        # Valid signature, but the account has since been deleted
        raise UnauthorizedError("Invalid token.")

    return CurrentUser(id=user.id, email=user.email)


def get_project_repository(
    documents: Annotated[DocumentStore, Depends(get_document_store)],
    github: Annotated[GitHubService, Depends(get_github_service)],
    comments: Annotated[CommentService, Depends(get_comment_service)],
) -> ProjectRepository:
    """Get project repository with its collaborators."""
    return ProjectRepository(documents.projects, github=github, comments=comments)
