"""Project repository backed by the MongoDB ``projects`` collection."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from crm.exceptions import ConflictError, InputValidationError
from crm.schemas.project import ProjectCreate, ProjectUpdate
from crm.services.ai_comments import CommentService
from crm.services.github import INVALID_REPO_PATH_MESSAGE, GitHubService, is_valid_repo_path

logger = logging.getLogger(__name__)

NAME_EXISTS_MESSAGE = "Project with this name already exists"
REPOSITORY_EXISTS_MESSAGE = "Repository already exists in your projects"


@dataclass
class ExistenceCheck:
    """Result of checking a repository path locally and on GitHub."""

    exists_locally: bool
    exists_on_remote: bool


def _parse_object_id(project_id: str) -> ObjectId | None:
    try:
        return ObjectId(project_id)
    except (InvalidId, TypeError):
        return None


class ProjectRepository:
    """Per-user project storage.

    Every lookup is scoped to ``(id, userId)`` so a project owned by someone
    else behaves exactly like one that does not exist.
    """

    def __init__(
        self,
        collection: Collection,
        github: GitHubService | None = None,
        comments: CommentService | None = None,
    ) -> None:
        self.collection = collection
        self.github = github
        self.comments = comments

    def list_for_user(self, user_id: int) -> list[dict[str, Any]]:
        """All of a user's projects, newest external creation time first."""
        return list(self.collection.find({"userId": user_id}).sort("createdAt", DESCENDING))

    def get(self, user_id: int, project_id: str) -> dict[str, Any] | None:
        oid = _parse_object_id(project_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid, "userId": user_id})

    def _insert(self, document: dict[str, Any]) -> dict[str, Any]:
        now = datetime.now(UTC)
        document["insertedAt"] = now
        document["updatedAt"] = now
        try:
            result = self.collection.insert_one(document)
        except DuplicateKeyError as e:
            raise ConflictError(self._conflict_message(document)) from e
        document["_id"] = result.inserted_id
        return document

    def _conflict_message(self, document: dict[str, Any]) -> str:
        github_path = document.get("githubPath")
        if github_path and self.collection.find_one(
            {"userId": document["userId"], "githubPath": github_path}, {"_id": 1}
        ):
            return REPOSITORY_EXISTS_MESSAGE
        return NAME_EXISTS_MESSAGE

    def create(self, user_id: int, data: ProjectCreate) -> dict[str, Any]:
        """Store a manually entered project."""
        document = data.model_dump(by_alias=True)
        document["userId"] = user_id
        project = self._insert(document)
        logger.info(f"User {user_id} created project {project['_id']}")
        return project

    async def create_from_github_import(self, user_id: int, repo_path: str) -> dict[str, Any]:
        """Import a GitHub repository as a project."""
        if not is_valid_repo_path(repo_path):
            raise InputValidationError(
                INVALID_REPO_PATH_MESSAGE,
                details=[{"field": "repoPath", "message": INVALID_REPO_PATH_MESSAGE}],
            )
        if self.collection.find_one({"userId": user_id, "githubPath": repo_path}, {"_id": 1}):
            raise ConflictError(REPOSITORY_EXISTS_MESSAGE)

        repo = await self.github.get_repository_data(repo_path)
        ai_comment = await self.comments.generate_comment(repo)

        document = {
            "owner": repo.owner,
            "name": repo.name,
            "url": repo.url,
            "stars": repo.stars,
            "forks": repo.forks,
            "openIssues": repo.open_issues,
            "createdAt": repo.created_at,
            # Keep the path as requested so later duplicate checks match
            "githubPath": repo_path,
            "aiComment": ai_comment,
            "userId": user_id,
        }
        project = self._insert(document)
        logger.info(f"User {user_id} imported {repo_path} as project {project['_id']}")
        return project

    async def check_exists(self, user_id: int, repo_path: str) -> ExistenceCheck:
        exists_locally = (
            self.collection.find_one({"userId": user_id, "githubPath": repo_path}, {"_id": 1})
            is not None
        )
        exists_on_remote = await self.github.check_exists(repo_path)
        return ExistenceCheck(exists_locally=exists_locally, exists_on_remote=exists_on_remote)

    def update(self, user_id: int, project_id: str, changes: ProjectUpdate) -> dict[str, Any] | None:
        """Apply the provided fields to a project the user owns."""
        oid = _parse_object_id(project_id)
        if oid is None:
            return None

        current = self.collection.find_one({"_id": oid, "userId": user_id})
        fields = changes.changes()
        if current is None or not fields:
            return current

        if "name" in fields and self.collection.find_one(
            {"userId": user_id, "name": fields["name"], "_id": {"$ne": oid}}, {"_id": 1}
        ):
            raise ConflictError(NAME_EXISTS_MESSAGE)

        fields["updatedAt"] = datetime.now(UTC)
        try:
            return self.collection.find_one_and_update(
                {"_id": oid, "userId": user_id},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise ConflictError(NAME_EXISTS_MESSAGE) from e

    def delete(self, user_id: int, project_id: str) -> bool:
        oid = _parse_object_id(project_id)
        if oid is None:
            return False
        result = self.collection.delete_one({"_id": oid, "userId": user_id})
        return result.deleted_count == 1

    def delete_all_for_user(self, user_id: int) -> int:
        """Remove every project a user owns."""
        result = self.collection.delete_many({"userId": user_id})
        logger.info(f"Deleted {result.deleted_count} projects for user {user_id}")
        return result.deleted_count
