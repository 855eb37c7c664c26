"""Document store (MongoDB) client and collection management."""

import logging

from fastapi import Request
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from crm.config import Settings

logger = logging.getLogger(__name__)

PROJECTS_COLLECTION = "projects"


class DocumentStore:
    """Owns the Mongo client (connection pool) and exposes the collections we use."""

    def __init__(self, client: MongoClient, database_name: str) -> None:
        self.client = client
        self.db = client[database_name]

    @classmethod
    def from_settings(cls, settings: Settings) -> "DocumentStore":
        client: MongoClient = MongoClient(
            settings.mongodb_url,
            maxPoolSize=settings.mongodb_max_pool_size,
            waitQueueTimeoutMS=settings.mongodb_timeout_ms,
            serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
            connectTimeoutMS=settings.mongodb_timeout_ms,
            connect=False,
        )
        return cls(client, settings.mongodb_database)

    @property
    def projects(self) -> Collection:
        return self.db[PROJECTS_COLLECTION]

    def ensure_indexes(self) -> None:
        """Create the indexes that enforce per-user uniqueness."""
        self.projects.create_index(
            [("userId", ASCENDING), ("name", ASCENDING)],
            unique=True,
            name="user_name_unique",
        )
        # Manual projects have no githubPath and must not collide with each other
        self.projects.create_index(
            [("userId", ASCENDING), ("githubPath", ASCENDING)],
            unique=True,
            partialFilterExpression={"githubPath": {"$exists": True}},
            name="user_github_path_unique",
        )
        self.projects.create_index(
            [("userId", ASCENDING), ("createdAt", DESCENDING)],
            name="user_created_at",
        )
        logger.info("MongoDB project indexes ensured")

    def ping(self) -> bool:
        """Return True if the server answers a ping."""
        try:
            self.db.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False

    def close(self) -> None:
        self.client.close()
        logger.info("MongoDB client closed")


def get_document_store(request: Request) -> DocumentStore:
    """Dependency that provides the application's DocumentStore."""
    return request.app.state.documents
