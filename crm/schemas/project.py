"""Project schemas."""

from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field

from crm.schemas.common import CamelModel

URL_PATTERN = r"^https?://\S+$"
MAX_AI_COMMENT_LENGTH = 500


class ProjectCreate(CamelModel):
    """Create a project by hand."""

    model_config = ConfigDict(str_strip_whitespace=True)

    owner: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., max_length=2048, pattern=URL_PATTERN)
    stars: int = Field(..., ge=0)
    forks: int = Field(..., ge=0)
    open_issues: int = Field(..., ge=0)
    created_at: int = Field(..., ge=0)  # Unix timestamp of the external resource


class ProjectUpdate(CamelModel):
    """Partial project update; omitted fields are left untouched."""

    model_config = ConfigDict(str_strip_whitespace=True)

    owner: str | None = Field(None, min_length=1, max_length=255)
    name: str | None = Field(None, min_length=1, max_length=255)
    url: str | None = Field(None, max_length=2048, pattern=URL_PATTERN)
    stars: int | None = Field(None, ge=0)
    forks: int | None = Field(None, ge=0)
    open_issues: int | None = Field(None, ge=0)
    created_at: int | None = Field(None, ge=0)
    ai_comment: str | None = Field(None, max_length=MAX_AI_COMMENT_LENGTH)

    def changes(self) -> dict[str, Any]:
        """Provided fields keyed by their stored (camelCase) names."""
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)


class ProjectResponse(CamelModel):
    """Project response."""

    id: str
    owner: str
    name: str
    url: str
    stars: int
    forks: int
    open_issues: int
    created_at: int
    github_path: str | None = None
    ai_comment: str | None = None
    user_id: int
    inserted_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "ProjectResponse":
        data = {key: value for key, value in document.items() if key != "_id"}
        data["id"] = str(document["_id"])
        return cls.model_validate(data)
