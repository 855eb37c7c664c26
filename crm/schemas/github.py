"""GitHub import schemas."""

from pydantic import ConfigDict, Field

from crm.schemas.common import CamelModel


class GitHubImportRequest(CamelModel):
    """Import a repository by its owner/repo path."""

    model_config = ConfigDict(str_strip_whitespace=True)

    repo_path: str = Field(..., min_length=1, max_length=255)


class RepositoryCheck(CamelModel):
    """Whether a repository is already imported and whether GitHub knows it."""

    exists_locally: bool
    exists_on_remote: bool
