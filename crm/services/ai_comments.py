"""AI-generated project comments using Claude, with a deterministic fallback."""

import logging

import anthropic

from crm.config import get_settings
from crm.schemas.project import MAX_AI_COMMENT_LENGTH
from crm.services.github import RepositoryData
from crm.services.llm_prompts import PROJECT_COMMENT_SYSTEM_PROMPT, get_project_comment_prompt

logger = logging.getLogger(__name__)


def fallback_comment(repo: RepositoryData) -> str:
    """Build a comment from owner, name, language and star count."""
    comment = f"{repo.owner}/{repo.name}"

    if repo.language:
        comment += f" - {repo.language} project"

    if repo.stars > 1000:
        comment += f" with {repo.stars:,} stars"
    elif repo.stars > 100:
        comment += f" ({repo.stars} stars)"

    return comment


class CommentService:
    """Service for generating short repository comments.

    Generation is best-effort: any failure is logged and replaced by
    :func:`fallback_comment`, so callers never see an error from here.
    """

    def __init__(self) -> None:
        settings = get_settings()
        self.api_key = settings.anthropic_api_key
        self.model = settings.ai_comment_model
        self.timeout = settings.ai_comment_timeout

    @property
    def is_configured(self) -> bool:
        """Check if the Anthropic API is configured."""
        return bool(self.api_key)

    async def generate_comment(self, repo: RepositoryData) -> str:
        if not self.is_configured:
            logger.info("Anthropic API key not configured, using fallback comment")
            return fallback_comment(repo)

        try:
            async with anthropic.AsyncAnthropic(
                api_key=self.api_key, timeout=self.timeout, max_retries=1
            ) as client:
                message = await client.messages.create(
                    model=self.model,
                    max_tokens=150,
                    temperature=0.7,
                    system=PROJECT_COMMENT_SYSTEM_PROMPT,
                    messages=[{"role": "user", "content": get_project_comment_prompt(repo)}],
                )
            text = "".join(
                block.text for block in message.content if getattr(block, "type", None) == "text"
            ).strip()
        except Exception as e:
            logger.error(f"AI comment generation failed for {repo.github_path}: {e}")
            return fallback_comment(repo)

        if not text:
            logger.warning(f"Empty AI comment for {repo.github_path}, using fallback")
            return fallback_comment(repo)

        return text[:MAX_AI_COMMENT_LENGTH]


def get_comment_service() -> CommentService:
    """Get a comment service instance."""
    return CommentService()
