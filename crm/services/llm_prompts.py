"""Prompt templates for AI-generated project comments."""

from crm.services.github import RepositoryData

PROJECT_COMMENT_SYSTEM_PROMPT = """You write one or two sentence comments about GitHub repositories for a personal bookmark list.

Rules:
- Plain text only, no markdown, no quotes around the answer
- Highlight what makes the project interesting
- Stay under 300 characters"""


def get_project_comment_prompt(repo: RepositoryData) -> str:
    """Generate the user prompt describing a repository."""
    prompt = f'Generate a short comment about the GitHub repository "{repo.owner}/{repo.name}".'

    if repo.description:
        prompt += f" Description: {repo.description}"

    if repo.language:
        prompt += f" Primary language: {repo.language}"

    prompt += f" Stats: {repo.stars} stars, {repo.forks} forks, {repo.open_issues} open issues."

    if repo.is_private:
        prompt += " This is a private repository."

    if repo.is_archived:
        prompt += " This repository is archived."

    prompt += " Write a brief, engaging comment that highlights what makes this project interesting."
    return prompt
