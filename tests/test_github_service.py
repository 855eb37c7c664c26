"""Tests for the GitHub API client."""

import httpx
import pytest

from crm.exceptions import (
    InputValidationError,
    RateLimitedError,
    UpstreamError,
    UpstreamNotFoundError,
)
from crm.services.github import GitHubService, is_valid_repo_path


def service_for(handler) -> GitHubService:
    return GitHubService(transport=httpx.MockTransport(handler))


class TestRepoPath:
    @pytest.mark.parametrize("path", ["octocat/Hello-World", "a/b", "my.org/repo_name-2"])
    def test_valid(self, path):
        assert is_valid_repo_path(path)

    @pytest.mark.parametrize("path", ["", "octocat", "a/b/c", "/repo", "owner/", "own er/repo"])
    def test_invalid(self, path):
        assert not is_valid_repo_path(path)


class TestGetRepositoryData:
    @pytest.mark.asyncio
    async def test_maps_payload(self, fake_github):
        fake_github.add_repo("octocat/Hello-World", stars=80, forks=9, open_issues=1)

        repo = await fake_github.service().get_repository_data("octocat/Hello-World")

        assert repo.owner == "octocat"
        assert repo.name == "Hello-World"
        assert repo.url == "https://github.com/octocat/Hello-World"
        assert (repo.stars, repo.forks, repo.open_issues) == (80, 9, 1)
        assert repo.created_at == 1296068472
        assert repo.language == "Python"
        assert repo.is_archived is False

    @pytest.mark.asyncio
    async def test_sends_github_headers(self, fake_github):
        fake_github.add_repo("octocat/Hello-World")
        await fake_github.service().get_repository_data("octocat/Hello-World")

        request = fake_github.requests[0]
        assert request.url.path == "/repos/octocat/Hello-World"
        assert request.headers["accept"] == "application/vnd.github.v3+json"
        assert request.headers["user-agent"] == "Simple-CRM-App"
        assert "authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_token_sent_when_configured(self, fake_github):
        fake_github.add_repo("octocat/Hello-World")
        service = fake_github.service()
        service.settings = service.settings.model_copy(update={"github_token": "ghp_test"})

        await service.get_repository_data("octocat/Hello-World")
        assert fake_github.requests[0].headers["authorization"] == "Bearer ghp_test"

    @pytest.mark.asyncio
    async def test_not_found(self, fake_github):
        with pytest.raises(UpstreamNotFoundError) as exc_info:
            await fake_github.service().get_repository_data("octocat/missing")
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [403, 429])
    async def test_rate_limited(self, fake_github, status_code):
        fake_github.statuses["octocat/Hello-World"] = status_code
        with pytest.raises(RateLimitedError):
            await fake_github.service().get_repository_data("octocat/Hello-World")

    @pytest.mark.asyncio
    async def test_server_error(self, fake_github):
        fake_github.statuses["octocat/Hello-World"] = 500
        with pytest.raises(UpstreamError) as exc_info:
            await fake_github.service().get_repository_data("octocat/Hello-World")
        assert exc_info.value.message == "GitHub API error: 500 Internal Server Error"

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(UpstreamError) as exc_info:
            await service_for(handler).get_repository_data("octocat/Hello-World")
        assert "timed out" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamError):
            await service_for(handler).get_repository_data("octocat/Hello-World")

    @pytest.mark.asyncio
    async def test_unexpected_payload(self):
        def handler(request):
            return httpx.Response(200, json={"unexpected": True})

        with pytest.raises(UpstreamError) as exc_info:
            await service_for(handler).get_repository_data("octocat/Hello-World")
        assert exc_info.value.message == "GitHub returned an unexpected response"

    @pytest.mark.asyncio
    async def test_invalid_path_never_calls_github(self, fake_github):
        with pytest.raises(InputValidationError):
            await fake_github.service().get_repository_data("not a path")
        assert fake_github.requests == []


class TestCheckExists:
    @pytest.mark.asyncio
    async def test_exists(self, fake_github):
        fake_github.add_repo("octocat/Hello-World")
        assert await fake_github.service().check_exists("octocat/Hello-World") is True

    @pytest.mark.asyncio
    async def test_missing(self, fake_github):
        assert await fake_github.service().check_exists("octocat/missing") is False

    @pytest.mark.asyncio
    async def test_errors_are_false(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        assert await service_for(handler).check_exists("octocat/Hello-World") is False

    @pytest.mark.asyncio
    async def test_invalid_path_is_false(self, fake_github):
        assert await fake_github.service().check_exists("nope") is False
        assert fake_github.requests == []
