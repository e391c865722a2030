"""Tests for GitHubKitTransport.

Tests cover:
- Lazy githubkit client creation with auto retry disabled
- Conversion of successful and failed responses
- Network errors surfacing as GitHubNetworkError
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from githubkit.exception import RequestError, RequestFailed

from ospo_crawler.github import (
    GitHubKitTransport,
    GitHubNetworkError,
    GitHubRequest,
    Transport,
)


def make_mock_response(
    status_code: int = 200,
    content: bytes = b'[{"id": 1}]',
    json_body=None,
    headers: dict[str, str] | None = None,
):
    """Create a MagicMock that behaves like a githubkit Response."""
    response = MagicMock()
    response.status_code = status_code
    response.content = content
    response.text = content.decode()
    response.json.return_value = json_body if json_body is not None else [{"id": 1}]
    response.headers = httpx.Headers(
        headers or {"Content-Type": "application/json; charset=utf-8"}
    )
    return response


@pytest.fixture
def mock_github():
    """A mock githubkit GitHub instance."""
    github = MagicMock()
    github.arequest = AsyncMock()
    return github


class TestGitHubKitTransportInit:
    """Tests for client construction."""

    def test_is_a_transport(self):
        assert isinstance(GitHubKitTransport(timeout=1.0), Transport)

    def test_client_created_without_auto_retry(self):
        with patch("ospo_crawler.github.transport.GitHub") as mock_class:
            transport = GitHubKitTransport(timeout=12.0)
            _ = transport._github

            mock_class.assert_called_once_with(auto_retry=False, timeout=12.0)

    def test_timeout_defaults_to_settings(self):
        transport = GitHubKitTransport()
        assert transport._timeout == 30.0

    def test_request_defaults_to_githubkit_transport(self):
        request = GitHubRequest()
        assert isinstance(request.transport, GitHubKitTransport)


class TestGitHubKitTransportGet:
    """Tests for get()."""

    async def test_success_response(self, mock_github):
        mock_github.arequest.return_value = make_mock_response(
            headers={
                "Content-Type": "application/json",
                "Link": '<https://api.github.com/x?page=2>; rel="next"',
                "X-RateLimit-Remaining": "4999",
            }
        )
        transport = GitHubKitTransport(github=mock_github)

        response = await transport.get("https://api.github.com/x", headers={"A": "1"})

        assert response.status_code == 200
        assert response.body == [{"id": 1}]
        assert response.headers["x-ratelimit-remaining"] == "4999"
        assert "rel=\"next\"" in response.headers["link"]
        assert response.url == "https://api.github.com/x"
        assert response.elapsed_ms >= 0
        mock_github.arequest.assert_awaited_once_with(
            "GET", "https://api.github.com/x", headers={"A": "1"}
        )

    async def test_text_body(self, mock_github):
        mock_github.arequest.return_value = make_mock_response(
            content=b"plain", headers={"Content-Type": "text/plain"}
        )
        transport = GitHubKitTransport(github=mock_github)

        response = await transport.get("https://api.github.com/x", headers={})

        assert response.body == "plain"

    async def test_empty_body(self, mock_github):
        mock_github.arequest.return_value = make_mock_response(status_code=204, content=b"")
        transport = GitHubKitTransport(github=mock_github)

        response = await transport.get("https://api.github.com/x", headers={})

        assert response.body is None

    async def test_invalid_json_falls_back_to_text(self, mock_github):
        mock_response = make_mock_response(content=b"<html>")
        mock_response.json.side_effect = ValueError("not json")
        mock_github.arequest.return_value = mock_response
        transport = GitHubKitTransport(github=mock_github)

        response = await transport.get("https://api.github.com/x", headers={})

        assert response.body == "<html>"

    async def test_request_failed_becomes_response(self, mock_github):
        """Error statuses are returned for the fetcher to classify."""
        error_response = make_mock_response(
            status_code=500, content=b'{"message": "oops"}', json_body={"message": "oops"}
        )
        mock_github.arequest.side_effect = RequestFailed(error_response)
        transport = GitHubKitTransport(github=mock_github)

        response = await transport.get("https://api.github.com/x", headers={})

        assert response.status_code == 500
        assert response.body == {"message": "oops"}
        assert not response.is_success

    async def test_request_error_becomes_network_error(self, mock_github):
        mock_github.arequest.side_effect = RequestError(ConnectionError("refused"))
        transport = GitHubKitTransport(github=mock_github)

        with pytest.raises(GitHubNetworkError) as exc_info:
            await transport.get("https://api.github.com/x", headers={})

        assert exc_info.value.url == "https://api.github.com/x"
        assert exc_info.value.status_code is None

    async def test_context_manager_drops_client(self, mock_github):
        async with GitHubKitTransport(github=mock_github) as transport:
            assert transport._client is mock_github
        assert transport._client is None
