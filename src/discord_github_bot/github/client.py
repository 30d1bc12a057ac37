"""
GitHub REST API client.

This module defines the `GitHubClient` capability the interaction handlers
depend on, and `GitHubAPIClient`, its aiohttp implementation. Tests provide
their own implementations of the protocol.

Read-only calls are retried with exponential backoff on transport errors.
Issue creation is never retried: a timed-out POST may still have created
the issue, and a second attempt would file a duplicate.
"""

import asyncio
import time
from typing import Any, Dict, List, Optional, Protocol

import aiohttp
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from discord_github_bot import __version__
from discord_github_bot.cache import KeyedTTLCache
from discord_github_bot.config import GitHubConfig
from discord_github_bot.github.models import (
    CommitComparison,
    CreatedIssue,
    Release,
    Repository,
)
from discord_github_bot.utils.exceptions import GitHubAPIError
from discord_github_bot.utils.logging import (
    get_logger,
    log_function_call,
    log_http_request,
    log_http_response,
    generate_correlation_id,
)


class GitHubClient(Protocol):
    """The GitHub operations the bot needs."""

    async def list_releases(self, owner: str, repo: str, limit: int) -> List[Release]:
        ...

    async def compare_commits(self, owner: str, repo: str, base: str, head: str) -> CommitComparison:
        ...

    async def create_issue(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str,
        labels: List[str],
    ) -> CreatedIssue:
        ...

    async def get_repository(self, owner: str, repo: str) -> Repository:
        ...

    async def fetch_text(self, url: str) -> str:
        ...


_RETRYABLE = (aiohttp.ClientConnectionError, asyncio.TimeoutError)


class GitHubAPIClient:
    """
    aiohttp implementation of `GitHubClient`.

    Attributes:
        config: GitHub configuration (token, API URL, timeout)
        session: Lazily created HTTP session
    """

    def __init__(self, config: GitHubConfig, repository_ttl: float = 3600) -> None:
        """
        Initialize the GitHub client.

        Args:
            config: GitHub configuration settings
            repository_ttl: Seconds a repository lookup stays cached
        """
        self.config = config
        self.logger = get_logger(__name__)
        self.session: Optional[aiohttp.ClientSession] = None
        self._closed = False
        self._repositories: KeyedTTLCache[Repository] = KeyedTTLCache(
            repository_ttl, name="repositories"
        )

        log_function_call(
            "GitHubAPIClient.__init__",
            api_url=config.api_url,
            timeout=config.timeout,
        )

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """
        Ensure that we have an active HTTP session.

        Raises:
            GitHubAPIError: If the client has been closed
        """
        if self._closed:
            raise GitHubAPIError("GitHub client has been closed")

        if self.session is None or self.session.closed:
            headers = {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": f"Discord-GitHub-Bot/{__version__}",
            }
            if self.config.token:
                headers["Authorization"] = f"Bearer {self.config.token}"

            self.session = aiohttp.ClientSession(
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.config.timeout),
                raise_for_status=False,
            )
            self.logger.debug("Created new HTTP session for GitHub client")

        return self.session

    def _url(self, path: str) -> str:
        return f"{self.config.api_url.rstrip('/')}/{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        expect_json: bool = True,
    ) -> Any:
        """
        Perform one HTTP request and decode the response.

        Raises:
            GitHubAPIError: On a non-2xx status or an undecodable body
        """
        correlation_id = generate_correlation_id()
        log_http_request(
            method=method,
            url=url,
            body=json_body,
            service="github",
            correlation_id=correlation_id,
        )

        session = await self._ensure_session()
        start_time = time.time()

        async with session.request(method, url, params=params, json=json_body) as response:
            response_time_ms = (time.time() - start_time) * 1000
            text = await response.text()

            if response.status >= 400:
                log_http_response(
                    status_code=response.status,
                    response_time_ms=response_time_ms,
                    response_size=len(text),
                    error=text[:200],
                    service="github",
                    correlation_id=correlation_id,
                )
                raise GitHubAPIError(
                    f"GitHub API returned {response.status}",
                    context={"method": method, "url": url, "status": response.status},
                )

            log_http_response(
                status_code=response.status,
                response_time_ms=response_time_ms,
                response_size=len(text),
                service="github",
                correlation_id=correlation_id,
            )

            if not expect_json:
                return text
            try:
                return await response.json(content_type=None)
            except ValueError as e:
                raise GitHubAPIError(
                    "Invalid JSON in GitHub API response",
                    context={"url": url},
                    original_error=e,
                )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type(_RETRYABLE),
        reraise=True,
    )
    async def _get(self, url: str, params: Optional[Dict[str, Any]] = None, expect_json: bool = True) -> Any:
        return await self._request("GET", url, params=params, expect_json=expect_json)

    async def _get_or_raise(self, what: str, url: str, **kwargs: Any) -> Any:
        try:
            return await self._get(url, **kwargs)
        except GitHubAPIError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise GitHubAPIError(f"Failed to {what}", context={"url": url}, original_error=e)

    async def list_releases(self, owner: str, repo: str, limit: int) -> List[Release]:
        """List the most recent releases of `owner/repo`, newest first."""
        data = await self._get_or_raise(
            "list releases",
            self._url(f"repos/{owner}/{repo}/releases"),
            params={"per_page": limit},
        )
        return [Release.model_validate(item) for item in data]

    async def compare_commits(self, owner: str, repo: str, base: str, head: str) -> CommitComparison:
        """Compare two refs of `owner/repo`."""
        data = await self._get_or_raise(
            "compare commits",
            self._url(f"repos/{owner}/{repo}/compare/{base}...{head}"),
        )
        return CommitComparison.from_api(data)

    async def create_issue(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str,
        labels: List[str],
    ) -> CreatedIssue:
        """
        Create an issue in `owner/repo`.

        Args:
            owner: Repository owner
            repo: Repository name
            title: Issue title
            body: Markdown issue body
            labels: Labels to apply (omitted from the request when empty)

        Returns:
            Number and URL of the new issue

        Raises:
            GitHubAPIError: If the issue could not be created
        """
        self.logger.info(
            "Creating GitHub issue",
            repository=f"{owner}/{repo}",
            title=title,
            labels=labels,
        )

        payload: Dict[str, Any] = {"title": title, "body": body}
        if labels:
            payload["labels"] = list(labels)

        url = self._url(f"repos/{owner}/{repo}/issues")
        try:
            data = await self._request("POST", url, json_body=payload)
        except GitHubAPIError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise GitHubAPIError("Failed to create issue", context={"url": url}, original_error=e)

        return CreatedIssue.model_validate(data)

    async def get_repository(self, owner: str, repo: str) -> Repository:
        """Look up `owner/repo`; results are cached per repository."""

        async def fetch() -> Repository:
            data = await self._get_or_raise(
                "get repository",
                self._url(f"repos/{owner}/{repo}"),
            )
            return Repository.model_validate(data)

        return await self._repositories.get_or_fetch(f"{owner}/{repo}", fetch)

    async def fetch_text(self, url: str) -> str:
        """Fetch a raw text document, e.g. an issue template."""
        return await self._get_or_raise("fetch document", url, expect_json=False)

    async def close(self) -> None:
        """Close the client and clean up resources."""
        if self._closed:
            return

        self._closed = True

        if self.session and not self.session.closed:
            await self.session.close()
            self.logger.debug("Closed GitHub client HTTP session")

    async def __aenter__(self) -> "GitHubAPIClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
