"""GitHub GraphQL/REST client for contribution totals and repository stars."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from statscard.config.settings import settings
from statscard.fetchers.contracts import ContributionScope, ContributionTotals, ContributionWindow
from statscard.utils.logger import redact_secrets
from statscard.utils.retry import linear_backoff, retry_async

logger = logging.getLogger(__name__)

REST_PAGE_SIZE = 100

CONTRIBUTIONS_QUERY = """
query($login: String!, $from: DateTime!, $to: DateTime!, $privacy: RepositoryPrivacy) {
  user(login: $login) {
    contributionsCollection(from: $from, to: $to) {
      totalCommitContributions
      totalPullRequestContributions
      totalIssueContributions
      restrictedContributionsCount
    }
    repositoriesContributedTo(
      first: 1
      privacy: $privacy
      contributionTypes: [COMMIT, PULL_REQUEST, ISSUE, REPOSITORY]
    ) {
      totalCount
    }
  }
}
"""


class GitHubAPIError(RuntimeError):
    """GraphQL responded but reported errors."""


class AccountNotFound(LookupError):
    """GraphQL resolved the login to ``null``."""


class GitHubClient:
    """Thin async wrapper over the GitHub API with degrade-to-zero semantics."""

    def __init__(
        self,
        *,
        token: str | None = None,
        api_url: str | None = None,
        graphql_url: str | None = None,
        max_attempts: int | None = None,
        backoff_seconds: float | None = None,
        max_pages: int | None = None,
        page_delay_seconds: float | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleeper: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._token = (token if token is not None else settings.GITHUB_TOKEN) or None
        self._graphql_url = graphql_url or settings.GITHUB_GRAPHQL_URL
        self._max_attempts = max_attempts or settings.GITHUB_MAX_ATTEMPTS
        self._backoff = linear_backoff(
            settings.GITHUB_BACKOFF_SECONDS if backoff_seconds is None else backoff_seconds
        )
        self._max_pages = max_pages or settings.REST_MAX_PAGES
        self._page_delay = settings.REST_PAGE_DELAY_SECONDS if page_delay_seconds is None else page_delay_seconds
        self._sleep = sleeper

        headers = {
            "User-Agent": settings.USER_AGENT,
            "Accept": "application/vnd.github+json",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        self._client = httpx.AsyncClient(
            base_url=api_url or settings.GITHUB_API_URL,
            timeout=timeout_seconds or settings.HTTP_TIMEOUT_SECONDS,
            headers=headers,
            transport=transport,
        )

    @property
    def has_token(self) -> bool:
        return self._token is not None

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── Contributions (GraphQL) ──────────────────────────────

    async def fetch_contributions(self, login: str, window: ContributionWindow) -> ContributionTotals:
        """Contribution totals for ``login``, private-inclusive when the token allows it."""
        if not self.has_token:
            logger.warning("GITHUB_TOKEN is not configured; contribution stats will be zero")
            return ContributionTotals.zero()

        for include_private in (True, False):
            scope = ContributionScope.PRIVATE if include_private else ContributionScope.PUBLIC
            try:
                user = await self._query_contributions(login, window, include_private=include_private)
                return self._parse_contributions(user, include_private=include_private, scope=scope)
            except AccountNotFound:
                logger.warning(f"GitHub account {login} not found; contribution stats will be zero")
                return ContributionTotals.zero()
            except (httpx.HTTPError, GitHubAPIError, ValueError, KeyError, TypeError, AttributeError) as exc:
                logger.warning(f"{scope.value.capitalize()} contributions query for {login} failed: {redact_secrets(exc)}")

        logger.error(f"All contributions queries failed for {login}; falling back to zero")
        return ContributionTotals.zero()

    async def _query_contributions(
        self,
        login: str,
        window: ContributionWindow,
        *,
        include_private: bool,
    ) -> dict[str, Any]:
        variables = {
            "login": login,
            "from": window.start.isoformat(),
            "to": window.end.isoformat(),
            "privacy": None if include_private else "PUBLIC",
        }

        async def _post() -> httpx.Response:
            response = await self._client.post(
                self._graphql_url,
                json={"query": CONTRIBUTIONS_QUERY, "variables": variables},
            )
            if response.status_code >= 500:
                response.raise_for_status()
            return response

        response = await retry_async(
            _post,
            max_attempts=self._max_attempts,
            backoff=self._backoff,
            retry_on=(httpx.TransportError, httpx.HTTPStatusError),
            description=f"GraphQL contributions query for {login}",
            sleeper=self._sleep,
        )
        response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError("GraphQL returned a non-object body")
        if payload.get("errors"):
            messages = "; ".join(
                str(error.get("message", error)) if isinstance(error, dict) else str(error)
                for error in payload["errors"]
            )
            raise GitHubAPIError(messages)

        data = payload.get("data")
        if not isinstance(data, dict):
            raise ValueError("GraphQL response has no data object")
        user = data.get("user")
        if user is None:
            raise AccountNotFound(login)
        if not isinstance(user, dict):
            raise ValueError("GraphQL user is not an object")
        return user

    @staticmethod
    def _parse_contributions(
        user: dict[str, Any],
        *,
        include_private: bool,
        scope: ContributionScope,
    ) -> ContributionTotals:
        collection = user["contributionsCollection"]
        commits = int(collection["totalCommitContributions"])
        if include_private:
            commits += int(collection.get("restrictedContributionsCount") or 0)

        return ContributionTotals(
            total_commits=commits,
            total_prs=int(collection["totalPullRequestContributions"]),
            total_issues=int(collection["totalIssueContributions"]),
            total_contributed_to=int(user["repositoriesContributedTo"]["totalCount"]),
            scope=scope,
        )

    # ── Stars (REST pagination) ──────────────────────────────

    async def count_owned_stars(self, owner: str, *, is_org: bool) -> int:
        """Sum stargazers of non-fork public repositories owned by ``owner``."""
        if is_org:
            path, params = f"/orgs/{owner}/repos", {"type": "public"}
        else:
            path, params = f"/users/{owner}/repos", {"type": "owner"}

        try:
            repos = await self._paginate(path, params)
            return sum(
                int(repo.get("stargazers_count") or 0)
                for repo in repos
                if isinstance(repo, dict) and not repo.get("fork")
            )
        except (httpx.HTTPError, ValueError, TypeError) as exc:
            self._log_rest_failure(owner, exc)
            return 0

    async def count_starred(self, login: str) -> int:
        """Number of repositories starred by ``login``."""
        try:
            repos = await self._paginate(f"/users/{login}/starred", {})
        except (httpx.HTTPError, ValueError) as exc:
            self._log_rest_failure(login, exc)
            return 0
        return sum(1 for repo in repos if isinstance(repo, dict))

    async def _paginate(self, path: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        for page in range(1, self._max_pages + 1):
            response = await self._client.get(path, params={**params, "per_page": REST_PAGE_SIZE, "page": page})
            response.raise_for_status()

            batch = response.json()
            if not isinstance(batch, list):
                raise httpx.DecodingError(f"Expected a list from {path}", request=response.request)
            if not batch:
                break
            items.extend(batch)

            if 'rel="next"' not in response.headers.get("link", ""):
                break
            if page < self._max_pages:
                await self._sleep(self._page_delay)
        else:
            logger.info(f"Stopped paginating {path} at the {self._max_pages}-page cap")
        return items

    @staticmethod
    def _log_rest_failure(subject: str, exc: Exception) -> None:
        if isinstance(exc, httpx.HTTPStatusError):
            response = exc.response
            if response.status_code == 403 and response.headers.get("x-ratelimit-remaining") == "0":
                logger.error(f"GitHub API rate limit exceeded while fetching stars for {subject}")
                return
        logger.warning(f"Error fetching GitHub stars for {subject}: {redact_secrets(exc)}")
