from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import httpx
import pytest

from statscard.config.settings import Settings
from statscard.fetchers.contracts import ContributionScope, ContributionTotals, ContributionWindow
from statscard.fetchers.github import GitHubClient
from statscard.services.aggregator import StatsAggregator
from statscard.services.reconciler import InMemoryStarsStore

FIXED_NOW = datetime(2026, 10, 19, 9, 0, tzinfo=UTC)


class FakeStarClient:
    """Star client double returning scripted totals per account."""

    def __init__(self, totals: dict[str, int]) -> None:
        self.totals = totals
        self.calls: list[str] = []
        self.closed = False

    async def __aenter__(self) -> "FakeStarClient":
        return self

    async def __aexit__(self, *_: Any) -> None:
        self.closed = True

    async def fetch_stars(self, account: str) -> int:
        self.calls.append(account)
        return self.totals.get(account, 0)


class FakeGitHubClient:
    """GitHub client double for aggregator tests."""

    def __init__(self, contributions: ContributionTotals | None = None, owned: dict[str, int] | None = None, starred: int = 0) -> None:
        self.contributions = contributions or ContributionTotals.zero()
        self.owned = owned or {}
        self.starred = starred
        self.windows: list[ContributionWindow] = []

    async def __aenter__(self) -> "FakeGitHubClient":
        return self

    async def __aexit__(self, *_: Any) -> None:
        return None

    async def fetch_contributions(self, login: str, window: ContributionWindow) -> ContributionTotals:
        self.windows.append(window)
        return self.contributions

    async def count_owned_stars(self, owner: str, *, is_org: bool) -> int:
        return self.owned.get(owner, 0)

    async def count_starred(self, login: str) -> int:
        return self.starred


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "GITHUB_TOKEN": None,
        "DEFAULT_USER": "aligheshlaghi97",
        "DEFAULT_ORG": "Finance-Insight-Lab",
        "CONTRIBUTION_WINDOW": "calendar_year",
        "STAR_SOURCE": "service",
        "CACHE_KEY_SEPARATOR": "__",
    }
    values.update(overrides)
    return Settings(**values)


def make_aggregator(
    *,
    stars: dict[str, int] | None = None,
    contributions: ContributionTotals | None = None,
    store: InMemoryStarsStore | None = None,
    config: Settings | None = None,
    github: Any | None = None,
) -> StatsAggregator:
    star_client = FakeStarClient(stars or {})
    github_client = github or FakeGitHubClient(contributions)
    return StatsAggregator(
        store=store or InMemoryStarsStore(),
        config=config or make_settings(),
        star_client_factory=lambda: star_client,
        github_client_factory=lambda: github_client,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def sample_contributions() -> ContributionTotals:
    return ContributionTotals(
        total_commits=1450,
        total_prs=63,
        total_issues=12,
        total_contributed_to=8,
        scope=ContributionScope.PRIVATE,
    )


@pytest.fixture
def offline_github_factory():
    """Real GitHubClient without a token whose transport fails every request."""

    async def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("network disabled in tests", request=request)

    def _factory() -> GitHubClient:
        async def _no_sleep(_: float) -> None:
            return None

        return GitHubClient(
            token="",
            transport=httpx.MockTransport(handler),
            backoff_seconds=0,
            page_delay_seconds=0,
            sleeper=_no_sleep,
        )

    return _factory


@pytest.fixture
def aggregator_factory():
    return make_aggregator


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def fake_github_cls():
    return FakeGitHubClient
