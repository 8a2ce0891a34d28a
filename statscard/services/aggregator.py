"""Fetch, reconcile and render one stats card."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from statscard.config.settings import Settings, settings as default_settings
from statscard.fetchers.contracts import (
    ContributionTotals,
    ContributionWindow,
    MetricsSnapshot,
    contribution_window,
)
from statscard.fetchers.github import GitHubClient
from statscard.fetchers.star_service import StarServiceClient
from statscard.services.reconciler import ReconcileOutcome, StarsReconciler, StarsStore, composite_key
from statscard.services.renderer import render_card

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CardResult:
    """Rendered card and the numbers behind it."""

    svg: str
    snapshot: MetricsSnapshot
    outcome: ReconcileOutcome
    window: ContributionWindow

    @property
    def cacheable(self) -> bool:
        return self.outcome.fresh


class StatsAggregator:
    """Coordinates concurrent fetches, star reconciliation and rendering."""

    def __init__(
        self,
        *,
        store: StarsStore,
        config: Settings | None = None,
        star_client_factory: Callable[[], Any] | None = None,
        github_client_factory: Callable[[], Any] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config or default_settings
        self._reconciler = StarsReconciler(store)
        self._star_client_factory = star_client_factory or self._default_star_client
        self._github_client_factory = github_client_factory or self._default_github_client
        self._clock = clock

    @property
    def reconciler(self) -> StarsReconciler:
        return self._reconciler

    @property
    def config(self) -> Settings:
        return self._config

    def _default_star_client(self) -> StarServiceClient:
        return StarServiceClient(
            url_template=self._config.STAR_SERVICE_URL,
            max_attempts=self._config.STAR_FETCH_MAX_ATTEMPTS,
            backoff_seconds=self._config.STAR_FETCH_BACKOFF_SECONDS,
            timeout_seconds=self._config.HTTP_TIMEOUT_SECONDS,
        )

    def _default_github_client(self) -> GitHubClient:
        return GitHubClient(
            token=self._config.GITHUB_TOKEN or "",
            api_url=self._config.GITHUB_API_URL,
            graphql_url=self._config.GITHUB_GRAPHQL_URL,
            max_attempts=self._config.GITHUB_MAX_ATTEMPTS,
            backoff_seconds=self._config.GITHUB_BACKOFF_SECONDS,
            max_pages=self._config.REST_MAX_PAGES,
            page_delay_seconds=self._config.REST_PAGE_DELAY_SECONDS,
            timeout_seconds=self._config.HTTP_TIMEOUT_SECONDS,
        )

    def current_window(self) -> ContributionWindow:
        now = self._clock() if self._clock is not None else None
        return contribution_window(self._config.CONTRIBUTION_WINDOW, now)

    async def build_card(self, user: str, org: str) -> CardResult:
        window = self.current_window()

        async with self._star_client_factory() as star_client, self._github_client_factory() as github:
            user_stars, org_stars, contributions = await asyncio.gather(
                self._user_stars(user, star_client, github),
                self._org_stars(org, star_client, github),
                github.fetch_contributions(user, window),
            )

        calculated = user_stars + org_stars
        outcome = self._reconciler.reconcile(
            composite_key(user, org, self._config.CACHE_KEY_SEPARATOR), calculated
        )
        snapshot = self._snapshot(outcome.displayed, contributions)

        logger.info(
            f"Built card for {user}/{org}: stars={snapshot.total_stars} "
            f"(user={user_stars}, org={org_stars}), commits={snapshot.total_commits}, "
            f"contributions={contributions.scope.value}, cacheable={outcome.fresh}"
        )
        return CardResult(
            svg=render_card(snapshot, window.label),
            snapshot=snapshot,
            outcome=outcome,
            window=window,
        )

    def degraded_card(self, user: str | None = None, org: str | None = None) -> str:
        """
        Card used when building the real one failed outright

        With ``user`` the star total is reconciled as a zero fetch, so a cached
        highest total for ``(user, org)`` is still shown. Contributions are zero.
        """
        stars = 0
        if user:
            key = composite_key(user, org or "", self._config.CACHE_KEY_SEPARATOR)
            stars = self._reconciler.reconcile(key, 0).displayed
        return render_card(self._snapshot(stars, ContributionTotals.zero()), self.current_window().label)

    async def _user_stars(self, user: str, star_client: Any, github: Any) -> int:
        if self._config.STAR_SOURCE == "service":
            return await star_client.fetch_stars(user)
        if self._config.USER_STAR_DEFINITION == "starred":
            return await github.count_starred(user)
        return await github.count_owned_stars(user, is_org=False)

    async def _org_stars(self, org: str, star_client: Any, github: Any) -> int:
        if not org:
            return 0
        if self._config.STAR_SOURCE == "service":
            return await star_client.fetch_stars(org)
        return await github.count_owned_stars(org, is_org=True)

    @staticmethod
    def _snapshot(stars: int, contributions: ContributionTotals) -> MetricsSnapshot:
        return MetricsSnapshot(
            total_stars=stars,
            total_commits=contributions.total_commits,
            total_prs=contributions.total_prs,
            total_issues=contributions.total_issues,
            total_contributed_to=contributions.total_contributed_to,
        )
