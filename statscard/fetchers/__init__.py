"""Outbound fetchers for star totals and contribution stats."""

from statscard.fetchers.contracts import (
    ContributionScope,
    ContributionTotals,
    ContributionWindow,
    MetricsSnapshot,
    contribution_window,
)
from statscard.fetchers.github import GitHubClient
from statscard.fetchers.star_service import StarServiceClient

__all__ = [
    "GitHubClient",
    "StarServiceClient",
    "ContributionScope",
    "ContributionTotals",
    "ContributionWindow",
    "MetricsSnapshot",
    "contribution_window",
]
