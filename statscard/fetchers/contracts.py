"""Typed contracts shared by fetchers, reconciliation and rendering."""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Literal


WindowMode = Literal["trailing_365", "calendar_year"]


class ContributionScope(str, Enum):
    """Which contributions query produced a result."""

    PRIVATE = "private"
    PUBLIC = "public"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class MetricsSnapshot:
    """Reconciled numbers shown on the card."""

    total_stars: int = 0
    total_commits: int = 0
    total_prs: int = 0
    total_issues: int = 0
    total_contributed_to: int = 0

    def __post_init__(self) -> None:
        for field in fields(self):
            value = getattr(self, field.name)
            if value < 0:
                raise ValueError(f"{field.name} must be non-negative, got {value}")

    @classmethod
    def empty(cls) -> "MetricsSnapshot":
        return cls()


@dataclass(frozen=True, slots=True)
class ContributionTotals:
    """Contribution counts for one account over a window."""

    total_commits: int = 0
    total_prs: int = 0
    total_issues: int = 0
    total_contributed_to: int = 0
    scope: ContributionScope = ContributionScope.NONE

    @classmethod
    def zero(cls) -> "ContributionTotals":
        return cls()

    @property
    def is_degraded(self) -> bool:
        return self.scope == ContributionScope.NONE


@dataclass(frozen=True, slots=True)
class ContributionWindow:
    """Date range queried for contributions plus its card label."""

    start: datetime
    end: datetime
    label: str


def contribution_window(mode: WindowMode, now: datetime | None = None) -> ContributionWindow:
    """Build the contribution window for ``mode`` ending at ``now`` (UTC)."""
    end = now or datetime.now(UTC)
    if end.tzinfo is None:
        end = end.replace(tzinfo=UTC)

    if mode == "calendar_year":
        start = datetime(end.year, 1, 1, tzinfo=UTC)
        return ContributionWindow(start=start, end=end, label=str(end.year))
    if mode == "trailing_365":
        return ContributionWindow(start=end - timedelta(days=365), end=end, label="last 365 days")
    raise ValueError(f"Unknown contribution window: {mode}")
