"""Highest-stars reconciliation.

The star-count source occasionally answers with transient zeros or
undercounts. Any positive total seen before for a ``(user, org)`` key is
treated as a lower bound, so the displayed total never drops below it:

    calculated >  stored            -> show calculated, store it
    calculated == 0, stored > 0     -> show stored
    calculated == 0, stored == 0    -> show 0
    0 < calculated < stored         -> show stored
    calculated == stored > 0        -> show calculated, store if absent/zero

Real decreases (deleted or unstarred repositories) are therefore never shown
once a higher value was cached for the key.
"""

from __future__ import annotations

import logging
import os
import re
import threading
from dataclasses import dataclass
from typing import Mapping, Protocol

from statscard.config.settings import settings

logger = logging.getLogger(__name__)


def composite_key(user: str, org: str, separator: str | None = None) -> str:
    """Cache key for a personal account and organization pair."""
    sep = settings.CACHE_KEY_SEPARATOR if separator is None else separator
    return f"{user}{sep}{org}"


def env_safe_key(key: str) -> str:
    """``key`` with every character outside ``[A-Za-z0-9_]`` replaced by ``_``."""
    return re.sub(r"[^A-Za-z0-9_]", "_", key)


class StarsStore(Protocol):
    """Storage interface for highest observed star totals."""

    def get(self, key: str) -> int | None: ...

    def set(self, key: str, value: int) -> None: ...


class InMemoryStarsStore:
    """
    Process-local store; lives as long as the interpreter and never evicts.

    Lookups fall back to the ``env_safe_key`` form of the key, so a seed named
    ``HIGHEST_STARS_octocat__Finance_Insight_Lab`` serves ``octocat__Finance-Insight-Lab``.
    AWS Lambda rejects variable names containing ``-``.
    """

    def __init__(self, initial: Mapping[str, int] | None = None) -> None:
        self._values: dict[str, int] = dict(initial or {})
        self._lock = threading.Lock()

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str] | None = None,
        prefix: str | None = None,
    ) -> "InMemoryStarsStore":
        """
        Seed from ``<prefix><composite key>=<int>`` variables

        Only the process environment is read. Seeds written to ``.env`` are not
        picked up; export them or pass ``environ`` explicitly.
        """
        env = os.environ if environ is None else environ
        env_prefix = prefix or settings.HIGHEST_STARS_ENV_PREFIX
        seeded: dict[str, int] = {}

        for name, raw_value in env.items():
            if not name.startswith(env_prefix) or len(name) == len(env_prefix):
                continue
            key = name[len(env_prefix):]
            try:
                value = int(raw_value.strip())
            except (TypeError, ValueError):
                logger.warning(f"Ignoring non-integer star seed {name}={raw_value!r}")
                continue
            if value < 0:
                logger.warning(f"Ignoring negative star seed {name}={value}")
                continue
            seeded[key] = value

        if seeded:
            logger.info(f"Seeded highest-stars cache with {len(seeded)} entries")
        return cls(seeded)

    def get(self, key: str) -> int | None:
        with self._lock:
            value = self._values.get(key)
            if value is None:
                value = self._values.get(env_safe_key(key))
            return value

    def set(self, key: str, value: int) -> None:
        with self._lock:
            self._values[key] = value

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._values)


@dataclass(frozen=True, slots=True)
class ReconcileOutcome:
    """Result of reconciling one freshly calculated total."""

    displayed: int
    calculated: int
    stored_before: int
    cache_updated: bool

    @property
    def fresh(self) -> bool:
        """Displayed value is positive and backed by this request's fetch."""
        return self.displayed > 0 and self.displayed == self.calculated


def decide(calculated: int, stored: int) -> tuple[int, bool]:
    """Pure decision: ``(displayed, should_store)`` for ``calculated`` vs ``stored``."""
    if calculated < 0 or stored < 0:
        raise ValueError(f"star totals must be non-negative (calculated={calculated}, stored={stored})")

    if calculated > stored:
        return calculated, True
    if calculated == 0:
        return stored, False
    if calculated < stored:
        return stored, False
    return calculated, False


class StarsReconciler:
    """Apply the never-regress policy against an injected store."""

    def __init__(self, store: StarsStore) -> None:
        self._store = store
        self._lock = threading.Lock()

    @property
    def store(self) -> StarsStore:
        return self._store

    def reconcile(self, key: str, calculated: int) -> ReconcileOutcome:
        with self._lock:
            previous = self._store.get(key)
            stored = previous or 0
            displayed, should_store = decide(calculated, stored)
            if should_store:
                self._store.set(key, displayed)

        if displayed != calculated:
            logger.info(
                f"Keeping cached star total for {key}: fetched {calculated}, showing {displayed}"
            )
        elif should_store:
            logger.info(f"Raised cached star total for {key}: {stored} -> {displayed}")

        return ReconcileOutcome(
            displayed=displayed,
            calculated=calculated,
            stored_before=stored,
            cache_updated=should_store,
        )
