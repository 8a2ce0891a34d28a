"""Client for the public star-count service."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable

import httpx
from pydantic import BaseModel, field_validator

from statscard.config.settings import settings
from statscard.utils.logger import redact_secrets
from statscard.utils.retry import linear_backoff, retry_async

logger = logging.getLogger(__name__)


class StarServicePayload(BaseModel):
    """Validated ``{"stars": number}`` response body."""

    stars: int

    @field_validator("stars", mode="before")
    @classmethod
    def validate_stars(cls, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("stars must be a number")
        if value < 0:
            raise ValueError("stars must be non-negative")
        return int(value)


class StarServiceClient:
    """Fetch total stars for an account, retrying transient failures and zeros."""

    def __init__(
        self,
        *,
        url_template: str | None = None,
        max_attempts: int | None = None,
        backoff_seconds: float | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleeper: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._url_template = url_template or settings.STAR_SERVICE_URL
        self._max_attempts = max_attempts or settings.STAR_FETCH_MAX_ATTEMPTS
        self._backoff = linear_backoff(
            settings.STAR_FETCH_BACKOFF_SECONDS if backoff_seconds is None else backoff_seconds
        )
        self._sleep = sleeper
        self._client = httpx.AsyncClient(
            timeout=timeout_seconds or settings.HTTP_TIMEOUT_SECONDS,
            headers={"User-Agent": settings.USER_AGENT, "Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "StarServiceClient":
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_stars(self, account: str) -> int:
        """Return the star total for ``account``; 0 when the service keeps failing."""
        if not account:
            return 0

        url = self._url_template.format(account=account)
        try:
            stars = await retry_async(
                lambda: self._fetch_once(url),
                max_attempts=self._max_attempts,
                backoff=self._backoff,
                should_retry=lambda value: value == 0,
                retry_on=(httpx.HTTPError, ValueError),
                description=f"Star fetch for {account}",
                sleeper=self._sleep,
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"Star fetch for {account} gave up after {self._max_attempts} attempts: {redact_secrets(exc)}")
            return 0

        if stars == 0:
            logger.warning(f"Star service kept returning 0 for {account}")
        else:
            logger.debug(f"Star service reported {stars} stars for {account}")
        return stars

    async def _fetch_once(self, url: str) -> int:
        response = await self._client.get(url)
        response.raise_for_status()
        try:
            body = response.json()
        except json.JSONDecodeError as exc:
            raise ValueError(f"star service returned non-JSON body: {exc}") from exc
        if not isinstance(body, dict):
            raise ValueError("star service returned a non-object body")
        return StarServicePayload.model_validate(body).stars
