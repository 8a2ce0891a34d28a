"""HTTP entrypoint for the stats card.

``handle_card_request`` implements the request/response contract and is
shared by the AWS Lambda handler below and the local development server in
``statscard.server``. It always answers 200: upstream failures degrade to
zero or cached numbers instead of an error page.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Mapping

from statscard.config.settings import Settings, settings
from statscard.services.aggregator import StatsAggregator
from statscard.services.reconciler import InMemoryStarsStore
from statscard.utils.logger import setup_logger

logger = logging.getLogger(__name__)

SVG_CONTENT_TYPE = "image/svg+xml; charset=utf-8"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"
NO_STORE = "no-store, no-cache, must-revalidate, max-age=0"
TRUTHY = {"1", "true", "yes", "on"}

_default_aggregator: StatsAggregator | None = None


@dataclass(slots=True)
class HttpResponse:
    """Framework-neutral response."""

    status_code: int
    body: str
    headers: dict[str, str] = field(default_factory=dict)

    def to_lambda(self) -> dict[str, Any]:
        return {
            "statusCode": self.status_code,
            "headers": dict(self.headers),
            "body": self.body,
            "isBase64Encoded": False,
        }


def get_default_aggregator() -> StatsAggregator:
    """Process-wide aggregator whose star cache lives as long as the process."""
    global _default_aggregator
    if _default_aggregator is None:
        store = InMemoryStarsStore.from_environ(prefix=settings.HIGHEST_STARS_ENV_PREFIX)
        _default_aggregator = StatsAggregator(store=store)
    return _default_aggregator


def cache_control(cacheable: bool, config: Settings = settings) -> str:
    if not cacheable:
        return NO_STORE
    return (
        f"public, max-age={config.CACHE_MAX_AGE_SECONDS}, "
        f"s-maxage={config.CACHE_MAX_AGE_SECONDS}, "
        f"stale-while-revalidate={config.STALE_WHILE_REVALIDATE_SECONDS}"
    )


def _param(params: Mapping[str, Any], name: str, default: str) -> str:
    value = params.get(name)
    if value is None:
        return default
    value = str(value).strip()
    return value or default


def is_diagnostic(params: Mapping[str, Any]) -> bool:
    return str(params.get("test") or "").strip().lower() in TRUTHY


def diagnostic_response(params: Mapping[str, Any], aggregator: StatsAggregator) -> HttpResponse:
    payload = {
        "status": "ok",
        "hasToken": bool(aggregator.config.GITHUB_TOKEN),
        "query": {key: str(value) for key, value in params.items()},
        "timestamp": datetime.now(UTC).isoformat(),
    }
    return HttpResponse(
        status_code=200,
        body=json.dumps(payload, ensure_ascii=False),
        headers={"Content-Type": JSON_CONTENT_TYPE, "Cache-Control": NO_STORE},
    )


async def handle_card_request(
    params: Mapping[str, Any] | None,
    aggregator: StatsAggregator | None = None,
) -> HttpResponse:
    """
    Serve one card request

    Args:
        params: Query parameters (``user``, ``org``, ``test``)
        aggregator: Aggregator to use, defaults to the process-wide one

    Returns:
        HttpResponse carrying the SVG, or the JSON status payload for ``test``
    """
    params = params or {}
    aggregator = aggregator or get_default_aggregator()

    if is_diagnostic(params):
        return diagnostic_response(params, aggregator)

    user = _param(params, "user", aggregator.config.DEFAULT_USER)
    org = _param(params, "org", aggregator.config.DEFAULT_ORG)

    try:
        result = await aggregator.build_card(user, org)
        svg, cacheable = result.svg, result.cacheable
    except Exception:
        logger.exception(f"Card build failed for {user}/{org}; serving cached stars with zero contributions")
        svg, cacheable = aggregator.degraded_card(user, org), False

    return HttpResponse(
        status_code=200,
        body=svg,
        headers={"Content-Type": SVG_CONTENT_TYPE, "Cache-Control": cache_control(cacheable, aggregator.config)},
    )


def lambda_handler(event: dict[str, Any] | None, context: Any, aggregator: StatsAggregator | None = None) -> dict[str, Any]:
    """AWS Lambda entrypoint for API Gateway / function URL proxy events."""
    setup_logger("statscard", settings.LOG_LEVEL)
    params = (event or {}).get("queryStringParameters") or {}
    response = asyncio.run(handle_card_request(params, aggregator))
    return response.to_lambda()
