"""Local development server.

Usage:
    python -m statscard.server          # serves on PORT (default 3000)

Endpoints:
    GET /                               index page with example links
    GET /api?user=<login>&org=<org>     the SVG card
    GET /api?test=true                  JSON status payload
"""

from __future__ import annotations

import logging
from html import escape

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, Response

from statscard.config.settings import settings
from statscard.handler import get_default_aggregator, handle_card_request
from statscard.services.aggregator import StatsAggregator
from statscard.utils.logger import setup_logger

logger = logging.getLogger(__name__)


def _index_html(has_token: bool) -> str:
    token_status = "✅ Set" if has_token else "❌ Not set"
    return f"""<!DOCTYPE html>
<html><head><meta charset="utf-8"><title>{escape(settings.APP_NAME)}</title></head>
<body>
<h1>{escape(settings.APP_NAME)} - Local Testing</h1>
<h2>Available Endpoints:</h2>
<ul>
  <li><a href="/api?test=true">Test endpoint</a> - Check if server is working</li>
  <li><a href="/api">Default stats</a> - Stats for the configured defaults</li>
  <li><a href="/api?user=YOUR_USERNAME">Custom user</a> - Replace YOUR_USERNAME with your GitHub username</li>
  <li><a href="/api?user=YOUR_USERNAME&amp;org=YOUR_ORG">Custom user + org</a> - Add organization</li>
</ul>
<h2>Environment Variables:</h2>
<p>GITHUB_TOKEN: {token_status}</p>
</body></html>"""


def create_app(aggregator: StatsAggregator | None = None) -> FastAPI:
    """Build the FastAPI app; ``aggregator`` defaults to the process-wide one."""
    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION)

    def _aggregator() -> StatsAggregator:
        return aggregator or get_default_aggregator()

    @app.get("/", response_class=HTMLResponse)
    async def index() -> HTMLResponse:
        return HTMLResponse(_index_html(bool(_aggregator().config.GITHUB_TOKEN)))

    @app.get("/api")
    async def card(request: Request) -> Response:
        result = await handle_card_request(dict(request.query_params), _aggregator())
        return Response(content=result.body, status_code=result.status_code, headers=result.headers)

    return app


def main() -> None:
    import uvicorn

    setup_logger("statscard", settings.LOG_LEVEL)
    logger.info(f"Local server running on http://localhost:{settings.PORT}")
    logger.info(f"GitHub token: {'set' if settings.GITHUB_TOKEN else 'not set'}")
    uvicorn.run(create_app(), host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    main()
