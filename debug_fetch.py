"""
Debug script to run the fetchers and print their raw results.

Only the outbound calls: nothing is reconciled, cached or rendered.

Usage:
    python debug_fetch.py                    # configured default user/org
    python debug_fetch.py octocat            # specific user
    python debug_fetch.py octocat github     # specific user and org
"""

import asyncio
import json
import logging
import sys
from typing import Any, Dict

from statscard.config.settings import settings
from statscard.fetchers import GitHubClient, StarServiceClient, contribution_window

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("debug_fetch")


async def collect(user: str, org: str) -> Dict[str, Any]:
    """Run every fetcher once and gather their outputs."""
    window = contribution_window(settings.CONTRIBUTION_WINDOW)
    loop = asyncio.get_running_loop()
    start = loop.time()

    async with StarServiceClient() as stars, GitHubClient() as github:
        results = await asyncio.gather(
            stars.fetch_stars(user),
            stars.fetch_stars(org),
            github.count_owned_stars(user, is_org=False),
            github.count_owned_stars(org, is_org=True),
            github.count_starred(user),
            github.fetch_contributions(user, window),
        )

    service_user, service_org, owned_user, owned_org, starred_user, contributions = results
    return {
        "user": user,
        "org": org,
        "has_token": github.has_token,
        "window": {"start": window.start.isoformat(), "end": window.end.isoformat(), "label": window.label},
        "star_service": {"user": service_user, "org": service_org},
        "rest": {"user_owned": owned_user, "org_owned": owned_org, "user_starred": starred_user},
        "contributions": {
            "scope": contributions.scope.value,
            "commits": contributions.total_commits,
            "prs": contributions.total_prs,
            "issues": contributions.total_issues,
            "contributed_to": contributions.total_contributed_to,
        },
        "elapsed_seconds": round(loop.time() - start, 2),
    }


async def main():
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    user = args[0] if len(args) > 0 else settings.DEFAULT_USER
    org = args[1] if len(args) > 1 else settings.DEFAULT_ORG

    logger.info(f"Fetching raw stats for {user}/{org}...")
    try:
        data = await collect(user, org)
    except Exception as e:
        logger.error(f"Fetch FAILED: {e}", exc_info=True)
        return

    print(json.dumps(data, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    asyncio.run(main())
