# backend/signage/display/player.py

"""
Headless display player.

Polls GET /display/{tv_id}/active-ads on the backend and drives a
DisplaySession. Drawing is left to the renderer; the default one logs.

    signage-player --base-url http://localhost:8000 --tv-id tv-...
"""

import argparse
import asyncio
import logging
from typing import List, Optional

import httpx

from signage import config
from signage.errors import NotFound
from signage.models.advertisement import DisplayAd
from signage.scheduling.display_session import DisplaySession, Renderer

logger = logging.getLogger(__name__)


class HttpQueueSource:
    """Fetches the active-ad queue for a TV over HTTP."""

    def __init__(self, base_url: str, timeout: float = 10.0, client: httpx.AsyncClient | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def __call__(self, tv_id: str) -> List[DisplayAd]:
        url = f"{self.base_url}/display/{tv_id}/active-ads"
        if self._client is not None:
            response = await self._client.get(url)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url)

        if response.status_code == 404:
            raise NotFound("TV", tv_id)
        response.raise_for_status()
        return [DisplayAd.model_validate(item) for item in response.json()["ads"]]


def log_renderer(ad: Optional[DisplayAd]) -> None:
    if ad is None:
        logger.info("no ads scheduled")
        return
    logger.info("showing %s ad %r (%s) from campaign %r", ad.kind.value, ad.name, ad.media_url, ad.campaign_name)


async def run_player(
    base_url: str,
    tv_id: str,
    renderer: Renderer = log_renderer,
    resolve_interval_seconds: float = config.RESOLVE_INTERVAL_SECONDS,
) -> None:
    """Runs until cancelled."""
    session = DisplaySession(
        tv_id,
        source=HttpQueueSource(base_url),
        renderer=renderer,
        resolve_interval_seconds=resolve_interval_seconds,
    )
    async with session:
        await asyncio.Event().wait()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Headless signage display player")
    parser.add_argument("--base-url", default="http://localhost:8000")
    parser.add_argument("--tv-id", required=True)
    parser.add_argument("--interval", type=float, default=config.RESOLVE_INTERVAL_SECONDS)
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args(argv)

    config.configure_logging(args.log_level)
    try:
        asyncio.run(run_player(args.base_url, args.tv_id, resolve_interval_seconds=args.interval))
    except KeyboardInterrupt:
        logger.info("player stopped")


if __name__ == "__main__":
    main()
