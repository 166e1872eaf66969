import httpx
import pytest

from signage.display.player import HttpQueueSource, log_renderer
from signage.errors import NotFound
from signage.models.advertisement import AdKind

from test_playback_scheduler import display_ad


def _transport(status: int, payload=None):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/display/tv-1/active-ads"
        return httpx.Response(status, json=payload or {"detail": "TV 'tv-1' not found"})

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_fetches_queue():
    payload = {
        "tv": {"id": "tv-1", "name": "Lobby TV"},
        "ads": [
            {"id": "ad-1", "name": "poster", "kind": "image", "media_url": "https://cdn/p.png", "display_seconds": 5},
            {"id": "ad-2", "name": "clip", "kind": "video", "media_url": "https://cdn/c.mp4"},
        ],
        "resolved_at": "2025-03-01T12:00:00+00:00",
        "refresh_seconds": 60,
    }
    async with httpx.AsyncClient(transport=_transport(200, payload)) as client:
        source = HttpQueueSource("http://signage.local/", client=client)
        queue = await source("tv-1")

    assert [ad.id for ad in queue] == ["ad-1", "ad-2"]
    assert queue[1].kind == AdKind.VIDEO


@pytest.mark.asyncio
async def test_unknown_tv_raises_not_found():
    async with httpx.AsyncClient(transport=_transport(404)) as client:
        source = HttpQueueSource("http://signage.local", client=client)
        with pytest.raises(NotFound):
            await source("tv-1")


@pytest.mark.asyncio
async def test_server_error_raises():
    async with httpx.AsyncClient(transport=_transport(500)) as client:
        source = HttpQueueSource("http://signage.local", client=client)
        with pytest.raises(httpx.HTTPStatusError):
            await source("tv-1")


def test_log_renderer_handles_idle_and_ads(caplog):
    with caplog.at_level("INFO"):
        log_renderer(None)
        log_renderer(display_ad("poster"))
    assert "no ads scheduled" in caplog.text
    assert "poster" in caplog.text
