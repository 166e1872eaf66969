from signage.models.advertisement import AdKind, DisplayAd
from signage.scheduling.playback_scheduler import PlaybackScheduler, PlaybackState


def display_ad(name: str, seconds: int | None = 5, kind: AdKind = AdKind.IMAGE) -> DisplayAd:
    return DisplayAd(
        id=f"ad-{name}",
        name=name,
        kind=kind,
        media_url=f"https://cdn.example.com/{name}",
        display_seconds=seconds,
    )


class TestTransitions:
    def test_starts_idle(self):
        scheduler = PlaybackScheduler()
        assert scheduler.state == PlaybackState.IDLE
        assert scheduler.current is None
        assert scheduler.advance() is None

    def test_non_empty_queue_shows_first(self):
        scheduler = PlaybackScheduler()
        queue = [display_ad("a"), display_ad("b")]
        assert scheduler.apply_queue(queue).name == "a"
        assert scheduler.state == PlaybackState.SHOWING
        assert scheduler.index == 0

    def test_empty_queue_goes_idle_and_back(self):
        scheduler = PlaybackScheduler()
        scheduler.apply_queue([display_ad("a"), display_ad("b")])
        scheduler.advance()

        assert scheduler.apply_queue([]) is None
        assert scheduler.state == PlaybackState.IDLE

        assert scheduler.apply_queue([display_ad("c")]).name == "c"
        assert scheduler.state == PlaybackState.SHOWING
        assert scheduler.index == 0

    def test_advance_wraps_around(self):
        scheduler = PlaybackScheduler()
        scheduler.apply_queue([display_ad("a"), display_ad("b"), display_ad("c")])
        names = [scheduler.advance().name for _ in range(4)]
        assert names == ["b", "c", "a", "b"]

    def test_reresolution_keeps_index_modulo_new_length(self):
        scheduler = PlaybackScheduler()
        scheduler.apply_queue([display_ad(n) for n in "abcde"])
        for _ in range(4):
            scheduler.advance()
        assert scheduler.index == 4

        current = scheduler.apply_queue([display_ad(n) for n in "xyz"])
        assert scheduler.index == 1
        assert current.name == "y"

    def test_reresolution_with_same_queue_does_not_restart(self):
        scheduler = PlaybackScheduler()
        queue = [display_ad(n) for n in "abc"]
        scheduler.apply_queue(queue)
        scheduler.advance()
        assert scheduler.apply_queue(queue).name == "b"


class TestDwell:
    def test_image_and_gif_use_display_seconds(self):
        scheduler = PlaybackScheduler()
        assert scheduler.dwell_seconds(display_ad("a", 12)) == 12
        assert scheduler.dwell_seconds(display_ad("g", 4, AdKind.GIF)) == 4

    def test_video_uses_fixed_fallback(self):
        scheduler = PlaybackScheduler()
        assert scheduler.dwell_seconds(display_ad("v", 5, AdKind.VIDEO)) == 30
        assert scheduler.dwell_seconds(display_ad("v", None, AdKind.VIDEO)) == 30

    def test_rotation_wraps_after_sum_of_dwell_times(self):
        scheduler = PlaybackScheduler()
        scheduler.apply_queue([display_ad("a", 5), display_ad("b", 10), display_ad("c", 5)])

        elapsed = 0
        shown = [scheduler.current.name]
        while elapsed < 20:
            elapsed += scheduler.dwell_seconds(scheduler.current)
            shown.append(scheduler.advance().name)

        assert elapsed == 20
        assert shown == ["a", "b", "c", "a"]

    def test_media_failure_keeps_rotation(self):
        scheduler = PlaybackScheduler()
        scheduler.apply_queue([display_ad("a"), display_ad("b")])
        scheduler.report_media_failure(scheduler.current, RuntimeError("404 from CDN"))

        assert scheduler.current.name == "a"
        assert scheduler.advance().name == "b"
        assert [ad.name for ad in scheduler.queue] == ["a", "b"]
