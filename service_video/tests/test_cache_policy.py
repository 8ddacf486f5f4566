"""
Unit tests for the read-through metadata cache policy.
"""

import asyncio
from datetime import timedelta

import pytest

from service_video.app.service import VideoMetadataService, clamp_max_results
from shared.errors import NotFoundError
from shared.metrics import MetricsCollector
from shared.test_helpers import FakeClock
from .fakes import InMemoryVideoCache, ScriptedYouTube, make_videos


class TestClampMaxResults:
    """Test cases for max_results clamping."""

    @pytest.mark.parametrize("requested,expected", [
        (None, 10),
        (0, 10),
        (-5, 10),
        (1000, 10),
        (51, 10),
        (50, 50),
        (25, 25),
        (1, 1),
    ])
    def test_clamp(self, requested, expected):
        assert clamp_max_results(requested) == expected


class TestVideoMetadataService:
    """Test cases for VideoMetadataService."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def cache(self, clock):
        return InMemoryVideoCache(clock)

    @pytest.fixture
    def youtube(self):
        return ScriptedYouTube()

    @pytest.fixture
    def metrics(self):
        return MetricsCollector("video")

    @pytest.fixture
    def service(self, cache, youtube, clock, metrics):
        """Create VideoMetadataService with a 30 minute freshness window."""
        return VideoMetadataService(
            cache,
            youtube,
            cache_max_age=timedelta(minutes=30),
            metrics=metrics,
            clock=clock
        )

    @pytest.mark.asyncio
    async def test_search_channel_miss_fetches_and_caches(self, service, cache, youtube):
        response = await service.search_channel("Test Channel", user_id="user-1")

        assert response.channel_id == "UC123"
        assert response.channel_title == "Test Channel"
        assert [v.video_id for v in response.videos] == ["vid0", "vid1", "vid2"]
        assert youtube.calls == {"search_channel": 1, "get_channel_videos": 1}
        assert youtube.requested_max_results == [10]
        assert "UC123" in cache.channels
        assert set(cache.videos) == {"vid0", "vid1", "vid2"}

    @pytest.mark.asyncio
    async def test_search_channel_cache_is_keyed_by_search_term(self, service, youtube):
        """A free-text term never matches the channel_id key, so it always refetches."""
        await service.search_channel("Test Channel")
        await service.search_channel("Test Channel")

        assert youtube.calls["search_channel"] == 2

    @pytest.mark.asyncio
    async def test_search_channel_fresh_hit(self, service, youtube, clock):
        """A term equal to a cached channel_id within 30 minutes is served from cache."""
        await service.search_channel("UC123")
        clock.advance(minutes=10)

        response = await service.search_channel("UC123")

        assert response.channel_id == "UC123"
        assert len(response.videos) == 3
        assert youtube.calls["search_channel"] == 1

    @pytest.mark.asyncio
    async def test_search_channel_stale_entry_refetches(self, service, youtube, cache, clock):
        await service.search_channel("UC123")
        clock.advance(minutes=40)

        await service.search_channel("UC123")

        assert youtube.calls["search_channel"] == 2
        assert cache.channels["UC123"].cached_at == clock.now

    @pytest.mark.asyncio
    async def test_search_channel_not_found(self, service, cache):
        with pytest.raises(NotFoundError):
            await service.search_channel("missing")
        assert cache.channels == {}

    @pytest.mark.asyncio
    async def test_concurrent_searches_leave_one_record_per_key(self, service, cache, youtube):
        """Racing misses for the same channel upsert rather than duplicate."""
        await asyncio.gather(*[service.search_channel("Test Channel") for _ in range(5)])

        assert youtube.calls["search_channel"] == 5
        assert list(cache.channels) == ["UC123"]
        assert sorted(cache.videos) == ["vid0", "vid1", "vid2"]

    @pytest.mark.asyncio
    async def test_channel_videos_fresh_hit_at_10_minutes(self, service, cache, youtube, clock):
        await cache.cache_videos(make_videos())
        clock.advance(minutes=10)

        response = await service.get_channel_videos("UC123", 10)

        assert len(response.videos) == 3
        assert "get_channel_videos" not in youtube.calls

    @pytest.mark.asyncio
    async def test_channel_videos_stale_at_40_minutes(self, service, cache, youtube, clock):
        await cache.cache_videos(make_videos())
        clock.advance(minutes=40)

        await service.get_channel_videos("UC123", 10)

        assert youtube.calls["get_channel_videos"] == 1
        assert all(v.cached_at == clock.now for v in cache.videos.values())

    @pytest.mark.asyncio
    async def test_channel_videos_hit_ignores_max_results(self, service, cache):
        """A fresh cached list is returned whole, whatever max_results asks for."""
        await cache.cache_videos(make_videos(count=3))

        response = await service.get_channel_videos("UC123", 1)

        assert len(response.videos) == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("requested,sent", [(0, 10), (1000, 10), (25, 25)])
    async def test_channel_videos_clamps_upstream_request(self, service, youtube, requested, sent):
        await service.get_channel_videos("UC123", requested)

        assert youtube.requested_max_results == [sent]

    @pytest.mark.asyncio
    async def test_video_details_miss_then_hit(self, service, youtube):
        first = await service.get_video_details("vid0")
        second = await service.get_video_details("vid0")

        assert first.video.view_count == 1500
        assert second.video.like_count == 42
        assert youtube.calls["get_video_details"] == 1

    @pytest.mark.asyncio
    async def test_video_details_stale_refetches(self, service, youtube, clock):
        await service.get_video_details("vid0")
        clock.advance(minutes=31)

        await service.get_video_details("vid0")

        assert youtube.calls["get_video_details"] == 2

    @pytest.mark.asyncio
    async def test_video_details_fresh_hit_at_10_minutes(self, service, cache, youtube, clock):
        """A record cached 10 minutes ago is served without an upstream call."""
        await cache.cache_videos(make_videos(count=1))
        cached_at = clock.now
        clock.advance(minutes=10)

        response = await service.get_video_details("vid0")

        assert response.video.title == "Video 0"
        assert "get_video_details" not in youtube.calls
        assert cache.videos["vid0"].cached_at == cached_at

    @pytest.mark.asyncio
    async def test_video_details_stale_at_40_minutes(self, service, cache, youtube, clock):
        """A record cached 40 minutes ago is refetched and its cached_at overwritten."""
        await cache.cache_videos(make_videos(count=1))
        clock.advance(minutes=40)

        response = await service.get_video_details("vid0")

        assert response.video.title == "Detailed Video"
        assert youtube.calls["get_video_details"] == 1
        assert cache.videos["vid0"].cached_at == clock.now
        assert cache.videos["vid0"].view_count == 1500

    @pytest.mark.asyncio
    async def test_cache_write_failure_is_not_surfaced(self, service, cache, metrics):
        """Fetched data is served even when the cache cannot store it."""
        cache.fail_writes = True

        response = await service.search_channel("Test Channel")

        assert response.channel_id == "UC123"
        assert cache.channels == {}
        assert metrics.registry.get_sample_value(
            "cache_write_failures_total", {"entity": "channel"}
        ) == 1.0

    @pytest.mark.asyncio
    async def test_cache_read_failure_is_a_miss(self, service, cache, youtube):
        cache.fail_reads = True

        response = await service.get_video_details("vid0")

        assert response.video.video_id == "vid0"
        assert youtube.calls["get_video_details"] == 1

    @pytest.mark.asyncio
    async def test_transcript_scrape_is_never_cached(self, service, youtube, cache):
        first = await service.get_video_transcript("vid0")
        second = await service.get_video_transcript("vid0")

        assert first.transcript == "Hello world"
        assert first.video_id == "vid0"
        assert second.transcript == "Hello world"
        assert youtube.calls["fetch_transcript_page"] == 2
        assert cache.videos == {}

    @pytest.mark.asyncio
    async def test_transcript_from_captions(self, cache, youtube, clock):
        service = VideoMetadataService(cache, youtube, transcript_source="captions", clock=clock)

        response = await service.get_video_transcript("vid0")

        assert response.transcript == "Hello world"
        assert youtube.calls == {"download_captions": 1}

    @pytest.mark.asyncio
    async def test_transcript_page_without_container(self, service, youtube):
        youtube.transcript_html = "<html><body><p>No transcript here</p></body></html>"

        response = await service.get_video_transcript("vid0")

        assert response.transcript == ""
