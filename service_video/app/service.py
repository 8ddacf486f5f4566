"""
Read-through cache policy for video metadata.

Per request and per entity: check the cache, serve a fresh hit, otherwise
fetch from the upstream provider, upsert the result (best effort) and serve
what was fetched. Transcripts bypass the cache entirely.
"""

from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, List, Optional, Protocol, TypeVar

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from shared.errors import StorageError
from .models import (
    Channel, Video, VideoInfo, SearchChannelResponse, ChannelVideosResponse,
    VideoDetailsResponse, TranscriptResponse
)
from .youtube import YouTubeClient, extract_transcript, srt_to_text

DEFAULT_MAX_RESULTS = 10
MAX_RESULTS_LIMIT = 50
SEARCH_VIDEO_COUNT = 10

T = TypeVar("T")


class MetadataCacheStore(Protocol):
    async def start(self) -> None: ...

    async def stop(self) -> None: ...

    async def health_check(self) -> bool: ...

    async def get_cached_channel(self, channel_id: str) -> Optional[Channel]: ...

    async def cache_channel(self, channel: Channel) -> Channel: ...

    async def get_cached_videos(self, channel_id: str, max_age: timedelta) -> List[Video]: ...

    async def cache_videos(self, videos: List[Video]) -> List[Video]: ...

    async def get_cached_video(self, video_id: str, max_age: timedelta) -> Optional[Video]: ...


def clamp_max_results(max_results: Optional[int]) -> int:
    """Keep max_results within 1..50, defaulting to 10 when unset or out of range."""
    if max_results is None or max_results <= 0 or max_results > MAX_RESULTS_LIMIT:
        return DEFAULT_MAX_RESULTS
    return max_results


class VideoMetadataService:
    """Orchestrates the metadata cache and the upstream video provider."""

    def __init__(self, cache: MetadataCacheStore, youtube: YouTubeClient,
                 cache_max_age: timedelta = timedelta(minutes=30),
                 transcript_source: str = "scrape",
                 metrics: Optional[MetricsCollector] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.cache = cache
        self.youtube = youtube
        self.cache_max_age = cache_max_age
        self.transcript_source = transcript_source
        self.metrics = metrics
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.logger = get_logger("video.service")

    def _is_fresh(self, cached_at: Optional[datetime]) -> bool:
        return cached_at is not None and self.clock() - cached_at < self.cache_max_age

    def _record_lookup(self, entity: str, result: str):
        if self.metrics:
            self.metrics.increment_counter("cache_lookups_total", entity=entity, result=result)

    async def _read_cache(self, entity: str, read: Awaitable[T]) -> Optional[T]:
        """Run a cache read; a store failure counts as a miss."""
        try:
            return await read
        except StorageError as e:
            self._record_lookup(entity, "error")
            self.logger.warning("Cache read failed, treating as miss", entity=entity, error=e.message)
            return None

    async def _write_cache(self, entity: str, write: Awaitable[object]) -> None:
        """Run a cache write; failures are logged and never reach the caller."""
        try:
            await write
        except StorageError as e:
            if self.metrics:
                self.metrics.increment_counter("cache_write_failures_total", entity=entity)
            self.logger.warning("Cache write failed", entity=entity, error=e.message)

    async def search_channel(self, channel_name: str, user_id: Optional[str] = None) -> SearchChannelResponse:
        """Find a channel and its recent videos.

        The cache is keyed by the raw search term, so only a repeat of the
        exact same term can hit.
        """
        cached = await self._read_cache("channel", self.cache.get_cached_channel(channel_name))
        if cached is not None and self._is_fresh(cached.cached_at):
            self._record_lookup("channel", "hit")
            videos = await self._read_cache(
                "channel_videos",
                self.cache.get_cached_videos(cached.channel_id, self.cache_max_age)
            )
            return self._build_search_response(cached, videos or [])

        self._record_lookup("channel", "miss")
        self.logger.info("Channel cache miss", channel_name=channel_name, user_id=user_id)

        channel = await self.youtube.search_channel(channel_name)
        videos = await self.youtube.get_channel_videos(channel.channel_id, SEARCH_VIDEO_COUNT)

        await self._write_cache("channel", self.cache.cache_channel(channel))
        await self._write_cache("video", self.cache.cache_videos(videos))

        return self._build_search_response(channel, videos)

    async def get_channel_videos(self, channel_id: str, max_results: Optional[int] = None,
                                 user_id: Optional[str] = None) -> ChannelVideosResponse:
        """Return a channel's recent videos.

        A non-empty fresh cached list is returned as-is, whatever max_results asks for.
        """
        max_results = clamp_max_results(max_results)

        cached = await self._read_cache(
            "channel_videos",
            self.cache.get_cached_videos(channel_id, self.cache_max_age)
        )
        if cached:
            self._record_lookup("channel_videos", "hit")
            return ChannelVideosResponse(videos=[VideoInfo.from_video(v) for v in cached])

        self._record_lookup("channel_videos", "miss")
        self.logger.info("Channel videos cache miss", channel_id=channel_id,
                         max_results=max_results, user_id=user_id)

        videos = await self.youtube.get_channel_videos(channel_id, max_results)
        await self._write_cache("video", self.cache.cache_videos(videos))

        return ChannelVideosResponse(videos=[VideoInfo.from_video(v) for v in videos])

    async def get_video_details(self, video_id: str, user_id: Optional[str] = None) -> VideoDetailsResponse:
        """Return one video with statistics. The store query applies the freshness filter."""
        cached = await self._read_cache("video", self.cache.get_cached_video(video_id, self.cache_max_age))
        if cached is not None:
            self._record_lookup("video", "hit")
            return VideoDetailsResponse(video=VideoInfo.from_video(cached))

        self._record_lookup("video", "miss")
        self.logger.info("Video cache miss", video_id=video_id, user_id=user_id)

        video = await self.youtube.get_video_details(video_id)
        await self._write_cache("video", self.cache.cache_videos([video]))

        return VideoDetailsResponse(video=VideoInfo.from_video(video))

    async def get_video_transcript(self, video_id: str, user_id: Optional[str] = None) -> TranscriptResponse:
        """Fetch a plain-text transcript live. Nothing is cached."""
        if self.transcript_source == "captions":
            srt = await self.youtube.download_captions(video_id)
            transcript = srt_to_text(srt)
        else:
            html = await self.youtube.fetch_transcript_page(video_id)
            transcript = extract_transcript(html)

        self.logger.info("Transcript fetched", video_id=video_id, source=self.transcript_source,
                         length=len(transcript), user_id=user_id)
        return TranscriptResponse(transcript=transcript, video_id=video_id)

    @staticmethod
    def _build_search_response(channel: Channel, videos: List[Video]) -> SearchChannelResponse:
        return SearchChannelResponse(
            channel_id=channel.channel_id,
            channel_title=channel.title,
            channel_description=channel.description,
            thumbnail_url=channel.thumbnail,
            videos=[VideoInfo.from_video(v) for v in videos]
        )
