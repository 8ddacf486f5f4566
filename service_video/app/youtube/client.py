"""
YouTube Data API v3 client for Video service.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar
from urllib.parse import urlparse

import httpx
from pydantic import ValidationError as PayloadValidationError

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from shared.errors import DeadlineExceededError, NotFoundError, UpstreamError
from ..models import Channel, Video
from .schemas import (
    ApiModel, CaptionListResponse, ChannelListResponse, SearchListResponse,
    Snippet, Statistics, VideoListResponse
)

ResponseT = TypeVar("ResponseT", bound=ApiModel)


def extract_channel_handle(value: str) -> Optional[str]:
    """Return the handle from a channel URL such as https://www.youtube.com/@name.

    Anything that is not an http(s) URL with an ``@handle`` path segment yields None.
    """
    if not value.startswith(("http://", "https://")):
        return None

    for segment in urlparse(value).path.split("/"):
        if segment.startswith("@") and len(segment) > 1:
            return segment[1:]
    return None


def _channel(channel_id: str, snippet: Snippet) -> Channel:
    return Channel(
        channel_id=channel_id,
        title=snippet.title,
        description=snippet.description,
        thumbnail=snippet.thumbnail_url
    )


def _video(video_id: str, snippet: Snippet, statistics: Optional[Statistics] = None) -> Video:
    statistics = statistics or Statistics()
    return Video(
        video_id=video_id,
        title=snippet.title,
        description=snippet.description,
        thumbnail=snippet.thumbnail_url,
        published_at=snippet.published_at,
        channel_id=snippet.channel_id,
        channel_title=snippet.channel_title,
        view_count=statistics.view_count,
        like_count=statistics.like_count
    )


class YouTubeClient:
    """Client for the upstream video provider."""

    def __init__(self, api_key: str, api_url: str = "https://www.googleapis.com/youtube/v3",
                 transcript_page_url: str = "https://youtubetotranscript.com/transcript",
                 oauth_token: Optional[str] = None, timeout: float = 15.0,
                 metrics: Optional[MetricsCollector] = None,
                 http_client: Optional[httpx.AsyncClient] = None):
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.transcript_page_url = transcript_page_url
        self.oauth_token = oauth_token
        self.metrics = metrics
        self.http_client = http_client or httpx.AsyncClient(timeout=timeout)
        self.logger = get_logger("video.youtube_client")

    async def close(self):
        await self.http_client.aclose()

    async def _send(self, endpoint: str, url: str, params: Dict[str, Any],
                    headers: Optional[Dict[str, str]] = None) -> httpx.Response:
        """Issue a GET and map transport failures onto service errors."""
        status = "error"
        try:
            if self.metrics:
                with self.metrics.time_operation("upstream_request_duration_seconds", endpoint=endpoint):
                    response = await self.http_client.get(url, params=params, headers=headers)
            else:
                response = await self.http_client.get(url, params=params, headers=headers)
            status = str(response.status_code)
            return response
        except httpx.TimeoutException as e:
            status = "timeout"
            self.logger.warning("Upstream request timed out", endpoint=endpoint)
            raise DeadlineExceededError(f"YouTube {endpoint} request timed out", details={"error": str(e)})
        except httpx.HTTPError as e:
            self.logger.error("Upstream request failed", endpoint=endpoint, error=str(e))
            raise UpstreamError(f"YouTube {endpoint} request failed", details={"error": str(e)})
        finally:
            if self.metrics:
                self.metrics.increment_counter("upstream_requests_total", endpoint=endpoint, status=status)

    async def _get_json(self, endpoint: str, params: Dict[str, Any],
                        model: Type[ResponseT]) -> ResponseT:
        """Call a Data API endpoint and validate its JSON body against ``model``."""
        response = await self._send(
            endpoint,
            f"{self.api_url}/{endpoint}",
            {**params, "key": self.api_key}
        )

        if response.status_code != 200:
            raise UpstreamError(
                f"YouTube API error: {response.status_code}",
                details={"endpoint": endpoint, "status_code": response.status_code, "body": response.text[:500]}
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError("YouTube API returned malformed JSON", details={"endpoint": endpoint, "error": str(e)})

        try:
            return model.model_validate(payload)
        except PayloadValidationError as e:
            self.logger.warning("Unexpected YouTube payload", endpoint=endpoint, errors=e.error_count())
            raise UpstreamError(
                "YouTube API returned an unexpected payload",
                details={"endpoint": endpoint, "error": str(e)}
            )

    async def get_channel_by_handle(self, handle: str) -> Channel:
        """Resolve a channel by its @handle."""
        payload = await self._get_json(
            "channels",
            {"part": "snippet", "forHandle": handle},
            ChannelListResponse
        )

        if not payload.items:
            raise NotFoundError("channel not found", details={"handle": handle})

        item = payload.items[0]
        return _channel(item.id, item.snippet)

    async def search_channel(self, channel_name: str) -> Channel:
        """Resolve a channel from a URL or a free-text search term."""
        handle = extract_channel_handle(channel_name)
        if handle:
            return await self.get_channel_by_handle(handle)

        payload = await self._get_json("search", {
            "q": channel_name,
            "type": "channel",
            "part": "snippet",
            "maxResults": 1
        }, SearchListResponse)

        if not payload.items:
            raise NotFoundError("channel not found", details={"query": channel_name})

        snippet = payload.items[0].snippet
        return _channel(snippet.channel_id, snippet)

    async def get_channel_videos(self, channel_id: str, max_results: int) -> List[Video]:
        """Fetch a channel's most recent videos, newest first."""
        payload = await self._get_json("search", {
            "channelId": channel_id,
            "part": "snippet,id",
            "order": "date",
            "maxResults": max_results,
            "type": "video"
        }, SearchListResponse)

        return [
            _video(item.id.video_id, item.snippet)
            for item in payload.items or []
            if item.id.video_id
        ]

    async def get_video_details(self, video_id: str) -> Video:
        """Fetch a single video including view and like counts."""
        payload = await self._get_json(
            "videos",
            {"id": video_id, "part": "snippet,statistics"},
            VideoListResponse
        )

        if not payload.items:
            raise NotFoundError("video not found", details={"video_id": video_id})

        item = payload.items[0]
        return _video(item.id or video_id, item.snippet, item.statistics)

    async def download_captions(self, video_id: str) -> str:
        """Download the first caption track of a video as SRT."""
        payload = await self._get_json(
            "captions",
            {"part": "snippet", "videoId": video_id},
            CaptionListResponse
        )

        if not payload.items:
            raise NotFoundError("no captions available", details={"video_id": video_id})

        caption_id = payload.items[0].id
        headers = {"Authorization": f"Bearer {self.oauth_token}"} if self.oauth_token else None
        response = await self._send(
            "captions.download",
            f"{self.api_url}/captions/{caption_id}",
            {"tfmt": "srt", "key": self.api_key},
            headers=headers
        )

        if response.status_code != 200:
            raise UpstreamError(
                f"failed to download captions: status {response.status_code}",
                details={"video_id": video_id, "status_code": response.status_code}
            )
        return response.text

    async def fetch_transcript_page(self, video_id: str) -> str:
        """Fetch the transcript HTML page for a video."""
        response = await self._send("transcript_page", self.transcript_page_url, {"v": video_id})

        if response.status_code != 200:
            raise UpstreamError(
                f"failed to fetch transcript: status {response.status_code}",
                details={"video_id": video_id, "status_code": response.status_code}
            )
        return response.text
