"""
Video metadata service for TextTube.
"""

from datetime import timedelta
from typing import Optional

from shared.base_service import BaseService
from shared.config import ServiceConfig
from .cache import VideoCacheRepository
from .models import (
    SearchChannelRequest, SearchChannelResponse, ChannelVideosRequest, ChannelVideosResponse,
    VideoDetailsRequest, VideoDetailsResponse, TranscriptRequest, TranscriptResponse
)
from .service import MetadataCacheStore, VideoMetadataService
from .youtube import YouTubeClient


class VideoService(BaseService):
    """Video service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None,
                 cache_repository: Optional[MetadataCacheStore] = None,
                 youtube_client: Optional[YouTubeClient] = None):
        super().__init__("video", 8020, config)

        if not self.config.youtube_api_key and youtube_client is None:
            self.logger.warning("TEXTTUBE_YOUTUBE_API_KEY is not set; upstream calls will be rejected")

        self.cache_repository = cache_repository or VideoCacheRepository(self.config.postgres_dsn)
        self.youtube_client = youtube_client or YouTubeClient(
            self.config.youtube_api_key,
            api_url=self.config.youtube_api_url,
            transcript_page_url=self.config.transcript_page_url,
            oauth_token=self.config.youtube_oauth_token,
            timeout=self.config.upstream_timeout_seconds,
            metrics=self.metrics
        )
        self.video_service = VideoMetadataService(
            self.cache_repository,
            self.youtube_client,
            cache_max_age=timedelta(minutes=self.config.cache_max_age_minutes),
            transcript_source=self.config.transcript_source,
            metrics=self.metrics
        )

        @self.app.on_event("startup")
        async def _startup():
            await self.cache_repository.start()

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.cache_repository.stop()
            await self.youtube_client.close()

        self._setup_video_routes()

    def _setup_video_routes(self):
        """Set up video-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "video",
                "message": "TextTube - Video Metadata Service",
                "version": "1.0.0",
                "cache_max_age_minutes": self.config.cache_max_age_minutes
            }

        @self.app.post("/videos/search-channel", response_model=SearchChannelResponse)
        async def search_channel(request: SearchChannelRequest):
            """Resolve a channel and its recent videos."""
            self.observability.trace_request(user_id=request.user_id)
            return await self.video_service.search_channel(request.channel_name, user_id=request.user_id)

        @self.app.post("/videos/channel-videos", response_model=ChannelVideosResponse)
        async def get_channel_videos(request: ChannelVideosRequest):
            """List a channel's recent videos."""
            self.observability.trace_request(user_id=request.user_id)
            return await self.video_service.get_channel_videos(
                request.channel_id,
                request.max_results,
                user_id=request.user_id
            )

        @self.app.post("/videos/details", response_model=VideoDetailsResponse)
        async def get_video_details(request: VideoDetailsRequest):
            """Single video with statistics."""
            self.observability.trace_request(user_id=request.user_id)
            return await self.video_service.get_video_details(request.video_id, user_id=request.user_id)

        @self.app.post("/videos/transcript", response_model=TranscriptResponse)
        async def get_video_transcript(request: TranscriptRequest):
            """Live transcript fetch."""
            self.observability.trace_request(user_id=request.user_id)
            return await self.video_service.get_video_transcript(request.video_id, user_id=request.user_id)

    async def _check_dependencies(self):
        """Check video service dependencies."""
        healthy = await self.cache_repository.health_check()
        return {"postgres": "ok" if healthy else "error"}


def create_app(config: Optional[ServiceConfig] = None):
    """Create FastAPI application."""
    service = VideoService(config)
    return service.app


if __name__ == "__main__":
    service = VideoService()
    service.run()
