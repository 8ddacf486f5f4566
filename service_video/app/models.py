"""
Data models for Video service.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


@dataclass
class Channel:
    """Cached channel record, keyed by channel_id."""
    channel_id: str
    title: str = ""
    description: str = ""
    thumbnail: str = ""
    cached_at: Optional[datetime] = None


@dataclass
class Video:
    """Cached video record, keyed by video_id.

    channel_id is a soft reference; the channel need not be cached.
    """
    video_id: str
    title: str = ""
    description: str = ""
    thumbnail: str = ""
    published_at: str = ""
    channel_id: str = ""
    channel_title: str = ""
    view_count: int = 0
    like_count: int = 0
    cached_at: Optional[datetime] = None


class VideoInfo(BaseModel):
    """Video as returned to callers."""
    video_id: str
    title: str
    description: str
    thumbnail_url: str
    published_at: str
    channel_id: str
    channel_title: str
    view_count: int = 0
    like_count: int = 0

    @classmethod
    def from_video(cls, video: Video) -> "VideoInfo":
        return cls(
            video_id=video.video_id,
            title=video.title,
            description=video.description,
            thumbnail_url=video.thumbnail,
            published_at=video.published_at,
            channel_id=video.channel_id,
            channel_title=video.channel_title,
            view_count=video.view_count,
            like_count=video.like_count
        )


class SearchChannelRequest(BaseModel):
    """Request model for channel search."""
    channel_name: str = Field(..., min_length=1, description="Search term or channel URL")
    user_id: str = Field(..., description="Verified caller identity")


class SearchChannelResponse(BaseModel):
    """Response model for channel search."""
    channel_id: str
    channel_title: str
    channel_description: str
    thumbnail_url: str
    videos: List[VideoInfo] = Field(default_factory=list)


class ChannelVideosRequest(BaseModel):
    """Request model for a channel's recent videos."""
    channel_id: str = Field(..., min_length=1)
    user_id: str
    max_results: int = Field(default=10, description="Clamped to 1..50, default 10")


class ChannelVideosResponse(BaseModel):
    """Response model for a channel's recent videos."""
    videos: List[VideoInfo] = Field(default_factory=list)


class VideoDetailsRequest(BaseModel):
    """Request model for video details."""
    video_id: str = Field(..., min_length=1)
    user_id: str


class VideoDetailsResponse(BaseModel):
    """Response model for video details."""
    video: VideoInfo


class TranscriptRequest(BaseModel):
    """Request model for a video transcript."""
    video_id: str = Field(..., min_length=1)
    user_id: str


class TranscriptResponse(BaseModel):
    """Response model for a video transcript."""
    transcript: str
    video_id: str
