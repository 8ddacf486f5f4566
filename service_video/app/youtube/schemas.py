"""
Typed shapes of the Data API v3 responses the client consumes.

Only the fields TextTube reads are declared; everything else is ignored.
A payload that does not fit these shapes is an upstream error.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApiModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Thumbnail(ApiModel):
    url: str = ""


class Thumbnails(ApiModel):
    default: Thumbnail = Field(default_factory=Thumbnail)


class Snippet(ApiModel):
    title: str = ""
    description: str = ""
    channel_id: str = Field("", alias="channelId")
    channel_title: str = Field("", alias="channelTitle")
    published_at: str = Field("", alias="publishedAt")
    thumbnails: Thumbnails = Field(default_factory=Thumbnails)

    @property
    def thumbnail_url(self) -> str:
        return self.thumbnails.default.url


class Statistics(ApiModel):
    # Counts arrive as decimal strings; hidden counts are omitted.
    view_count: int = Field(0, alias="viewCount")
    like_count: int = Field(0, alias="likeCount")


class SearchResultId(ApiModel):
    kind: str = ""
    video_id: Optional[str] = Field(None, alias="videoId")
    channel_id: Optional[str] = Field(None, alias="channelId")


class SearchResult(ApiModel):
    id: SearchResultId = Field(default_factory=SearchResultId)
    snippet: Snippet = Field(default_factory=Snippet)


class SearchListResponse(ApiModel):
    items: Optional[List[SearchResult]] = None


class ChannelResource(ApiModel):
    id: str = ""
    snippet: Snippet = Field(default_factory=Snippet)


class ChannelListResponse(ApiModel):
    items: Optional[List[ChannelResource]] = None


class VideoResource(ApiModel):
    id: str = ""
    snippet: Snippet = Field(default_factory=Snippet)
    statistics: Statistics = Field(default_factory=Statistics)


class VideoListResponse(ApiModel):
    items: Optional[List[VideoResource]] = None


class CaptionResource(ApiModel):
    id: str


class CaptionListResponse(ApiModel):
    items: Optional[List[CaptionResource]] = None
