"""
Video service client for Gateway.
"""

from typing import Any, Dict

from .base import DownstreamClient


class VideoClient(DownstreamClient):
    """Client for communicating with the Video metadata service."""

    service_name = "video"

    async def search_channel(self, channel_name: str, user_id: str) -> Dict[str, Any]:
        return await self._post("search_channel", "/videos/search-channel", {
            "channel_name": channel_name,
            "user_id": user_id
        })

    async def get_channel_videos(self, channel_id: str, user_id: str, max_results: int) -> Dict[str, Any]:
        return await self._post("get_channel_videos", "/videos/channel-videos", {
            "channel_id": channel_id,
            "user_id": user_id,
            "max_results": max_results
        })

    async def get_video_details(self, video_id: str, user_id: str) -> Dict[str, Any]:
        return await self._post("get_video_details", "/videos/details", {
            "video_id": video_id,
            "user_id": user_id
        })

    async def get_video_transcript(self, video_id: str, user_id: str) -> Dict[str, Any]:
        return await self._post("get_video_transcript", "/videos/transcript", {
            "video_id": video_id,
            "user_id": user_id
        })
