"""
Adapters package for the Gateway Service.

Contains HTTP client wrappers for internal dependencies (Auth, Video).
These adapters encapsulate:

- Base URLs and request shapes
- Timeouts (no retries)
- Error handling that maps downstream error bodies to shared errors

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .auth_client import AuthClient
from .video_client import VideoClient

__all__ = [
    "AuthClient",
    "VideoClient",
]
