from .client import YouTubeClient, extract_channel_handle
from .transcripts import collapse_whitespace, extract_transcript, srt_to_text

__all__ = [
    "YouTubeClient",
    "extract_channel_handle",
    "collapse_whitespace",
    "extract_transcript",
    "srt_to_text",
]
