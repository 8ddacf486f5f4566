from .repository import VideoCacheRepository

__all__ = ["VideoCacheRepository"]
