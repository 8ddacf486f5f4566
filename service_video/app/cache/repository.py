"""
PostgreSQL metadata cache for Video service.

Every write is an upsert on the natural key (channel_id / video_id) that
overwrites all fields and stamps cached_at; concurrent writers for the same
key resolve last-write-wins.
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

import asyncpg
from asyncpg.exceptions import InterfaceError, PostgresError

from shared.logging import get_logger
from shared.errors import StorageError
from ..models import Channel, Video

# InterfaceError covers client-side failures such as a closed pool or connection.
STORE_ERRORS = (PostgresError, InterfaceError, OSError)

_VIDEO_COLUMNS = """
    video_id, title, description, thumbnail, published_at,
    channel_id, channel_title, view_count, like_count, cached_at
"""


def _row_to_video(row) -> Video:
    return Video(
        video_id=row["video_id"],
        title=row["title"],
        description=row["description"],
        thumbnail=row["thumbnail"],
        published_at=row["published_at"],
        channel_id=row["channel_id"],
        channel_title=row["channel_title"],
        view_count=row["view_count"],
        like_count=row["like_count"],
        cached_at=row["cached_at"]
    )


class VideoCacheRepository:
    """Channel and video cache records."""

    def __init__(self, dsn: str, clock: Optional[Callable[[], datetime]] = None):
        self.dsn = dsn
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.logger = get_logger("video.cache.repository")
        self.pool: Optional[asyncpg.Pool] = None

    async def start(self):
        """Open the connection pool and create tables."""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=2,
                max_size=10,
                command_timeout=30
            )
            await self._create_tables()
            self.logger.info("Video cache repository started")
        except STORE_ERRORS as e:
            self.logger.error("Failed to start video cache repository", error=str(e))
            raise StorageError("Failed to start video cache repository", details={"error": str(e)})

    async def stop(self):
        """Close the connection pool."""
        if self.pool:
            await self.pool.close()
            self.logger.info("Video cache repository stopped")

    async def _create_tables(self):
        async with self.pool.acquire() as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS channels (
                    channel_id VARCHAR(255) PRIMARY KEY,
                    title TEXT NOT NULL DEFAULT '',
                    description TEXT NOT NULL DEFAULT '',
                    thumbnail TEXT NOT NULL DEFAULT '',
                    cached_at TIMESTAMP WITH TIME ZONE NOT NULL
                );
            """)
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS videos (
                    video_id VARCHAR(255) PRIMARY KEY,
                    title TEXT NOT NULL DEFAULT '',
                    description TEXT NOT NULL DEFAULT '',
                    thumbnail TEXT NOT NULL DEFAULT '',
                    published_at VARCHAR(64) NOT NULL DEFAULT '',
                    channel_id VARCHAR(255) NOT NULL DEFAULT '',
                    channel_title TEXT NOT NULL DEFAULT '',
                    view_count BIGINT NOT NULL DEFAULT 0,
                    like_count BIGINT NOT NULL DEFAULT 0,
                    cached_at TIMESTAMP WITH TIME ZONE NOT NULL
                );
            """)
            await conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_videos_channel_cached ON videos(channel_id, cached_at);
            """)

    async def get_cached_channel(self, channel_id: str) -> Optional[Channel]:
        """Return the channel record regardless of age; callers judge freshness."""
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow("""
                    SELECT channel_id, title, description, thumbnail, cached_at
                    FROM channels WHERE channel_id = $1
                """, channel_id)
        except STORE_ERRORS as e:
            raise StorageError("Failed to read cached channel", details={"error": str(e)})

        if row is None:
            return None

        return Channel(
            channel_id=row["channel_id"],
            title=row["title"],
            description=row["description"],
            thumbnail=row["thumbnail"],
            cached_at=row["cached_at"]
        )

    async def cache_channel(self, channel: Channel) -> Channel:
        """Upsert a channel and stamp cached_at."""
        stamped = replace(channel, cached_at=self.clock())
        try:
            async with self.pool.acquire() as conn:
                await conn.execute("""
                    INSERT INTO channels (channel_id, title, description, thumbnail, cached_at)
                    VALUES ($1, $2, $3, $4, $5)
                    ON CONFLICT (channel_id) DO UPDATE SET
                        title = EXCLUDED.title,
                        description = EXCLUDED.description,
                        thumbnail = EXCLUDED.thumbnail,
                        cached_at = EXCLUDED.cached_at
                """, stamped.channel_id, stamped.title, stamped.description,
                    stamped.thumbnail, stamped.cached_at)
        except STORE_ERRORS as e:
            raise StorageError("Failed to cache channel", details={"error": str(e)})

        return stamped

    async def get_cached_videos(self, channel_id: str, max_age: timedelta) -> List[Video]:
        """Return a channel's videos cached within max_age, newest publish first."""
        cutoff = self.clock() - max_age
        try:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(f"""
                    SELECT {_VIDEO_COLUMNS}
                    FROM videos
                    WHERE channel_id = $1 AND cached_at >= $2
                    ORDER BY published_at DESC
                """, channel_id, cutoff)
        except STORE_ERRORS as e:
            raise StorageError("Failed to read cached videos", details={"error": str(e)})

        return [_row_to_video(row) for row in rows]

    async def cache_videos(self, videos: List[Video]) -> List[Video]:
        """Upsert a batch of videos, stamping each with cached_at."""
        if not videos:
            return []

        now = self.clock()
        stamped = [replace(video, cached_at=now) for video in videos]
        try:
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    await conn.executemany(f"""
                        INSERT INTO videos ({_VIDEO_COLUMNS})
                        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                        ON CONFLICT (video_id) DO UPDATE SET
                            title = EXCLUDED.title,
                            description = EXCLUDED.description,
                            thumbnail = EXCLUDED.thumbnail,
                            published_at = EXCLUDED.published_at,
                            channel_id = EXCLUDED.channel_id,
                            channel_title = EXCLUDED.channel_title,
                            view_count = EXCLUDED.view_count,
                            like_count = EXCLUDED.like_count,
                            cached_at = EXCLUDED.cached_at
                    """, [
                        (v.video_id, v.title, v.description, v.thumbnail, v.published_at,
                         v.channel_id, v.channel_title, v.view_count, v.like_count, v.cached_at)
                        for v in stamped
                    ])
        except STORE_ERRORS as e:
            raise StorageError("Failed to cache videos", details={"error": str(e)})

        return stamped

    async def get_cached_video(self, video_id: str, max_age: timedelta) -> Optional[Video]:
        """Return a video cached within max_age, or None."""
        cutoff = self.clock() - max_age
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(f"""
                    SELECT {_VIDEO_COLUMNS}
                    FROM videos
                    WHERE video_id = $1 AND cached_at >= $2
                """, video_id, cutoff)
        except STORE_ERRORS as e:
            raise StorageError("Failed to read cached video", details={"error": str(e)})

        return _row_to_video(row) if row else None

    async def health_check(self) -> bool:
        """Check database connectivity."""
        if not self.pool:
            return False
        try:
            async with self.pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return True
        except STORE_ERRORS:
            return False
