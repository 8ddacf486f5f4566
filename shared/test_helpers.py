"""
Test helper functions and factory methods for TextTube.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional, List

from jose import jwt

from shared.config import ServiceConfig, get_config

TEST_JWT_SECRET = "test-secret"


@dataclass
class TestUser:
    """Test user data."""
    user_id: str
    username: str
    email: str
    password: str = "password123"


class FakeClock:
    """Settable clock for freshness and expiry tests."""

    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class TestDataFactory:
    """Factory for creating test data."""

    @staticmethod
    def create_test_users() -> List[TestUser]:
        """Create test users."""
        return [
            TestUser(
                user_id="user-1",
                username="alice",
                email="alice@example.com"
            ),
            TestUser(
                user_id="user-2",
                username="bob",
                email="bob@example.com"
            )
        ]

    @staticmethod
    def channel_search_payload(channel_id: str = "UC123", title: str = "Test Channel") -> Dict[str, Any]:
        """Provider response for a type=channel search."""
        return {
            "items": [
                {
                    "id": {"kind": "youtube#channel", "channelId": channel_id},
                    "snippet": {
                        "channelId": channel_id,
                        "title": title,
                        "description": "A channel about tests",
                        "thumbnails": {"default": {"url": f"https://img.example.com/{channel_id}.jpg"}}
                    }
                }
            ]
        }

    @staticmethod
    def channel_handle_payload(channel_id: str = "UC123", title: str = "Test Channel") -> Dict[str, Any]:
        """Provider response for a channels?forHandle lookup."""
        return {
            "items": [
                {
                    "id": channel_id,
                    "snippet": {
                        "title": title,
                        "description": "A channel about tests",
                        "thumbnails": {"default": {"url": f"https://img.example.com/{channel_id}.jpg"}}
                    }
                }
            ]
        }

    @staticmethod
    def channel_videos_payload(channel_id: str = "UC123", count: int = 3) -> Dict[str, Any]:
        """Provider response for a type=video search, newest first."""
        return {
            "items": [
                {
                    "id": {"kind": "youtube#video", "videoId": f"vid{i}"},
                    "snippet": {
                        "channelId": channel_id,
                        "channelTitle": "Test Channel",
                        "title": f"Video {i}",
                        "description": f"Description {i}",
                        "publishedAt": f"2024-01-{30 - i:02d}T00:00:00Z",
                        "thumbnails": {"default": {"url": f"https://img.example.com/vid{i}.jpg"}}
                    }
                }
                for i in range(count)
            ]
        }

    @staticmethod
    def video_details_payload(video_id: str = "vid0", views: str = "1500", likes: str = "42") -> Dict[str, Any]:
        """Provider response for a videos?part=snippet,statistics lookup."""
        return {
            "items": [
                {
                    "id": video_id,
                    "snippet": {
                        "channelId": "UC123",
                        "channelTitle": "Test Channel",
                        "title": "Detailed Video",
                        "description": "All the details",
                        "publishedAt": "2024-01-15T00:00:00Z",
                        "thumbnails": {"default": {"url": f"https://img.example.com/{video_id}.jpg"}}
                    },
                    "statistics": {"viewCount": views, "likeCount": likes}
                }
            ]
        }


class MockTokenGenerator:
    """Mock token generator for testing."""

    def __init__(self, secret: str = TEST_JWT_SECRET, algorithm: str = "HS256"):
        self.secret = secret
        self.algorithm = algorithm

    def generate_token(self, user: TestUser, expires_in: int = 3600, **extra_claims) -> str:
        """Generate a signed token for a test user."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user.user_id,
            "username": user.username,
            "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
            **extra_claims
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def generate_expired_token(self, user: TestUser) -> str:
        """Generate a token whose expiry has already passed."""
        return self.generate_token(user, expires_in=-60)


class TestEnvironment:
    """Test environment configuration."""

    @staticmethod
    def get_mock_config(service_name: str, port: int, **overrides) -> ServiceConfig:
        """Service config pointing at nothing real."""
        settings = {
            "env": "test",
            "log_level": "warning",
            "jwt_secret": TEST_JWT_SECRET,
            "bcrypt_rounds": 4,
            "youtube_api_key": "test-api-key",
            "youtube_api_url": "https://youtube.test/v3",
            "transcript_page_url": "https://transcripts.test/transcript",
            "auth_service_url": "http://auth.test",
            "video_service_url": "http://video.test",
        }
        settings.update(overrides)
        return get_config(service_name, port, **settings)
