"""
In-memory credential store for Auth service tests.
"""

from dataclasses import replace
from typing import Dict, Optional

from shared.errors import StorageError, ValidationError
from service_auth.app.models import User


class InMemoryUserRepository:
    """Dict-backed stand-in for UserRepository with the same uniqueness rules."""

    def __init__(self):
        self.users: Dict[str, User] = {}
        self.fail_writes = False
        self.started = False

    async def start(self):
        self.started = True

    async def stop(self):
        self.started = False

    async def health_check(self) -> bool:
        return self.started

    async def create(self, user: User) -> User:
        if self.fail_writes:
            raise StorageError("Failed to create user")
        for existing in self.users.values():
            if existing.username == user.username or existing.email == user.email:
                raise ValidationError("User already exists")
        self.users[user.id] = replace(user)
        return user

    async def find_by_email(self, email: str) -> Optional[User]:
        for user in self.users.values():
            if user.email == email:
                return user
        return None
