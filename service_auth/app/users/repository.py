"""
PostgreSQL credential store for Auth service.
"""

from typing import Optional

import asyncpg
from asyncpg.exceptions import InterfaceError, PostgresError, UniqueViolationError

from shared.logging import get_logger
from shared.errors import StorageError, ValidationError
from ..models import User

STORE_ERRORS = (PostgresError, InterfaceError, OSError)


class UserRepository:
    """User records keyed by email and username."""

    def __init__(self, dsn: str):
        self.dsn = dsn
        self.logger = get_logger("auth.users.repository")
        self.pool: Optional[asyncpg.Pool] = None

    async def start(self):
        """Open the connection pool and create the users table."""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=2,
                max_size=10,
                command_timeout=30
            )
            await self._create_tables()
            self.logger.info("User repository started")
        except STORE_ERRORS as e:
            self.logger.error("Failed to start user repository", error=str(e))
            raise StorageError("Failed to start user repository", details={"error": str(e)})

    async def stop(self):
        """Close the connection pool."""
        if self.pool:
            await self.pool.close()
            self.logger.info("User repository stopped")

    async def _create_tables(self):
        async with self.pool.acquire() as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id VARCHAR(64) PRIMARY KEY,
                    username VARCHAR(255) NOT NULL UNIQUE,
                    email VARCHAR(255) NOT NULL UNIQUE,
                    password_hash VARCHAR(255) NOT NULL,
                    created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
                    updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
                );
            """)

    async def create(self, user: User) -> User:
        """Insert a new user.

        Raises ValidationError when the email or username is already taken and
        StorageError for any other persistence failure.
        """
        try:
            async with self.pool.acquire() as conn:
                await conn.execute("""
                    INSERT INTO users (id, username, email, password_hash, created_at, updated_at)
                    VALUES ($1, $2, $3, $4, $5, $6)
                """, user.id, user.username, user.email, user.password_hash,
                    user.created_at, user.updated_at)
        except UniqueViolationError as e:
            self.logger.info("Duplicate user rejected", constraint=e.constraint_name)
            raise ValidationError("User already exists", details={"constraint": e.constraint_name})
        except STORE_ERRORS as e:
            self.logger.error("Failed to create user", error=str(e))
            raise StorageError("Failed to create user", details={"error": str(e)})

        return user

    async def find_by_email(self, email: str) -> Optional[User]:
        """Look up a user by email. Returns None when absent."""
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow("""
                    SELECT id, username, email, password_hash, created_at, updated_at
                    FROM users WHERE email = $1
                """, email)
        except STORE_ERRORS as e:
            self.logger.error("Failed to look up user", error=str(e))
            raise StorageError("Failed to look up user", details={"error": str(e)})

        if row is None:
            return None

        return User(
            id=row["id"],
            username=row["username"],
            email=row["email"],
            password_hash=row["password_hash"],
            created_at=row["created_at"],
            updated_at=row["updated_at"]
        )

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
