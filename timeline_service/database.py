"""
Database connection for Timeline Service
"""
import asyncpg
from typing import Optional, List, Dict, Any
import logging

from .config import settings

logger = logging.getLogger(__name__)


class Database:
    """PostgreSQL database connection manager using asyncpg"""

    def __init__(self):
        self.pool: Optional[asyncpg.Pool] = None

    async def connect(self):
        """Create database connection pool"""
        try:
            self.pool = await asyncpg.create_pool(
                settings.DATABASE_URL,
                min_size=1,
                max_size=settings.DB_POOL_SIZE,
                command_timeout=60,
            )
            logger.info("Database connection pool created successfully")

            if settings.DB_INIT_SCHEMA:
                await self._init_schema()
        except Exception as e:
            logger.error(f"Failed to connect to database: {e}")
            raise

    async def disconnect(self):
        """Close database connection pool"""
        if self.pool:
            await self.pool.close()
            logger.info("Database connection pool closed")

    async def _init_schema(self):
        """Create the tables the timeline reads from"""
        async with self.pool.acquire() as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id SERIAL PRIMARY KEY,
                    name TEXT NOT NULL,
                    handle TEXT NOT NULL UNIQUE,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    bio TEXT DEFAULT '',
                    avatar_url TEXT,
                    profile_languages TEXT DEFAULT '',
                    created_at TIMESTAMP NOT NULL DEFAULT (NOW() AT TIME ZONE 'utc')
                )
            """)

            await conn.execute("""
                CREATE TABLE IF NOT EXISTS posts (
                    id SERIAL PRIMARY KEY,
                    public_id TEXT NOT NULL UNIQUE,
                    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    premise_1 TEXT NOT NULL,
                    premise_2 TEXT NOT NULL,
                    code TEXT NOT NULL,
                    language TEXT NOT NULL,
                    version TEXT DEFAULT 'latest',
                    ai_summary TEXT DEFAULT '',
                    created_at TIMESTAMP NOT NULL DEFAULT (NOW() AT TIME ZONE 'utc')
                )
            """)

            await conn.execute("""
                CREATE TABLE IF NOT EXISTS tags (
                    id SERIAL PRIMARY KEY,
                    name TEXT NOT NULL UNIQUE,
                    kind TEXT NOT NULL
                )
            """)

            await conn.execute("""
                CREATE TABLE IF NOT EXISTS post_tags (
                    post_id INTEGER NOT NULL REFERENCES posts(id) ON DELETE CASCADE,
                    tag_id INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
                    PRIMARY KEY (post_id, tag_id)
                )
            """)

            await conn.execute("""
                CREATE TABLE IF NOT EXISTS comments (
                    id SERIAL PRIMARY KEY,
                    post_id INTEGER NOT NULL REFERENCES posts(id) ON DELETE CASCADE,
                    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    body TEXT NOT NULL,
                    created_at TIMESTAMP NOT NULL DEFAULT (NOW() AT TIME ZONE 'utc')
                )
            """)

            await conn.execute("""
                CREATE TABLE IF NOT EXISTS likes (
                    post_id INTEGER NOT NULL REFERENCES posts(id) ON DELETE CASCADE,
                    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    created_at TIMESTAMP NOT NULL DEFAULT (NOW() AT TIME ZONE 'utc'),
                    PRIMARY KEY (post_id, user_id)
                )
            """)

            await conn.execute("""
                CREATE TABLE IF NOT EXISTS follows (
                    follower_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    following_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    created_at TIMESTAMP NOT NULL DEFAULT (NOW() AT TIME ZONE 'utc'),
                    PRIMARY KEY (follower_id, following_id)
                )
            """)

            await conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_posts_created
                ON posts (created_at DESC)
            """)

            await conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_likes_user
                ON likes (user_id)
            """)

            logger.info("Database schema initialized successfully")

    async def fetch_all(self, query: str, *args) -> List[Dict[str, Any]]:
        """Fetch all rows"""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, *args)
            return [dict(row) for row in rows]


# Global database instance
db = Database()


async def get_db() -> Database:
    """Dependency for getting database instance"""
    return db
