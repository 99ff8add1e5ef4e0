import json
from redis import asyncio as aioredis
from app.core.config import settings


class RedisManager:
    def __init__(self, url: str | None = None):
        self.url = url or settings.REDIS_URL
        self.redis = None

    async def connect(self):
        """Connect to Redis (called on FastAPI startup)."""
        self.redis = await aioredis.from_url(
            self.url,
            encoding="utf-8",
            decode_responses=True
        )

    async def close(self):
        """Close Redis connection."""
        if self.redis:
            await self.redis.close()
            self.redis = None

    async def set_json(self, key: str, data: dict):
        await self.redis.set(key, json.dumps(data))

    async def get_json(self, key: str) -> dict | None:
        data = await self.redis.get(key)
        if data:
            return json.loads(data)
        return None

redis_manager = RedisManager()
