# posai/domain/repositories/token_repo.py
from __future__ import annotations
from typing import Optional
from redis.asyncio import Redis
import logging

logger = logging.getLogger(__name__)

class TokenRepo:
    """
    Adapter over the persisted key-value store holding the session bearer token.
    No business logic here, just a read with tolerant failure:
    a missing Redis or a Redis error means "no token".
    """
    def __init__(self, redis: Optional[Redis], key: str = "auth_token"):
        self.redis = redis
        self.key = key

    async def get_token(self) -> Optional[str]:
        if self.redis is None:
            return None
        try:
            token = await self.redis.get(self.key)
        except Exception as e:
            logger.warning("token lookup failed key=%s err=%s", self.key, e)
            return None
        if isinstance(token, bytes):
            token = token.decode("utf-8")
        return token or None

    async def set_token(self, token: str, ttl: Optional[int] = None) -> None:
        if self.redis is None:
            return
        await self.redis.set(self.key, token, ex=ttl)

    async def clear(self) -> None:
        if self.redis is not None:
            await self.redis.delete(self.key)
