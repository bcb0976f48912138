"""Redis 客户端配置模块"""

from redis import Redis
from redis.asyncio import Redis as AsyncRedis

from order_notes.core.config import settings

REDIS_URL = settings.redis_url

# 同步客户端供服务层缓存使用，异步客户端仅用于启动时的连通性检查
redis_client = Redis.from_url(REDIS_URL, decode_responses=True)
async_redis = AsyncRedis.from_url(REDIS_URL, decode_responses=True)

# 导出
__all__ = [
    "redis_client",
    "async_redis",
    "REDIS_URL"
]
