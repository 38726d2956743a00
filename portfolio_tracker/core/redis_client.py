import redis
from portfolio_tracker.core.config import settings
from portfolio_tracker.core.logger import logger

redis_client = redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)


def check_redis_connection() -> bool:
    try:
        redis_client.ping()
        logger.info("Connected to Redis successfully.")
        return True
    except redis.RedisError as e:
        logger.error(f"Redis connection failed: {e}")
        return False
