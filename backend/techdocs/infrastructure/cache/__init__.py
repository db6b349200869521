from .redis_cache_backend import RedisCacheBackend

__all__ = ["RedisCacheBackend"]
