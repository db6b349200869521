from .redis_stream_queue import RedisStreamJobQueue

__all__ = ["RedisStreamJobQueue"]
