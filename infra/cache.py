# infra/cache.py
"""
Redis access for the shared outfit history.

The client is created on first use, so importing this module never touches
the network and the in-memory history backend never needs a server.
"""
import json
from typing import Any, Optional

import redis

import config

_r: Optional[redis.Redis] = None


def get_client() -> redis.Redis:
    global _r
    if _r is None:
        _r = redis.Redis.from_url(config.REDIS_URL, decode_responses=True)
    return _r


def cache_delete(key: str):
    get_client().delete(key)


def ping() -> bool:
    """True when the Redis server at REDIS_URL answers."""
    try:
        return bool(get_client().ping())
    except redis.RedisError:
        return False


def hash_get_all(name: str) -> dict:
    """All fields of a Redis hash as a {field: JSON value} dict."""
    return {k: json.loads(v) for k, v in get_client().hgetall(name).items()}


def hash_get(name: str, field: str) -> Any:
    v = get_client().hget(name, field)
    return json.loads(v) if v else None


def hash_set(name: str, field: str, value: Any, ttl: int = 3600):
    """
    Store one field of a hash as JSON and refresh the TTL of the whole hash.
    Other fields are left untouched, so several writers can share one hash.
    """
    pipe = get_client().pipeline()
    pipe.hset(name, field, json.dumps(value))
    pipe.expire(name, ttl)
    pipe.execute()


def hash_delete(name: str, *fields: str) -> int:
    if not fields:
        return 0
    return get_client().hdel(name, *fields)
