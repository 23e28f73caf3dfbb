# app/services/cache.py
from __future__ import annotations
import asyncio
import functools
import logging
import time
from typing import Any, Callable, Dict, Tuple

logger = logging.getLogger(__name__)

# In-process TTL caches by namespace
# value = (expires_at_epoch, stored_at_epoch, data)
_CACHES: Dict[str, Dict[Tuple[Any, ...], Tuple[float, int, Any]]] = {}


def _cache_for(namespace: str) -> Dict[Tuple[Any, ...], Tuple[float, int, Any]]:
    return _CACHES.setdefault(namespace, {})


def _set_headers(response, state: str, stored_at: int, ttl_seconds: int, cache_control: str | None) -> None:
    if response is None:
        return
    response.headers["X-Cache"] = state
    response.headers["X-Cache-Stored-At"] = str(stored_at)
    response.headers["Cache-Control"] = cache_control or f"private, max-age={ttl_seconds}"


def cache_route(
    *,
    namespace: str,
    ttl_seconds: int,
    key_builder: Callable[..., Tuple[Any, ...]],
    cache_control: str | None = None,  # defaults to private,max-age=ttl
):
    """
    Decorator for FastAPI routes (sync or async).
    - Caches the returned data by a computed key.
    - Sets X-Cache: HIT|MISS, X-Cache-Stored-At, and Cache-Control on the Response if present in kwargs.
    Exceptions are never cached.
    """
    cache = _cache_for(namespace)

    def decorator(fn: Callable):
        def lookup(kwargs):
            key = key_builder(**kwargs)
            now = time.time()
            entry = cache.get(key)
            if entry:
                exp_at, stored_at, data = entry
                if exp_at > now:
                    _set_headers(kwargs.get("response"), "HIT", stored_at, ttl_seconds, cache_control)
                    return key, entry
                cache.pop(key, None)
            return key, None

        def store(key, kwargs, data):
            now = time.time()
            cache[key] = (now + ttl_seconds, int(now), data)
            _set_headers(kwargs.get("response"), "MISS", int(now), ttl_seconds, cache_control)
            return data

        # keep the route's sync/async kind so FastAPI runs it the same way
        if asyncio.iscoroutinefunction(fn):
            @functools.wraps(fn)
            async def async_wrapper(**kwargs):
                key, hit = lookup(kwargs)
                if hit:
                    return hit[2]
                return store(key, kwargs, await fn(**kwargs))

            return async_wrapper

        @functools.wraps(fn)
        def wrapper(**kwargs):
            key, hit = lookup(kwargs)
            if hit:
                return hit[2]
            return store(key, kwargs, fn(**kwargs))

        return wrapper
    return decorator


def key_tuple(*parts: Any) -> Tuple[Any, ...]:
    return tuple(parts)


def invalidate(namespace: str, predicate: Callable[[Tuple[Any, ...]], bool] | None = None) -> int:
    """Drop entries of a namespace (all, or those whose key matches). Returns how many were dropped."""
    cache = _cache_for(namespace)
    keys = [k for k in cache if predicate is None or predicate(k)]
    for k in keys:
        cache.pop(k, None)
    if keys:
        logger.debug("Invalidated %d entries in cache %s", len(keys), namespace)
    return len(keys)
