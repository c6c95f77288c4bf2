"""Path-keyed caching built on Flask-Caching.

Data cached for a path is stored under a key that embeds the path's current
generation token.  :func:`revalidate_path` replaces the token, which makes
every cached entry for that path stale at once without having to know the
individual keys (query-string variants, pages, searches).
"""

from __future__ import annotations

import hashlib
import json
import uuid
from functools import wraps
from typing import Any, Callable

from flask import current_app

from app import cache


def _generation_key(path: str) -> str:
    return f"revalidate:{path}"


def _generation(path: str) -> str:
    token = cache.get(_generation_key(path))
    if token is None:
        token = uuid.uuid4().hex
        # timeout=0 keeps the token until the path is revalidated.
        cache.set(_generation_key(path), token, timeout=0)
    return token


def path_cache_key(path: str, prefix: str, *args: Any, **kwargs: Any) -> str:
    """Build the cache key for ``prefix`` called with the given arguments."""
    key_data = {"args": args, "kwargs": sorted(kwargs.items())}
    key_string = json.dumps(key_data, sort_keys=True, default=str)
    key_hash = hashlib.sha256(key_string.encode()).hexdigest()
    return f"view:{path}:{_generation(path)}:{prefix}:{key_hash}"


def cached_for_path(path: str, timeout: int | None = None) -> Callable:
    """Cache a function's result under ``path`` until it is revalidated."""

    def decorator(func: Callable) -> Callable:
        prefix = f"{func.__module__}.{func.__qualname__}"

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            key = path_cache_key(path, prefix, *args, **kwargs)
            value = cache.get(key)
            if value is None:
                value = func(*args, **kwargs)
                cache.set(key, value, timeout=timeout)
            return value

        return wrapper

    return decorator


def revalidate_path(path: str) -> None:
    """Mark everything cached for ``path`` as stale."""
    try:
        cache.set(_generation_key(path), uuid.uuid4().hex, timeout=0)
    except Exception:
        current_app.logger.warning(
            "Cache revalidation failed for %s", path, exc_info=True
        )
