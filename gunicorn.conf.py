import logging
import os

# Bind to the port provided via the PORT environment variable, defaulting to
# 5000.
bind = f"0.0.0.0:{os.getenv('PORT', '5000')}"

# Cache backends that live inside one worker process.  Revalidating the
# invoice list there would not reach the other workers.
PER_PROCESS_CACHES = {"simple", "simplecache"}


def cache_is_shared(cache_type: str) -> bool:
    return cache_type.rsplit(".", 1)[-1].lower() not in PER_PROCESS_CACHES


def worker_count(environ=os.environ) -> int:
    """Return the number of sync workers to start."""
    requested = int(environ.get("WEB_CONCURRENCY", "2"))
    cache_type = environ.get("CACHE_TYPE", "SimpleCache")
    if requested > 1 and not cache_is_shared(cache_type):
        logging.getLogger("gunicorn.error").warning(
            "CACHE_TYPE=%s is per-process; starting 1 worker instead of %s",
            cache_type,
            requested,
        )
        return 1
    return requested


workers = worker_count()
timeout = 30
