# league_table/utils/idempotency.py
import hashlib
import inspect
import logging
from collections import OrderedDict
from functools import wraps

from fastapi import HTTPException, Request

from .. import config
from ..config import is_testing

logger = logging.getLogger(__name__)

# In-memory store (per-process), bounded by config.IDEMPOTENCY_CACHE_SIZE.
# Not shared between workers.
_idempotency_store: "OrderedDict[str, object]" = OrderedDict()


async def _request_fingerprint(request: Request) -> str:
    """
    Stable fingerprint of a request: method, path, query string and
    SHA-1 of the raw body. Starlette caches request.body(), so reading it here is safe.
    """
    method = request.method.upper()
    path = request.url.path
    query = request.url.query or ""
    body_bytes = await request.body()
    body_hash = hashlib.sha1(body_bytes or b"").hexdigest()
    return f"{method}|{path}|{query}|{body_hash}"


def clear_idempotency_store() -> None:
    _idempotency_store.clear()


def _remember(cache_key: str, result) -> None:
    _idempotency_store[cache_key] = result
    while len(_idempotency_store) > max(1, config.IDEMPOTENCY_CACHE_SIZE):
        _idempotency_store.popitem(last=False)


def with_idempotency(key_prefix: str):
    """
    Decorator for FastAPI endpoints that must not run twice for one retry.
    Requires an 'Idempotency-Key' header; with TESTING=1 a fallback key is generated.

    The cache key combines the header with the request fingerprint, so the
    same key on a different league or body does not collide.
    Only successful results are cached; raised HTTP errors pass through.
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            request: Request | None = None
            for a in args:
                if isinstance(a, Request):
                    request = a
                    break
            if request is None:
                request = kwargs.get("request")
            if request is None:
                raise HTTPException(status_code=500, detail="Request object not found")

            header_key = request.headers.get("Idempotency-Key")
            if not header_key and is_testing():
                header_key = f"test-{key_prefix}"
            if not header_key:
                raise HTTPException(status_code=400, detail="Missing Idempotency-Key header")

            fp = await _request_fingerprint(request)
            cache_key = f"{key_prefix}::{header_key}::{fp}"

            if cache_key in _idempotency_store:
                logger.info("idempotent replay key=%s", header_key)
                return _idempotency_store[cache_key]

            if inspect.iscoroutinefunction(func):
                result = await func(*args, **kwargs)
            else:
                result = func(*args, **kwargs)

            _remember(cache_key, result)
            return result

        return wrapper

    return decorator
