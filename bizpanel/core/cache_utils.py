"""
Caching utilities for per-business read paths (category list, public menu).

Keys are namespaced ``menu:<business_id>:<version>:<name>``. Invalidation bumps
the business version, which works on every cache backend, and additionally
scans Redis for stale keys when django-redis is the backend.
"""
import hashlib
import logging

from django.core.cache import cache

logger = logging.getLogger('bizpanel.core.cache')

# Cache TTLs (in seconds)
CATEGORY_LIST_CACHE_TTL = 120
PUBLIC_MENU_CACHE_TTL = 300


def _version_key(business_id):
    return f"menu:{business_id}:version"


def get_business_cache_version(business_id):
    version = cache.get(_version_key(business_id))
    if version is None:
        cache.add(_version_key(business_id), 1, None)
        version = cache.get(_version_key(business_id)) or 1
    return version


def make_cache_key(business_id, name, **params):
    """Generate a versioned cache key for one business"""
    version = get_business_cache_version(business_id)
    key = f"menu:{business_id}:{version}:{name}"
    if params:
        digest = hashlib.md5(str(sorted(params.items())).encode()).hexdigest()
        key = f"{key}:{digest}"
    return key


def get_cached(business_id, name, **params):
    """Returns tuple: (cached_data, cache_key)"""
    cache_key = make_cache_key(business_id, name, **params)
    data = cache.get(cache_key)
    if data is not None:
        logger.debug(f"Cache HIT: {cache_key}")
    else:
        logger.debug(f"Cache MISS: {cache_key}")
    return data, cache_key


def set_cached(cache_key, data, ttl=CATEGORY_LIST_CACHE_TTL):
    cache.set(cache_key, data, ttl)
    logger.debug(f"Cached: {cache_key}")


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys matching a pattern
    Uses Redis SCAN; silently skipped on other backends
    """
    try:
        from django_redis import get_redis_connection
        redis_conn = get_redis_connection("default")
    except Exception:
        return 0

    try:
        keys = []
        cursor = 0
        while True:
            cursor, partial_keys = redis_conn.scan(cursor, match=f"*{pattern}*", count=100)
            keys.extend(partial_keys)
            if cursor == 0:
                break
        if keys:
            redis_conn.delete(*keys)
        logger.info(f"Cache invalidation for pattern {pattern}: deleted {len(keys)} keys")
        return len(keys)
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {pattern}: {str(e)}")
        return 0


def invalidate_business_cache(business_id):
    """Drop every cached read for one business"""
    if business_id is None:
        return
    key = _version_key(business_id)
    try:
        cache.incr(key)
    except ValueError:
        cache.set(key, 2, None)
    invalidate_cache_pattern(f"menu:{business_id}:")
    logger.info(f"Invalidated menu cache for business {business_id}")
