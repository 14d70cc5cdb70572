"""
Cache invalidation signals
Invalidate the per-business menu cache when catalog rows change
"""
import logging
import threading
from contextlib import contextmanager

from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from .cache_utils import invalidate_business_cache

logger = logging.getLogger('bizpanel.core.cache')

# Thread-local storage to track signal suspension
_thread_locals = threading.local()

CACHED_MODELS = ('Category', 'Product')


@contextmanager
def suspend_cache_signals():
    """
    Temporarily suspend cache invalidation signals for bulk writes.
    Invalidate manually after the block.
    """
    previous = is_suspended()
    _thread_locals.suspended = True
    try:
        yield
    finally:
        _thread_locals.suspended = previous


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


@receiver([post_save, post_delete])
def invalidate_menu_cache(sender, instance, **kwargs):
    """Invalidate the owning business's menu cache when categories/products change"""
    if is_suspended() or sender.__name__ not in CACHED_MODELS:
        return
    if sender._meta.app_label != 'catalog':
        return

    business_id = getattr(instance, 'business_id', None)
    try:
        invalidate_business_cache(business_id)
        # again after commit so a concurrent reader cannot repopulate stale rows
        transaction.on_commit(lambda: invalidate_business_cache(business_id))
    except Exception as e:
        logger.warning(f"Error in invalidate_menu_cache signal: {e}")
