"""
Sort-order helpers shared by every ordered tenant collection.

Rows carry a zero-based ``sort_order``; lists are served ordered by
(sort_order, id) and bulk reorder rewrites every position in one transaction.
"""
import logging

from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from .cache_signals import suspend_cache_signals
from .cache_utils import invalidate_business_cache
from .errors import AppError
from .utils import create_audit_log

logger = logging.getLogger('bizpanel.core.ordering')


def next_sort_order(queryset):
    """Position for a row appended at the end of the collection"""
    current = queryset.aggregate(max_order=Max('sort_order'))['max_order']
    return 0 if current is None else current + 1


def parse_reorder_items(data):
    """
    Validate a reorder body: {"items": [{"id": ..., "sort_order": n}, ...]}

    Returns a list of (id, sort_order) pairs in request order.
    """
    items = data.get('items') if hasattr(data, 'get') else None
    if not isinstance(items, list) or not items:
        raise AppError.bad_request('items must be a non-empty list')

    pairs = []
    details = []
    seen = set()
    for index, entry in enumerate(items):
        if not isinstance(entry, dict):
            details.append(f'items.{index}: must be an object')
            continue
        item_id = entry.get('id')
        position = entry.get('sort_order')
        try:
            item_id = int(item_id)
        except (TypeError, ValueError):
            details.append(f'items.{index}.id: must be an integer id')
            continue
        if isinstance(position, bool) or not isinstance(position, int) or position < 0:
            details.append(f'items.{index}.sort_order: must be a non-negative integer')
            continue
        if item_id in seen:
            details.append(f'items.{index}.id: duplicate id {item_id}')
            continue
        seen.add(item_id)
        pairs.append((item_id, position))

    if details:
        raise AppError.validation_error(details=details)
    return pairs


def apply_bulk_reorder(request, model, business, pairs):
    """Write every (id, sort_order) pair atomically; foreign ids reject the batch"""
    label = model._meta.verbose_name.title()
    with transaction.atomic():
        rows = {obj.pk: obj for obj in model.objects.select_for_update().filter(business=business, pk__in=[item_id for item_id, _ in pairs])}
        missing = [item_id for item_id, _ in pairs if item_id not in rows]
        if missing:
            raise AppError('NOT_FOUND', f'{label} not found.', [f'id: {item_id} does not belong to this business' for item_id in missing])

        changed = []
        with suspend_cache_signals():
            for item_id, position in pairs:
                obj = rows[item_id]
                if obj.sort_order != position:
                    obj.sort_order = position
                    obj.updated_at = timezone.now()
                    changed.append(obj)
            if changed:
                model.objects.bulk_update(changed, ['sort_order', 'updated_at'])

        invalidate_business_cache(business.id)
        transaction.on_commit(lambda: invalidate_business_cache(business.id))

    logger.info(f"User {request.user.username} reordered {len(pairs)} {model.__name__} rows ({len(changed)} changed) for business {business.id}")
    create_audit_log(
        request=request,
        action='reorder',
        model_name=model.__name__,
        object_id=business.id,
        business=business,
        changes={'order': [[item_id, position] for item_id, position in pairs]},
    )
    return [rows[item_id] for item_id, _ in sorted(pairs, key=lambda pair: pair[1])]
