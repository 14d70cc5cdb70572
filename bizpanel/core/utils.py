"""Audit trail for tenant data changes"""
import logging

from .models import AuditLog

logger = logging.getLogger('bizpanel.core.audit')


def get_client_ip(request):
    """First X-Forwarded-For hop, falling back to REMOTE_ADDR"""
    meta = getattr(request, 'META', None) or {}
    forwarded = meta.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return meta.get('REMOTE_ADDR') or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, business=None, object_name=None):
    """
    Record one AuditLog row for a change in ``business``.

    The acting user is ``user`` or the request's authenticated user. Rows
    without an action, model or object id are not written. A failure to
    write is logged and never raised, so the change itself still succeeds.
    """
    if not action or not model_name or object_id in (None, ''):
        logger.warning(f"Skipping audit entry: action={action} model={model_name} object_id={object_id}")
        return None

    actor = user or getattr(request, 'user', None)
    if actor is not None and not actor.is_authenticated:
        actor = None

    try:
        return AuditLog.objects.create(
            user=actor,
            business=business,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            changes=changes or {},
            ip_address=get_client_ip(request),
        )
    except Exception as e:
        logger.error(f"Audit entry for {model_name} {object_id} ({action}) not written: {e}")
        return None
