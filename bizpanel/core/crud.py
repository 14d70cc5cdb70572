"""
Create/update/delete plumbing shared by the tenant collection views.

Views resolve the business and the target row; these helpers validate,
write, log and audit, then answer with the success envelope.
"""
import logging

from rest_framework import status

from .envelope import success_response
from .ordering import next_sort_order
from .utils import create_audit_log

logger = logging.getLogger('bizpanel.core.crud')


def _context(request, business):
    return {'request': request, 'business': business}


def _as_text(value):
    if hasattr(value, '_meta') and hasattr(value, 'pk'):
        return value.pk
    return value if isinstance(value, (str, int, float, bool, list, dict)) or value is None else str(value)


def create_from_request(request, business, serializer_class, data=None):
    serializer = serializer_class(data=request.data if data is None else data, context=_context(request, business))
    serializer.is_valid(raise_exception=True)

    model = serializer_class.Meta.model
    extra = {'business': business}
    if 'sort_order' not in serializer.validated_data:
        extra['sort_order'] = next_sort_order(model.objects.filter(business=business))
    instance = serializer.save(**extra)

    logger.info(f"User {request.user.username} created {model.__name__} {instance.pk} for business {business.id}")
    create_audit_log(
        request=request,
        action='create',
        model_name=model.__name__,
        object_id=instance.pk,
        business=business,
        object_name=str(instance),
        changes={field: _as_text(value) for field, value in serializer.validated_data.items()},
    )
    return success_response(serializer.data, status_code=status.HTTP_201_CREATED)


def update_from_request(request, business, serializer_class, instance, data=None, action='update', partial=True):
    """With partial=True only the fields present in the body are written"""
    data = request.data if data is None else data
    serializer = serializer_class(instance, data=data, partial=partial, context=_context(request, business))
    serializer.is_valid(raise_exception=True)

    old_values = {field: _as_text(getattr(instance, field, None)) for field in serializer.validated_data}
    serializer.save()

    model_name = instance.__class__.__name__
    changes = {
        field: {'old': old_values[field], 'new': _as_text(value)}
        for field, value in serializer.validated_data.items()
        if old_values[field] != _as_text(value)
    }
    logger.info(f"User {request.user.username} updated {model_name} {instance.pk} ({', '.join(changes) or 'no changes'})")
    create_audit_log(
        request=request,
        action=action,
        model_name=model_name,
        object_id=instance.pk,
        business=business,
        object_name=str(instance),
        changes=changes,
    )
    return success_response(serializer.data)


def delete_instance(request, business, instance, changes=None):
    model_name = instance.__class__.__name__
    object_id = instance.pk
    object_name = str(instance)
    instance.delete()

    logger.info(f"User {request.user.username} deleted {model_name} {object_id} for business {business.id}")
    create_audit_log(
        request=request,
        action='delete',
        model_name=model_name,
        object_id=object_id,
        business=business,
        object_name=object_name,
        changes=changes,
    )
    return success_response({'id': object_id, 'deleted': True})
