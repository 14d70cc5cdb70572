"""Resolve the business (tenant) a request operates on"""
import logging

from .errors import AppError

logger = logging.getLogger('bizpanel.core.tenancy')


def get_request_business(request):
    """
    Return the business the current user manages.

    Platform admins (superusers or role 'admin') may target another business
    with ?business_id=; everyone else is pinned to their own business.
    """
    from bizpanel.businesses.models import Business

    user = request.user
    requested_id = request.query_params.get('business_id')

    if user.is_superuser or getattr(user, 'role', '') == 'admin':
        if requested_id:
            business = Business.objects.filter(pk=requested_id).first()
            if not business:
                raise AppError.not_found('Business')
            return business

    business = getattr(user, 'business', None)
    if business is None:
        logger.warning(f"User {user.username} has no business assigned")
        raise AppError.forbidden('This user is not linked to any business.')

    if requested_id and str(business.id) != str(requested_id):
        raise AppError.forbidden('You are not allowed to access this business.')

    if not business.is_active:
        raise AppError.forbidden('This business is deactivated.')

    return business


def get_owned_object(model, business, pk, label=None):
    """Fetch a tenant row by id, reporting foreign or missing rows as NOT_FOUND"""
    if pk in (None, ''):
        raise AppError.bad_request('ID required')
    try:
        return model.objects.get(pk=pk, business=business)
    except (model.DoesNotExist, ValueError, TypeError):
        raise AppError.not_found(label or model._meta.verbose_name.title())
