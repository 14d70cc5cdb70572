import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from bizpanel.core.crud import create_from_request, update_from_request, delete_instance
from bizpanel.core.envelope import success_response
from bizpanel.core.errors import AppError
from bizpanel.core.ordering import parse_reorder_items, apply_bulk_reorder
from bizpanel.core.tenancy import get_request_business, get_owned_object
from .filters import ListingFilter
from .models import Listing
from .serializers import ListingSerializer

logger = logging.getLogger('bizpanel.realestate')


@api_view(['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def listing_collection(request):
    """Listings of the caller's business; id in the query (GET/DELETE) or body (PUT/PATCH)"""
    business = get_request_business(request)

    if request.method == 'GET':
        pk = request.query_params.get('id')
        if pk:
            return success_response(ListingSerializer(get_owned_object(Listing, business, pk, 'Listing')).data)

        filterset = ListingFilter(request.query_params, queryset=Listing.objects.filter(business=business))
        if not filterset.is_valid():
            raise AppError.validation_error(details=[f'{field}: {errors[0]}' for field, errors in filterset.errors.items()])
        listings = filterset.qs.order_by('sort_order', 'id')
        return success_response(ListingSerializer(listings, many=True).data)

    if request.method == 'POST':
        return create_from_request(request, business, ListingSerializer)

    if request.method in ('PUT', 'PATCH'):
        listing = get_owned_object(Listing, business, request.data.get('id'), 'Listing')
        return update_from_request(request, business, ListingSerializer, listing)

    listing = get_owned_object(Listing, business, request.query_params.get('id'), 'Listing')
    return delete_instance(request, business, listing)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def listing_reorder(request):
    business = get_request_business(request)
    listings = apply_bulk_reorder(request, Listing, business, parse_reorder_items(request.data))
    return success_response(ListingSerializer(listings, many=True).data)
