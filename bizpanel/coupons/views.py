import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny

from bizpanel.businesses.models import Business
from bizpanel.core.crud import create_from_request, update_from_request, delete_instance
from bizpanel.core.envelope import success_response
from bizpanel.core.errors import AppError
from bizpanel.core.ordering import parse_reorder_items, apply_bulk_reorder
from bizpanel.core.tenancy import get_request_business, get_owned_object
from .models import Coupon
from .serializers import CouponSerializer, CouponValidationSerializer

logger = logging.getLogger('bizpanel.coupons')


@api_view(['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def coupon_collection(request):
    """Coupons of the caller's business; id in the query (GET/DELETE) or body (PUT/PATCH)"""
    business = get_request_business(request)

    if request.method == 'GET':
        pk = request.query_params.get('id')
        if pk:
            return success_response(CouponSerializer(get_owned_object(Coupon, business, pk, 'Coupon')).data)
        coupons = Coupon.objects.filter(business=business).order_by('sort_order', 'id')
        active = request.query_params.get('is_active')
        if active is not None:
            coupons = coupons.filter(is_active=active.lower() in ('1', 'true'))
        return success_response(CouponSerializer(coupons, many=True).data)

    if request.method == 'POST':
        return create_from_request(request, business, CouponSerializer)

    if request.method in ('PUT', 'PATCH'):
        coupon = get_owned_object(Coupon, business, request.data.get('id'), 'Coupon')
        return update_from_request(request, business, CouponSerializer, coupon)

    coupon = get_owned_object(Coupon, business, request.query_params.get('id'), 'Coupon')
    return delete_instance(request, business, coupon)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def coupon_reorder(request):
    business = get_request_business(request)
    coupons = apply_bulk_reorder(request, Coupon, business, parse_reorder_items(request.data))
    return success_response(CouponSerializer(coupons, many=True).data)


@api_view(['POST'])
@permission_classes([AllowAny])
def coupon_validate(request):
    """
    Check a coupon code against an order at checkout.

    Answers {valid, message?, discount, coupon?}; an unusable coupon is a
    successful response with valid=false.
    """
    serializer = CouponValidationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    business = Business.objects.filter(slug=data['business_slug'].strip().lower(), is_active=True).first()
    if not business:
        raise AppError.not_found('Business')

    code = data['code'].strip().upper()
    coupon = Coupon.objects.filter(business=business, code__iexact=code).first()
    if not coupon:
        logger.info(f"Coupon validation miss for {code} at business {business.id}")
        return success_response({'valid': False, 'message': 'Invalid coupon code.', 'discount': 0})

    message = coupon.check_usable(data['subtotal'], data['category_ids'], data['product_ids'])
    if message:
        return success_response({'valid': False, 'message': message, 'discount': 0})

    return success_response({
        'valid': True,
        'discount': coupon.calculate_discount(data['subtotal']),
        'coupon': {
            'id': coupon.id,
            'code': coupon.code,
            'title': coupon.title,
            'discount_type': coupon.discount_type,
            'discount_value': coupon.discount_value,
        },
    })
