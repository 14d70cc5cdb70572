import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny

from bizpanel.core.envelope import success_response
from bizpanel.core.errors import AppError
from bizpanel.core.serializers import UserSerializer
from bizpanel.core.tenancy import get_request_business
from bizpanel.core.utils import create_audit_log
from bizpanel.core.views import CustomTokenObtainPairSerializer
from .models import Business, check_slug
from .serializers import BusinessSerializer, RegisterSerializer

logger = logging.getLogger('bizpanel.businesses')

User = get_user_model()


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Create an owner account and its business in one transaction"""
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    slug = data['business_slug']
    if Business.objects.filter(slug=slug).exists():
        raise AppError.conflict('This business address is already taken.', [f'business_slug: {slug}'])

    try:
        with transaction.atomic():
            business = Business.objects.create(
                name=data['business_name'],
                slug=slug,
                business_type=data['business_type'],
                phone=data.get('phone', ''),
                email=data['email'],
            )
            user = User.objects.create_user(
                username=data['username'],
                email=data['email'],
                password=data['password'],
                first_name=data.get('first_name', ''),
                last_name=data.get('last_name', ''),
                phone=data.get('phone') or None,
                business=business,
                role='owner',
            )
    except IntegrityError:
        logger.warning(f"Registration race on slug {slug}")
        raise AppError.conflict('This business address is already taken.', [f'business_slug: {slug}'])

    logger.info(f"Registered business {business.slug} ({business.business_type}) for owner {user.username}")
    create_audit_log(
        request=request,
        action='register',
        model_name='Business',
        object_id=business.id,
        user=user,
        business=business,
        object_name=business.name,
    )

    token = CustomTokenObtainPairSerializer.get_token(user)
    return success_response({
        'user': UserSerializer(user).data,
        'business': BusinessSerializer(business).data,
        'access': str(token.access_token),
        'refresh': str(token),
    }, status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([AllowAny])
def slug_available(request):
    """Whether a public business address can still be claimed"""
    available, slug, reason = check_slug(request.query_params.get('slug', ''))
    data = {'available': available, 'slug': slug}
    if reason:
        data['reason'] = reason
    return success_response(data)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def business_me(request):
    """Read or update the caller's business profile"""
    business = get_request_business(request)

    if request.method == 'GET':
        return success_response(BusinessSerializer(business).data)

    if request.user.role == 'staff':
        raise AppError.forbidden('Only the owner can change business settings.')

    serializer = BusinessSerializer(business, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    old_values = {field: getattr(business, field) for field in serializer.validated_data}
    serializer.save()

    logger.info(f"User {request.user.username} updated business {business.id}")
    create_audit_log(
        request=request,
        action='update',
        model_name='Business',
        object_id=business.id,
        business=business,
        object_name=business.name,
        changes={field: {'old': str(old_values[field]), 'new': str(value)} for field, value in serializer.validated_data.items()},
    )
    return success_response(serializer.data)
