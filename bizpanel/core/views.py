import logging
import os
import uuid

from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist
from django.core.files.storage import default_storage
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .envelope import success_response
from .errors import AppError
from .models import AuditLog, User
from .serializers import UserSerializer, AuditLogSerializer, UploadSerializer
from .tenancy import get_request_business
from .utils import create_audit_log

logger = logging.getLogger('bizpanel.core')


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['business_id'] = self.user.business_id
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['business_id'] = user.business_id
        token['role'] = user.role
        return token


class EnvelopeMixin:
    """Wrap simplejwt's plain token payloads in the success envelope"""

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        return success_response(response.data, status_code=response.status_code)


class CustomTokenObtainPairView(EnvelopeMixin, TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that reports deleted users as an invalid token"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(EnvelopeMixin, TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user and business summary; clients build their session from it"""
    user = request.user
    data = UserSerializer(user).data
    data['business_id'] = user.business_id
    data['is_admin'] = user.is_superuser or user.role == 'admin'
    return success_response(data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def upload_file(request):
    """Store an image under uploads/<business_id>/ and return its public URL"""
    business = get_request_business(request)
    serializer = UploadSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    upload = serializer.validated_data['file']
    extension = os.path.splitext(upload.name)[1].lower() or '.bin'
    name = default_storage.save(f"uploads/{business.id}/{uuid.uuid4().hex}{extension}", upload)
    url = f"{settings.PUBLIC_BASE_URL.rstrip('/')}{settings.MEDIA_URL}{name}"

    logger.info(f"User {request.user.username} uploaded {name} ({upload.size} bytes) for business {business.id}")
    create_audit_log(
        request=request,
        action='upload',
        model_name='Upload',
        object_id=name,
        business=business,
        object_name=upload.name,
        changes={'size': upload.size, 'content_type': upload.content_type},
    )
    return success_response({'url': url, 'path': name}, status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """Audit trail of the caller's business, newest first"""
    business = get_request_business(request)
    queryset = AuditLog.objects.filter(business=business).select_related('user')

    action_filter = request.query_params.get('action')
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model')
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from')
    date_to = request.query_params.get('date_to')
    if date_from:
        queryset = queryset.filter(created_at__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__lte=date_to)

    try:
        limit = min(int(request.query_params.get('limit', 100)), 500)
    except ValueError:
        raise AppError.bad_request('limit must be an integer')

    serializer = AuditLogSerializer(queryset.order_by('-created_at')[:limit], many=True)
    return success_response(serializer.data)
