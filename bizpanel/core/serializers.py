from django.conf import settings
from rest_framework import serializers

from .models import User, AuditLog

ALLOWED_UPLOAD_TYPES = ('image/jpeg', 'image/png', 'image/webp', 'image/gif')


class BusinessSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    slug = serializers.CharField()
    business_type = serializers.CharField()
    is_active = serializers.BooleanField()


class UserSerializer(serializers.ModelSerializer):
    business = BusinessSummarySerializer(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'phone', 'role', 'business', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['role', 'business', 'is_active', 'created_at', 'updated_at']


class AuditLogSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'username', 'action', 'model_name', 'object_id', 'object_name', 'changes', 'ip_address', 'created_at']


class UploadSerializer(serializers.Serializer):
    file = serializers.FileField()

    def validate_file(self, value):
        content_type = getattr(value, 'content_type', '') or ''
        if content_type not in ALLOWED_UPLOAD_TYPES:
            raise serializers.ValidationError('Only JPEG, PNG, WEBP or GIF images are allowed.')
        if value.size > settings.UPLOAD_MAX_BYTES:
            raise serializers.ValidationError(f'File is larger than {settings.UPLOAD_MAX_BYTES // (1024 * 1024)} MB.')
        return value
