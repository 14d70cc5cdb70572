from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from .models import Business, check_slug

User = get_user_model()


class BusinessSerializer(serializers.ModelSerializer):
    class Meta:
        model = Business
        fields = ['id', 'name', 'slug', 'business_type', 'phone', 'email', 'address', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['slug', 'business_type', 'is_active', 'created_at', 'updated_at']


class RegisterSerializer(serializers.Serializer):
    """Owner account plus the business it manages"""
    username = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    business_name = serializers.CharField(max_length=200)
    business_slug = serializers.CharField(max_length=50)
    business_type = serializers.ChoiceField(choices=Business.BUSINESS_TYPE_CHOICES)

    def validate_username(self, value):
        if User.objects.filter(username__iexact=value).exists():
            raise serializers.ValidationError('A user with that username already exists.')
        return value

    def validate_business_slug(self, value):
        available, slug, reason = check_slug(value)
        if reason in ('invalid', 'reserved'):
            raise serializers.ValidationError('Slug must be 3-50 characters of a-z, 0-9 and "-" and not reserved.')
        return slug

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        return attrs
