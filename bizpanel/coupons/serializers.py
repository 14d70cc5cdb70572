from decimal import Decimal

from rest_framework import serializers
from .models import Coupon


class CouponSerializer(serializers.ModelSerializer):
    class Meta:
        model = Coupon
        fields = [
            'id', 'code', 'title', 'description', 'emoji',
            'discount_type', 'discount_value', 'max_discount_amount', 'min_order_amount',
            'max_usage_count', 'usage_per_user', 'current_usage_count',
            'valid_from', 'valid_until', 'is_active', 'is_public', 'is_first_order_only',
            'applicable_to', 'applicable_category_ids', 'applicable_product_ids',
            'sort_order', 'created_at', 'updated_at',
        ]
        read_only_fields = ['current_usage_count', 'created_at', 'updated_at']
        # uniqueness is checked case-insensitively in validate_code
        validators = []

    def validate_code(self, value):
        code = value.strip().upper()
        if not code:
            raise serializers.ValidationError('This field may not be blank.')
        business = self.context.get('business')
        queryset = Coupon.objects.filter(business=business, code__iexact=code)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if business is not None and queryset.exists():
            raise serializers.ValidationError(f'Coupon code {code} already exists.')
        return code

    def validate(self, attrs):
        discount_type = attrs.get('discount_type', getattr(self.instance, 'discount_type', 'fixed'))
        discount_value = attrs.get('discount_value', getattr(self.instance, 'discount_value', Decimal('0')))
        if discount_type in ('fixed', 'percentage') and (discount_value is None or discount_value <= 0):
            raise serializers.ValidationError({'discount_value': 'Must be greater than 0.'})
        if discount_type == 'percentage' and discount_value > 100:
            raise serializers.ValidationError({'discount_value': 'Percentage cannot exceed 100.'})

        valid_from = attrs.get('valid_from', getattr(self.instance, 'valid_from', None))
        valid_until = attrs.get('valid_until', getattr(self.instance, 'valid_until', None))
        if valid_from and valid_until and valid_until < valid_from:
            raise serializers.ValidationError({'valid_until': 'Must be after valid_from.'})
        return attrs


class CouponValidationSerializer(serializers.Serializer):
    business_slug = serializers.CharField()
    code = serializers.CharField()
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))
    category_ids = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    product_ids = serializers.ListField(child=serializers.CharField(), required=False, default=list)
