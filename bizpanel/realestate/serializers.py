from rest_framework import serializers
from .models import Listing


class ListingSerializer(serializers.ModelSerializer):
    images = serializers.ListField(child=serializers.URLField(max_length=500), required=False)

    class Meta:
        model = Listing
        fields = ['id', 'consultant_id', 'title', 'description', 'listing_type', 'property_type', 'price', 'currency',
                  'area_sqm', 'room_count', 'city', 'district', 'images', 'status', 'sort_order', 'is_active',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('This field may not be blank.')
        return value

    def validate_currency(self, value):
        return value.strip().upper()
