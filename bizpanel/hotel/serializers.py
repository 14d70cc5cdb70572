from rest_framework import serializers
from .models import RoomType, Room


class RoomTypeSerializer(serializers.ModelSerializer):
    amenities = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    photos = serializers.ListField(child=serializers.URLField(max_length=500), required=False)
    room_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = RoomType
        fields = ['id', 'name', 'description', 'price', 'currency', 'capacity', 'bed_type', 'size_sqm',
                  'amenities', 'photos', 'sort_order', 'is_active', 'room_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('This field may not be blank.')
        return value

    def validate_currency(self, value):
        return value.strip().upper()


class RoomSerializer(serializers.ModelSerializer):
    room_type_name = serializers.CharField(source='room_type.name', read_only=True)

    class Meta:
        model = Room
        fields = ['id', 'room_type', 'room_type_name', 'room_number', 'floor', 'status', 'sort_order', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        # room_number uniqueness is checked per business in validate_room_number
        validators = []

    def validate_room_type(self, value):
        business = self.context.get('business')
        if business is not None and value.business_id != business.id:
            raise serializers.ValidationError('Room type not found.')
        return value

    def validate_room_number(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('This field may not be blank.')
        business = self.context.get('business')
        queryset = Room.objects.filter(business=business, room_number__iexact=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if business is not None and queryset.exists():
            raise serializers.ValidationError(f'Room {value} already exists.')
        return value


class RoomStatusSerializer(serializers.ModelSerializer):
    class Meta:
        model = Room
        fields = ['status']
        extra_kwargs = {'status': {'required': True}}
