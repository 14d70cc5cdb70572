from django.contrib import admin
from .models import RoomType, Room


@admin.register(RoomType)
class RoomTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'business', 'price', 'currency', 'capacity', 'sort_order', 'is_active']
    list_filter = ['is_active', 'business']
    search_fields = ['name', 'business__name']
    ordering = ['business', 'sort_order']


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ['room_number', 'business', 'room_type', 'floor', 'status', 'sort_order', 'is_active']
    list_filter = ['status', 'is_active', 'business']
    search_fields = ['room_number', 'business__name']
    ordering = ['business', 'sort_order']
