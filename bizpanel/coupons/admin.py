from django.contrib import admin
from .models import Coupon


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = ['code', 'title', 'business', 'discount_type', 'discount_value', 'current_usage_count', 'is_active', 'valid_until']
    list_filter = ['discount_type', 'is_active', 'is_public', 'business']
    search_fields = ['code', 'title', 'business__name']
    ordering = ['business', 'sort_order']
    readonly_fields = ['current_usage_count', 'created_at', 'updated_at']
