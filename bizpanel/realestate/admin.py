from django.contrib import admin
from .models import Listing


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    list_display = ['title', 'business', 'listing_type', 'property_type', 'price', 'currency', 'city', 'status', 'sort_order']
    list_filter = ['listing_type', 'property_type', 'status', 'business']
    search_fields = ['title', 'city', 'district', 'business__name']
    ordering = ['business', 'sort_order']
