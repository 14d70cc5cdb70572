from django.contrib import admin
from .models import Category, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'business', 'icon', 'sort_order', 'is_active', 'created_at']
    list_filter = ['is_active', 'business']
    search_fields = ['name', 'business__name']
    ordering = ['business', 'sort_order']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'business', 'category', 'price', 'sort_order', 'is_active']
    list_filter = ['is_active', 'business', 'category']
    search_fields = ['name', 'description', 'business__name']
    ordering = ['business', 'sort_order']
