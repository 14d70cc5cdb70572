import django_filters
from django.db.models import Q

from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Filter for the product list using django-filter"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.NumberFilter(field_name='category_id', lookup_expr='exact')
    uncategorized = django_filters.BooleanFilter(field_name='category', lookup_expr='isnull')
    active = django_filters.BooleanFilter(field_name='is_active')
    min_price = django_filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='price', lookup_expr='lte')

    class Meta:
        model = Product
        fields = ['search', 'category', 'uncategorized', 'active', 'min_price', 'max_price']

    def filter_search(self, queryset, name, value):
        """All words must appear in the name or description, in any order"""
        value = (value or '').strip()
        if not value:
            return queryset
        for word in value.split():
            queryset = queryset.filter(Q(name__icontains=word) | Q(description__icontains=word))
        return queryset
