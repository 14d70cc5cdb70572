import django_filters

from .models import Listing


class ListingFilter(django_filters.FilterSet):
    """Filters for the listing panel"""

    property_type = django_filters.ChoiceFilter(choices=Listing.PROPERTY_TYPE_CHOICES)
    listing_type = django_filters.ChoiceFilter(choices=Listing.LISTING_TYPE_CHOICES)
    status = django_filters.ChoiceFilter(choices=Listing.STATUS_CHOICES)
    consultant_id = django_filters.CharFilter(field_name='consultant_id', lookup_expr='exact')
    city = django_filters.CharFilter(field_name='city', lookup_expr='iexact')
    min_price = django_filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='price', lookup_expr='lte')

    class Meta:
        model = Listing
        fields = ['property_type', 'listing_type', 'status', 'consultant_id', 'city', 'min_price', 'max_price']
