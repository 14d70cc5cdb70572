from django.urls import path
from .views import listing_collection, listing_reorder

urlpatterns = [
    path('emlak/listings/', listing_collection, name='listing-collection'),
    path('emlak/listings/reorder/', listing_reorder, name='listing-reorder'),
]
