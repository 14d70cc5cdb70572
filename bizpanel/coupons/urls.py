from django.urls import path
from .views import coupon_collection, coupon_reorder, coupon_validate

urlpatterns = [
    path('fastfood/coupons/', coupon_collection, name='coupon-collection'),
    path('fastfood/coupons/reorder/', coupon_reorder, name='coupon-reorder'),
    path('fastfood/coupons/validate/', coupon_validate, name='coupon-validate'),
]
