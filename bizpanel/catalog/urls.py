from django.urls import path
from .views import (
    category_collection, category_reorder,
    product_collection, product_reorder,
    public_menu,
)

urlpatterns = [
    path('fastfood/categories/', category_collection, name='category-collection'),
    path('fastfood/categories/reorder/', category_reorder, name='category-reorder'),
    path('fastfood/products/', product_collection, name='product-collection'),
    path('fastfood/products/reorder/', product_reorder, name='product-reorder'),
    path('fastfood/menu/', public_menu, name='public-menu'),
]
