import logging

from django.db import transaction
from django.db.models import Count, Prefetch
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny

from bizpanel.businesses.models import Business
from bizpanel.core.cache_utils import get_cached, set_cached, PUBLIC_MENU_CACHE_TTL
from bizpanel.core.crud import create_from_request, update_from_request, delete_instance
from bizpanel.core.envelope import success_response
from bizpanel.core.errors import AppError
from bizpanel.core.ordering import parse_reorder_items, apply_bulk_reorder
from bizpanel.core.tenancy import get_request_business, get_owned_object
from .filters import ProductFilter
from .models import Category, Product
from .serializers import CategorySerializer, ProductSerializer, PublicMenuCategorySerializer

logger = logging.getLogger('bizpanel.catalog')


def _is_true(value):
    return str(value).lower() in ('1', 'true', 'yes')


# Category views
@api_view(['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def category_collection(request):
    """
    Categories of the caller's business.

    GET lists (or returns ?id=), POST creates, PUT/PATCH update the row
    named by "id" in the body, DELETE removes ?id= (refused while products
    reference it unless ?force=true).
    """
    business = get_request_business(request)

    if request.method == 'GET':
        pk = request.query_params.get('id')
        if pk:
            category = get_owned_object(Category, business, pk, 'Category')
            return success_response(CategorySerializer(category).data)

        cached_data, cache_key = get_cached(business.id, 'categories')
        if cached_data is not None:
            return success_response(cached_data)
        categories = Category.objects.filter(business=business).annotate(product_count=Count('products')).order_by('sort_order', 'id')
        data = CategorySerializer(categories, many=True).data
        set_cached(cache_key, data)
        return success_response(data)

    if request.method == 'POST':
        return create_from_request(request, business, CategorySerializer)

    if request.method in ('PUT', 'PATCH'):
        category = get_owned_object(Category, business, request.data.get('id'), 'Category')
        return update_from_request(request, business, CategorySerializer, category)

    category = get_owned_object(Category, business, request.query_params.get('id'), 'Category')
    products_count = category.products.count()
    if products_count and not _is_true(request.query_params.get('force')):
        raise AppError.conflict(
            f'This category has {products_count} products. Move or delete them first.',
            [f'products_count: {products_count}'],
        )
    with transaction.atomic():
        detached = category.products.update(category=None) if products_count else 0
        return delete_instance(request, business, category, changes={'detached_products': detached})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def category_reorder(request):
    business = get_request_business(request)
    categories = apply_bulk_reorder(request, Category, business, parse_reorder_items(request.data))
    return success_response(CategorySerializer(categories, many=True).data)


# Product views
@api_view(['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_collection(request):
    """Products of the caller's business, addressed the same way as categories"""
    business = get_request_business(request)

    if request.method == 'GET':
        pk = request.query_params.get('id')
        if pk:
            product = get_owned_object(Product, business, pk, 'Product')
            return success_response(ProductSerializer(product).data)

        queryset = Product.objects.filter(business=business).select_related('category')
        filterset = ProductFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            raise AppError.validation_error(details=[f'{field}: {errors[0]}' for field, errors in filterset.errors.items()])
        products = filterset.qs.order_by('sort_order', 'id')
        return success_response(ProductSerializer(products, many=True).data)

    if request.method == 'POST':
        return create_from_request(request, business, ProductSerializer)

    if request.method in ('PUT', 'PATCH'):
        product = get_owned_object(Product, business, request.data.get('id'), 'Product')
        return update_from_request(request, business, ProductSerializer, product)

    product = get_owned_object(Product, business, request.query_params.get('id'), 'Product')
    return delete_instance(request, business, product)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def product_reorder(request):
    business = get_request_business(request)
    products = apply_bulk_reorder(request, Product, business, parse_reorder_items(request.data))
    return success_response(ProductSerializer(products, many=True).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def public_menu(request):
    """Active categories with their active products for a public business page"""
    slug = (request.query_params.get('business_slug') or '').strip().lower()
    if not slug:
        raise AppError.bad_request('business_slug required')
    business = Business.objects.filter(slug=slug, is_active=True).first()
    if not business:
        raise AppError.not_found('Business')

    cached_data, cache_key = get_cached(business.id, 'public_menu')
    if cached_data is not None:
        return success_response(cached_data)

    categories = (
        Category.objects.filter(business=business, is_active=True)
        .prefetch_related(Prefetch('products', queryset=Product.objects.order_by('sort_order', 'id')))
        .order_by('sort_order', 'id')
    )
    data = {
        'business': {'name': business.name, 'slug': business.slug},
        'categories': PublicMenuCategorySerializer(categories, many=True).data,
    }
    set_cached(cache_key, data, PUBLIC_MENU_CACHE_TTL)
    return success_response(data)
