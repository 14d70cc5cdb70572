"""
Test utilities and factories for creating test data
"""
import json
import random
import string
from decimal import Decimal
from urllib.parse import urlencode, urlsplit

from django.core.files.uploadedfile import SimpleUploadedFile

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from bizpanel.businesses.models import Business
from bizpanel.catalog.models import Category, Product
from bizpanel.coupons.models import Coupon
from bizpanel.hotel.models import RoomType, Room
from bizpanel.realestate.models import Listing

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_lowercase + string.digits, k=length))

    @staticmethod
    def create_business(name=None, slug=None, business_type='fastfood', is_active=True):
        """Create a test business"""
        if not slug:
            slug = f'biz-{TestDataFactory.random_string(8)}'
        return Business.objects.create(
            name=name or f'Business {slug}',
            slug=slug,
            business_type=business_type,
            phone='5550000000',
            is_active=is_active,
        )

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', business=None, role='owner', is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            business=business,
            role=role,
            is_superuser=is_superuser,
            is_staff=is_superuser,
        )

    @staticmethod
    def create_owner(business=None, **kwargs):
        """Create a business together with its owner user"""
        business = business or TestDataFactory.create_business()
        return TestDataFactory.create_user(business=business, **kwargs)

    @staticmethod
    def create_category(business, name=None, sort_order=0, is_active=True, icon='🍔'):
        """Create a test category"""
        return Category.objects.create(
            business=business,
            name=name or f'Category_{TestDataFactory.random_string(6)}',
            icon=icon,
            sort_order=sort_order,
            is_active=is_active,
        )

    @staticmethod
    def create_product(business, category=None, name=None, price=None, sort_order=0, is_active=True):
        """Create a test product"""
        return Product.objects.create(
            business=business,
            category=category,
            name=name or f'Product_{TestDataFactory.random_string(6)}',
            price=Decimal('100.00') if price is None else price,
            sort_order=sort_order,
            is_active=is_active,
        )

    @staticmethod
    def create_coupon(business, code=None, discount_type='fixed', discount_value=None, sort_order=0, **kwargs):
        """Create a test coupon"""
        return Coupon.objects.create(
            business=business,
            code=code or f'CODE{TestDataFactory.random_string(4).upper()}',
            title=kwargs.pop('title', 'Test coupon'),
            discount_type=discount_type,
            discount_value=Decimal('10.00') if discount_value is None else discount_value,
            sort_order=sort_order,
            **kwargs
        )

    @staticmethod
    def create_room_type(business, name=None, price=None, capacity=2, sort_order=0):
        """Create a test room type"""
        return RoomType.objects.create(
            business=business,
            name=name or f'RoomType_{TestDataFactory.random_string(6)}',
            price=Decimal('1500.00') if price is None else price,
            capacity=capacity,
            sort_order=sort_order,
        )

    @staticmethod
    def create_room(business, room_type=None, room_number=None, floor=1, sort_order=0, status='available'):
        """Create a test room"""
        if room_type is None:
            room_type = TestDataFactory.create_room_type(business)
        return Room.objects.create(
            business=business,
            room_type=room_type,
            room_number=room_number or TestDataFactory.random_string(4),
            floor=floor,
            status=status,
            sort_order=sort_order,
        )

    @staticmethod
    def create_listing(business, title=None, price=None, sort_order=0, **kwargs):
        """Create a test listing"""
        return Listing.objects.create(
            business=business,
            title=title or f'Listing {TestDataFactory.random_string(6)}',
            price=Decimal('2500000.00') if price is None else price,
            sort_order=sort_order,
            **kwargs
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()


class _AdapterResponse:
    """The slice of requests.Response the panel client reads"""

    def __init__(self, response):
        self.status_code = response.status_code
        self.content = response.content
        self.headers = response.headers
        self.text = response.content.decode('utf-8', errors='replace')

    def json(self):
        return json.loads(self.text)


class APIClientSession:
    """
    requests.Session stand-in that routes panel client calls through
    DRF's APIClient, so client tests exercise the real views.

    Also records every call as (method, path, params, json) in ``calls``.
    """

    def __init__(self, api_client=None):
        self.api_client = api_client or APIClient()
        self.headers = {}
        self.calls = []

    def request(self, method, url, params=None, json=None, files=None, data=None, timeout=None):
        path = urlsplit(url).path
        self.calls.append((method.upper(), path, dict(params or {}), json))

        extra = {}
        auth = self.headers.get('Authorization')
        if auth:
            extra['HTTP_AUTHORIZATION'] = auth

        query = ''
        if params:
            query = '?' + urlencode(params)

        handler = getattr(self.api_client, method.lower())
        if files:
            payload = dict(data or {})
            for field, (filename, fileobj, content_type) in files.items():
                content = fileobj.read() if hasattr(fileobj, 'read') else fileobj
                payload[field] = SimpleUploadedFile(filename, content, content_type=content_type)
            response = handler(path + query, payload, format='multipart', **extra)
        elif json is not None:
            response = handler(path + query, json, format='json', **extra)
        else:
            response = handler(path + query, **extra)
        return _AdapterResponse(response)

    def close(self):
        pass
