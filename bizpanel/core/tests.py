"""
Test suite for the core module
Tests: auth envelope, error envelope, tenancy, uploads, audit log, ordering and cache helpers
"""
import shutil
from io import StringIO
import tempfile

from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.contrib.auth.models import AnonymousUser
from django.test import RequestFactory, TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from bizpanel.catalog.models import Category
from bizpanel.core.cache_utils import get_cached, set_cached, invalidate_business_cache
from bizpanel.core.errors import AppError, flatten_errors
from bizpanel.core.models import AuditLog
from bizpanel.core.ordering import next_sort_order, parse_reorder_items
from bizpanel.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizpanel.core.utils import create_audit_log, get_client_ip


class AuthAPITests(TestCase):
    """Login, refresh and me endpoints answer with the envelope"""

    def setUp(self):
        self.business = TestDataFactory.create_business()
        self.user = TestDataFactory.create_user(username='owner1', password='Str0ng-pass!', business=self.business)
        self.client = APIClient()

    def test_login_returns_tokens_and_business(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'owner1', 'password': 'Str0ng-pass!'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertIn('access', response.data['data'])
        self.assertIn('refresh', response.data['data'])
        self.assertEqual(response.data['data']['business_id'], self.business.id)

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'owner1', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['code'], 'UNAUTHORIZED')

    def test_refresh(self):
        login = self.client.post('/api/v1/auth/login/', {'username': 'owner1', 'password': 'Str0ng-pass!'}, format='json')
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['data']['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data['data'])

    def test_refresh_with_garbage_token(self):
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': 'not-a-token'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])

    def test_me(self):
        client = AuthenticatedAPIClient().authenticate_user(self.user)
        response = client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['username'], 'owner1')
        self.assertEqual(data['business_id'], self.business.id)
        self.assertEqual(data['business']['slug'], self.business.slug)
        self.assertFalse(data['is_admin'])

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['code'], 'UNAUTHORIZED')


class ErrorEnvelopeTests(TestCase):
    def test_app_error_body(self):
        error = AppError.conflict('Taken', ['slug: demo'])
        self.assertEqual(error.status_code, 409)
        self.assertEqual(error.to_body(), {'success': False, 'error': 'Taken', 'code': 'CONFLICT', 'details': ['slug: demo']})

    def test_not_found_message(self):
        self.assertEqual(AppError.not_found('Category').message, 'Category not found.')

    def test_flatten_errors(self):
        details = flatten_errors({'name': ['This field is required.'], 'non_field_errors': ['Bad pair']})
        self.assertEqual(details, ['name: This field is required.', 'Bad pair'])

    def test_flatten_nested_errors(self):
        details = flatten_errors({'items': [{'id': ['Invalid']}]})
        self.assertEqual(details, ['items.0.id: Invalid'])


class TenancyTests(TestCase):
    def setUp(self):
        cache.clear()
        self.business = TestDataFactory.create_business()
        self.other = TestDataFactory.create_business()
        self.user = TestDataFactory.create_user(business=self.business)
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def test_user_without_business_is_forbidden(self):
        orphan = TestDataFactory.create_user()
        client = AuthenticatedAPIClient().authenticate_user(orphan)
        response = client.get('/api/v1/fastfood/categories/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['code'], 'FORBIDDEN')

    def test_owner_cannot_target_other_business(self):
        response = self.client.get('/api/v1/fastfood/categories/', {'business_id': self.other.id})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_owner_may_name_own_business(self):
        response = self.client.get('/api/v1/fastfood/categories/', {'business_id': self.business.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_admin_can_target_any_business(self):
        TestDataFactory.create_category(self.other, name='Pizza')
        admin = TestDataFactory.create_user(is_superuser=True)
        client = AuthenticatedAPIClient().authenticate_user(admin)
        response = client.get('/api/v1/fastfood/categories/', {'business_id': self.other.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['name'] for c in response.data['data']], ['Pizza'])

    def test_inactive_business_is_forbidden(self):
        self.business.is_active = False
        self.business.save()
        response = self.client.get('/api/v1/fastfood/categories/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class UploadAPITests(TestCase):
    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.business = TestDataFactory.create_business()
        self.user = TestDataFactory.create_user(business=self.business)
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def tearDown(self):
        shutil.rmtree(self.media_root, ignore_errors=True)

    def test_upload_image(self):
        with override_settings(MEDIA_ROOT=self.media_root, PUBLIC_BASE_URL='https://cdn.example.com'):
            upload = SimpleUploadedFile('burger.png', b'\x89PNG fake', content_type='image/png')
            response = self.client.post('/api/v1/uploads/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        url = response.data['data']['url']
        self.assertTrue(url.startswith(f'https://cdn.example.com/media/uploads/{self.business.id}/'))
        self.assertTrue(url.endswith('.png'))
        self.assertTrue(AuditLog.objects.filter(action='upload', business=self.business).exists())

    def test_upload_rejects_non_images(self):
        with override_settings(MEDIA_ROOT=self.media_root):
            upload = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')
            response = self.client.post('/api/v1/uploads/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'VALIDATION_ERROR')
        self.assertTrue(response.data['details'][0].startswith('file:'))

    def test_upload_size_limit(self):
        with override_settings(MEDIA_ROOT=self.media_root, UPLOAD_MAX_BYTES=10):
            upload = SimpleUploadedFile('big.jpg', b'x' * 50, content_type='image/jpeg')
            response = self.client.post('/api/v1/uploads/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AuditLogAPITests(TestCase):
    def setUp(self):
        cache.clear()
        self.business = TestDataFactory.create_business()
        self.user = TestDataFactory.create_user(business=self.business)
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def test_writes_are_audited_and_listed(self):
        self.client.post('/api/v1/fastfood/categories/', {'name': 'Burgers'}, format='json')
        response = self.client.get('/api/v1/audit-logs/', {'model': 'Category'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 1)
        entry = response.data['data'][0]
        self.assertEqual(entry['action'], 'create')
        self.assertEqual(entry['object_name'], 'Burgers')
        self.assertEqual(entry['username'], self.user.username)

    def test_other_business_logs_are_hidden(self):
        other = TestDataFactory.create_business()
        AuditLog.objects.create(business=other, action='create', model_name='Category', object_id='1')
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.data['data'], [])

    def test_helper_records_actor_and_first_forwarded_hop(self):
        request = RequestFactory().patch('/', HTTP_X_FORWARDED_FOR='203.0.113.5, 10.0.0.1')
        request.user = self.user
        self.assertEqual(get_client_ip(request), '203.0.113.5')
        entry = create_audit_log(request=request, action='update', model_name='Coupon', object_id=7,
                                 business=self.business, changes={'title': 'New'})
        self.assertEqual(entry.user, self.user)
        self.assertEqual(entry.object_id, '7')
        self.assertEqual(entry.ip_address, '203.0.113.5')

    def test_helper_skips_incomplete_entries_and_anonymous_actor(self):
        request = RequestFactory().get('/', REMOTE_ADDR='198.51.100.9')
        request.user = AnonymousUser()
        self.assertIsNone(create_audit_log(request=request, action='delete', model_name='Coupon', business=self.business))
        self.assertFalse(AuditLog.objects.exists())
        entry = create_audit_log(request=request, action='delete', model_name='Coupon', object_id=3, business=self.business)
        self.assertIsNone(entry.user)
        self.assertEqual(entry.ip_address, '198.51.100.9')
        self.assertIsNone(get_client_ip(None))


class OrderingHelperTests(TestCase):
    def test_next_sort_order(self):
        business = TestDataFactory.create_business()
        queryset = Category.objects.filter(business=business)
        self.assertEqual(next_sort_order(queryset), 0)
        TestDataFactory.create_category(business, sort_order=4)
        self.assertEqual(next_sort_order(queryset), 5)

    def test_parse_reorder_items(self):
        pairs = parse_reorder_items({'items': [{'id': 3, 'sort_order': 0}, {'id': '7', 'sort_order': 1}]})
        self.assertEqual(pairs, [(3, 0), (7, 1)])

    def test_parse_rejects_empty(self):
        with self.assertRaises(AppError) as ctx:
            parse_reorder_items({'items': []})
        self.assertEqual(ctx.exception.code, 'BAD_REQUEST')

    def test_parse_rejects_bad_rows(self):
        with self.assertRaises(AppError) as ctx:
            parse_reorder_items({'items': [{'id': 1, 'sort_order': -1}, {'id': 'x', 'sort_order': 0}, {'id': 1, 'sort_order': 2}]})
        self.assertEqual(ctx.exception.code, 'VALIDATION_ERROR')
        self.assertEqual(len(ctx.exception.details), 2)


class MenuCacheTests(TestCase):
    def setUp(self):
        cache.clear()
        self.business = TestDataFactory.create_business()

    def test_invalidation_hides_stale_entries(self):
        _, key = get_cached(self.business.id, 'categories')
        set_cached(key, ['stale'])
        self.assertEqual(get_cached(self.business.id, 'categories')[0], ['stale'])
        invalidate_business_cache(self.business.id)
        self.assertIsNone(get_cached(self.business.id, 'categories')[0])

    def test_category_save_invalidates(self):
        _, key = get_cached(self.business.id, 'categories')
        set_cached(key, ['stale'])
        TestDataFactory.create_category(self.business)
        self.assertIsNone(get_cached(self.business.id, 'categories')[0])

    def test_other_business_cache_survives(self):
        other = TestDataFactory.create_business()
        _, key = get_cached(other.id, 'categories')
        set_cached(key, ['kept'])
        TestDataFactory.create_category(self.business)
        self.assertEqual(get_cached(other.id, 'categories')[0], ['kept'])

    def test_check_cache_command(self):
        out = StringIO()
        call_command('check_cache', stdout=out)
        self.assertIn('SET/GET: Success', out.getvalue())
        self.assertIn('Invalidation: Success', out.getvalue())
