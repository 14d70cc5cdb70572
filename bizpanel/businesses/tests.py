"""
Test suite for businesses
Tests: owner registration, slug availability, business profile
"""
from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from bizpanel.businesses.models import Business, check_slug
from bizpanel.core.test_utils import TestDataFactory, AuthenticatedAPIClient

User = get_user_model()


class SlugCheckTests(TestCase):
    def test_free_slug(self):
        self.assertEqual(check_slug('Burger-House'), (True, 'burger-house', None))

    def test_malformed_slugs(self):
        for slug in ['ab', 'has space', 'ümlaut', '-leading', 'x' * 51, '']:
            available, _, reason = check_slug(slug)
            self.assertFalse(available, slug)
            self.assertEqual(reason, 'invalid', slug)

    def test_reserved_slug(self):
        self.assertEqual(check_slug('admin')[2], 'reserved')

    def test_taken_slug(self):
        TestDataFactory.create_business(slug='burger-house')
        self.assertEqual(check_slug('BURGER-HOUSE'), (False, 'burger-house', 'taken'))


class SlugAvailableAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_available(self):
        response = self.client.get('/api/v1/businesses/slug-available/', {'slug': 'new-place'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'], {'available': True, 'slug': 'new-place'})

    def test_taken(self):
        TestDataFactory.create_business(slug='new-place')
        response = self.client.get('/api/v1/businesses/slug-available/', {'slug': 'new-place'})
        self.assertFalse(response.data['data']['available'])
        self.assertEqual(response.data['data']['reason'], 'taken')

    def test_malformed_is_unavailable_not_error(self):
        response = self.client.get('/api/v1/businesses/slug-available/', {'slug': 'a!'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['data']['available'])
        self.assertEqual(response.data['data']['reason'], 'invalid')


class RegisterAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.payload = {
            'username': 'ayse',
            'email': 'ayse@example.com',
            'password': 'Kebap-Lover-2024',
            'password_confirm': 'Kebap-Lover-2024',
            'business_name': 'Ayse Burger',
            'business_slug': 'Ayse-Burger',
            'business_type': 'fastfood',
        }

    def test_register_creates_owner_and_business(self):
        response = self.client.post('/api/v1/auth/register/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        business = Business.objects.get(slug='ayse-burger')
        user = User.objects.get(username='ayse')
        self.assertEqual(user.business, business)
        self.assertEqual(user.role, 'owner')
        self.assertIn('access', response.data['data'])
        self.assertEqual(response.data['data']['business']['slug'], 'ayse-burger')

    def test_register_taken_slug_conflict(self):
        TestDataFactory.create_business(slug='ayse-burger')
        response = self.client.post('/api/v1/auth/register/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'CONFLICT')
        self.assertFalse(User.objects.filter(username='ayse').exists())

    def test_register_invalid_slug(self):
        self.payload['business_slug'] = 'no'
        response = self.client.post('/api/v1/auth/register/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'VALIDATION_ERROR')
        self.assertTrue(any(d.startswith('business_slug:') for d in response.data['details']))

    def test_register_password_mismatch(self):
        self.payload['password_confirm'] = 'Something-else-1'
        response = self.client.post('/api/v1/auth/register/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Business.objects.filter(slug='ayse-burger').exists())


class BusinessMeAPITests(TestCase):
    def setUp(self):
        self.business = TestDataFactory.create_business(name='Old Name')
        self.owner = TestDataFactory.create_user(business=self.business)
        self.client = AuthenticatedAPIClient().authenticate_user(self.owner)

    def test_get(self):
        response = self.client.get('/api/v1/businesses/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['name'], 'Old Name')

    def test_patch_updates_profile_not_slug(self):
        response = self.client.patch('/api/v1/businesses/me/', {'name': 'New Name', 'slug': 'hijack'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.business.refresh_from_db()
        self.assertEqual(self.business.name, 'New Name')
        self.assertNotEqual(self.business.slug, 'hijack')

    def test_staff_cannot_patch(self):
        staff = TestDataFactory.create_user(business=self.business, role='staff')
        client = AuthenticatedAPIClient().authenticate_user(staff)
        response = client.patch('/api/v1/businesses/me/', {'name': 'Nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
