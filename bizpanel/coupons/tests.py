"""
Tests for fast-food coupons: CRUD rules, code normalization, checkout validation
"""
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from bizpanel.coupons.models import Coupon
from bizpanel.core.test_utils import TestDataFactory, AuthenticatedAPIClient

COUPONS_URL = '/api/v1/fastfood/coupons/'
VALIDATE_URL = '/api/v1/fastfood/coupons/validate/'


class CouponModelTests(TestCase):
    def setUp(self):
        self.business = TestDataFactory.create_business()

    def test_code_is_stored_uppercase(self):
        coupon = TestDataFactory.create_coupon(self.business, code=' save10 ')
        self.assertEqual(coupon.code, 'SAVE10')

    def test_fixed_discount_never_exceeds_subtotal(self):
        coupon = TestDataFactory.create_coupon(self.business, discount_value=Decimal('50.00'))
        self.assertEqual(coupon.calculate_discount(Decimal('200.00')), Decimal('50.00'))
        self.assertEqual(coupon.calculate_discount(Decimal('30.00')), Decimal('30.00'))

    def test_percentage_discount_is_capped(self):
        coupon = TestDataFactory.create_coupon(
            self.business, discount_type='percentage', discount_value=Decimal('20'),
            max_discount_amount=Decimal('25.00'),
        )
        self.assertEqual(coupon.calculate_discount(Decimal('100.00')), Decimal('20.00'))
        self.assertEqual(coupon.calculate_discount(Decimal('500.00')), Decimal('25.00'))

    def test_free_delivery_has_no_order_discount(self):
        coupon = TestDataFactory.create_coupon(self.business, discount_type='free_delivery', discount_value=Decimal('0'))
        self.assertEqual(coupon.calculate_discount(Decimal('100.00')), Decimal('0.00'))

    def test_check_usable(self):
        now = timezone.now()
        coupon = TestDataFactory.create_coupon(self.business, min_order_amount=Decimal('100.00'))
        self.assertIsNone(coupon.check_usable(Decimal('150.00'), now=now))
        self.assertEqual(coupon.check_usable(Decimal('99.99'), now=now), 'Minimum order amount: 100.00')

        coupon.valid_until = now - timedelta(days=1)
        self.assertEqual(coupon.check_usable(Decimal('150.00'), now=now), 'This coupon has expired.')

        coupon.valid_until = None
        coupon.max_usage_count = 3
        coupon.current_usage_count = 3
        self.assertEqual(coupon.check_usable(Decimal('150.00'), now=now), 'This coupon has reached its usage limit.')

    def test_check_usable_for_selected_products(self):
        coupon = TestDataFactory.create_coupon(self.business, applicable_to='products', applicable_product_ids=[7, 8])
        self.assertIsNone(coupon.check_usable(Decimal('10'), product_ids=['8']))
        self.assertIsNotNone(coupon.check_usable(Decimal('10'), product_ids=['9']))


class CouponAPITests(TestCase):
    def setUp(self):
        self.business = TestDataFactory.create_business()
        self.user = TestDataFactory.create_user(business=self.business)
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def test_create_coupon(self):
        payload = {'code': 'save10', 'title': '10 off', 'discount_type': 'fixed', 'discount_value': '10'}
        response = self.client.post(COUPONS_URL, payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['code'], 'SAVE10')
        self.assertEqual(response.data['data']['sort_order'], 0)
        self.assertEqual(response.data['data']['current_usage_count'], 0)

    def test_duplicate_code_is_case_insensitive(self):
        TestDataFactory.create_coupon(self.business, code='SAVE10')
        payload = {'code': 'Save10', 'title': 'again', 'discount_value': '5'}
        response = self.client.post(COUPONS_URL, payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'VALIDATION_ERROR')
        self.assertEqual(response.data['details'], ['code: Coupon code SAVE10 already exists.'])

    def test_same_code_in_another_business(self):
        TestDataFactory.create_coupon(TestDataFactory.create_business(), code='SAVE10')
        payload = {'code': 'SAVE10', 'title': 'ours', 'discount_value': '5'}
        response = self.client.post(COUPONS_URL, payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_percentage_above_100_rejected(self):
        payload = {'code': 'HALF', 'title': 'x', 'discount_type': 'percentage', 'discount_value': '150'}
        response = self.client.post(COUPONS_URL, payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['details'], ['discount_value: Percentage cannot exceed 100.'])

    def test_zero_fixed_discount_rejected(self):
        payload = {'code': 'ZERO', 'title': 'x', 'discount_type': 'fixed', 'discount_value': '0'}
        response = self.client.post(COUPONS_URL, payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_valid_until_before_valid_from_rejected(self):
        payload = {
            'code': 'DATES', 'title': 'x', 'discount_value': '5',
            'valid_from': '2026-05-10T00:00:00Z', 'valid_until': '2026-05-01T00:00:00Z',
        }
        response = self.client.post(COUPONS_URL, payload, format='json')
        self.assertEqual(response.data['details'], ['valid_until: Must be after valid_from.'])

    def test_update_keeps_own_code(self):
        coupon = TestDataFactory.create_coupon(self.business, code='KEEP')
        response = self.client.patch(COUPONS_URL, {'id': coupon.id, 'code': 'keep', 'title': 'renamed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        coupon.refresh_from_db()
        self.assertEqual(coupon.title, 'renamed')

    def test_filter_active(self):
        TestDataFactory.create_coupon(self.business, code='ON')
        TestDataFactory.create_coupon(self.business, code='OFF', is_active=False)
        response = self.client.get(COUPONS_URL, {'is_active': 'false'})
        self.assertEqual([c['code'] for c in response.data['data']], ['OFF'])

    def test_delete_and_reorder(self):
        first = TestDataFactory.create_coupon(self.business, code='A', sort_order=0)
        second = TestDataFactory.create_coupon(self.business, code='B', sort_order=1)
        third = TestDataFactory.create_coupon(self.business, code='C', sort_order=2)
        self.client.delete(f'{COUPONS_URL}?id={second.id}')
        response = self.client.post(
            f'{COUPONS_URL}reorder/',
            {'items': [{'id': third.id, 'sort_order': 0}, {'id': first.id, 'sort_order': 1}]},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(list(Coupon.objects.values_list('code', 'sort_order')), [('C', 0), ('A', 1)])


class CouponValidateAPITests(TestCase):
    def setUp(self):
        self.business = TestDataFactory.create_business(slug='burger-hut')
        self.client = APIClient()

    def validate(self, code, subtotal='100.00', slug='burger-hut', **extra):
        payload = {'business_slug': slug, 'code': code, 'subtotal': subtotal}
        payload.update(extra)
        return self.client.post(VALIDATE_URL, payload, format='json')

    def test_valid_coupon(self):
        TestDataFactory.create_coupon(
            self.business, code='HALF', discount_type='percentage', discount_value=Decimal('50'),
            max_discount_amount=Decimal('30.00'),
        )
        response = self.validate('half')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertTrue(data['valid'])
        self.assertEqual(data['discount'], Decimal('30.00'))
        self.assertEqual(data['coupon']['code'], 'HALF')

    def test_unknown_code(self):
        response = self.validate('NOPE')
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data'], {'valid': False, 'message': 'Invalid coupon code.', 'discount': 0})

    def test_min_order_not_reached(self):
        TestDataFactory.create_coupon(self.business, code='BIG', min_order_amount=Decimal('250.00'))
        response = self.validate('BIG')
        self.assertFalse(response.data['data']['valid'])
        self.assertEqual(response.data['data']['message'], 'Minimum order amount: 250.00')

    def test_inactive_coupon(self):
        TestDataFactory.create_coupon(self.business, code='OLD', is_active=False)
        response = self.validate('OLD')
        self.assertFalse(response.data['data']['valid'])

    def test_unknown_business(self):
        response = self.validate('ANY', slug='missing-shop')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Business not found.')

    def test_negative_subtotal(self):
        response = self.validate('ANY', subtotal='-5')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'VALIDATION_ERROR')
