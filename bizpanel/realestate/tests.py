"""
Tests for real-estate listings
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from bizpanel.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizpanel.realestate.models import Listing

LISTINGS_URL = '/api/v1/emlak/listings/'


class ListingAPITests(TestCase):
    def setUp(self):
        self.business = TestDataFactory.create_business(business_type='emlak')
        self.user = TestDataFactory.create_user(business=self.business)
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def test_create_listing(self):
        payload = {
            'title': '3+1 flat near the sea', 'price': '4250000', 'property_type': 'apartment',
            'listing_type': 'sale', 'city': 'Izmir', 'room_count': '3+1',
            'images': ['https://cdn.example.com/a.jpg'],
        }
        response = self.client.post(LISTINGS_URL, payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['status'], 'active')
        self.assertEqual(data['currency'], 'TRY')
        self.assertEqual(data['images'], ['https://cdn.example.com/a.jpg'])

    def test_price_must_be_positive(self):
        response = self.client.post(LISTINGS_URL, {'title': 'Free land', 'price': '0'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(response.data['details'][0].startswith('price:'))

    def test_price_is_required(self):
        response = self.client.post(LISTINGS_URL, {'title': 'No price'}, format='json')
        self.assertEqual(response.data['details'], ['price: This field is required.'])

    def test_filters(self):
        TestDataFactory.create_listing(self.business, title='Villa', property_type='villa', city='Bodrum', price=Decimal('9000000'))
        TestDataFactory.create_listing(self.business, title='Office', property_type='office', city='Ankara', listing_type='rent', price=Decimal('40000'))
        TestDataFactory.create_listing(self.business, title='Flat', city='bodrum', price=Decimal('3000000'))

        response = self.client.get(LISTINGS_URL, {'city': 'BODRUM'})
        self.assertEqual([l['title'] for l in response.data['data']], ['Villa', 'Flat'])

        response = self.client.get(LISTINGS_URL, {'listing_type': 'rent'})
        self.assertEqual([l['title'] for l in response.data['data']], ['Office'])

        response = self.client.get(LISTINGS_URL, {'min_price': '1000000', 'max_price': '5000000'})
        self.assertEqual([l['title'] for l in response.data['data']], ['Flat'])

    def test_invalid_filter_value(self):
        response = self.client.get(LISTINGS_URL, {'property_type': 'castle'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'VALIDATION_ERROR')
        self.assertTrue(response.data['details'][0].startswith('property_type:'))

    def test_mark_sold(self):
        listing = TestDataFactory.create_listing(self.business)
        response = self.client.put(LISTINGS_URL, {'id': listing.id, 'status': 'sold'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        listing.refresh_from_db()
        self.assertEqual(listing.status, 'sold')

    def test_other_business_cannot_see_listing(self):
        listing = TestDataFactory.create_listing(TestDataFactory.create_business(business_type='emlak'))
        response = self.client.get(LISTINGS_URL, {'id': listing.id})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.delete(f'{LISTINGS_URL}?id={listing.id}')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertTrue(Listing.objects.filter(pk=listing.id).exists())

    def test_reorder(self):
        a = TestDataFactory.create_listing(self.business, title='a', sort_order=0)
        b = TestDataFactory.create_listing(self.business, title='b', sort_order=1)
        c = TestDataFactory.create_listing(self.business, title='c', sort_order=2)
        items = [{'id': c.id, 'sort_order': 0}, {'id': a.id, 'sort_order': 1}, {'id': b.id, 'sort_order': 2}]
        response = self.client.post(f'{LISTINGS_URL}reorder/', {'items': items}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        listed = self.client.get(LISTINGS_URL)
        self.assertEqual([(l['title'], l['sort_order']) for l in listed.data['data']], [('c', 0), ('a', 1), ('b', 2)])
