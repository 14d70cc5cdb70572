"""
Tests for hotel room types and rooms (path-addressed collections)
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from bizpanel.core.models import AuditLog
from bizpanel.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizpanel.hotel.models import RoomType, Room

ROOM_TYPES_URL = '/api/v1/hotel/room-types/'
ROOMS_URL = '/api/v1/hotel/rooms/'


class HotelTestCase(TestCase):
    def setUp(self):
        self.business = TestDataFactory.create_business(business_type='hotel')
        self.user = TestDataFactory.create_user(business=self.business)
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)


class RoomTypeAPITests(HotelTestCase):
    def test_create_room_type(self):
        payload = {'name': 'Deluxe', 'price': '2400.00', 'capacity': 3, 'amenities': ['wifi', 'minibar'], 'currency': 'eur'}
        response = self.client.post(ROOM_TYPES_URL, payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['amenities'], ['wifi', 'minibar'])
        self.assertEqual(data['currency'], 'EUR')
        self.assertEqual(data['sort_order'], 0)

    def test_list_includes_room_count(self):
        suite = TestDataFactory.create_room_type(self.business, name='Suite', sort_order=1)
        standard = TestDataFactory.create_room_type(self.business, name='Standard', sort_order=0)
        TestDataFactory.create_room(self.business, room_type=suite, room_number='501')
        TestDataFactory.create_room(self.business, room_type=suite, room_number='502')
        response = self.client.get(ROOM_TYPES_URL)
        rows = [(r['name'], r['room_count']) for r in response.data['data']]
        self.assertEqual(rows, [('Standard', 0), ('Suite', 2)])
        self.assertEqual(response.data['data'][0]['id'], standard.id)

    def test_put_replaces_and_patch_merges(self):
        room_type = TestDataFactory.create_room_type(self.business, name='Standard', capacity=2)
        response = self.client.patch(f'{ROOM_TYPES_URL}{room_type.id}/', {'capacity': 4}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        room_type.refresh_from_db()
        self.assertEqual((room_type.name, room_type.capacity), ('Standard', 4))

        response = self.client.put(f'{ROOM_TYPES_URL}{room_type.id}/', {'capacity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name: This field is required.', response.data['details'])

    def test_capacity_must_be_positive(self):
        response = self.client.post(ROOM_TYPES_URL, {'name': 'Closet', 'capacity': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_with_rooms_conflicts(self):
        room_type = TestDataFactory.create_room_type(self.business)
        TestDataFactory.create_room(self.business, room_type=room_type)
        response = self.client.delete(f'{ROOM_TYPES_URL}{room_type.id}/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['details'], ['rooms_count: 1'])

    def test_delete_empty_room_type(self):
        room_type = TestDataFactory.create_room_type(self.business)
        response = self.client.delete(f'{ROOM_TYPES_URL}{room_type.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(RoomType.objects.filter(pk=room_type.id).exists())

    def test_foreign_room_type_not_found(self):
        other = TestDataFactory.create_room_type(TestDataFactory.create_business(business_type='hotel'))
        response = self.client.get(f'{ROOM_TYPES_URL}{other.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Room type not found.')

    def test_reorder(self):
        first = TestDataFactory.create_room_type(self.business, sort_order=0)
        second = TestDataFactory.create_room_type(self.business, sort_order=1)
        response = self.client.post(
            f'{ROOM_TYPES_URL}reorder/',
            {'items': [{'id': second.id, 'sort_order': 0}, {'id': first.id, 'sort_order': 1}]},
            format='json',
        )
        self.assertEqual([r['id'] for r in response.data['data']], [second.id, first.id])


class RoomAPITests(HotelTestCase):
    def setUp(self):
        super().setUp()
        self.room_type = TestDataFactory.create_room_type(self.business, name='Standard', price=Decimal('1200.00'))

    def test_create_room(self):
        payload = {'room_type': self.room_type.id, 'room_number': ' 101 ', 'floor': 1}
        response = self.client.post(ROOMS_URL, payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['room_number'], '101')
        self.assertEqual(data['room_type_name'], 'Standard')
        self.assertEqual(data['status'], 'available')

    def test_duplicate_room_number(self):
        TestDataFactory.create_room(self.business, room_type=self.room_type, room_number='A1')
        response = self.client.post(ROOMS_URL, {'room_type': self.room_type.id, 'room_number': 'a1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['details'], ['room_number: Room a1 already exists.'])

    def test_foreign_room_type_rejected(self):
        other = TestDataFactory.create_room_type(TestDataFactory.create_business(business_type='hotel'))
        response = self.client.post(ROOMS_URL, {'room_type': other.id, 'room_number': '9'}, format='json')
        self.assertEqual(response.data['details'], ['room_type: Room type not found.'])

    def test_filters(self):
        TestDataFactory.create_room(self.business, room_type=self.room_type, room_number='1', status='cleaning')
        TestDataFactory.create_room(self.business, room_type=self.room_type, room_number='2')
        response = self.client.get(ROOMS_URL, {'status': 'cleaning'})
        self.assertEqual([r['room_number'] for r in response.data['data']], ['1'])
        response = self.client.get(ROOMS_URL, {'room_type': 'abc'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_status_change(self):
        room = TestDataFactory.create_room(self.business, room_type=self.room_type, room_number='7')
        response = self.client.patch(f'{ROOMS_URL}{room.id}/status/', {'status': 'maintenance'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'maintenance')
        self.assertEqual(response.data['data']['room_number'], '7')
        log = AuditLog.objects.get(action='status_change')
        self.assertEqual(log.changes, {'status': {'old': 'available', 'new': 'maintenance'}})

    def test_status_change_rejects_unknown_status(self):
        room = TestDataFactory.create_room(self.business, room_type=self.room_type)
        response = self.client.patch(f'{ROOMS_URL}{room.id}/status/', {'status': 'haunted'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        room.refresh_from_db()
        self.assertEqual(room.status, 'available')

    def test_delete_room(self):
        room = TestDataFactory.create_room(self.business, room_type=self.room_type)
        response = self.client.delete(f'{ROOMS_URL}{room.id}/')
        self.assertEqual(response.data['data'], {'id': room.id, 'deleted': True})
        self.assertFalse(Room.objects.filter(pk=room.id).exists())

    def test_reorder_rooms(self):
        r1 = TestDataFactory.create_room(self.business, room_type=self.room_type, room_number='1', sort_order=0)
        r2 = TestDataFactory.create_room(self.business, room_type=self.room_type, room_number='2', sort_order=1)
        self.client.post(f'{ROOMS_URL}reorder/', {'items': [{'id': r1.id, 'sort_order': 1}, {'id': r2.id, 'sort_order': 0}]}, format='json')
        self.assertEqual(list(Room.objects.values_list('room_number', flat=True)), ['2', '1'])
