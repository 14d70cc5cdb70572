"""
Comprehensive test suite for the fast-food catalog
Tests: category/product CRUD, tenant isolation, bulk reorder, delete rules, public menu, commands
"""
from decimal import Decimal
from io import StringIO

from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from bizpanel.catalog.models import Category, Product
from bizpanel.core.models import AuditLog
from bizpanel.core.test_utils import TestDataFactory, AuthenticatedAPIClient

CATEGORIES_URL = '/api/v1/fastfood/categories/'
PRODUCTS_URL = '/api/v1/fastfood/products/'


class CatalogTestCase(TestCase):
    def setUp(self):
        cache.clear()
        self.business = TestDataFactory.create_business()
        self.user = TestDataFactory.create_user(business=self.business)
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)
        self.other_business = TestDataFactory.create_business()


class CategoryAPITests(CatalogTestCase):
    def test_list_ordered_by_sort_order_then_id(self):
        TestDataFactory.create_category(self.business, name='b', sort_order=1)
        TestDataFactory.create_category(self.business, name='a', sort_order=0)
        TestDataFactory.create_category(self.business, name='c', sort_order=1)
        TestDataFactory.create_category(self.other_business, name='foreign')
        response = self.client.get(CATEGORIES_URL)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual([c['name'] for c in response.data['data']], ['a', 'b', 'c'])

    def test_empty_list(self):
        response = self.client.get(CATEGORIES_URL)
        self.assertEqual(response.data, {'success': True, 'data': []})

    def test_get_by_id(self):
        category = TestDataFactory.create_category(self.business, name='Pizza')
        response = self.client.get(CATEGORIES_URL, {'id': category.id})
        self.assertEqual(response.data['data']['name'], 'Pizza')

    def test_get_foreign_id_is_not_found(self):
        category = TestDataFactory.create_category(self.other_business)
        response = self.client.get(CATEGORIES_URL, {'id': category.id})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['code'], 'NOT_FOUND')
        self.assertEqual(response.data['error'], 'Category not found.')

    def test_create_appends_to_end(self):
        TestDataFactory.create_category(self.business, sort_order=0)
        TestDataFactory.create_category(self.business, sort_order=1)
        response = self.client.post(CATEGORIES_URL, {'name': 'Drinks'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['sort_order'], 2)
        self.assertEqual(data['icon'], '🍔')
        self.assertTrue(data['is_active'])
        self.assertEqual(Category.objects.get(pk=data['id']).business, self.business)

    def test_create_keeps_explicit_sort_order(self):
        response = self.client.post(CATEGORIES_URL, {'name': 'Drinks', 'sort_order': 5}, format='json')
        self.assertEqual(response.data['data']['sort_order'], 5)

    def test_create_requires_name(self):
        response = self.client.post(CATEGORIES_URL, {'icon': '🍕'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['details'], ['name: This field is required.'])

    def test_create_ignores_business_in_body(self):
        response = self.client.post(CATEGORIES_URL, {'name': 'Sneaky', 'business': self.other_business.id}, format='json')
        category = Category.objects.get(pk=response.data['data']['id'])
        self.assertEqual(category.business, self.business)

    def test_update_with_id_in_body_writes_only_given_fields(self):
        category = TestDataFactory.create_category(self.business, name='Burgers', icon='🍔')
        response = self.client.put(CATEGORIES_URL, {'id': category.id, 'name': 'Smash Burgers'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        category.refresh_from_db()
        self.assertEqual(category.name, 'Smash Burgers')
        self.assertEqual(category.icon, '🍔')

    def test_update_without_id(self):
        response = self.client.patch(CATEGORIES_URL, {'name': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'ID required')

    def test_toggle_status(self):
        category = TestDataFactory.create_category(self.business)
        self.client.patch(CATEGORIES_URL, {'id': category.id, 'is_active': False}, format='json')
        category.refresh_from_db()
        self.assertFalse(category.is_active)
        log = AuditLog.objects.filter(model_name='Category', action='update').first()
        self.assertEqual(log.changes['is_active'], {'old': True, 'new': False})

    def test_update_foreign_category(self):
        category = TestDataFactory.create_category(self.other_business, name='Theirs')
        response = self.client.patch(CATEGORIES_URL, {'id': category.id, 'name': 'Mine'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        category.refresh_from_db()
        self.assertEqual(category.name, 'Theirs')

    def test_delete(self):
        category = TestDataFactory.create_category(self.business)
        response = self.client.delete(f'{CATEGORIES_URL}?id={category.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertFalse(Category.objects.filter(pk=category.id).exists())

    def test_delete_with_products_conflicts(self):
        category = TestDataFactory.create_category(self.business)
        TestDataFactory.create_product(self.business, category=category)
        TestDataFactory.create_product(self.business, category=category)
        response = self.client.delete(f'{CATEGORIES_URL}?id={category.id}')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'CONFLICT')
        self.assertEqual(response.data['details'], ['products_count: 2'])
        self.assertTrue(Category.objects.filter(pk=category.id).exists())

    def test_force_delete_detaches_products(self):
        category = TestDataFactory.create_category(self.business)
        product = TestDataFactory.create_product(self.business, category=category)
        response = self.client.delete(f'{CATEGORIES_URL}?id={category.id}&force=true')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertIsNone(product.category)

    def test_list_reflects_writes_despite_cache(self):
        self.client.get(CATEGORIES_URL)
        self.client.post(CATEGORIES_URL, {'name': 'Fresh'}, format='json')
        response = self.client.get(CATEGORIES_URL)
        self.assertEqual([c['name'] for c in response.data['data']], ['Fresh'])


class CategoryReorderAPITests(CatalogTestCase):
    def setUp(self):
        super().setUp()
        self.a = TestDataFactory.create_category(self.business, name='a', sort_order=0)
        self.b = TestDataFactory.create_category(self.business, name='b', sort_order=1)
        self.c = TestDataFactory.create_category(self.business, name='c', sort_order=2)

    def test_batch_reorder(self):
        items = [{'id': self.c.id, 'sort_order': 0}, {'id': self.a.id, 'sort_order': 1}, {'id': self.b.id, 'sort_order': 2}]
        response = self.client.post(f'{CATEGORIES_URL}reorder/', {'items': items}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['name'] for c in response.data['data']], ['c', 'a', 'b'])
        listed = self.client.get(CATEGORIES_URL)
        self.assertEqual([c['name'] for c in listed.data['data']], ['c', 'a', 'b'])
        self.assertTrue(AuditLog.objects.filter(action='reorder', model_name='Category').exists())

    def test_foreign_id_rejects_whole_batch(self):
        foreign = TestDataFactory.create_category(self.other_business)
        items = [{'id': self.c.id, 'sort_order': 0}, {'id': foreign.id, 'sort_order': 1}]
        response = self.client.post(f'{CATEGORIES_URL}reorder/', {'items': items}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.c.refresh_from_db()
        self.assertEqual(self.c.sort_order, 2)
        foreign.refresh_from_db()
        self.assertEqual(foreign.sort_order, 0)

    def test_malformed_items(self):
        response = self.client.post(f'{CATEGORIES_URL}reorder/', {'items': [{'id': self.a.id}]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'VALIDATION_ERROR')


class ProductAPITests(CatalogTestCase):
    def setUp(self):
        super().setUp()
        self.category = TestDataFactory.create_category(self.business, name='Burgers')

    def test_create_product(self):
        response = self.client.post(PRODUCTS_URL, {'name': 'Cheeseburger', 'price': '149.90', 'category': self.category.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['category_name'], 'Burgers')
        self.assertEqual(Decimal(str(data['price'])), Decimal('149.90'))

    def test_negative_price_rejected(self):
        response = self.client.post(PRODUCTS_URL, {'name': 'Free money', 'price': '-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(response.data['details'][0].startswith('price:'))

    def test_foreign_category_rejected(self):
        foreign = TestDataFactory.create_category(self.other_business)
        response = self.client.post(PRODUCTS_URL, {'name': 'Burger', 'price': '10', 'category': foreign.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['details'], ['category: Category not found.'])

    def test_filter_by_category_and_search(self):
        TestDataFactory.create_product(self.business, category=self.category, name='Double Cheeseburger')
        TestDataFactory.create_product(self.business, category=self.category, name='Chicken Burger')
        TestDataFactory.create_product(self.business, name='Cola')
        response = self.client.get(PRODUCTS_URL, {'category': self.category.id, 'search': 'cheese'})
        self.assertEqual([p['name'] for p in response.data['data']], ['Double Cheeseburger'])

    def test_delete_product(self):
        product = TestDataFactory.create_product(self.business)
        response = self.client.delete(f'{PRODUCTS_URL}?id={product.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'], {'id': product.id, 'deleted': True})

    def test_delete_without_id(self):
        response = self.client.delete(PRODUCTS_URL)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_product_reorder(self):
        p1 = TestDataFactory.create_product(self.business, sort_order=0)
        p2 = TestDataFactory.create_product(self.business, sort_order=1)
        response = self.client.post(f'{PRODUCTS_URL}reorder/', {'items': [{'id': p2.id, 'sort_order': 0}, {'id': p1.id, 'sort_order': 1}]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(list(Product.objects.filter(business=self.business).values_list('id', flat=True)), [p2.id, p1.id])


class PublicMenuAPITests(CatalogTestCase):
    def test_menu_lists_active_categories_and_products(self):
        burgers = TestDataFactory.create_category(self.business, name='Burgers', sort_order=1)
        drinks = TestDataFactory.create_category(self.business, name='Drinks', sort_order=0)
        TestDataFactory.create_category(self.business, name='Hidden', is_active=False)
        TestDataFactory.create_product(self.business, category=burgers, name='Classic')
        TestDataFactory.create_product(self.business, category=burgers, name='Retired', is_active=False)
        TestDataFactory.create_product(self.business, category=drinks, name='Ayran')

        response = APIClient().get('/api/v1/fastfood/menu/', {'business_slug': self.business.slug})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        categories = response.data['data']['categories']
        self.assertEqual([c['name'] for c in categories], ['Drinks', 'Burgers'])
        self.assertEqual([p['name'] for p in categories[1]['products']], ['Classic'])

    def test_menu_refreshes_after_product_change(self):
        burgers = TestDataFactory.create_category(self.business, name='Burgers')
        anonymous = APIClient()
        anonymous.get('/api/v1/fastfood/menu/', {'business_slug': self.business.slug})
        TestDataFactory.create_product(self.business, category=burgers, name='New')
        response = anonymous.get('/api/v1/fastfood/menu/', {'business_slug': self.business.slug})
        self.assertEqual([p['name'] for p in response.data['data']['categories'][0]['products']], ['New'])

    def test_unknown_business(self):
        response = APIClient().get('/api/v1/fastfood/menu/', {'business_slug': 'nope-nope'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class CatalogCommandTests(TestCase):
    def setUp(self):
        cache.clear()
        self.business = TestDataFactory.create_business(slug='demo-grill')

    def test_add_default_categories_appends(self):
        TestDataFactory.create_category(self.business, name='Burgers', sort_order=0)
        call_command('add_default_categories', 'demo-grill', stdout=StringIO())
        categories = list(Category.objects.filter(business=self.business))
        self.assertEqual(categories[0].name, 'Burgers')
        self.assertEqual(len(categories), 7)
        self.assertEqual([c.sort_order for c in categories], list(range(7)))

    def test_normalize_sort_orders(self):
        TestDataFactory.create_category(self.business, name='x', sort_order=5)
        TestDataFactory.create_category(self.business, name='y', sort_order=5)
        TestDataFactory.create_category(self.business, name='z', sort_order=9)
        call_command('normalize_sort_orders', business='demo-grill', stdout=StringIO())
        self.assertEqual(
            list(Category.objects.filter(business=self.business).values_list('name', 'sort_order')),
            [('x', 0), ('y', 1), ('z', 2)],
        )

    def test_normalize_dry_run_writes_nothing(self):
        TestDataFactory.create_category(self.business, sort_order=3)
        call_command('normalize_sort_orders', dry_run=True, stdout=StringIO())
        self.assertEqual(Category.objects.get(business=self.business).sort_order, 3)
