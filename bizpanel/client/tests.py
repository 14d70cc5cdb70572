"""
Tests for the panel client.

Integration tests drive the real API views through APIClientSession;
failure and timing cases use a scripted session that answers from a handler.
"""
import io
import os
from unittest import mock
from urllib.parse import urlsplit

import requests
from django.core.cache import cache
from django.test import TestCase, SimpleTestCase

from bizpanel.catalog.models import Category
from bizpanel.client import (
    ApiClient, ClientConfig, Collection, PanelSession, AbortScope,
    CATEGORIES, COUPONS, ROOM_TYPES,
    ClientError, TransportError, RemoteRejected, ValidationFailed, Aborted,
    FormState, TxState, reorder,
)
from bizpanel.client.collection import is_temp_id
from bizpanel.client.forms import validate_draft, SCHEMAS
from bizpanel.core.test_utils import TestDataFactory, APIClientSession
from bizpanel.coupons.models import Coupon
from bizpanel.hotel.models import RoomType

BASE_URL = 'http://testserver/api/v1'


class FakeResponse:
    def __init__(self, body, status_code=200):
        self.body = body
        self.status_code = status_code

    def json(self):
        if isinstance(self.body, Exception):
            raise self.body
        return self.body


def ok(data, status_code=200):
    return FakeResponse({'success': True, 'data': data}, status_code)


def rejected(error, code, details=None, status_code=400):
    body = {'success': False, 'error': error, 'code': code}
    if details:
        body['details'] = details
    return FakeResponse(body, status_code)


class ScriptedSession:
    """requests.Session stand-in answering every call from handler(method, path, params, json)"""

    def __init__(self, handler):
        self.handler = handler
        self.headers = {}
        self.calls = []
        self.closed = False

    def request(self, method, url, params=None, json=None, files=None, timeout=None):
        path = urlsplit(url).path.replace('/api/v1/', '', 1)
        self.calls.append((method, path, params, json))
        return self.handler(method, path, params, json)

    def close(self):
        self.closed = True


def scripted_session(handler, **config):
    config.setdefault('base_url', BASE_URL)
    api = ApiClient(ClientConfig(**config), session=ScriptedSession(handler))
    return PanelSession(api, business_id=1)


CATEGORY_ROWS = [
    {'id': 1, 'name': 'a', 'sort_order': 0, 'is_active': True},
    {'id': 2, 'name': 'b', 'sort_order': 1, 'is_active': True},
    {'id': 3, 'name': 'c', 'sort_order': 2, 'is_active': True},
]


class ReorderFunctionTests(SimpleTestCase):
    def setUp(self):
        self.collection = Collection.from_server(CATEGORY_ROWS)

    def test_move_to_front(self):
        result = reorder(self.collection, 3, 0)
        self.assertEqual(result.ids(), [3, 1, 2])
        self.assertEqual([item['sort_order'] for item in result], [0, 1, 2])

    def test_target_index_is_clamped(self):
        self.assertEqual(reorder(self.collection, 1, 99).ids(), [2, 3, 1])
        self.assertEqual(reorder(self.collection, 3, -4).ids(), [3, 1, 2])

    def test_unknown_id_keeps_order(self):
        self.assertEqual(reorder(self.collection, 42, 0).ids(), [1, 2, 3])

    def test_input_is_not_mutated(self):
        reorder(self.collection, 3, 0)
        self.assertEqual(self.collection.ids(), [1, 2, 3])


class CollectionTests(SimpleTestCase):
    def test_from_server_sorts_and_renumbers(self):
        records = [
            {'id': 5, 'sort_order': 7},
            {'id': 6},
            {'id': 7, 'sort_order': 7},
            {'id': 8, 'sort_order': None},
        ]
        collection = Collection.from_server(records)
        self.assertEqual(collection.ids(), [6, 8, 5, 7])
        self.assertEqual([item['sort_order'] for item in collection], [0, 1, 2, 3])

    def test_lookup(self):
        collection = Collection.from_server(CATEGORY_ROWS)
        self.assertEqual(collection.index_of(2), 1)
        self.assertEqual(collection.index_of(9), -1)
        self.assertEqual(collection.get(3)['name'], 'c')
        self.assertIsNone(collection.get(9))


class AbortScopeTests(SimpleTestCase):
    def test_close_cascades_to_children(self):
        root = AbortScope()
        child = root.child()
        grandchild = child.child()
        root.close()
        self.assertTrue(child.closed)
        self.assertTrue(grandchild.closed)
        with self.assertRaises(Aborted):
            grandchild.check()

    def test_child_of_closed_scope_starts_closed(self):
        root = AbortScope()
        root.close()
        self.assertTrue(root.child().closed)

    def test_closing_child_leaves_parent_open(self):
        root = AbortScope()
        root.child().close()
        self.assertFalse(root.closed)

    def test_closed_child_is_released_by_parent(self):
        root = AbortScope()
        kept = root.child()
        for _ in range(3):
            root.child().close()
        self.assertEqual(root._children, [kept])


class ClientConfigTests(SimpleTestCase):
    def test_defaults(self):
        config = ClientConfig(base_url='http://panel.local/api/v1/')
        self.assertEqual(config.base_url, 'http://panel.local/api/v1')
        self.assertEqual(config.reorder_strategy, 'per_item')
        self.assertEqual(config.reconcile_policy, 'revert')

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            ClientConfig(reorder_strategy='random')
        with self.assertRaises(ValueError):
            ClientConfig(reconcile_policy='ignore')
        with self.assertRaises(ValueError):
            ClientConfig(per_item_concurrency=0)

    def test_from_env(self):
        env = {'BIZPANEL_API_URL': 'http://env.local/api/v1', 'BIZPANEL_TIMEOUT': '2.5', 'BIZPANEL_REORDER_STRATEGY': 'batch'}
        with mock.patch.dict(os.environ, env):
            config = ClientConfig.from_env(reconcile_policy='reload')
        self.assertEqual(config.base_url, 'http://env.local/api/v1')
        self.assertEqual(config.timeout, 2.5)
        self.assertEqual(config.reorder_strategy, 'batch')
        self.assertEqual(config.reconcile_policy, 'reload')


class TransportTests(SimpleTestCase):
    def api(self, handler):
        return ApiClient(ClientConfig(base_url=BASE_URL), session=ScriptedSession(handler))

    def test_returns_envelope_data(self):
        api = self.api(lambda *args: ok([{'id': 1}]))
        self.assertEqual(api.get('fastfood/categories/'), [{'id': 1}])

    def test_failure_envelope_raises_remote_rejected(self):
        api = self.api(lambda *args: rejected('Validation error', 'VALIDATION_ERROR', ['name: This field is required.']))
        with self.assertRaises(RemoteRejected) as ctx:
            api.post('fastfood/categories/', json={})
        self.assertEqual(ctx.exception.code, 'VALIDATION_ERROR')
        self.assertEqual(ctx.exception.details, ['name: This field is required.'])
        self.assertEqual(ctx.exception.status_code, 400)

    def test_success_false_with_http_200_is_still_a_failure(self):
        api = self.api(lambda *args: rejected('Nope', 'CONFLICT', status_code=200))
        with self.assertRaises(RemoteRejected):
            api.get('fastfood/categories/')

    def test_non_json_body(self):
        api = self.api(lambda *args: FakeResponse(ValueError('no json'), 502))
        with self.assertRaises(TransportError) as ctx:
            api.get('fastfood/categories/')
        self.assertEqual(ctx.exception.status_code, 502)

    def test_body_without_envelope(self):
        api = self.api(lambda *args: FakeResponse({'detail': 'x'}))
        with self.assertRaises(TransportError):
            api.get('fastfood/categories/')

    def test_connection_error(self):
        def handler(*args):
            raise requests.ConnectionError('refused')
        with self.assertRaises(TransportError):
            self.api(handler).get('fastfood/categories/')

    def test_tokens_set_and_cleared(self):
        api = self.api(lambda *args: ok({'access': 'A', 'refresh': 'R', 'business_id': 1}))
        api.login('owner', 'secret')
        self.assertEqual(api.session.headers['Authorization'], 'Bearer A')
        api.clear_tokens()
        self.assertNotIn('Authorization', api.session.headers)

    def test_expired_token_is_refreshed_once(self):
        def handler(method, path, params, json):
            if path == 'auth/refresh/':
                return ok({'access': 'B'})
            if api.session.headers.get('Authorization') == 'Bearer A':
                return rejected('Token is invalid or expired', 'UNAUTHORIZED', status_code=401)
            return ok([{'id': 1}])

        api = self.api(handler)
        api.set_tokens('A', 'R')
        self.assertEqual(api.get('fastfood/categories/'), [{'id': 1}])
        self.assertEqual([call[:2] for call in api.session.calls],
                         [('GET', 'fastfood/categories/'), ('POST', 'auth/refresh/'), ('GET', 'fastfood/categories/')])
        self.assertEqual(api.session.calls[1][3], {'refresh': 'R'})
        self.assertEqual(api.session.headers['Authorization'], 'Bearer B')

    def test_401_without_refresh_token_is_not_retried(self):
        api = self.api(lambda *args: rejected('Authentication required', 'UNAUTHORIZED', status_code=401))
        api.set_tokens('A')
        with self.assertRaises(RemoteRejected):
            api.get('fastfood/categories/')
        self.assertEqual(len(api.session.calls), 1)

    def test_failed_refresh_is_not_retried(self):
        api = self.api(lambda *args: rejected('Token is invalid or expired', 'UNAUTHORIZED', status_code=401))
        api.set_tokens('A', 'R')
        with self.assertRaises(RemoteRejected):
            api.get('fastfood/categories/')
        self.assertEqual([call[:2] for call in api.session.calls],
                         [('GET', 'fastfood/categories/'), ('POST', 'auth/refresh/')])


class ClientIntegrationTestCase(TestCase):
    """Signed-in panel session talking to the real views"""
    reorder_strategy = 'per_item'

    def setUp(self):
        cache.clear()
        self.business = TestDataFactory.create_business()
        self.user = TestDataFactory.create_user(business=self.business)
        self.http = APIClientSession()
        config = ClientConfig(base_url=BASE_URL, reorder_strategy=self.reorder_strategy, per_item_concurrency=1)
        self.session = PanelSession.login(self.user.username, 'testpass123', config=config, session=self.http)

    def calls(self, method):
        return [call for call in self.http.calls if call[0] == method]


class PanelSessionTests(ClientIntegrationTestCase):
    def test_login_reads_business_from_profile(self):
        self.assertEqual(self.session.business_id, self.business.id)
        self.assertEqual(self.session.user['username'], self.user.username)
        self.assertTrue(self.http.headers['Authorization'].startswith('Bearer '))

    def test_close_discards_tokens(self):
        with self.session:
            pass
        self.assertTrue(self.session.scope.closed)
        self.assertNotIn('Authorization', self.http.headers)

    def test_wrong_password(self):
        with self.assertRaises(RemoteRejected) as ctx:
            PanelSession.login(self.user.username, 'wrong', config=ClientConfig(base_url=BASE_URL), session=APIClientSession())
        self.assertEqual(ctx.exception.code, 'UNAUTHORIZED')

    def test_expired_access_token_is_refreshed(self):
        TestDataFactory.create_category(self.business, name='a')
        self.session.api.set_tokens('expired', self.session.api.refresh_token)
        panel = self.session.open(CATEGORIES)
        panel.load()
        self.assertEqual([item['name'] for item in panel.items], ['a'])
        self.assertIn('/api/v1/auth/refresh/', [call[1] for call in self.calls('POST')])
        self.assertNotEqual(self.http.headers['Authorization'], 'Bearer expired')
        self.assertEqual(self.session.notifications.errors, [])


class LoaderTests(ClientIntegrationTestCase):
    def test_load_orders_items(self):
        TestDataFactory.create_category(self.business, name='b', sort_order=1)
        TestDataFactory.create_category(self.business, name='a', sort_order=0)
        panel = self.session.open(CATEGORIES)
        seen = []
        panel.store.subscribe(seen.append)
        panel.load()
        self.assertEqual([item['name'] for item in panel.items], ['a', 'b'])
        self.assertEqual(len(seen), 1)
        self.assertTrue(panel.store.loaded)
        self.assertEqual(self.calls('GET')[-1][2], {'business_id': self.business.id})

    def test_failed_load_keeps_previous_items(self):
        TestDataFactory.create_category(self.business, name='a')
        panel = self.session.open(CATEGORIES)
        panel.load()
        with mock.patch.object(self.http, 'request', side_effect=requests.Timeout('slow')):
            panel.load()
        self.assertEqual([item['name'] for item in panel.items], ['a'])
        errors = self.session.notifications.errors
        self.assertEqual(len(errors), 1)
        self.assertTrue(errors[0].message.startswith('Category list could not be loaded: '))

    def test_load_after_close_is_ignored(self):
        panel = self.session.open(CATEGORIES)
        panel.close()
        panel.load()
        self.assertEqual(self.calls('GET'), [call for call in self.http.calls if call[1].endswith('/auth/me/')])


class MutatorIntegrationTests(ClientIntegrationTestCase):
    def setUp(self):
        super().setUp()
        self.panel = self.session.open(COUPONS)
        self.panel.load()

    def test_create_swaps_temp_item_for_server_record(self):
        snapshots = []
        self.panel.store.subscribe(lambda collection: snapshots.append(collection.ids()))
        tx = self.panel.mutator.create({'code': 'SAVE10', 'title': '10 off', 'discount_type': 'fixed', 'discount_value': 10})
        self.assertIs(tx.state, TxState.COMMITTED)
        coupon = Coupon.objects.get(business=self.business, code='SAVE10')
        self.assertEqual(tx.item_id, coupon.id)
        self.assertTrue(is_temp_id(snapshots[0][0]))
        self.assertEqual(self.panel.store.collection.ids(), [coupon.id])
        self.assertEqual(self.panel.items[0]['sort_order'], 0)

    def test_rejected_create_removes_entry(self):
        TestDataFactory.create_coupon(self.business, code='SAVE10')
        self.panel.load()
        tx = self.panel.mutator.create({'code': 'SAVE10', 'title': 'dup', 'discount_value': 5})
        self.assertIs(tx.state, TxState.ROLLED_BACK)
        self.assertEqual(len(self.panel.items), 1)
        notification = self.session.notifications.errors[-1]
        self.assertEqual(notification.message, 'Coupon could not be created: Validation error')
        self.assertEqual(notification.code, 'VALIDATION_ERROR')
        self.assertEqual(notification.details, ['code: Coupon code SAVE10 already exists.'])

    def test_rejected_update_reverts(self):
        coupon = TestDataFactory.create_coupon(self.business, code='HALF', title='Half')
        self.panel.load()
        tx = self.panel.mutator.update(coupon.id, {'discount_type': 'percentage', 'discount_value': 150})
        self.assertIs(tx.state, TxState.ROLLED_BACK)
        item = self.panel.store.get(coupon.id)
        self.assertEqual(item['discount_type'], 'fixed')
        self.assertEqual(self.session.notifications.errors[-1].message, 'Coupon could not be updated: Validation error')

    def test_double_toggle_sends_two_updates(self):
        coupon = TestDataFactory.create_coupon(self.business)
        self.panel.load()
        self.panel.mutator.toggle_status(coupon.id)
        self.assertFalse(self.panel.store.get(coupon.id)['is_active'])
        self.panel.mutator.toggle_status(coupon.id)
        self.assertEqual(len(self.calls('PATCH')), 2)
        coupon.refresh_from_db()
        self.assertTrue(coupon.is_active)
        self.assertTrue(self.panel.store.get(coupon.id)['is_active'])

    def test_declined_delete_makes_no_call(self):
        coupon = TestDataFactory.create_coupon(self.business)
        self.panel.load()
        seen = []
        result = self.panel.mutator.delete(coupon.id, confirm=lambda item: seen.append(item['code']) or False)
        self.assertIsNone(result)
        self.assertEqual(seen, [coupon.code])
        self.assertEqual(self.calls('DELETE'), [])
        self.assertEqual(len(self.panel.items), 1)

    def test_confirmed_delete(self):
        coupon = TestDataFactory.create_coupon(self.business)
        self.panel.load()
        tx = self.panel.mutator.delete(coupon.id, confirm=lambda item: True)
        self.assertIs(tx.state, TxState.COMMITTED)
        self.assertEqual(self.panel.items, [])
        self.assertFalse(Coupon.objects.filter(pk=coupon.id).exists())

    def test_update_of_unsaved_item_is_refused(self):
        with self.assertRaises(ClientError):
            self.panel.mutator.update('tmp-abc', {'title': 'x'})
        with self.assertRaises(KeyError):
            self.panel.mutator.update(999999, {'title': 'x'})


class PathStyleIntegrationTests(ClientIntegrationTestCase):
    def test_room_type_update_and_delete_use_item_path(self):
        room_type = TestDataFactory.create_room_type(self.business, name='Standard')
        panel = self.session.open(ROOM_TYPES)
        panel.load()
        tx = panel.mutator.update(room_type.id, {'capacity': 3})
        self.assertTrue(tx.ok)
        self.assertEqual(self.calls('PATCH')[-1][1], f'/api/v1/hotel/room-types/{room_type.id}/')
        panel.mutator.delete(room_type.id, confirm=lambda item: True)
        self.assertFalse(RoomType.objects.filter(pk=room_type.id).exists())


class CreateOrderingIntegrationTests(ClientIntegrationTestCase):
    def test_create_after_deletes_appends_on_server_and_locally(self):
        panel = self.session.open(CATEGORIES)
        panel.load()
        for name in ('a', 'b', 'c'):
            self.assertTrue(panel.mutator.create({'name': name}).ok)
        a_id, b_id = panel.store.collection.ids()[:2]
        panel.mutator.delete(a_id, confirm=lambda item: True)
        panel.mutator.delete(b_id, confirm=lambda item: True)
        self.assertEqual([(item['name'], item['sort_order']) for item in panel.items], [('c', 0)])

        self.assertTrue(panel.mutator.create({'name': 'd'}).ok)
        self.assertEqual(self.calls('POST')[-1][3], {'name': 'd'})
        self.assertEqual([(item['name'], item['sort_order']) for item in panel.items], [('c', 0), ('d', 1)])

        panel.load()
        self.assertEqual([(item['name'], item['sort_order']) for item in panel.items], [('c', 0), ('d', 1)])
        self.assertEqual(list(Category.objects.filter(business=self.business).values_list('name', flat=True)), ['c', 'd'])


class PerItemReorderIntegrationTests(ClientIntegrationTestCase):
    def test_drag_last_to_front(self):
        a = TestDataFactory.create_category(self.business, name='a', sort_order=0)
        b = TestDataFactory.create_category(self.business, name='b', sort_order=1)
        c = TestDataFactory.create_category(self.business, name='c', sort_order=2)
        panel = self.session.open(CATEGORIES)
        panel.load()

        self.assertTrue(panel.reorder.drop_onto(c.id, a.id))
        self.assertEqual(panel.store.collection.ids(), [c.id, a.id, b.id])
        self.assertEqual([item['sort_order'] for item in panel.items], [0, 1, 2])
        self.assertEqual(len(self.calls('PATCH')), 3)
        self.assertEqual(
            list(Category.objects.filter(business=self.business).values_list('name', 'sort_order')),
            [('c', 0), ('a', 1), ('b', 2)],
        )

    def test_move_at_edges_is_a_no_op(self):
        a = TestDataFactory.create_category(self.business, name='a', sort_order=0)
        panel = self.session.open(CATEGORIES)
        panel.load()
        self.assertTrue(panel.reorder.move_up(a.id))
        self.assertTrue(panel.reorder.move_down(a.id))
        self.assertEqual(self.calls('PATCH'), [])


class BatchReorderIntegrationTests(ClientIntegrationTestCase):
    reorder_strategy = 'batch'

    def test_move_down_sends_one_call(self):
        a = TestDataFactory.create_category(self.business, name='a', sort_order=0)
        b = TestDataFactory.create_category(self.business, name='b', sort_order=1)
        panel = self.session.open(CATEGORIES)
        panel.load()
        self.assertTrue(panel.reorder.move_down(a.id))
        posts = self.calls('POST')
        self.assertEqual(posts[-1][1], '/api/v1/fastfood/categories/reorder/')
        self.assertEqual(posts[-1][3], {'items': [{'id': b.id, 'sort_order': 0}, {'id': a.id, 'sort_order': 1}]})
        self.assertEqual(list(Category.objects.filter(business=self.business).values_list('name', flat=True)), ['b', 'a'])


class ReorderFailureTests(SimpleTestCase):
    def test_batch_failure_reloads_and_notifies_once(self):
        def handler(method, path, params, json):
            if method == 'GET':
                return ok(CATEGORY_ROWS)
            return rejected('Category not found.', 'NOT_FOUND', status_code=404)

        session = scripted_session(handler, reorder_strategy='batch')
        panel = session.open(CATEGORIES)
        panel.load()
        self.assertFalse(panel.reorder.move(3, 0))
        self.assertEqual(panel.store.collection.ids(), [1, 2, 3])
        errors = session.notifications.errors
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].message, 'Category order could not be saved')
        self.assertEqual(errors[0].details, ['Category not found.'])
        self.assertEqual([call[0] for call in session.api.session.calls], ['GET', 'POST', 'GET'])

    def test_concurrent_per_item_failure(self):
        def handler(method, path, params, json):
            if method == 'GET':
                return ok(CATEGORY_ROWS)
            if json['id'] == 2:
                return rejected('Category not found.', 'NOT_FOUND', status_code=404)
            return ok(dict(json, name='x'))

        session = scripted_session(handler, reorder_strategy='per_item', per_item_concurrency=4)
        panel = session.open(CATEGORIES)
        panel.load()
        self.assertFalse(panel.reorder.move(3, 0))
        patches = [call for call in session.api.session.calls if call[0] == 'PATCH']
        self.assertEqual(sorted(call[3]['id'] for call in patches), [1, 2, 3])
        errors = session.notifications.errors
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].details, ['2: Category not found.'])
        self.assertEqual(panel.store.collection.ids(), [1, 2, 3])

    def test_temp_items_are_not_persisted(self):
        def handler(method, path, params, json):
            if method == 'GET':
                return ok(CATEGORY_ROWS[:2])
            return ok([])

        session = scripted_session(handler, reorder_strategy='batch')
        panel = session.open(CATEGORIES)
        panel.load()
        panel.store.append({'id': 'tmp-1', 'name': 'new', 'sort_order': 2})
        self.assertTrue(panel.reorder.move('tmp-1', 0))
        post = session.api.session.calls[-1]
        self.assertEqual(post[3], {'items': [{'id': 1, 'sort_order': 1}, {'id': 2, 'sort_order': 2}]})


class LateResponseTests(SimpleTestCase):
    def test_update_settling_after_close_is_discarded(self):
        panel = None

        def handler(method, path, params, json):
            if method == 'GET':
                return ok(CATEGORY_ROWS)
            panel.close()
            return ok(dict(json, name='server'))

        session = scripted_session(handler)
        panel = session.open(CATEGORIES)
        panel.load()
        tx = panel.mutator.update(1, {'name': 'local'})
        self.assertIs(tx.state, TxState.DISCARDED)
        self.assertEqual(panel.store.get(1)['name'], 'local')
        self.assertEqual(len(session.notifications), 0)

    def test_failed_create_after_logout_records_nothing(self):
        session = None

        def handler(method, path, params, json):
            session.close()
            return rejected('Session not found. Please sign in again.', 'UNAUTHORIZED', status_code=401)

        session = scripted_session(handler)
        panel = session.open(CATEGORIES)
        tx = panel.mutator.create({'name': 'late'})
        self.assertIs(tx.state, TxState.DISCARDED)
        self.assertEqual(session.notifications.errors, [])

    def test_reload_policy(self):
        def handler(method, path, params, json):
            if method == 'GET':
                return ok(CATEGORY_ROWS)
            return rejected('Validation error', 'VALIDATION_ERROR', ['name: This field may not be blank.'])

        session = scripted_session(handler, reconcile_policy='reload')
        panel = session.open(CATEGORIES)
        panel.load()
        tx = panel.mutator.update(2, {'name': 'renamed'})
        self.assertIs(tx.state, TxState.ROLLED_BACK)
        self.assertEqual(panel.store.get(2)['name'], 'b')
        self.assertEqual([call[0] for call in session.api.session.calls], ['GET', 'PATCH', 'GET'])


class ClosedSessionTests(SimpleTestCase):
    def setUp(self):
        self.session = scripted_session(lambda method, path, params, json: ok(CATEGORY_ROWS))
        self.session.api.set_tokens('A', 'R')
        self.panel = self.session.open(CATEGORIES)
        self.panel.load()
        self.session.close()

    def test_close_releases_http_session(self):
        self.assertTrue(self.session.api.session.closed)
        self.assertNotIn('Authorization', self.session.api.session.headers)

    def test_mutations_after_close_are_refused(self):
        asked = []

        def confirm(item):
            asked.append(item['id'])
            return True

        with self.assertRaises(Aborted):
            self.panel.mutator.create({'name': 'd'})
        with self.assertRaises(Aborted):
            self.panel.mutator.update(1, {'name': 'x'})
        with self.assertRaises(Aborted):
            self.panel.mutator.toggle_status(1)
        with self.assertRaises(Aborted):
            self.panel.mutator.delete(1, confirm=confirm)
        with self.assertRaises(Aborted):
            self.panel.reorder.move(3, 0)

        self.assertEqual(asked, [])
        self.assertEqual([call[0] for call in self.session.api.session.calls], ['GET'])
        self.assertEqual(self.panel.store.collection.ids(), [1, 2, 3])
        self.assertEqual(self.panel.items[0]['name'], 'a')

    def test_closed_panel_leaves_session_scope(self):
        session = scripted_session(lambda *args: ok([]))
        before = len(session.scope._children)
        session.open(CATEGORIES).close()
        self.assertEqual(len(session.scope._children), before)


class DraftValidationTests(SimpleTestCase):
    def test_coupon_code_uppercased_and_value_coerced(self):
        payload = validate_draft(SCHEMAS['coupons'], {'id': 4, 'code': 'save10', 'title': 'Ten', 'discount_type': 'fixed', 'discount_value': '10'})
        self.assertEqual(payload, {'code': 'SAVE10', 'title': 'Ten', 'discount_type': 'fixed', 'discount_value': 10.0})

    def test_free_delivery_needs_no_value(self):
        payload = validate_draft(SCHEMAS['coupons'], {'code': 'SHIP', 'title': 'Free delivery', 'discount_type': 'free_delivery'})
        self.assertNotIn('discount_value', payload)

    def test_first_broken_rule_wins(self):
        with self.assertRaises(ValidationFailed) as ctx:
            validate_draft(SCHEMAS['room_types'], {'name': ' ', 'capacity': 0})
        self.assertEqual(ctx.exception.field, 'name')
        self.assertEqual(ctx.exception.message, 'Room type name is required')

    def test_capacity_must_be_whole(self):
        with self.assertRaises(ValidationFailed) as ctx:
            validate_draft(SCHEMAS['room_types'], {'name': 'Suite', 'price': '100', 'capacity': '2.5'})
        self.assertEqual(ctx.exception.field, 'capacity')

    def test_listing_price_must_be_positive(self):
        with self.assertRaises(ValidationFailed):
            validate_draft(SCHEMAS['listings'], {'title': 'Plot', 'price': 0})


class FormControllerIntegrationTests(ClientIntegrationTestCase):
    def setUp(self):
        super().setUp()
        self.panel = self.session.open(COUPONS)
        self.panel.load()
        self.form = self.panel.form

    def test_create_flow(self):
        self.form.open_for_create({'discount_type': 'fixed'})
        self.assertIs(self.form.state, FormState.OPEN_FOR_CREATE)
        self.form.update(code='save10', title='10 off', discount_value='10')
        tx = self.form.submit()
        self.assertTrue(tx.ok)
        self.assertIs(self.form.state, FormState.CLOSED)
        self.assertEqual(self.form.draft, {})
        self.assertEqual(self.panel.items[0]['code'], 'SAVE10')

    def test_missing_field_blocks_submit(self):
        self.form.open_for_create()
        self.form.set('title', 'No code')
        with self.assertRaises(ValidationFailed):
            self.form.submit()
        self.assertIs(self.form.state, FormState.OPEN_FOR_CREATE)
        self.assertEqual(self.calls('POST'), [call for call in self.http.calls if call[1].endswith('/auth/login/')])
        notification = self.session.notifications.errors[-1]
        self.assertEqual(notification.message, 'Coupon code is required')
        self.assertEqual(notification.code, 'VALIDATION_ERROR')

    def test_rejected_create_keeps_form_open(self):
        TestDataFactory.create_coupon(self.business, code='SAVE10')
        self.panel.load()
        self.form.open_for_create({'code': 'save10', 'title': 'dup', 'discount_value': 5})
        tx = self.form.submit()
        self.assertIs(tx.state, TxState.ROLLED_BACK)
        self.assertIs(self.form.state, FormState.OPEN_FOR_CREATE)
        self.assertEqual(self.form.draft['code'], 'save10')

    def test_edit_sends_only_changed_fields(self):
        coupon = TestDataFactory.create_coupon(self.business, code='KEEP', title='Old title')
        self.panel.load()
        self.form.open_for_edit(coupon.id)
        self.assertIs(self.form.state, FormState.OPEN_FOR_EDIT)
        self.form.set('title', 'New title')
        tx = self.form.submit()
        self.assertTrue(tx.ok)
        self.assertEqual(self.calls('PATCH')[-1][3], {'title': 'New title', 'id': coupon.id})
        coupon.refresh_from_db()
        self.assertEqual(coupon.title, 'New title')

    def test_unchanged_edit_closes_without_call(self):
        coupon = TestDataFactory.create_coupon(self.business)
        self.panel.load()
        self.form.open_for_edit(coupon.id)
        self.assertIsNone(self.form.submit())
        self.assertIs(self.form.state, FormState.CLOSED)
        self.assertEqual(self.calls('PATCH'), [])

    def test_draft_is_a_copy(self):
        coupon = TestDataFactory.create_coupon(self.business, applicable_product_ids=[1])
        self.panel.load()
        self.form.open_for_edit(coupon.id)
        self.form.draft['applicable_product_ids'].append(2)
        self.assertEqual(self.panel.store.get(coupon.id)['applicable_product_ids'], [1])

    def test_failed_submit_returns_form_to_editing(self):
        coupon = TestDataFactory.create_coupon(self.business, title='Old title')
        self.panel.load()
        self.form.open_for_edit(coupon.id)
        self.form.set('title', 'New title')
        self.panel.store.remove(coupon.id)
        with self.assertRaises(KeyError):
            self.form.submit()
        self.assertIs(self.form.state, FormState.OPEN_FOR_EDIT)
        self.assertFalse(self.form.saving)
        self.assertEqual(self.form.draft['title'], 'New title')
        self.form.cancel()
        self.assertFalse(self.form.is_open)

    def test_cancel(self):
        self.form.open_for_create({'code': 'X'})
        self.form.cancel()
        self.assertFalse(self.form.is_open)
        with self.assertRaises(ClientError):
            self.form.set('code', 'Y')


class FormUploadTests(SimpleTestCase):
    def test_attach_upload_appends_url(self):
        def handler(method, path, params, json):
            if path.startswith('uploads/'):
                return ok({'url': 'https://cdn.example.com/media/uploads/1/a.jpg', 'path': 'uploads/1/a.jpg'}, 201)
            return ok([])

        session = scripted_session(handler)
        panel = session.open(ROOM_TYPES)
        panel.form.open_for_create({'name': 'Suite', 'photos': ['https://cdn.example.com/old.jpg']})
        url = panel.form.attach_upload('photos', io.BytesIO(b'\xff\xd8'), 'a.jpg', 'image/jpeg', append=True)
        self.assertEqual(url, 'https://cdn.example.com/media/uploads/1/a.jpg')
        self.assertEqual(panel.form.draft['photos'], ['https://cdn.example.com/old.jpg', url])

    def test_failed_upload_is_reported(self):
        session = scripted_session(lambda *args: rejected('Unsupported file type.', 'VALIDATION_ERROR'))
        panel = session.open(ROOM_TYPES)
        panel.form.open_for_create()
        with self.assertRaises(RemoteRejected):
            panel.form.attach_upload('photos', io.BytesIO(b'x'), 'a.txt', 'text/plain')
        self.assertEqual(session.notifications.errors[-1].message, 'Upload failed: Unsupported file type.')
        self.assertNotIn('photos', panel.form.draft)
