"""
Optimistic Mutator.

Each mutation changes local state first, then calls the server and settles
as a Transaction: COMMITTED with the server record, ROLLED_BACK with local
state reconciled and an error notification recorded, or DISCARDED when the
collection was closed before the answer arrived.
"""
import enum
import logging
import uuid
from typing import Callable, Dict, Optional

from .collection import TEMP_ID_PREFIX, is_temp_id
from .errors import ClientError

logger = logging.getLogger('bizpanel.client.mutator')


class TxState(enum.Enum):
    PENDING = 'pending'
    COMMITTED = 'committed'
    ROLLED_BACK = 'rolled_back'
    DISCARDED = 'discarded'


class Transaction:
    def __init__(self, kind: str, item_id):
        self.kind = kind
        self.item_id = item_id
        self.state = TxState.PENDING
        self.record = None
        self.error = None

    def __repr__(self):
        return f"Transaction({self.kind!r}, {self.item_id!r}, {self.state.value})"

    @property
    def ok(self) -> bool:
        return self.state is TxState.COMMITTED

    def _settle(self, state: TxState, record=None, error=None):
        if self.state is not TxState.PENDING:
            raise RuntimeError(f"{self!r} already settled")
        self.state = state
        self.record = record
        self.error = error


class OptimisticMutator:
    """create / update / delete / toggle_status against one CollectionStore"""

    def __init__(self, store, reconcile_policy: Optional[str] = None):
        self.store = store
        self.reconcile_policy = reconcile_policy or store.session.config.reconcile_policy

    @property
    def resource(self):
        return self.store.resource

    def _late(self, tx: Transaction) -> bool:
        if self.store.scope.closed:
            logger.debug(f"Discarding late response for {tx!r}")
            tx._settle(TxState.DISCARDED)
            return True
        return False

    def create(self, fields: Dict) -> Transaction:
        """Append a temporary item now; swap in the server record when it is confirmed"""
        self.store.scope.check()
        temp_id = f"{TEMP_ID_PREFIX}{uuid.uuid4().hex}"
        tx = Transaction('create', temp_id)
        # the server appends after its highest sort_order
        payload = dict(fields)
        optimistic = dict({'is_active': True, 'sort_order': len(self.store.collection)}, **payload)
        optimistic['id'] = temp_id
        self.store.append(optimistic)

        try:
            record = self.resource.create(self.store.api, payload, params=self.store.params)
        except ClientError as e:
            if self._late(tx):
                return tx
            self.store.remove(temp_id)
            logger.warning(f"Create {self.resource.name} rolled back: {e.message}")
            self.store.notifications.from_error(f"{self.resource.label} could not be created", e)
            tx._settle(TxState.ROLLED_BACK, error=e)
            return tx

        if self._late(tx):
            return tx
        current = self.store.get(temp_id)
        if current is None:
            logger.debug(f"Temporary item {temp_id} left the collection before confirmation")
        else:
            self.store.put(temp_id, dict(record, sort_order=current['sort_order']))
        tx.item_id = record.get('id', temp_id)
        tx._settle(TxState.COMMITTED, record=record)
        return tx

    def update(self, item_id, fields: Dict) -> Transaction:
        """Merge fields into the item now; reconcile if the server refuses"""
        if is_temp_id(item_id):
            raise ClientError(f"{self.resource.label} is still being created")
        self.store.scope.check()
        tx = Transaction('update', item_id)
        snapshot = self.store.merge(item_id, fields)
        if snapshot is None:
            raise KeyError(item_id)

        try:
            record = self.resource.update(self.store.api, item_id, fields, params=self.store.params)
        except ClientError as e:
            if self._late(tx):
                return tx
            self._reconcile(item_id, snapshot)
            logger.warning(f"Update {self.resource.name} {item_id} rolled back ({self.reconcile_policy}): {e.message}")
            self.store.notifications.from_error(f"{self.resource.label} could not be updated", e)
            tx._settle(TxState.ROLLED_BACK, error=e)
            return tx

        if self._late(tx):
            return tx
        current = self.store.get(item_id)
        if current is not None and isinstance(record, dict):
            # keep the local position; reorders own sort_order
            self.store.put(item_id, dict(current, **dict(record, sort_order=current['sort_order'])))
        tx._settle(TxState.COMMITTED, record=record)
        return tx

    def _reconcile(self, item_id, snapshot: Dict):
        if self.reconcile_policy == 'reload':
            self.store.load()
        else:
            self.store.put(item_id, snapshot)

    def toggle_status(self, item_id) -> Transaction:
        item = self.store.get(item_id)
        if item is None:
            raise KeyError(item_id)
        return self.update(item_id, {'is_active': not item.get('is_active', True)})

    def delete(self, item_id, confirm: Callable[[Dict], bool]) -> Optional[Transaction]:
        """
        Ask confirm(item) first; a declined delete makes no call and returns None.
        The item leaves the collection only once the server confirms.
        """
        self.store.scope.check()
        item = self.store.get(item_id)
        if item is None:
            raise KeyError(item_id)
        if not confirm(item):
            logger.debug(f"Delete of {self.resource.name} {item_id} declined")
            return None

        tx = Transaction('delete', item_id)
        try:
            self.resource.delete(self.store.api, item_id, params=self.store.params)
        except ClientError as e:
            if self._late(tx):
                return tx
            logger.warning(f"Delete {self.resource.name} {item_id} failed: {e.message}")
            self.store.notifications.from_error(f"{self.resource.label} could not be deleted", e)
            tx._settle(TxState.ROLLED_BACK, error=e)
            return tx

        if self._late(tx):
            return tx
        self.store.remove(item_id)
        tx._settle(TxState.COMMITTED)
        return tx
