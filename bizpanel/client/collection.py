"""
Collection Loader.

A Collection is an immutable, ordered snapshot of items (plain dicts);
a CollectionStore owns the current snapshot of one remote collection and
replaces it as loads and mutations settle.
"""
import copy
import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional

from .errors import ClientError

logger = logging.getLogger('bizpanel.client.collection')

TEMP_ID_PREFIX = 'tmp-'


def is_temp_id(item_id) -> bool:
    return isinstance(item_id, str) and item_id.startswith(TEMP_ID_PREFIX)


class Collection:
    """Ordered items; sort_order of each item equals its index"""

    def __init__(self, items: Iterable[Dict] = ()):
        self._items = tuple(items)

    @classmethod
    def from_server(cls, records: Iterable[Dict]) -> 'Collection':
        """
        Order server records by sort_order (missing counts as 0), keeping
        server order for ties, then renumber positions densely from 0.
        """
        items = []
        for record in records:
            item = dict(record)
            if item.get('sort_order') is None:
                item['sort_order'] = 0
            items.append(item)
        items.sort(key=lambda item: item['sort_order'])
        return cls(renumber(items))

    def __iter__(self):
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def __eq__(self, other):
        return isinstance(other, Collection) and self._items == other._items

    def __repr__(self):
        return f"Collection({self.ids()!r})"

    @property
    def items(self) -> List[Dict]:
        return list(self._items)

    def ids(self) -> List:
        return [item['id'] for item in self._items]

    def index_of(self, item_id) -> int:
        for index, item in enumerate(self._items):
            if item['id'] == item_id:
                return index
        return -1

    def get(self, item_id) -> Optional[Dict]:
        index = self.index_of(item_id)
        return None if index < 0 else self._items[index]


def renumber(items: List[Dict]) -> List[Dict]:
    """Copies of items whose sort_order is their zero-based position"""
    return [dict(item, sort_order=position) for position, item in enumerate(items)]


class CollectionStore:
    """
    Owner of one collection's in-memory state.

    Listeners are called with the new Collection after every change, which
    is how a UI observes optimistic state before the server answers.
    """

    def __init__(self, session, resource, parent_key=None):
        self.session = session
        self.resource = resource
        self.parent_key = parent_key
        self.scope = session.scope.child()
        self.collection = Collection()
        self.loaded = False
        self._lock = threading.RLock()
        self._listeners: List[Callable[[Collection], None]] = []

    @property
    def api(self):
        return self.session.api

    @property
    def notifications(self):
        return self.session.notifications

    @property
    def params(self) -> Dict:
        return {} if self.parent_key is None else {'business_id': self.parent_key}

    def subscribe(self, listener: Callable[[Collection], None]):
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _publish(self, collection: Collection):
        for listener in list(self._listeners):
            listener(collection)

    def load(self) -> Collection:
        """
        Fetch every item of the collection. On failure an error notification
        is recorded and the previous collection is kept.
        """
        if self.scope.closed:
            return self.collection
        try:
            records = self.resource.fetch_all(self.api, params=self.params)
        except ClientError as e:
            if self.scope.closed:
                return self.collection
            logger.warning(f"Loading {self.resource.name} failed: {e.message}")
            self.notifications.from_error(f"{self.resource.label} list could not be loaded", e)
            return self.collection
        if self.scope.closed:
            logger.debug(f"Discarding late {self.resource.name} load")
            return self.collection

        collection = Collection.from_server(records)
        with self._lock:
            self.collection = collection
            self.loaded = True
        logger.debug(f"Loaded {len(collection)} {self.resource.name}")
        self._publish(collection)
        return collection

    def replace(self, collection: Collection):
        with self._lock:
            self.collection = collection
        self._publish(collection)

    def get(self, item_id) -> Optional[Dict]:
        with self._lock:
            item = self.collection.get(item_id)
        return copy.deepcopy(item) if item is not None else None

    def append(self, item: Dict):
        with self._lock:
            collection = Collection(self.collection.items + [item])
            self.collection = collection
        self._publish(collection)

    def put(self, item_id, item: Dict) -> bool:
        """Replace the item with this id in place; False when it is gone"""
        with self._lock:
            items = self.collection.items
            index = self.collection.index_of(item_id)
            if index < 0:
                return False
            items[index] = item
            collection = Collection(items)
            self.collection = collection
        self._publish(collection)
        return True

    def merge(self, item_id, fields: Dict) -> Optional[Dict]:
        """Merge fields into the item in place and return its previous state"""
        with self._lock:
            previous = self.collection.get(item_id)
            if previous is None:
                return None
            self.put(item_id, dict(previous, **fields))
        return previous

    def remove(self, item_id) -> bool:
        with self._lock:
            items = [item for item in self.collection.items if item['id'] != item_id]
            if len(items) == len(self.collection):
                return False
            collection = Collection(renumber(items))
            self.collection = collection
        self._publish(collection)
        return True

    def close(self):
        self.scope.close()
