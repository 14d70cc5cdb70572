"""
Reorder Engine.

reorder() computes a new order without side effects; ReorderEngine applies
it locally, persists every position, and on any failure records one error
and reloads the collection from the server.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

from .collection import Collection, is_temp_id, renumber
from .errors import ClientError, ReorderFailed

logger = logging.getLogger('bizpanel.client.reorder')


def reorder(collection: Collection, moved_id, target_index: int) -> Collection:
    """
    Move one item to target_index (clamped to the bounds) and renumber
    sort_order densely from 0. Unknown ids leave the order unchanged.
    """
    items = collection.items
    index = collection.index_of(moved_id)
    if index < 0:
        return Collection(renumber(items))
    moved = items.pop(index)
    target_index = max(0, min(target_index, len(items)))
    items.insert(target_index, moved)
    return Collection(renumber(items))


class ReorderEngine:
    def __init__(self, store, strategy: Optional[str] = None, max_workers: Optional[int] = None):
        config = store.session.config
        self.store = store
        self.strategy = strategy or config.reorder_strategy
        self.max_workers = max_workers or config.per_item_concurrency

    @property
    def resource(self):
        return self.store.resource

    def move(self, moved_id, target_index: int) -> bool:
        """
        Returns True when the new order was applied and persisted (or there
        was nothing to do), False when persistence failed and the collection
        was reloaded.
        """
        self.store.scope.check()
        current = self.store.collection
        updated = reorder(current, moved_id, target_index)
        if updated.ids() == current.ids():
            return True

        self.store.replace(updated)
        try:
            self._persist(updated)
        except ReorderFailed as e:
            if self.store.scope.closed:
                return False
            logger.warning(f"Reorder of {self.resource.name} failed, reloading: {e.message}")
            details = [error.message if item_id is None else f"{item_id}: {error.message}" for item_id, error in e.failures]
            self.store.notifications.error(f"{self.resource.label} order could not be saved", details=details)
            self.store.load()
            return False
        return True

    def move_up(self, item_id) -> bool:
        index = self.store.collection.index_of(item_id)
        if index <= 0:
            return True
        return self.move(item_id, index - 1)

    def move_down(self, item_id) -> bool:
        collection = self.store.collection
        index = collection.index_of(item_id)
        if index < 0 or index >= len(collection) - 1:
            return True
        return self.move(item_id, index + 1)

    def drop_onto(self, moved_id, target_id) -> bool:
        """Drag-and-drop: the moved item takes the target item's position"""
        if moved_id == target_id:
            return True
        target_index = self.store.collection.index_of(target_id)
        if target_index < 0:
            return True
        return self.move(moved_id, target_index)

    def _pairs(self, collection: Collection) -> List[Tuple]:
        # unsaved items get their position when their create settles
        return [(item['id'], item['sort_order']) for item in collection if not is_temp_id(item['id'])]

    def _persist(self, collection: Collection):
        pairs = self._pairs(collection)
        if not pairs:
            return
        if self.strategy == 'batch' and self.resource.batch_reorder:
            try:
                self.resource.reorder(self.store.api, pairs, params=self.store.params)
            except ClientError as e:
                raise ReorderFailed([(None, e)])
            return
        self._persist_per_item(pairs)

    def _update_position(self, pair):
        item_id, position = pair
        try:
            self.resource.update(self.store.api, item_id, {'sort_order': position}, params=self.store.params)
        except ClientError as e:
            return item_id, e
        return item_id, None

    def _persist_per_item(self, pairs):
        if self.max_workers == 1:
            results = [self._update_position(pair) for pair in pairs]
        else:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(pairs))) as executor:
                results = list(executor.map(self._update_position, pairs))
        failures = [(item_id, error) for item_id, error in results if error is not None]
        if failures:
            raise ReorderFailed(failures)
