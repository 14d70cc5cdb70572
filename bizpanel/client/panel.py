from .collection import CollectionStore
from .forms import FormController
from .mutator import OptimisticMutator
from .reorder import ReorderEngine


class ListPanel:
    """One admin list: its store, mutator, reorder engine and form"""

    def __init__(self, session, resource, parent_key=None):
        self.session = session
        self.resource = resource
        self.store = CollectionStore(session, resource, parent_key=parent_key)
        self.mutator = OptimisticMutator(self.store)
        self.reorder = ReorderEngine(self.store)
        self.form = FormController(self.mutator)

    @property
    def items(self):
        return self.store.collection.items

    def load(self):
        return self.store.load()

    def close(self):
        self.form.cancel()
        self.store.close()
