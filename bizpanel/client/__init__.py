"""
Python client for the bizpanel API: load ordered collections, mutate them
optimistically, reorder them and drive their create/edit forms.
"""
from .collection import Collection, CollectionStore
from .config import ClientConfig
from .context import AbortScope, PanelSession
from .errors import ClientError, ValidationFailed, TransportError, RemoteRejected, ReorderFailed, Aborted
from .forms import FormController, FormState
from .mutator import OptimisticMutator, Transaction, TxState
from .panel import ListPanel
from .reorder import ReorderEngine, reorder
from .resources import CATEGORIES, PRODUCTS, COUPONS, ROOM_TYPES, ROOMS, LISTINGS, Resource
from .transport import ApiClient
