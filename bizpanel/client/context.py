"""
Session context and abort scopes.

A PanelSession is created once per signed-in user and handed to every
component that needs the API, the business id or the notification list.
Closing it (logout) closes every scope derived from it, so responses that
arrive afterwards are discarded instead of applied.
"""
import logging
import threading
from typing import Optional

from .config import ClientConfig
from .errors import Aborted
from .notifications import NotificationCenter
from .transport import ApiClient

logger = logging.getLogger('bizpanel.client.context')


class AbortScope:
    def __init__(self, parent: Optional['AbortScope'] = None):
        self._closed = threading.Event()
        self._children = []
        self._lock = threading.Lock()
        self._parent = parent
        if parent is not None:
            parent._adopt(self)

    def _adopt(self, child: 'AbortScope'):
        with self._lock:
            self._children.append(child)
            closed = self.closed
        if closed:
            child.close()

    def _release(self, child: 'AbortScope'):
        with self._lock:
            if child in self._children:
                self._children.remove(child)

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def child(self) -> 'AbortScope':
        return AbortScope(parent=self)

    def check(self):
        if self.closed:
            raise Aborted()

    def close(self):
        """Close this scope and every scope derived from it, then leave the parent"""
        self._closed.set()
        with self._lock:
            children = list(self._children)
        for child in children:
            child.close()
        if self._parent is not None:
            self._parent._release(self)


class PanelSession:
    """Explicit per-login context: API client, tenant, user and abort scope"""

    def __init__(self, api: ApiClient, business_id=None, user=None, notifications: Optional[NotificationCenter] = None):
        self.api = api
        self.business_id = business_id
        self.user = user or {}
        self.notifications = notifications or NotificationCenter()
        self.scope = AbortScope()

    @property
    def config(self) -> ClientConfig:
        return self.api.config

    @classmethod
    def login(cls, username: str, password: str, config: Optional[ClientConfig] = None, session=None) -> 'PanelSession':
        """Sign in and build the session from the auth/me/ profile"""
        api = ApiClient(config, session=session)
        api.login(username, password)
        profile = api.me()
        return cls(api, business_id=profile.get('business_id'), user=profile)

    def open(self, resource, parent_key=None):
        """Open a list panel for one collection, scoped to this session"""
        from .panel import ListPanel
        return ListPanel(self, resource, parent_key=self.business_id if parent_key is None else parent_key)

    def close(self):
        if self.scope.closed:
            return
        self.scope.close()
        self.api.clear_tokens()
        self.api.close()
        logger.info(f"Panel session for business {self.business_id} closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
