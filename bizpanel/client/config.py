import os
from typing import Optional

DEFAULT_API_URL = 'http://127.0.0.1:8000/api/v1'

REORDER_STRATEGIES = ('batch', 'per_item')
RECONCILE_POLICIES = ('revert', 'reload')


class ClientConfig:
    """
    Settings of a panel client.

    reorder_strategy: 'per_item' (default) sends one update per item, 'batch'
    one bulk reorder call. reconcile_policy: what a failed update does to local
    state, 'revert' to the snapshot or 'reload' from the server.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: Optional[float] = None,
        reorder_strategy: str = 'per_item',
        reconcile_policy: str = 'revert',
        per_item_concurrency: int = 8,
    ):
        if reorder_strategy not in REORDER_STRATEGIES:
            raise ValueError(f"reorder_strategy must be one of {REORDER_STRATEGIES}, got {reorder_strategy!r}")
        if reconcile_policy not in RECONCILE_POLICIES:
            raise ValueError(f"reconcile_policy must be one of {RECONCILE_POLICIES}, got {reconcile_policy!r}")
        if per_item_concurrency < 1:
            raise ValueError("per_item_concurrency must be at least 1")
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.reorder_strategy = reorder_strategy
        self.reconcile_policy = reconcile_policy
        self.per_item_concurrency = per_item_concurrency

    @classmethod
    def from_env(cls, **overrides) -> 'ClientConfig':
        """Build from BIZPANEL_API_URL, BIZPANEL_TIMEOUT and BIZPANEL_REORDER_STRATEGY"""
        values = {
            'base_url': os.getenv('BIZPANEL_API_URL', DEFAULT_API_URL),
            'reorder_strategy': os.getenv('BIZPANEL_REORDER_STRATEGY', 'per_item'),
        }
        timeout = os.getenv('BIZPANEL_TIMEOUT')
        if timeout:
            values['timeout'] = float(timeout)
        values.update(overrides)
        return cls(**values)

    def __repr__(self):
        return (f"ClientConfig(base_url={self.base_url!r}, timeout={self.timeout!r}, "
                f"reorder_strategy={self.reorder_strategy!r}, reconcile_policy={self.reconcile_policy!r})")
