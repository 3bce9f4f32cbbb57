"""Counter store backends."""

from .diskcache_store import DiskcacheCounterStore
from .store_factory import CounterStoreSetup, create_counter_store

__all__ = ["CounterStoreSetup", "DiskcacheCounterStore", "create_counter_store"]
