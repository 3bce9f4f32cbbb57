from .counter_store import CounterStorePort

__all__ = ["CounterStorePort"]
