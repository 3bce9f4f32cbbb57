from .store import AppwriteCounterStore

__all__ = ["AppwriteCounterStore"]
