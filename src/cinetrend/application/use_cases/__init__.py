from .events import CounterEventHandler
from .record_counter import KeyedCounterAggregator
from .trending import TrendingRanker

__all__ = ["CounterEventHandler", "KeyedCounterAggregator", "TrendingRanker"]
