"""Concurrency — keyed locks, in-flight de-duplication and batch pool."""

from imgvariants.concurrency.locks import KeyedLock
from imgvariants.concurrency.pool import ConcurrencyPool
from imgvariants.concurrency.singleflight import SingleFlight

__all__ = ["ConcurrencyPool", "KeyedLock", "SingleFlight"]
