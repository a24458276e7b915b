"""Async object stores for bough apps.

JSON objects filed under a uuid, with unique (keys) and non-unique
(sets) secondary indexes::

    from bough.store import MemoryStore

    store = MemoryStore()
    await store.set("u1", {"name": "ada"}, keys={"by_name": "name"})
    await store.query("by_name", "ada")
"""

from bough.errors import StoreError
from bough.store.base import ObjectStore
from bough.store.memory import MemoryStore

__all__ = [
    "MemoryStore",
    "ObjectStore",
    "StoreError",
]
