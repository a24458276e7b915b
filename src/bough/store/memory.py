"""In-memory object store.

No persistence and no external dependencies. Useful in tests and for
apps whose data is volatile anyway.
"""

import json as json_module
import logging
from typing import Any

from bough.errors import StoreError
from bough.store.base import ObjectStore

logger = logging.getLogger("bough.store")


def _index_key(index: str, value: Any) -> tuple[str, str]:
    # Values are compared by their JSON form, the same form they are stored in
    return index, json_module.dumps(value, sort_keys=True)


class MemoryStore(ObjectStore):
    """Keeps records and indexes in plain dictionaries.

    Records are stored as JSON strings, so objects read back are copies
    and never alias what the caller stored.
    """

    __slots__ = ("_keys", "_records", "_sets")

    def __init__(self) -> None:
        self._records: dict[str, str] = {}
        self._keys: dict[tuple[str, str], str] = {}
        self._sets: dict[tuple[str, str], dict[str, None]] = {}

    def __len__(self) -> int:
        return len(self._records)

    async def query_uuids(self, index: str, value: Any) -> list[str]:
        key = _index_key(index, value)
        owner = self._keys.get(key)
        if owner is not None:
            return [owner]
        return list(self._sets.get(key, ()))

    async def empty(self) -> None:
        logger.debug("Emptying memory store (%d records)", len(self._records))
        self._records.clear()
        self._keys.clear()
        self._sets.clear()

    async def _get_raw(self, uuid: str) -> str | None:
        return self._records.get(uuid)

    async def _set_raw(self, uuid: str, content: str) -> None:
        self._records[uuid] = content

    async def _delete_raw(self, uuid: str) -> None:
        self._records.pop(uuid, None)

    async def _key_owner(self, index: str, value: Any) -> str | None:
        return self._keys.get(_index_key(index, value))

    async def _set_key(self, uuid: str, index: str, value: Any) -> None:
        key = _index_key(index, value)
        if self._keys.get(key, uuid) != uuid:
            msg = f"Key {index!r}={value!r} is already held by {self._keys[key]!r}."
            raise StoreError(msg)
        self._keys[key] = uuid

    async def _add_to_set(self, uuid: str, index: str, value: Any) -> None:
        # dict keeps insertion order, so query results are stable
        self._sets.setdefault(_index_key(index, value), {})[uuid] = None

    async def _remove_index(self, uuid: str, index: str, value: Any) -> None:
        key = _index_key(index, value)
        if self._keys.get(key) == uuid:
            del self._keys[key]
            return
        members = self._sets.get(key)
        if members is None or uuid not in members:
            msg = f"Can't remove {uuid!r} from missing index entry {index!r}={value!r}."
            raise StoreError(msg)
        del members[uuid]
        if not members:
            del self._sets[key]
