"""The object store interface.

Objects are JSON-serialisable values filed under a string uuid, the
primary key. Besides the uuid, a store keeps two kinds of secondary
index, both named by the caller:

- **keys** map a property value to exactly one object (unique);
- **sets** map a property value to any number of objects.

Index names are unique across keys and sets. Each ``set``/``update``
names the indexes to maintain as ``{index_name: property_name}``; the
value indexed is ``obj[property_name]`` at that time.

Subclasses implement the raw storage primitives (the abstract methods
below); the record bookkeeping lives here.
"""

import json as json_module
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, TypeAlias

from bough.errors import StoreError

IndexSpec: TypeAlias = Mapping[str, str]


class ObjectStore(ABC):
    """Async store of JSON objects with unique and non-unique indexes.

    Usage::

        store = MemoryStore()
        await store.set("u1", {"name": "ada", "team": "core"},
                        keys={"by_name": "name"}, sets={"by_team": "team"})
        await store.query("by_team", "core")  # [{"name": "ada", ...}]
    """

    async def set(
        self,
        uuid: str,
        obj: Any,
        *,
        keys: IndexSpec | None = None,
        sets: IndexSpec | None = None,
    ) -> None:
        """Store a new object. Existing uuids must go through ``update``.

        Raises ``StoreError`` if *uuid* exists or a key index value is
        already taken; in the latter case nothing is stored.
        """
        if await self._get_raw(uuid) is not None:
            msg = f"Can't set existing uuid {uuid!r}: update it instead."
            raise StoreError(msg)

        record: dict[str, Any] = {"object": obj, "keys": {}, "sets": {}}
        for index, prop in (keys or {}).items():
            record["keys"][index] = _property(obj, prop, index)
        for index, prop in (sets or {}).items():
            record["sets"][index] = _property(obj, prop, index)

        raw = self._dump(record)
        await self._check_keys_free(uuid, record["keys"])
        for index, value in record["keys"].items():
            await self._set_key(uuid, index, value)
        for index, value in record["sets"].items():
            await self._add_to_set(uuid, index, value)
        # Save the record last
        await self._set_raw(uuid, raw)

    async def get(self, uuid: str) -> Any:
        """The object stored under *uuid*, or ``None``."""
        raw = await self._get_raw(uuid)
        if raw is None:
            return None
        return self._load(raw)["object"]

    async def update(
        self,
        uuid: str,
        obj: Any,
        *,
        keys: IndexSpec | None = None,
        sets: IndexSpec | None = None,
    ) -> None:
        """Replace the object under *uuid* and bring its indexes in line.

        Indexes named in *keys*/*sets* are (re)computed from *obj*;
        indexes the object had before but that are not named any more
        are dropped. Raises ``StoreError`` if *uuid* is unknown or a new
        key value is taken by another object.
        """
        raw = await self._get_raw(uuid)
        if raw is None:
            msg = f"Can't update unknown uuid {uuid!r}: set it first."
            raise StoreError(msg)
        record = self._load(raw)

        new_keys = {index: _property(obj, prop, index) for index, prop in (keys or {}).items()}
        new_sets = {index: _property(obj, prop, index) for index, prop in (sets or {}).items()}

        changed_keys = {
            index: value for index, value in new_keys.items() if record["keys"].get(index, _MISSING) != value
        }
        updated = self._dump({"object": obj, "keys": new_keys, "sets": new_sets})
        await self._check_keys_free(uuid, changed_keys)

        for index, old_value in record["keys"].items():
            if index not in new_keys or index in changed_keys:
                await self._remove_index(uuid, index, old_value)
        for index, value in changed_keys.items():
            await self._set_key(uuid, index, value)

        for index, old_value in record["sets"].items():
            if new_sets.get(index, _MISSING) != old_value:
                await self._remove_index(uuid, index, old_value)
        for index, value in new_sets.items():
            if record["sets"].get(index, _MISSING) != value:
                await self._add_to_set(uuid, index, value)

        await self._set_raw(uuid, updated)

    async def remove(self, uuid: str) -> None:
        """Delete *uuid* and its index entries. Unknown uuids are ignored."""
        raw = await self._get_raw(uuid)
        if raw is None:
            return
        record = self._load(raw)
        for kind in ("keys", "sets"):
            for index, value in record[kind].items():
                await self._remove_index(uuid, index, value)
        await self._delete_raw(uuid)

    async def query(self, index: str, value: Any) -> list[Any]:
        """Objects filed under *value* in *index*. Always a list, even for keys."""
        results = []
        for uuid in await self.query_uuids(index, value):
            obj = await self.get(uuid)
            if obj is not None:
                results.append(obj)
        return results

    # -- Storage primitives --

    @abstractmethod
    async def query_uuids(self, index: str, value: Any) -> list[str]:
        """Uuids filed under *value* in *index*; empty for unknown indexes."""

    @abstractmethod
    async def empty(self) -> None:
        """Delete everything in the store."""

    @abstractmethod
    async def _get_raw(self, uuid: str) -> str | None: ...

    @abstractmethod
    async def _set_raw(self, uuid: str, content: str) -> None: ...

    @abstractmethod
    async def _delete_raw(self, uuid: str) -> None: ...

    @abstractmethod
    async def _key_owner(self, index: str, value: Any) -> str | None:
        """The uuid holding *value* in key index *index*, if any."""

    @abstractmethod
    async def _set_key(self, uuid: str, index: str, value: Any) -> None: ...

    @abstractmethod
    async def _add_to_set(self, uuid: str, index: str, value: Any) -> None: ...

    @abstractmethod
    async def _remove_index(self, uuid: str, index: str, value: Any) -> None: ...

    # -- Internal --

    async def _check_keys_free(self, uuid: str, keys: Mapping[str, Any]) -> None:
        for index, value in keys.items():
            owner = await self._key_owner(index, value)
            if owner is not None and owner != uuid:
                msg = f"Key {index!r}={value!r} is already held by {owner!r}."
                raise StoreError(msg)

    @staticmethod
    def _dump(record: Mapping[str, Any]) -> str:
        try:
            return json_module.dumps(record)
        except (TypeError, ValueError) as exc:
            msg = f"Object is not JSON-serialisable: {exc}"
            raise StoreError(msg) from exc

    @staticmethod
    def _load(raw: str) -> dict[str, Any]:
        return json_module.loads(raw)


_MISSING = object()


def _property(obj: Any, prop: str, index: str) -> Any:
    try:
        return obj[prop]
    except (KeyError, TypeError, IndexError) as exc:
        msg = f"Index {index!r} needs property {prop!r}, which the object lacks."
        raise StoreError(msg) from exc
