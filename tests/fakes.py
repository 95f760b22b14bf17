"""In-memory stand-in for the subset of the async MongoDB API the services use.

Every operation yields to the event loop once before touching data, so
concurrent coroutines interleave between a read and the write that follows
it, the same way they do against a real server.
"""

import asyncio
import copy
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError


@dataclass
class InsertResult:
    inserted_id: Any


@dataclass
class UpdateResult:
    matched_count: int
    modified_count: int


@dataclass
class DeleteResult:
    deleted_count: int


def _matches_value(actual: Any, condition: Any) -> bool:
    if isinstance(condition, Mapping) and any(str(key).startswith("$") for key in condition):
        return all(_apply_operator(actual, op, arg, condition) for op, arg in condition.items() if op != "$options")
    if isinstance(actual, list) and not isinstance(condition, list):
        return condition in actual
    return bool(actual == condition)


def _apply_operator(actual: Any, op: str, arg: Any, condition: Mapping[str, Any]) -> bool:
    if op == "$eq":
        return _matches_value(actual, arg)
    if op == "$ne":
        return not _matches_value(actual, arg)
    if op == "$gt":
        return actual is not None and actual > arg
    if op == "$gte":
        return actual is not None and actual >= arg
    if op == "$lt":
        return actual is not None and actual < arg
    if op == "$lte":
        return actual is not None and actual <= arg
    if op == "$in":
        if isinstance(actual, list):
            return any(item in arg for item in actual)
        return actual in arg
    if op == "$regex":
        flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
        return isinstance(actual, str) and re.search(arg, actual, flags) is not None
    raise NotImplementedError(f"Operator {op} is not supported by the fake collection")


def matches(document: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
    """Whether ``document`` satisfies a MongoDB filter document."""
    for key, condition in query.items():
        if key == "$or":
            if not any(matches(document, branch) for branch in condition):
                return False
        elif not _matches_value(document.get(key), condition):
            return False
    return True


def _sort_documents(documents: list[dict[str, Any]], keys: Sequence[tuple[str, int]]) -> list[dict[str, Any]]:
    result = list(documents)
    # Stable sorts applied from the least significant key
    for field, direction in reversed(keys):
        result.sort(key=lambda doc, f=field: doc.get(f), reverse=direction < 0)
    return result


class FakeCursor:
    def __init__(self, documents: list[dict[str, Any]]) -> None:
        self._documents = documents
        self._skip = 0
        self._limit = 0

    def sort(self, key: str | Sequence[tuple[str, int]], direction: int = 1) -> "FakeCursor":
        keys = [(key, direction)] if isinstance(key, str) else list(key)
        self._documents = _sort_documents(self._documents, keys)
        return self

    def skip(self, count: int) -> "FakeCursor":
        self._skip = count
        return self

    def limit(self, count: int) -> "FakeCursor":
        self._limit = count
        return self

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        await asyncio.sleep(0)
        documents = self._documents[self._skip :]
        if self._limit:
            documents = documents[: self._limit]
        return [copy.deepcopy(doc) for doc in documents]


class FakeCollection:
    def __init__(self, name: str) -> None:
        self.name = name
        self.documents: list[dict[str, Any]] = []
        self.unique_keys: list[str] = ["_id"]
        self.indexes: list[tuple[list[tuple[str, int]], dict[str, Any]]] = []
        # Raised by every data operation while set, to simulate an unreachable server
        self.fail_with: Exception | None = None

    def _check_available(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def create_index(self, keys: list[tuple[str, int]], **kwargs: Any) -> str:
        self.indexes.append((keys, kwargs))
        if kwargs.get("unique") and len(keys) == 1:
            self.unique_keys.append(keys[0][0])
        return "_".join(f"{field}_{direction}" for field, direction in keys)

    def _find(self, query: Mapping[str, Any] | None, sort: Sequence[tuple[str, int]] | None = None) -> list[dict]:
        self._check_available()
        found = [doc for doc in self.documents if matches(doc, query or {})]
        return _sort_documents(found, sort) if sort else found

    async def insert_one(self, document: dict[str, Any]) -> InsertResult:
        await asyncio.sleep(0)
        self._check_available()
        for key in self.unique_keys:
            if any(existing.get(key) == document.get(key) for existing in self.documents):
                raise DuplicateKeyError(f"E11000 duplicate key error collection: {self.name} index: {key}_1")
        self.documents.append(copy.deepcopy(document))
        return InsertResult(inserted_id=document["_id"])

    async def find_one(
        self, query: Mapping[str, Any] | None = None, sort: Sequence[tuple[str, int]] | None = None
    ) -> dict[str, Any] | None:
        await asyncio.sleep(0)
        found = self._find(query, sort)
        return copy.deepcopy(found[0]) if found else None

    def find(self, query: Mapping[str, Any] | None = None) -> FakeCursor:
        return FakeCursor(self._find(query))

    async def count_documents(self, query: Mapping[str, Any]) -> int:
        await asyncio.sleep(0)
        return len(self._find(query))

    async def update_one(self, query: Mapping[str, Any], update: Mapping[str, Any]) -> UpdateResult:
        await asyncio.sleep(0)
        found = self._find(query)
        if not found:
            return UpdateResult(matched_count=0, modified_count=0)
        return UpdateResult(matched_count=1, modified_count=int(_apply_update(found[0], update)))

    async def update_many(self, query: Mapping[str, Any], update: Mapping[str, Any]) -> UpdateResult:
        await asyncio.sleep(0)
        found = self._find(query)
        modified = sum(_apply_update(doc, update) for doc in found)
        return UpdateResult(matched_count=len(found), modified_count=modified)

    async def find_one_and_update(
        self,
        query: Mapping[str, Any],
        update: Mapping[str, Any],
        return_document: bool = ReturnDocument.BEFORE,
        sort: Sequence[tuple[str, int]] | None = None,
    ) -> dict[str, Any] | None:
        await asyncio.sleep(0)
        found = self._find(query, sort)
        if not found:
            return None
        before = copy.deepcopy(found[0])
        _apply_update(found[0], update)
        return copy.deepcopy(found[0]) if return_document == ReturnDocument.AFTER else before

    async def delete_one(self, query: Mapping[str, Any]) -> DeleteResult:
        await asyncio.sleep(0)
        found = self._find(query)
        if not found:
            return DeleteResult(deleted_count=0)
        self.documents.remove(found[0])
        return DeleteResult(deleted_count=1)


def _apply_update(document: dict[str, Any], update: Mapping[str, Any]) -> bool:
    """Apply a ``$set`` update in place and report whether anything changed."""
    unsupported = set(update) - {"$set"}
    if unsupported:
        raise NotImplementedError(f"Update operators {unsupported} are not supported by the fake collection")
    changed = False
    for key, value in update.get("$set", {}).items():
        if document.get(key) != value:
            document[key] = copy.deepcopy(value)
            changed = True
    return changed


class FakeDatabase:
    def __init__(self, name: str = "notemaker_test") -> None:
        self.name = name
        self._collections: dict[str, FakeCollection] = {}

    def get_collection(self, name: str) -> FakeCollection:
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]

    def __getitem__(self, name: str) -> FakeCollection:
        return self.get_collection(name)
