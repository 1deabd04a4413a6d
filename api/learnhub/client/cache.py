"""Tag-invalidated query cache with undoable optimistic patches."""

import json
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any


# A tag is a type name, optionally narrowed to one id: "Courses" or ("Courses", "c1")
Tag = str | tuple[str, str]
CacheKey = tuple[str, str]

COURSES = "Courses"
USERS = "Users"
USER_COURSE_PROGRESS = "UserCourseProgress"


def cache_key(endpoint: str, args: Any = None) -> CacheKey:
    """Stable key for an endpoint call, independent of argument order."""
    return endpoint, json.dumps(args, sort_keys=True, default=str)


def _tag_type(tag: Tag) -> str:
    return tag if isinstance(tag, str) else tag[0]


@dataclass
class CacheEntry:
    data: Any
    tags: frozenset[Tag] = field(default_factory=frozenset)


class PatchResult:
    """Handle for an optimistic patch; `undo()` restores the prior value."""

    def __init__(self, cache: "QueryCache", key: CacheKey, previous: Any, applied: bool):
        self._cache = cache
        self._key = key
        self._previous = previous
        self.applied = applied

    def undo(self) -> None:
        if not self.applied:
            return
        entry = self._cache._entries.get(self._key)
        if entry is not None:
            entry.data = self._previous
        self.applied = False


class QueryCache:
    """Results of query endpoints keyed by endpoint and arguments.

    Invalidating a bare type tag drops every entry providing any tag of that
    type; invalidating `(type, id)` drops only entries providing that exact
    tag.
    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, CacheEntry] = {}

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: CacheKey) -> Any:
        entry = self._entries.get(key)
        return entry.data if entry else None

    def set(self, key: CacheKey, data: Any, tags: Iterable[Tag] = ()) -> None:
        self._entries[key] = CacheEntry(data=data, tags=frozenset(tags))

    def invalidate(self, tags: Iterable[Tag]) -> None:
        for tag in tags:
            for key in [k for k, e in self._entries.items() if self._matches(e, tag)]:
                del self._entries[key]

    @staticmethod
    def _matches(entry: CacheEntry, tag: Tag) -> bool:
        if isinstance(tag, str):
            return any(_tag_type(t) == tag for t in entry.tags)
        return tag in entry.tags

    def update_query_data(
        self, key: CacheKey, updater: Callable[[Any], Any]
    ) -> PatchResult:
        """Replace a cached value with `updater(value)`; no-op if not cached."""
        entry = self._entries.get(key)
        if entry is None:
            return PatchResult(self, key, None, applied=False)
        previous = entry.data
        entry.data = updater(previous)
        return PatchResult(self, key, previous, applied=True)

    def clear(self) -> None:
        self._entries.clear()
