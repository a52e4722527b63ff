"""Content domain: snippet models, store, query engine and sampler.

The store owns the collection and its persistence; ``run_query`` derives
filtered and sorted views from a snapshot; ``sample`` draws random picks
from a view.
"""

from randpick.content.models import (
    ALL_CATEGORIES,
    Category,
    ContentItem,
    QuerySpec,
    SortDirection,
    SortKey,
)
from randpick.content.query import QueryEngine, run_query
from randpick.content.sampler import sample
from randpick.content.storage import JsonFileStorage, KeyValueStorage, MemoryStorage
from randpick.content.store import STORAGE_KEY, ContentStore

__all__ = [
    "ALL_CATEGORIES",
    "STORAGE_KEY",
    "Category",
    "ContentItem",
    "ContentStore",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "QueryEngine",
    "QuerySpec",
    "SortDirection",
    "SortKey",
    "run_query",
    "sample",
]
