from .file_cache import JsonFileCache
from .local_store import LocalAssetStore
from .protocols import (
    BuildHost,
    FieldResolver,
    GraphQLDelegator,
    KeyValueCache,
    Node,
    NodeStore,
    RemoteFileNodeFactory,
    ResolverRegistry,
)

__all__ = [
    "BuildHost",
    "FieldResolver",
    "GraphQLDelegator",
    "JsonFileCache",
    "KeyValueCache",
    "LocalAssetStore",
    "Node",
    "NodeStore",
    "RemoteFileNodeFactory",
    "ResolverRegistry",
]
