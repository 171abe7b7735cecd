"""Services consumed from the host build system."""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol

import httpx

from directus_source.types.dataset_options import DatasetOptions
from directus_source.types.remote_file_node import RemoteFileNode

Node = dict[str, Any]


class KeyValueCache(Protocol):
    """Durable cache that survives incremental rebuilds."""

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any) -> Any: ...


class NodeStore(Protocol):
    def get_node(self, node_id: str) -> Node | None: ...

    def touch_node(self, node: Node) -> None: ...

    def create_node(self, node: Node) -> None: ...


class RemoteFileNodeFactory(Protocol):
    async def create_remote_file_node(
        self,
        *,
        url: str,
        parent_node_id: str,
        headers: dict[str, str],
        ext: str,
        name: str,
        fetch: Callable[..., Awaitable[httpx.Response]],
    ) -> RemoteFileNode: ...


class GraphQLDelegator(Protocol):
    """Sources and types one dataset from its GraphQL endpoint."""

    async def source_nodes(self, host: "BuildHost", options: DatasetOptions) -> None: ...

    async def create_schema_customization(
        self, host: "BuildHost", options: DatasetOptions
    ) -> None: ...


@dataclass(frozen=True)
class FieldResolver:
    type: str
    resolve: Callable[[Node], Awaitable[Any]]


class ResolverRegistry(Protocol):
    async def create_resolvers(
        self, resolvers: dict[str, dict[str, FieldResolver]]
    ) -> None: ...


@dataclass(frozen=True)
class BuildHost:
    """Bundle of host services passed to every plugin hook."""

    cache: KeyValueCache
    nodes: NodeStore
    files: RemoteFileNodeFactory
    delegator: GraphQLDelegator
    resolvers: ResolverRegistry
