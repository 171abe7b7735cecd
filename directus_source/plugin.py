"""Directus source plugin: the entry point driven by the host build system."""

import asyncio
import dataclasses
import logging
import os
from typing import Any, Awaitable, Callable, Mapping

import pydantic

from directus_source import DEFAULT_REFRESH_INTERVAL, DIRECTUS_TOKEN_NAME
from directus_source.assets import AssetSyncCache
from directus_source.client.exceptions import ConfigError, NotReadyError
from directus_source.client.session import DirectusSession
from directus_source.endpoints import resolve_endpoints
from directus_source.files import FilePaginator
from directus_source.host.protocols import BuildHost, FieldResolver, Node, NodeStore
from directus_source.types.dataset_options import DatasetOptions
from directus_source.types.plugin_options import AuthOptions, DevOptions, PluginOptions
from directus_source.types.sync_report import SyncReport
from directus_source.utils.parse_duration import parse_duration

logger = logging.getLogger(__name__)

DEFAULT_TYPE_NAME = "DirectusData"
DEFAULT_FIELD_NAME = "directus"
DEFAULT_SYSTEM_TYPE_NAME = "DirectusSystemData"
DEFAULT_SYSTEM_FIELD_NAME = "directus_system"

# Option keys consumed here and never forwarded to the delegator
INTERNAL_OPTIONS = ("url", "dev", "auth", "type")

error_refresh_msg = (
    '"dev.refresh" should be a number in seconds or a string with ms format, '
    + "i.e. 5s, 5m, 5h, ..."
)


class GraphQLSourceRenamer:
    """Node store wrapper giving each dataset's ``GraphQLSource`` node its own type.

    Both datasets are sourced through the same delegator, whose source nodes
    would otherwise collide on the ``GraphQLSource`` type.
    """

    def __init__(self, nodes: NodeStore, type_names: Mapping[str, str]):
        self.nodes = nodes
        self.type_names = dict(type_names)

    def get_node(self, node_id: str) -> Node | None:
        return self.nodes.get_node(node_id)

    def touch_node(self, node: Node) -> None:
        self.nodes.touch_node(node)

    def create_node(self, node: Node) -> None:
        internal = node.get("internal") or {}
        if internal.get("type") == "GraphQLSource":
            if renamed := self.type_names.get(node.get("typeName", "")):
                node = {**node, "internal": {**internal, "type": renamed}}
        self.nodes.create_node(node)


class DirectusSourcePlugin:
    """Validates options once, then sources datasets and files from Directus.

    Options are write-once: every hook passes the plugin options again, and
    passing anything other than the first set is an error.
    """

    def __init__(
        self,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        **client_kwargs: Any,
    ):
        self.options: PluginOptions | None = None
        self.session: DirectusSession | None = None
        self.refresh_interval: float = DEFAULT_REFRESH_INTERVAL
        self._sleep = sleep
        self._client_kwargs = client_kwargs
        self._lock = asyncio.Lock()

    @staticmethod
    def validate_options(options: PluginOptions | Mapping[str, Any]) -> PluginOptions:
        if isinstance(options, PluginOptions):
            return options
        try:
            return PluginOptions.model_validate(options)
        except pydantic.ValidationError as e:
            raise ConfigError(f"invalid options: {e}") from e

    @staticmethod
    def refresh_seconds(dev: DevOptions | None) -> float:
        refresh = dev.refresh if dev is not None else None
        # An explicit duration string such as "0s" is honored as given
        if refresh is None or refresh == 0:
            return DEFAULT_REFRESH_INTERVAL
        try:
            return parse_duration(refresh)
        except ValueError as e:
            raise ConfigError(error_refresh_msg) from e

    async def set_options(
        self, options: PluginOptions | Mapping[str, Any]
    ) -> DirectusSession:
        """Validate options and establish the session, once per plugin instance.

        Raises:
            ConfigError: Options are invalid, or differ from the first set.
            AuthError: The credential exchange failed.
        """
        options = self.validate_options(options)

        async with self._lock:
            if self.session is not None:
                if options != self.options:
                    raise ConfigError("options cannot change once the plugin is set up")
                return self.session

            endpoints = resolve_endpoints(options.url)
            refresh_interval = self.refresh_seconds(options.dev)

            credential = options.auth
            if credential is None and (token := os.getenv(DIRECTUS_TOKEN_NAME)):
                logger.debug(f"Using static token from {DIRECTUS_TOKEN_NAME}")
                credential = AuthOptions(token=token)

            session = DirectusSession(
                endpoints,
                retries=options.retries,
                headers=options.headers,
                sleep=self._sleep,
                **self._client_kwargs,
            )
            try:
                await session.establish(credential)
            except Exception:
                await session.aclose()
                raise

            self.options = options
            self.session = session
            self.refresh_interval = refresh_interval
            return session

    def _require_ready(self) -> tuple[PluginOptions, DirectusSession]:
        if self.options is None or self.session is None:
            raise NotReadyError()
        return self.options, self.session

    def get_options(self) -> DatasetOptions:
        """Option bundle for the primary dataset."""
        options, session = self._require_ready()

        forwarded = options.model_dump(exclude={*INTERNAL_OPTIONS, "graphql", "headers"})
        type_options = options.type

        return DatasetOptions(
            url=session.endpoints.graphql,
            type_name=(type_options and type_options.name) or DEFAULT_TYPE_NAME,
            field_name=(type_options and type_options.field) or DEFAULT_FIELD_NAME,
            headers=session.headers,
            fetch=session.fetch,
            extra={**options.graphql, **forwarded},
        )

    def get_options_system(self) -> DatasetOptions:
        """Option bundle for the system dataset."""
        options, session = self._require_ready()
        type_options = options.type

        return self.get_options().model_copy(
            update={
                "url": session.endpoints.graphql_system,
                "type_name": (type_options and type_options.system_name)
                or DEFAULT_SYSTEM_TYPE_NAME,
                "field_name": (type_options and type_options.system_field)
                or DEFAULT_SYSTEM_FIELD_NAME,
            }
        )

    def iterate_files(self) -> FilePaginator:
        options, session = self._require_ready()
        return FilePaginator(session, page_size=options.concurrency)

    def asset_cache(self, host: BuildHost) -> AssetSyncCache:
        _, session = self._require_ready()
        return AssetSyncCache(
            session, cache=host.cache, nodes=host.nodes, files=host.files
        )

    async def source_nodes(
        self, host: BuildHost, options: PluginOptions | Mapping[str, Any]
    ) -> SyncReport:
        """Source both datasets, then mirror the file library once."""
        await self.set_options(options)

        system_options = self.get_options_system()
        data_options = self.get_options()

        renamer = GraphQLSourceRenamer(
            host.nodes,
            {
                system_options.type_name: "DirectusSystemGraphQLSource",
                data_options.type_name: "DirectusGraphQLSource",
            },
        )
        sourcing_host = dataclasses.replace(host, nodes=renamer)

        await host.delegator.source_nodes(sourcing_host, system_options)
        await host.delegator.source_nodes(sourcing_host, data_options)

        return await self.sync_files(host)

    async def sync_files(self, host: BuildHost) -> SyncReport:
        return await self.asset_cache(host).sync(self.iterate_files())

    async def create_schema_customization(
        self, host: BuildHost, options: PluginOptions | Mapping[str, Any]
    ) -> None:
        await self.set_options(options)

        await host.delegator.create_schema_customization(
            host, self.get_options_system()
        )
        await host.delegator.create_schema_customization(host, self.get_options())

    async def create_resolvers(
        self, host: BuildHost, options: PluginOptions | Mapping[str, Any]
    ) -> None:
        """Register the ``imageFile`` resolver on both datasets' file types."""
        await self.set_options(options)

        assets = self.asset_cache(host)

        async def resolve_image_file(source: Node) -> Node | None:
            return await assets.resolve(source["id"])

        file_resolver = {"imageFile": FieldResolver(type="File", resolve=resolve_image_file)}

        await host.resolvers.create_resolvers(
            {
                f"{self.get_options().type_name}_directus_files": file_resolver,
                f"{self.get_options_system().type_name}_directus_files": file_resolver,
            }
        )

    async def aclose(self) -> None:
        if self.session is not None:
            await self.session.aclose()
