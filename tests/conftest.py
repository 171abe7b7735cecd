import json
from typing import Any

import httpx
import pytest

from directus_source.host.protocols import BuildHost, FieldResolver, Node
from directus_source.types.dataset_options import DatasetOptions
from directus_source.types.remote_file_node import RemoteFileNode

CMS_URL = "https://cms.example.com/api"
EMAIL = "admin@example.com"
PASSWORD = "secret"


def file_record(file_id: str, filename: str | None = None) -> dict[str, Any]:
    return {
        "id": file_id,
        "type": "image/jpeg",
        "filename_download": filename or f"{file_id}.jpg",
    }


class FakeDirectus:
    """In-process Directus API served through ``httpx.MockTransport``."""

    def __init__(
        self,
        files: list[dict[str, Any]] | None = None,
        *,
        expires: int = 900_000,
    ):
        self.files = list(files or [])
        self.expires = expires
        self.logins = 0
        self.refreshes = 0
        self.requests: list[httpx.Request] = []

    def paths(self, suffix: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(suffix)]

    def token_payload(self, access_token: str) -> dict[str, Any]:
        return {
            "data": {
                "access_token": access_token,
                "refresh_token": "refresh-token",
                "expires": self.expires,
            }
        }

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.endswith("/auth/login"):
            self.logins += 1
            body = json.loads(request.content)
            if body == {"email": EMAIL, "password": PASSWORD}:
                return httpx.Response(200, json=self.token_payload("login-token"))
            return httpx.Response(
                401, json={"errors": [{"message": "Invalid user credentials."}]}
            )

        if path.endswith("/auth/refresh"):
            self.refreshes += 1
            return httpx.Response(
                200, json=self.token_payload(f"refreshed-token-{self.refreshes}")
            )

        if path.endswith("/files"):
            limit = int(request.url.params["limit"])
            page = int(request.url.params["page"])
            ordered = sorted(self.files, key=lambda f: f["id"])
            return httpx.Response(
                200, json={"data": ordered[(page - 1) * limit : page * limit]}
            )

        if "/assets/" in path:
            file_id = path.rsplit("/", 1)[-1]
            return httpx.Response(200, content=f"asset:{file_id}".encode())

        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


class SleepRecorder:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class MemoryCache:
    def __init__(self):
        self.data: dict[str, Any] = {}

    async def get(self, key: str) -> Any | None:
        return self.data.get(key)

    async def set(self, key: str, value: Any) -> Any:
        self.data[key] = value
        return value


class FakeNodeStore:
    def __init__(self):
        self.nodes: dict[str, Node] = {}
        self.touched: list[str] = []

    def get_node(self, node_id: str) -> Node | None:
        return self.nodes.get(node_id)

    def touch_node(self, node: Node) -> None:
        self.touched.append(node["id"])

    def create_node(self, node: Node) -> None:
        self.nodes[node["id"]] = node


class FakeFileFactory:
    """Downloads through the given fetch and registers a ``File`` node."""

    def __init__(self, nodes: FakeNodeStore):
        self.nodes = nodes
        self.calls: list[dict[str, Any]] = []
        self.contents: dict[str, bytes] = {}

    async def create_remote_file_node(self, **kwargs: Any) -> RemoteFileNode:
        self.calls.append(kwargs)
        response = await kwargs["fetch"](kwargs["url"], headers=kwargs["headers"])
        response.raise_for_status()

        node_id = f"file-node-{kwargs['parent_node_id']}"
        self.contents[node_id] = response.content
        self.nodes.create_node(
            {"id": node_id, "parent": kwargs["parent_node_id"], "internal": {"type": "File"}}
        )
        return RemoteFileNode(
            id=node_id,
            url=kwargs["url"],
            name=kwargs["name"],
            ext=kwargs["ext"],
            parent_node_id=kwargs["parent_node_id"],
        )


class FakeDelegator:
    """Creates one ``GraphQLSource`` node per sourced dataset."""

    def __init__(self):
        self.sourced: list[DatasetOptions] = []
        self.customized: list[DatasetOptions] = []

    async def source_nodes(self, host: BuildHost, options: DatasetOptions) -> None:
        self.sourced.append(options)
        host.nodes.create_node(
            {
                "id": f"source-{options.type_name}",
                "typeName": options.type_name,
                "internal": {"type": "GraphQLSource"},
            }
        )

    async def create_schema_customization(
        self, host: BuildHost, options: DatasetOptions
    ) -> None:
        self.customized.append(options)


class FakeResolverRegistry:
    def __init__(self):
        self.resolvers: dict[str, dict[str, FieldResolver]] = {}

    async def create_resolvers(
        self, resolvers: dict[str, dict[str, FieldResolver]]
    ) -> None:
        self.resolvers.update(resolvers)


def make_host(
    cache: MemoryCache | None = None, nodes: FakeNodeStore | None = None
) -> BuildHost:
    nodes = nodes or FakeNodeStore()
    return BuildHost(
        cache=cache or MemoryCache(),
        nodes=nodes,
        files=FakeFileFactory(nodes),
        delegator=FakeDelegator(),
        resolvers=FakeResolverRegistry(),
    )


@pytest.fixture(autouse=True)
def no_env_token(monkeypatch):
    monkeypatch.delenv("DIRECTUS_TOKEN", raising=False)


@pytest.fixture
def directus() -> FakeDirectus:
    return FakeDirectus([file_record("a"), file_record("b"), file_record("c")])


@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()
