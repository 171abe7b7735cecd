import httpx

from directus_source.client.exceptions import ConfigError
from directus_source.types.endpoints import Endpoints

error_invalid_url_msg = '"url" should be a valid URL'


def resolve_endpoints(url: str) -> Endpoints:
    """Derive the root, GraphQL and system GraphQL URLs from the root URL.

    Trailing slashes on the root path are dropped, so ``https://cms.test/api/``
    and ``https://cms.test/api`` resolve to the same endpoints. Query strings
    and fragments are discarded.
    """
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise ConfigError(error_invalid_url_msg) from e

    if not parsed.is_absolute_url or parsed.scheme not in ("http", "https"):
        raise ConfigError(error_invalid_url_msg)
    if not parsed.host:
        raise ConfigError(error_invalid_url_msg)

    origin = f"{parsed.scheme}://{parsed.netloc.decode('ascii')}"
    root = origin + parsed.raw_path.decode("ascii").split("?", 1)[0].rstrip("/")

    return Endpoints(
        root=root,
        graphql=f"{root}/graphql",
        graphql_system=f"{root}/graphql/system",
    )
