from typing import Any, Awaitable, Callable

import httpx
from pydantic import BaseModel, ConfigDict, Field


class DatasetOptions(BaseModel):
    """Option bundle handed to the GraphQL delegator for one dataset."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="GraphQL endpoint of the dataset")
    type_name: str = Field(..., description="Root type name in the merged schema")
    field_name: str = Field(..., description="Root query field name")
    headers: Callable[[], Awaitable[dict[str, str]]]
    fetch: Callable[..., Awaitable[httpx.Response]]
    extra: dict[str, Any] = Field(default_factory=dict)
