from pydantic import BaseModel, Field


class CacheEntry(BaseModel):
    """Value stored in the host cache under a Directus file id."""

    node_id: str = Field(..., description="Id of the materialized file node")
