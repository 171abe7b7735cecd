from pathlib import Path

from pydantic import BaseModel, Field


class RemoteFileNode(BaseModel):
    id: str = Field(..., description="Node id assigned by the host")
    url: str = Field(..., description="Remote URL the file was downloaded from")
    path: Path | None = Field(default=None, description="Local file path")
    name: str = Field(..., description="File name without extension")
    ext: str = Field(default="", description="Extension including the dot")
    parent_node_id: str | None = Field(default=None)
