from pydantic import BaseModel, ConfigDict, Field


class FileRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Directus file identifier")
    type: str | None = Field(default=None, description="Declared MIME type")
    filename_download: str = Field(..., description="Download filename")
