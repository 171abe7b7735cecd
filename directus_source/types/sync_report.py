from pydantic import BaseModel, Field


class SyncReport(BaseModel):
    downloaded: list[str] = Field(default_factory=list)
    touched: list[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.downloaded) + len(self.touched)
