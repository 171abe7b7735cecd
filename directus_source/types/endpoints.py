from pydantic import BaseModel, ConfigDict


class Endpoints(BaseModel):
    """Canonical URLs derived from the configured root URL."""

    model_config = ConfigDict(frozen=True)

    root: str
    graphql: str
    graphql_system: str

    def asset_url(self, file_id: str) -> str:
        return f"{self.root}/assets/{file_id}"
