from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, ConfigDict, Field


class AuthTokens(BaseModel):
    """Token pair returned by ``/auth/login`` and ``/auth/refresh``."""

    model_config = ConfigDict(extra="ignore")

    access_token: str = Field(..., min_length=1)
    refresh_token: str | None = Field(default=None)
    expires: int | None = Field(
        default=None, description="Access token lifetime in milliseconds"
    )
    obtained_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def expires_at(self) -> datetime | None:
        if self.expires is None:
            return None
        return self.obtained_at + timedelta(milliseconds=self.expires)

    def is_expiring(self, margin: timedelta) -> bool:
        if self.expires_at is None:
            return False
        return datetime.now(timezone.utc) + margin >= self.expires_at
