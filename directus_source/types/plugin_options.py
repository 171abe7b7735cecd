from typing import Any, Awaitable, Callable, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from directus_source import DEFAULT_CONCURRENCY, DEFAULT_RETRIES

HeadersSource = (
    Mapping[str, str]
    | Callable[[], Mapping[str, str] | Awaitable[Mapping[str, str] | None] | None]
)


class AuthOptions(BaseModel):
    """Credential block: a static token, or an email and password pair."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    token: str | None = Field(default=None, description="Static access token")
    email: str | None = Field(default=None, description="Login email")
    password: str | None = Field(default=None, description="Login password")

    @field_validator("token", "email", "password", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value:
            return None
        return value

    @model_validator(mode="after")
    def check_credentials(self) -> "AuthOptions":
        if (self.email is None) != (self.password is None):
            raise ValueError(
                '"auth.email" and "auth.password" must be defined together'
            )
        if self.token is not None and self.email is not None:
            raise ValueError(
                '"auth.token" and "auth.email" cannot be defined together'
            )
        if self.token is None and self.email is None:
            raise ValueError(
                '"auth.token" or ("auth.email" and "auth.password") must be defined'
            )
        return self

    @property
    def kind(self) -> Literal["token", "credentials"]:
        return "token" if self.token is not None else "credentials"


class TypeOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str | None = Field(default=None, description="Primary dataset type name")
    field: str | None = Field(default=None, description="Primary dataset field name")
    system_name: str | None = Field(
        default=None, description="System dataset type name"
    )
    system_field: str | None = Field(
        default=None, description="System dataset field name"
    )


class DevOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    # Seconds, or a duration string such as "5s", "5m" or "1h"
    refresh: float | str | None = Field(default=None)


class PluginOptions(BaseModel):
    """Validated plugin options.

    Unknown top-level keys are kept and forwarded to the GraphQL delegator.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    url: str = Field(..., min_length=1, description="Root URL of the Directus API")
    auth: AuthOptions | None = Field(default=None)
    type: TypeOptions | None = Field(default=None)
    dev: DevOptions | None = Field(default=None)
    graphql: dict[str, Any] = Field(
        default_factory=dict, description="Options passed through to the delegator"
    )
    headers: HeadersSource | None = Field(
        default=None, description="Extra request headers, or a callable producing them"
    )
    concurrency: int = Field(default=DEFAULT_CONCURRENCY, ge=1)
    retries: int = Field(default=DEFAULT_RETRIES, ge=1)
