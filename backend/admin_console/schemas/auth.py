"""Pydantic schemas for admin login and the session profile."""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    """What the marketplace API returns from ``POST /auth/login``.

    The upstream flattens the account profile into the same object as the
    token; everything besides token/role/status is kept in ``profile``.
    """

    model_config = ConfigDict(populate_by_name=True)

    token: str
    role: str | None = Field(default=None, validation_alias=AliasChoices("type", "role"))
    status: str | None = None
    profile: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _split_profile(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "profile" in data:
            return data
        return {**data, "profile": {k: v for k, v in data.items() if k != "token"}}


class SessionRead(BaseModel):
    """The signed-in admin as exposed by ``GET /auth/session``."""

    authenticated: bool
    profile: dict[str, Any] | None = None
