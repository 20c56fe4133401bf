from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..constants import IRC_DEFAULT_PORT
from ..errors import ConfigurationError
from ..irc.decoder import default_encoding, normalize_encoding
from ..irc.state_machine import first_token


class SessionConfig(BaseModel):
    """Connection settings for one IRC session.

    Attributes:
        host: Server host name.
        port: Server port.
        user_name: User name sent with USER; only the first word is kept.
        nick_name: Desired nick; only the first word is kept.
        real_name: Real name sent with USER.
        encoding: Fallback codec for lines that are not valid UTF-8.
        secure: Whether to connect over TLS.
        password: Optional server password sent with PASS.
        capabilities: Capabilities to request when the server offers them.
    """

    host: str = Field(min_length=1)
    port: int = Field(default=IRC_DEFAULT_PORT, ge=1, le=65535)
    user_name: str
    nick_name: str
    real_name: str = Field(min_length=1)
    encoding: str = Field(default_factory=default_encoding)
    secure: bool = False
    password: str | None = None
    capabilities: list[str] = Field(default_factory=list)

    @field_validator("user_name", "nick_name", mode="before")
    @classmethod
    def keep_first_word(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError("must be a string")
        token = first_token(v)
        if not token:
            raise ValueError("must not be empty")
        return token

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        normalized = normalize_encoding(v)
        if normalized is None:
            raise ValueError(f"unsupported encoding: {v}")
        return normalized

    @field_validator("capabilities", mode="before")
    @classmethod
    def validate_capabilities(cls, v: Any) -> list[str]:
        """Accept a list or a space separated string; dedupe, keep order."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split()
        if not isinstance(v, list):
            raise ValueError("capabilities must be a list")
        return list(dict.fromkeys(c.strip() for c in v if isinstance(c, str) and c.strip()))

    @model_validator(mode="after")
    def default_secure_port(self) -> SessionConfig:
        if self.secure and "port" not in self.model_fields_set:
            self.port = 6697
        return self

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SessionConfig:
        """Create a SessionConfig, reporting problems as ConfigurationError."""
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise ConfigurationError(
                "invalid session configuration",
                data={"errors": [err["msg"] for err in e.errors()]},
            ) from e
