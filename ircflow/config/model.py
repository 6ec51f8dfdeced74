from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from ..constants import DEFAULT_PORT

CHANNEL_PREFIXES = "#&+!"


def _normalize_channel(name: str) -> str:
    stripped = name.strip()
    if stripped and stripped[0] not in CHANNEL_PREFIXES:
        return f"#{stripped}"
    return stripped


class IRCConfig(BaseModel):
    """Everything needed to open and register one server connection.

    Attributes:
        host: Server host name or address.
        port: Server TCP port.
        password: Optional server password, sent as PASS before registration.
        nick: Nickname to register with.
        user: Username for the USER command; defaults to the nick.
        realname: Real name for the USER command; defaults to the nick.
        channels: Channels to join once the server welcomes us, in order.
        encoding: Text encoding used on the wire.
    """

    host: str = Field(min_length=1)
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    password: str | None = None
    nick: str = Field(min_length=1)
    user: str = ""
    realname: str = ""
    channels: list[str] = Field(default_factory=list)
    encoding: str = "utf-8"

    @field_validator("nick", "user")
    @classmethod
    def validate_no_spaces(cls, v: str) -> str:
        if " " in v:
            raise ValueError("must not contain spaces")
        return v

    @field_validator("channels", mode="before")
    @classmethod
    def validate_channels(cls, v: Any) -> list[str]:
        """Strip names, add a missing '#' prefix and drop duplicates keeping order."""
        if not isinstance(v, list):
            raise ValueError("channels must be a list")
        validated = []
        for c in v:
            if isinstance(c, str):
                normalized = _normalize_channel(c)
                if normalized:
                    validated.append(normalized)
        return list(dict.fromkeys(validated))

    @model_validator(mode="after")
    def fill_identity(self) -> IRCConfig:
        if not self.user:
            self.user = self.nick
        if not self.realname:
            self.realname = self.nick
        return self
