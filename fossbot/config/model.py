from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)

from ..constants import CHANNEL_NAME_MAX, NICK_MAX, USER_MAX


class ScopedSecret:
    """A secret that can be read exactly once.

    ``consume()`` hands out the value and overwrites the stored bytes, so the
    service password does not linger in memory after identification.
    """

    def __init__(self, value: str) -> None:
        self._value = bytearray(value.encode("utf-8"))
        self._lock = threading.Lock()

    def consume(self) -> str | None:
        with self._lock:
            if not self._value:
                return None
            secret = self._value.decode("utf-8")
            for i in range(len(self._value)):
                self._value[i] = 0
            self._value = bytearray()
            return secret

    @property
    def consumed(self) -> bool:
        return not self._value

    def __repr__(self) -> str:
        return "ScopedSecret('**********')" if self._value else "ScopedSecret(<wiped>)"


def _normalize_channels(channels: list[str]) -> list[str]:
    """Strip, truncate and deduplicate channel names keeping their order."""
    normalized: list[str] = []
    for ch in channels:
        name = ch.strip()[:CHANNEL_NAME_MAX]
        if not name:
            continue
        if not name.startswith("#"):
            raise ValueError(f"channel {name!r} must start with '#'")
        if name not in normalized:
            normalized.append(name)
    return normalized


class BotConfig(BaseModel):
    """Bot configuration for a single network session.

    Attributes:
        server: IRC server address (must contain a dot).
        port: IRC server port.
        nick: Initial nickname; collisions append '_'.
        user: Username for the USER registration (defaults to nick).
        channels: Channels joined once the server finishes registration.
        verbose: Log raw inbound/outbound lines at INFO level.
        nick_password: NickServ password, sent once then wiped.
        bot_version: Reply to CTCP VERSION requests.
        quit_message: Message sent with QUIT on shutdown.
        github_token: Optional token for the GitHub API.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    server: str = Field(min_length=3)
    port: int = Field(default=6667, ge=1, le=65535)
    nick: str = Field(min_length=1)
    user: str | None = None
    channels: list[str] = Field(default_factory=list)
    verbose: bool = False
    nick_password: ScopedSecret | None = None
    bot_version: str = "fossbot"
    quit_message: str = "Bye"
    github_token: SecretStr | None = None

    @field_validator("server")
    @classmethod
    def validate_server(cls, v: str) -> str:
        v = v.strip()
        if "." not in v:
            raise ValueError("server must be a host name or address containing '.'")
        return v

    @field_validator("nick")
    @classmethod
    def truncate_nick(cls, v: str) -> str:
        v = v.strip()
        if not v or " " in v:
            raise ValueError("nick must be a single non-empty word")
        return v[:NICK_MAX]

    @field_validator("user")
    @classmethod
    def truncate_user(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v[:USER_MAX] or None

    @field_validator("channels", mode="before")
    @classmethod
    def validate_channels(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        if not isinstance(v, list):
            raise ValueError("channels must be a list")
        return _normalize_channels([str(c) for c in v])

    @field_validator("nick_password", mode="before")
    @classmethod
    def wrap_password(cls, v: Any) -> ScopedSecret | None:
        if v is None or isinstance(v, ScopedSecret):
            return v
        if not isinstance(v, str):
            raise ValueError("nick_password must be a string")
        return ScopedSecret(v) if v else None

    @model_validator(mode="after")
    def default_user(self) -> BotConfig:
        if self.user is None:
            self.user = self.nick[:USER_MAX]
        return self

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BotConfig:
        """Create a BotConfig from a dictionary (e.g. parsed JSON)."""
        return cls.model_validate(dict(data))
