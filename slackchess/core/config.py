"""
Process configuration.

Values come from command line flags first, then environment variables. The shared Slack token, the public base URL
(used to build board image links) and the port are required: the process refuses to start without them.
"""

import os
from typing import Mapping, Optional, Self

from pydantic import BaseModel, ValidationError, field_validator

from slackchess.core.exceptions import ConfigError

DEFAULT_DATABASE_URL = "sqlite:///slackchess.db"
DEFAULT_STOCKFISH_PATH = "stockfish"


class Settings(BaseModel):
    token: str
    base_url: str
    port: int
    host: str = "0.0.0.0"
    database_url: str = DEFAULT_DATABASE_URL
    stockfish_path: str = DEFAULT_STOCKFISH_PATH
    engine_think_time: float = 0.5
    engine_timeout: float = 5.0

    @field_validator(*["token", "base_url"])
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"must be an http(s) URL, got {value!r}")
        return value.rstrip("/")

    @field_validator("port")
    @classmethod
    def validate_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError(f"not a valid port: {value}")
        return value

    @field_validator(*["engine_think_time", "engine_timeout"])
    @classmethod
    def validate_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @property
    def listen_address(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def load(
        cls,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        environ: Mapping[str, str] = os.environ,
    ) -> Self:
        """Combine flag values with the environment. Raises ConfigError naming what is missing or invalid."""
        values: dict[str, str] = {}
        sources = {
            "token": token or environ.get("SLACKCHESS_TOKEN"),
            "base_url": base_url or environ.get("SLACKCHESS_URL"),
            "port": environ.get("PORT"),
            "host": environ.get("HOST"),
            "database_url": environ.get("DATABASE_URL"),
            "stockfish_path": environ.get("STOCKFISH_PATH"),
            "engine_think_time": environ.get("ENGINE_THINK_TIME"),
            "engine_timeout": environ.get("ENGINE_TIMEOUT"),
        }
        for name, value in sources.items():
            if value:
                values[name] = value

        missing = [
            hint
            for name, hint in [
                ("token", "token (--token or $SLACKCHESS_TOKEN)"),
                ("base_url", "url (--url or $SLACKCHESS_URL)"),
                ("port", "$PORT"),
            ]
            if name not in values
        ]
        if missing:
            raise ConfigError(f"must set {', '.join(missing)}")

        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigError(str(e)) from e
