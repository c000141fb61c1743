"""
Server settings — environment variables for ``tokenforge serve``.

    TOKENFORGE_ENV                development | production | test
    PORT                          1–65535 (default 3001)
    FRONTEND_URL                  extra origin allowed by CORS
    TOKENFORGE_PREVIEW_GENERATOR  built-in used for on-demand previews
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from tokenforge.core.errors import ConfigInvalidError
from tokenforge.core.models.config import GENERATOR_NAME_RE
from tokenforge.core.services.generators.registry import BUILTIN_GENERATORS

_ENV_KEYS = {
    "environment": "TOKENFORGE_ENV",
    "port": "PORT",
    "frontend_url": "FRONTEND_URL",
    "preview_generator": "TOKENFORGE_PREVIEW_GENERATOR",
}


class ServerSettings(BaseModel):
    environment: Literal["development", "production", "test"] = "development"
    port: int = Field(default=3001, ge=1, le=65535)
    frontend_url: str = ""
    preview_generator: str = "tailwind"

    @field_validator("preview_generator")
    @classmethod
    def _check_preview_generator(cls, value: str) -> str:
        if not GENERATOR_NAME_RE.match(value):
            raise ValueError(f"invalid generator name {value!r}")
        if value not in BUILTIN_GENERATORS:
            known = ", ".join(BUILTIN_GENERATORS)
            raise ValueError(f"unknown built-in generator {value!r} (known: {known})")
        return value

    def is_origin_allowed(self, origin: str | None) -> bool:
        """Local dev servers and the configured frontend may call the API."""
        if not origin:
            return True
        if origin.startswith(("http://localhost:", "http://127.0.0.1:")):
            return True
        return bool(self.frontend_url) and origin == self.frontend_url


def load_settings(environ: Mapping[str, str] | None = None) -> ServerSettings:
    """Build settings from the environment.

    Raises:
        ConfigInvalidError: One line per bad variable.
    """
    env = os.environ if environ is None else environ
    data = {field: env[key] for field, key in _ENV_KEYS.items() if env.get(key)}
    try:
        return ServerSettings.model_validate(data)
    except ValidationError as e:
        problems = []
        for err in e.errors():
            field = str(err["loc"][0]) if err["loc"] else "root"
            problems.append(f"{_ENV_KEYS.get(field, field)}: {err['msg']}")
        raise ConfigInvalidError("environment", problems) from e
