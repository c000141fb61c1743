"""
Configuration models — producer and consumer config files.

A producer owns token sources and generates artifacts from them.
A consumer pins a published release and syncs its assets locally.
Both are loaded once per invocation and frozen for the run.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

GENERATOR_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")
REPO_RE = re.compile(r"^[\w.-]+/[\w.-]+$")

DEFAULT_GENERATORS: dict[str, bool | str] = {"tailwind": True, "figma": True}


class ProducerConfig(BaseModel):
    """Producer config — where tokens live and which generators run.

    ``generators`` maps a generator name to:
        False  → disabled, skipped entirely
        True   → the built-in generator of that name
        "path" → a plugin file, relative to the config file's directory
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    tokens: str = "./tokens"
    output: str = "./build"
    generators: dict[str, bool | str] = Field(
        default_factory=lambda: dict(DEFAULT_GENERATORS)
    )

    @field_validator("generators")
    @classmethod
    def _check_generator_names(cls, value: dict[str, bool | str]) -> dict[str, bool | str]:
        for name, spec in value.items():
            if not GENERATOR_NAME_RE.match(name):
                raise ValueError(f"invalid generator name {name!r}")
            if isinstance(spec, str) and not spec.strip():
                raise ValueError(f"generator {name!r} has an empty plugin path")
        return value

    def enabled_generators(self) -> list[str]:
        """Names of generators that are not disabled, in config order."""
        return [name for name, spec in self.generators.items() if spec is not False]

    def with_generators(self, generators: dict[str, bool | str]) -> ProducerConfig:
        """Copy of this config with a different generator map."""
        return self.model_copy(update={"generators": generators})

    def with_output(self, output: str) -> ProducerConfig:
        return self.model_copy(update={"output": output})


class ConsumerConfig(BaseModel):
    """Consumer config — the pinned release and where its assets go."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    repo: str
    version: str = Field(min_length=1)
    files: dict[str, str] = Field(min_length=1)
    post_sync: str | None = Field(default=None, alias="postSync")

    @field_validator("repo")
    @classmethod
    def _check_repo(cls, value: str) -> str:
        if not REPO_RE.match(value):
            raise ValueError(
                f'"{value}" is not a valid GitHub repository (use org/repo)'
            )
        return value

    @field_validator("version")
    @classmethod
    def _check_version(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("version must not be blank")
        return value.strip()
