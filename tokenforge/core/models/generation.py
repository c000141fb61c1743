"""
Generation models — what a generator receives and what a run returns.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tokenforge.core.models.config import ProducerConfig

BASE_CSS_ARTIFACT = "tailwind/base.css"
DARK_CSS_ARTIFACT = "tailwind/dark.css"


class RunMode(str, Enum):
    WRITE = "write"
    DRY_RUN = "dry-run"


class GeneratorContext(BaseModel):
    """Everything a generator sees for one run.

    ``output_dir`` is already scoped to the generator
    (``<output>/<generator name>``).  ``toolkit`` is the
    ``tokenforge.core.services.tokens`` module: readers, flattening,
    reference resolution and colour helpers for plugins to reuse.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    tokens_dir: Path
    output_dir: Path
    config: ProducerConfig
    token_tree: dict[str, Any] = Field(default_factory=dict)
    toolkit: Any = None


class GenerationResult(BaseModel):
    """Outcome of one generation run.

    ``artifacts`` maps a path relative to the output directory
    (``tailwind/base.css``) to its content.  On the producer path the
    result is informational; the on-demand service keeps the last
    successful one to serve when a later run fails.
    """

    success: bool
    artifacts: dict[str, str] = Field(default_factory=dict)
    error: str | None = None
    failed_generator: str | None = None
    generators: list[str] = Field(default_factory=list)

    @property
    def base_css(self) -> str | None:
        return self.artifacts.get(BASE_CSS_ARTIFACT)

    @property
    def dark_css(self) -> str | None:
        return self.artifacts.get(DARK_CSS_ARTIFACT)

    @classmethod
    def failure(
        cls,
        error: str,
        fallback: GenerationResult | None = None,
        failed_generator: str | None = None,
    ) -> GenerationResult:
        """Failed result, carrying ``fallback``'s artifacts when there is one."""
        return cls(
            success=False,
            error=error,
            failed_generator=failed_generator,
            artifacts=dict(fallback.artifacts) if fallback else {},
        )
