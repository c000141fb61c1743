"""
Generation engine — run the enabled generators against one token tree.

Flow:
    config → resolve generators → read tokens → run each (sequentially) → collect artifacts

Generators run one at a time in config order, each into
``<output>/<name>``.  They must not depend on each other's output.

Failure is fail-fast: the first generator that raises stops the run
and surfaces as ``GenerationFailedError`` naming it.  Whatever earlier
generators wrote stays on disk; nothing is rolled back.

Dry-run executes the generators inside a throwaway temp directory so
the result still reports what *would* be written, while the caller's
output directory is never created or touched.
"""

from __future__ import annotations

import logging
import tempfile
import time
from collections.abc import Iterable
from pathlib import Path

from tokenforge.core.errors import GenerationFailedError, TokenforgeError
from tokenforge.core.models.config import ProducerConfig
from tokenforge.core.models.generation import (
    GenerationResult,
    GeneratorContext,
    RunMode,
)
from tokenforge.core.services import tokens as toolkit
from tokenforge.core.services.generators.registry import (
    GeneratorRegistry,
    GeneratorUnit,
)

logger = logging.getLogger(__name__)


class GenerationEngine:
    """Sequential, fail-fast generator runner."""

    def __init__(self, registry: GeneratorRegistry | None = None):
        self.registry = registry or GeneratorRegistry()

    def plan(
        self,
        config: ProducerConfig,
        only: Iterable[str] | None = None,
    ) -> list[GeneratorUnit]:
        """Resolve the generators a run would execute, in order.

        Args:
            config: Producer config.
            only: Restrict to these generator names (others are skipped
                even if enabled).
        """
        units = self.registry.resolve_all(config)
        if only is not None:
            wanted = set(only)
            units = [u for u in units if u.name in wanted]
        return units

    def run(
        self,
        config: ProducerConfig,
        tokens_dir: Path,
        output_dir: Path,
        mode: RunMode = RunMode.WRITE,
        only: Iterable[str] | None = None,
    ) -> GenerationResult:
        """Run every enabled generator.

        Args:
            config: Producer config (not modified).
            tokens_dir: Directory holding the token JSON files.
            output_dir: Root output directory; ignored in dry-run mode.
            mode: ``RunMode.WRITE`` or ``RunMode.DRY_RUN``.
            only: Optional subset of generator names to run.

        Returns:
            Successful GenerationResult with the produced artifacts.

        Raises:
            GenerationFailedError: A generator raised; later ones never ran.
            TokenforgeError: Configuration or token errors, unchanged.
        """
        units = self.plan(config, only)
        tree = toolkit.read_token_tree(tokens_dir)

        logger.info("Tokens: %s (%d files)", tokens_dir, len(tree))

        if mode == RunMode.DRY_RUN:
            with tempfile.TemporaryDirectory(prefix="tokenforge-dry-") as scratch:
                logger.info("[dry-run] Would write to: %s", output_dir)
                return self._execute(units, config, tokens_dir, Path(scratch), tree)

        logger.info("Output: %s", output_dir)
        return self._execute(units, config, tokens_dir, output_dir, tree)

    def _execute(
        self,
        units: list[GeneratorUnit],
        config: ProducerConfig,
        tokens_dir: Path,
        output_dir: Path,
        tree: toolkit.TokenTree,
    ) -> GenerationResult:
        completed: list[str] = []
        artifacts: dict[str, str] = {}

        for unit in units:
            target = output_dir / unit.name
            context = GeneratorContext(
                tokens_dir=tokens_dir,
                output_dir=target,
                config=config,
                token_tree=tree,
                toolkit=toolkit,
            )

            logger.info("Running %s generator (%s)...", unit.name, unit.kind)
            start = time.monotonic()
            try:
                unit.run(context)
            except TokenforgeError as e:
                logger.error("%s failed: %s", unit.name, e)
                raise GenerationFailedError(unit.name, e.detail) from e
            except Exception as e:
                logger.error("%s failed: %s", unit.name, e)
                raise GenerationFailedError(unit.name, str(e) or type(e).__name__) from e

            elapsed_ms = int((time.monotonic() - start) * 1000)
            completed.append(unit.name)
            artifacts.update(_collect(output_dir, target))
            logger.info("%s complete (%dms)", unit.name, elapsed_ms)

        logger.info("Generation complete: %d generator(s)", len(completed))
        return GenerationResult(success=True, artifacts=artifacts, generators=completed)


def _collect(output_dir: Path, target: Path) -> dict[str, str]:
    """Read back the text files a generator produced."""
    found: dict[str, str] = {}
    if not target.is_dir():
        return found
    for file in sorted(target.rglob("*")):
        if not file.is_file():
            continue
        rel = file.relative_to(output_dir).as_posix()
        try:
            found[rel] = file.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            logger.debug("Skipping binary artifact %s", rel)
    return found
