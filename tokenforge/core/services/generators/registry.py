"""
Generator registry — resolve config entries into runnable generators.

Each entry in ``ProducerConfig.generators`` resolves to one of:

    False   → nothing (disabled, no error)
    True    → the built-in generator of that name
    "path"  → a plugin file exposing ``generate(context)``

The engine never imports generators itself; it always goes through
the registry.

Plugins are trusted code.  Loading one executes it inside this process
with the same privileges as tokenforge; nothing is sandboxed.  Only
point a producer config at plugin files you would run yourself.
"""

from __future__ import annotations

import asyncio
import importlib.util
import inspect
import itertools
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from types import ModuleType

from tokenforge.core.errors import (
    ConfigInvalidError,
    PluginLoadError,
    UnknownBuiltinGeneratorError,
)
from tokenforge.core.models.config import GENERATOR_NAME_RE, ProducerConfig
from tokenforge.core.models.generation import GeneratorContext
from tokenforge.core.services.generators import figma, tailwind

logger = logging.getLogger(__name__)

GenerateFn = Callable[[GeneratorContext], object]

BUILTIN_GENERATORS: dict[str, GenerateFn] = {
    "tailwind": tailwind.generate,
    "figma": figma.generate,
}

_plugin_seq = itertools.count(1)


class GeneratorUnit(ABC):
    """One resolved generator.

    Units must not keep mutable state between runs: the on-demand
    service reuses them across requests.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The name this generator is configured under."""

    @property
    def kind(self) -> str:
        return "built-in"

    @abstractmethod
    def run(self, context: GeneratorContext) -> None:
        """Produce output files under ``context.output_dir``."""


class BuiltinGenerator(GeneratorUnit):
    def __init__(self, name: str, fn: GenerateFn):
        self._name = name
        self._fn = fn

    @property
    def name(self) -> str:
        return self._name

    def run(self, context: GeneratorContext) -> None:
        _call(self._fn, context)


class PluginGenerator(GeneratorUnit):
    """A generator loaded from a user-supplied Python file."""

    def __init__(self, name: str, path: Path, module: ModuleType):
        self._name = name
        self.path = path
        self._generate: GenerateFn = module.generate

    @property
    def name(self) -> str:
        return self._name

    @property
    def kind(self) -> str:
        return "plugin"

    def run(self, context: GeneratorContext) -> None:
        _call(self._generate, context)


def _call(fn: GenerateFn, context: GeneratorContext) -> None:
    """Invoke a generate function; coroutine functions are run to completion."""
    result = fn(context)
    if inspect.isawaitable(result):
        asyncio.run(_await(result))


async def _await(awaitable: object) -> None:
    await awaitable  # type: ignore[misc]


def load_plugin(path: Path) -> ModuleType:
    """Import a plugin file under a fresh module name.

    Raises:
        PluginLoadError: Missing file, import failure, or no callable
            ``generate``.
    """
    if not path.is_file():
        raise PluginLoadError(str(path), "file does not exist")

    module_name = f"tokenforge_plugin_{next(_plugin_seq)}_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise PluginLoadError(str(path), "not a loadable Python module")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise PluginLoadError(str(path), f"{type(e).__name__}: {e}") from e

    if not callable(getattr(module, "generate", None)):
        raise PluginLoadError(str(path), 'module does not define a "generate" function')

    logger.debug("Loaded plugin %s as %s", path, module_name)
    return module


class GeneratorRegistry:
    """Maps generator names and config specs to ``GeneratorUnit``s.

    Args:
        builtins: Name → generate function table.  Defaults to the
            shipped generators (tailwind, figma).
        base_dir: Directory plugin paths are resolved against, normally
            the producer config file's directory.
    """

    def __init__(
        self,
        builtins: dict[str, GenerateFn] | None = None,
        base_dir: Path | None = None,
    ):
        self._builtins = dict(BUILTIN_GENERATORS if builtins is None else builtins)
        self.base_dir = base_dir or Path.cwd()

    def register(self, name: str, fn: GenerateFn) -> None:
        """Add or replace a built-in generator."""
        if name in self._builtins:
            logger.warning("Overwriting built-in generator: %s", name)
        self._builtins[name] = fn

    def list_builtins(self) -> list[str]:
        return list(self._builtins)

    def resolve(self, name: str, spec: bool | str) -> GeneratorUnit | None:
        """Resolve one config entry.

        Returns:
            The unit, or None when the entry is disabled.

        Raises:
            ConfigInvalidError: ``name`` is not a valid generator name.
            UnknownBuiltinGeneratorError: ``True`` for a name with no built-in.
            PluginLoadError: The plugin file cannot be loaded.
        """
        if not isinstance(name, str) or not GENERATOR_NAME_RE.match(name):
            raise ConfigInvalidError("generators", [f"invalid generator name {name!r}"])

        if spec is False:
            logger.debug("Generator %s disabled", name)
            return None

        if spec is True:
            fn = self._builtins.get(name)
            if fn is None:
                raise UnknownBuiltinGeneratorError(name, self.list_builtins())
            return BuiltinGenerator(name, fn)

        path = (self.base_dir / spec).resolve()
        return PluginGenerator(name, path, load_plugin(path))

    def resolve_all(self, config: ProducerConfig) -> list[GeneratorUnit]:
        """Resolve every enabled generator, in config order."""
        units = []
        for name, spec in config.generators.items():
            unit = self.resolve(name, spec)
            if unit is not None:
                units.append(unit)
        return units
