"""
Configuration loader — reads producer/consumer config files into models.

Producer configs may be JSON or YAML; consumer configs are JSON.
Files are parsed, validated against the Pydantic models, and returned
frozen.  Every failure is a ``ConfigNotFoundError`` or
``ConfigInvalidError`` carrying a readable list of problems.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from tokenforge.core.errors import ConfigInvalidError, ConfigNotFoundError
from tokenforge.core.models.config import ConsumerConfig, ProducerConfig

logger = logging.getLogger(__name__)

CONFIG_DIR = ".tokenforge"
PRODUCER_CONFIG_FILE = f"{CONFIG_DIR}/producer.json"
CONSUMER_CONFIG_FILE = f"{CONFIG_DIR}/consumer.json"


def load_producer_config(path: Path) -> ProducerConfig:
    """Load and validate a producer config.

    Args:
        path: Path to the config file (``.json``, ``.yml`` or ``.yaml``).

    Returns:
        Frozen ProducerConfig.

    Raises:
        ConfigNotFoundError: The file does not exist.
        ConfigInvalidError: The file cannot be parsed or fails validation.
    """
    data = _read_mapping(path, consumer=False)
    try:
        config = ProducerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigInvalidError(str(path), _problems(e)) from e

    logger.info(
        "Loaded producer config %s (%d generators enabled)",
        path,
        len(config.enabled_generators()),
    )
    return config


def load_consumer_config(path: Path) -> ConsumerConfig:
    """Load and validate a consumer config.

    Raises:
        ConfigNotFoundError: The file does not exist.
        ConfigInvalidError: The file cannot be parsed or fails validation.
    """
    data = _read_mapping(path, consumer=True)
    try:
        config = ConsumerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigInvalidError(str(path), _problems(e)) from e

    logger.info("Loaded consumer config %s (%s@%s)", path, config.repo, config.version)
    return config


def _read_mapping(path: Path, consumer: bool) -> dict[str, Any]:
    """Read a config file into a dict, JSON or YAML by extension."""
    if not path.is_file():
        raise ConfigNotFoundError(str(path), consumer=consumer)

    logger.debug("Reading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigInvalidError(str(path), [f"cannot read file: {e}"]) from e

    try:
        if path.suffix in (".yml", ".yaml"):
            data = yaml.safe_load(raw)
        else:
            data = json.loads(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigInvalidError(str(path), [f"could not parse file: {e}"]) from e

    if not isinstance(data, dict):
        raise ConfigInvalidError(
            str(path), [f"root: expected an object, got {type(data).__name__}"]
        )
    return data


def _problems(error: ValidationError) -> list[str]:
    """Flatten pydantic errors into ``field.path: message`` lines."""
    problems = []
    for err in error.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "root"
        problems.append(f"{loc}: {err['msg']}")
    return problems
