"""
Domain models — Pydantic types for tokenforge.

All models are re-exported here for convenient access:

    from tokenforge.core.models import ProducerConfig, GenerationResult
"""

from tokenforge.core.models.config import ConsumerConfig, ProducerConfig
from tokenforge.core.models.generation import (
    GenerationResult,
    GeneratorContext,
    RunMode,
)
from tokenforge.core.models.release import ReleaseAsset, ReleaseMetadata

__all__ = [
    # config.py
    "ConsumerConfig",
    # generation.py
    "GenerationResult",
    "GeneratorContext",
    "ProducerConfig",
    # release.py
    "ReleaseAsset",
    "ReleaseMetadata",
    "RunMode",
]
