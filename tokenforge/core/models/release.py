"""
Release models — the parts of a GitHub release that sync cares about.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ReleaseAsset(BaseModel):
    name: str
    download_url: str
    size: int = 0


class ReleaseMetadata(BaseModel):
    """A release looked up by tag: asset name → download locator."""

    repo: str
    tag: str
    assets: list[ReleaseAsset] = Field(default_factory=list)

    def asset(self, name: str) -> ReleaseAsset | None:
        for asset in self.assets:
            if asset.name == name:
                return asset
        return None

    @property
    def asset_names(self) -> list[str]:
        return [a.name for a in self.assets]
