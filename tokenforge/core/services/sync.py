"""
Sync engine — bring a consumer project up to its pinned release.

Flow:
    read cache → (dry-run? report and stop) → (up to date? stop)
    → fetch release → download assets → write files → commit cache → post-sync hook

"Up to date" means: not forced, the pinned version equals the cached
one, and at least one configured output file already exists.  That
path makes no network calls and writes nothing.

The cache is committed only after every write succeeded, so a failed
write leaves the previous cached version (or none) in place and the
next sync retries.  The post-sync command runs after the commit; its
failure is reported but does not undo the sync.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from tokenforge.core.errors import SyncWriteError
from tokenforge.core.models.config import ConsumerConfig
from tokenforge.core.persistence.sync_cache import SyncCache
from tokenforge.core.services.release_client import ReleaseClient

logger = logging.getLogger(__name__)

POST_SYNC_TIMEOUT_S = 300


@dataclass
class SyncReport:
    """What a sync did."""

    status: str = ""                  # synced | up_to_date | dry_run
    repo: str = ""
    version: str = ""
    cached_version: str | None = None
    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    planned: dict[str, str] = field(default_factory=dict)
    post_sync_ok: bool | None = None

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "repo": self.repo,
            "version": self.version,
            "cached_version": self.cached_version,
            "written": self.written,
            "skipped": self.skipped,
            "planned": self.planned,
            "post_sync_ok": self.post_sync_ok,
        }


class SyncEngine:
    """Syncs one consumer project.

    Args:
        project_root: Root the configured output paths are relative to.
        client: Release client (default: built from ``GITHUB_TOKEN``).
        cache: Sync cache (default: ``<project_root>/.tokenforge/cache``).
    """

    def __init__(
        self,
        project_root: Path,
        client: ReleaseClient | None = None,
        cache: SyncCache | None = None,
    ):
        self.project_root = project_root
        self.client = client or ReleaseClient.from_env()
        self.cache = cache or SyncCache(project_root)

    def _output_path(self, rel: str) -> Path:
        return self.project_root / rel

    def is_up_to_date(self, config: ConsumerConfig, cached: str | None) -> bool:
        if cached is None or config.version != cached:
            return False
        return any(self._output_path(p).exists() for p in config.files.values())

    def sync(
        self,
        config: ConsumerConfig,
        force: bool = False,
        dry_run: bool = False,
    ) -> SyncReport:
        """Sync the project to ``config.version``.

        Args:
            config: Consumer config.
            force: Ignore the cache and always fetch.
            dry_run: Log the plan; no network, no writes, no cache update.

        Returns:
            SyncReport.

        Raises:
            ReleaseNotFoundError, AuthRequiredError, UpstreamError: From
                the release lookup.
            SyncWriteError: An output file could not be written.
            CacheIOError: The cache could not be read or committed.
        """
        cached = self.cache.read()
        report = SyncReport(repo=config.repo, version=config.version, cached_version=cached)

        logger.info("Repo: %s", config.repo)
        logger.info("Pinned: %s", config.version)
        logger.info("Cached: %s", cached or "none")

        if dry_run:
            logger.info("[dry-run] Would download from: %s %s", config.repo, config.version)
            for asset_name, output_path in config.files.items():
                logger.info("[dry-run] %s → %s", asset_name, output_path)
            report.status = "dry_run"
            report.planned = dict(config.files)
            return report

        if not force and self.is_up_to_date(config, cached):
            logger.info("Already at %s - no sync needed", config.version)
            report.status = "up_to_date"
            return report

        logger.info("Syncing %s...", config.version)

        release = self.client.fetch_release(config.repo, config.version)
        files = self.client.download_assets(release, list(config.files))
        report.skipped = [name for name in config.files if name not in files]

        for asset_name, content in files.items():
            rel = config.files[asset_name]
            target = self._output_path(rel)
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content, encoding="utf-8")
            except OSError as e:
                logger.error("Failed writing %s: %s", rel, e)
                raise SyncWriteError(rel, str(e)) from e
            report.written.append(rel)
            logger.info("Written: %s", rel)

        self.cache.write(config.version)
        report.status = "synced"
        logger.info("Synced to %s", config.version)

        if config.post_sync:
            report.post_sync_ok = self.run_post_sync(config.post_sync)

        return report

    def run_post_sync(self, command: str) -> bool:
        """Run the consumer's post-sync command; never raises."""
        logger.info("Running: %s", command)
        try:
            proc = subprocess.run(
                command,
                shell=True,
                cwd=str(self.project_root),
                capture_output=True,
                text=True,
                timeout=POST_SYNC_TIMEOUT_S,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning("Post-sync command failed: %s", e)
            return False

        if proc.returncode != 0:
            logger.warning(
                "Post-sync command exited %d: %s",
                proc.returncode,
                (proc.stderr or proc.stdout).strip()[:200],
            )
            return False
        return True
