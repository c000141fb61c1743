"""
Release client — GitHub Releases metadata and asset downloads.

    GET {api}/repos/{owner}/{name}/releases/tags/{tag}   → asset list
    GET {browser_download_url}  (Accept: application/octet-stream)

An optional token (``GITHUB_TOKEN``) is sent as ``Authorization: token …``.
Status mapping for the release lookup:

    404      → ReleaseNotFoundError
    401/403  → AuthRequiredError
    other    → UpstreamError

A missing or undownloadable asset is not fatal: ``download_assets``
warns and skips it, since consumers often request a subset.
Network only — nothing is written locally.
"""

from __future__ import annotations

import json
import logging
import os
import urllib.error
import urllib.parse
import urllib.request

from tokenforge import __version__
from tokenforge.core.errors import (
    AssetNotFoundError,
    AuthRequiredError,
    ReleaseNotFoundError,
    UpstreamError,
)
from tokenforge.core.models.release import ReleaseAsset, ReleaseMetadata

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30
TOKEN_ENV = "GITHUB_TOKEN"


class ReleaseClient:
    """Fetches releases and their assets from GitHub.

    Args:
        token: Opaque bearer token, or None for anonymous access.
        api_url: API root (override for GitHub Enterprise).
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        token: str | None = None,
        api_url: str = GITHUB_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._token = token or None
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_env(cls) -> ReleaseClient:
        return cls(token=os.environ.get(TOKEN_ENV))

    def _headers(self, accept: str) -> dict[str, str]:
        headers = {
            "Accept": accept,
            "User-Agent": f"tokenforge/{__version__}",
        }
        if self._token:
            headers["Authorization"] = f"token {self._token}"
        return headers

    # ── Release metadata ────────────────────────────────────────

    def fetch_release(self, repo: str, tag: str) -> ReleaseMetadata:
        """Look up a release by tag.

        Raises:
            ReleaseNotFoundError: No release with that tag.
            AuthRequiredError: 401/403 — private repo or bad token.
            UpstreamError: Any other failure.
        """
        url = (
            f"{self.api_url}/repos/{repo}/releases/tags/"
            f"{urllib.parse.quote(tag, safe='')}"
        )
        req = urllib.request.Request(
            url, headers=self._headers("application/vnd.github.v3+json")
        )

        logger.debug("GET %s", url)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = resp.read()
        except urllib.error.HTTPError as e:
            if e.code == 404:
                raise ReleaseNotFoundError(tag, repo) from e
            if e.code in (401, 403):
                raise AuthRequiredError() from e
            raise UpstreamError(f"GitHub API returned {e.code} for {repo}@{tag}", e.code) from e
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            raise UpstreamError(f"Could not reach GitHub: {e}") from e

        try:
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise UpstreamError(f"Malformed release response for {repo}@{tag}") from e

        raw_assets = data.get("assets") if isinstance(data, dict) else None
        if not isinstance(raw_assets, list):
            raise UpstreamError(f"Malformed release response for {repo}@{tag}")

        assets = [
            ReleaseAsset(
                name=a.get("name", ""),
                download_url=a.get("browser_download_url", ""),
                size=a.get("size", 0) or 0,
            )
            for a in raw_assets
            if isinstance(a, dict) and a.get("name")
        ]
        logger.info("Release %s@%s has %d asset(s)", repo, tag, len(assets))
        return ReleaseMetadata(repo=repo, tag=tag, assets=assets)

    # ── Assets ──────────────────────────────────────────────────

    def fetch_asset(self, locator: str) -> str:
        """Download one asset as text.

        Raises:
            AssetNotFoundError: Non-2xx or transport failure.
        """
        req = urllib.request.Request(
            locator, headers=self._headers("application/octet-stream")
        )
        logger.debug("GET %s", locator)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                return resp.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            raise AssetNotFoundError(locator, f"download failed ({e.code})") from e
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            raise AssetNotFoundError(locator, f"download failed ({e})") from e
        except UnicodeDecodeError as e:
            raise AssetNotFoundError(locator, "is not UTF-8 text") from e

    def download_assets(
        self,
        release: ReleaseMetadata,
        names: list[str],
    ) -> dict[str, str]:
        """Fetch the named assets, skipping any that are missing.

        Returns:
            Asset name → content, for every asset that was fetched.
        """
        files: dict[str, str] = {}
        for name in names:
            asset = release.asset(name)
            if asset is None:
                logger.warning("%s not found in release, skipping", name)
                continue

            logger.info("Downloading %s...", name)
            try:
                files[name] = self.fetch_asset(asset.download_url)
            except AssetNotFoundError as e:
                logger.warning("Failed to download %s: %s", name, e.detail)
        return files
