"""
Error taxonomy — every known failure carries a user-facing message.

Each error has a ``title`` (what went wrong), a ``detail`` (the specifics)
and an optional ``suggestion`` (how to fix it).  The CLI prints
``format()`` and exits 1 without a traceback; anything that is NOT a
``TokenforgeError`` is treated as a bug and reported as such.

Configuration errors abort immediately and are never retried.
``AssetNotFoundError`` is the one soft failure: the sync engine
catches it per asset and carries on.
"""

from __future__ import annotations

import click

REPORT_ISSUE_HINT = "Please report this issue with the command you ran and the output above."


class TokenforgeError(Exception):
    """Base class for all classified tokenforge failures."""

    def __init__(self, title: str, detail: str, suggestion: str | None = None):
        super().__init__(f"{title}: {detail}")
        self.title = title
        self.detail = detail
        self.suggestion = suggestion

    def format(self, color: bool = True) -> str:
        """Render the error as a structured terminal message."""
        label = click.style("Error:", fg="red") if color else "Error:"
        output = f"\n{label} {self.title}\n\n{self.detail}\n"
        if self.suggestion:
            hint = click.style("Suggestion:", fg="cyan") if color else "Suggestion:"
            output += f"\n{hint} {self.suggestion}\n"
        return output

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "detail": self.detail,
            "suggestion": self.suggestion,
        }


# ── Configuration ───────────────────────────────────────────────────


class ConfigNotFoundError(TokenforgeError):
    def __init__(self, config_path: str, consumer: bool):
        role = "consumer" if consumer else "producer"
        super().__init__(
            "Configuration not found",
            f"Could not find {config_path}",
            f"Run: tokenforge init --{role}",
        )
        self.config_path = config_path


class ConfigInvalidError(TokenforgeError):
    def __init__(self, config_path: str, problems: list[str]):
        lines = "\n".join(f"  - {p}" for p in problems)
        super().__init__(
            f"Invalid {config_path}",
            f"Configuration validation failed:\n{lines}",
            "Fix the listed fields and run the command again",
        )
        self.config_path = config_path
        self.problems = problems


class ConfigExistsError(TokenforgeError):
    def __init__(self, config_path: str):
        super().__init__(
            "Configuration already exists",
            f"{config_path} already exists",
            "Delete the file first if you want to reinitialize",
        )


# ── Tokens ──────────────────────────────────────────────────────────


class TokensDirNotFoundError(TokenforgeError):
    def __init__(self, tokens_dir: str):
        super().__init__(
            "Tokens directory not found",
            f'Directory "{tokens_dir}" does not exist',
            "Create the directory and add token JSON files",
        )


class InvalidTokenPathError(TokenforgeError):
    def __init__(self, path: str, reason: str):
        super().__init__(
            "Invalid token file path",
            f'"{path}" {reason}',
            "Token paths are relative, forward-slash separated and end in .json",
        )
        self.path = path


class TokenReferenceError(TokenforgeError):
    def __init__(self, chain: list[str]):
        super().__init__(
            "Circular token reference",
            "Circular reference detected: " + " -> ".join(chain),
            "Break the cycle by pointing one of the tokens at a literal value",
        )
        self.chain = chain


class TokenValueError(TokenforgeError):
    def __init__(self, token_path: str, value: object, expected: str):
        super().__init__(
            "Invalid token value",
            f"Token {token_path} has value {value!r}, expected {expected}",
        )
        self.token_path = token_path


# ── Generators ──────────────────────────────────────────────────────


class UnknownBuiltinGeneratorError(TokenforgeError):
    def __init__(self, name: str, available: list[str]):
        super().__init__(
            "Generator not found",
            f'Built-in generator "{name}" does not exist',
            f"Available generators: {', '.join(sorted(available))}",
        )
        self.name = name


class PluginLoadError(TokenforgeError):
    def __init__(self, plugin_path: str, message: str):
        super().__init__(
            "Plugin load failed",
            f"Could not load generator from {plugin_path}: {message}",
            'Ensure the file defines a "generate(context)" function',
        )
        self.plugin_path = plugin_path


class GenerationFailedError(TokenforgeError):
    def __init__(self, generator: str, message: str):
        super().__init__(
            "Generation failed",
            f'Generator "{generator}" failed: {message}',
            "Fix the generator or its tokens; remaining generators were not run",
        )
        self.generator = generator
        self.message = message


# ── Releases & sync ─────────────────────────────────────────────────


class ReleaseNotFoundError(TokenforgeError):
    def __init__(self, version: str, repo: str):
        super().__init__(
            "Release not found",
            f"Version {version} does not exist in {repo}",
            f"Check available releases: gh release list -R {repo}",
        )


class AuthRequiredError(TokenforgeError):
    def __init__(self) -> None:
        super().__init__(
            "Authentication required",
            "GITHUB_TOKEN is required for private repositories",
            "Set the environment variable: export GITHUB_TOKEN=ghp_xxx",
        )


class AssetNotFoundError(TokenforgeError):
    def __init__(self, asset: str, detail: str = "not found in release"):
        super().__init__("Asset not found", f"{asset} {detail}")
        self.asset = asset


class UpstreamError(TokenforgeError):
    def __init__(self, message: str, status: int | None = None):
        super().__init__(
            "GitHub API error",
            message,
            "Retry later, or check https://www.githubstatus.com",
        )
        self.status = status


class SyncWriteError(TokenforgeError):
    def __init__(self, path: str, message: str):
        super().__init__(
            "Sync failed",
            f"Could not write {path}: {message}",
            "Check permissions on the output path; the cached version was not updated",
        )
        self.path = path


class CacheIOError(TokenforgeError):
    def __init__(self, path: str, message: str):
        super().__init__(
            "Sync cache unavailable",
            f"Could not access {path}: {message}",
            "Delete the cache file and run sync again with --force",
        )
