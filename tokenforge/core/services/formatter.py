"""
Token formatter — rewrite token files into their canonical JSON form.

Canonical form is ``serialize_token_file``: two-space indent, keys in
document order, non-ASCII kept as-is, one trailing newline.  It is the
same form ``write_token_tree`` produces, so files written by the server
never show up as unformatted.

Modes:
    write    rewrite files that differ (default)
    check    report files that differ, write nothing
    dry_run  report files that would be rewritten, write nothing
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from tokenforge.core.services.tokens import read_token_tree, serialize_token_file

logger = logging.getLogger(__name__)


@dataclass
class FormatReport:
    """What a format run found or changed."""

    tokens_dir: str = ""
    mode: str = "write"               # write | check | dry_run
    total: int = 0
    changed: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.changed

    def to_dict(self) -> dict:
        return {
            "tokens_dir": self.tokens_dir,
            "mode": self.mode,
            "total": self.total,
            "changed": self.changed,
            "clean": self.clean,
        }


def format_tokens(tokens_dir: Path, check: bool = False, dry_run: bool = False) -> FormatReport:
    """Bring every ``*.json`` file under ``tokens_dir`` into canonical form.

    Args:
        tokens_dir: Token root.
        check: Only report files that are not canonical.
        dry_run: Only report files that would be rewritten.

    Returns:
        FormatReport; ``changed`` lists relative paths in sorted order.

    Raises:
        TokensDirNotFoundError: ``tokens_dir`` is not a directory.
        TokenValueError: A file is not valid JSON.  Nothing is written.
    """
    mode = "check" if check else "dry_run" if dry_run else "write"
    tree = read_token_tree(tokens_dir)
    report = FormatReport(tokens_dir=str(tokens_dir), mode=mode, total=len(tree))

    pending: dict[Path, str] = {}
    for rel, content in tree.items():
        path = tokens_dir / rel
        formatted = serialize_token_file(content)
        if path.read_text(encoding="utf-8") != formatted:
            report.changed.append(rel)
            pending[path] = formatted

    if mode == "write":
        for path, formatted in pending.items():
            path.write_text(formatted, encoding="utf-8")
            logger.info("Formatted %s", path)

    logger.debug("format (%s): %d of %d file(s) differ", mode, len(report.changed), report.total)
    return report
