"""
On-demand generation — single-flight previews for the token editor.

The editor posts whole token trees (no project on disk).  Each request
becomes a ticket on one FIFO queue; a single daemon worker pulls
tickets and runs them to completion, one at a time, in submission
order.  Every caller waits on its own ticket's future, so completion
is independent even though execution is strictly sequential.

Per ticket:
    mkdtemp → write tokens/ → engine (preview profile only) → read artifacts → rmtree

Each run gets its own uniquely named scratch directory, removed on
both the success and the failure path.

State
─────
- ``_queue``      tickets waiting for the worker (owned by this object)
- ``_last_good``  newest successful result, replaced whole under ``_lock``

On failure the caller gets ``success=False`` with the error message
*and* the last good artifacts, so the preview keeps rendering the
previous CSS instead of going blank.

Tickets cannot be cancelled once enqueued.
"""

from __future__ import annotations

import itertools
import logging
import queue
import shutil
import tempfile
import threading
from collections.abc import Iterable
from concurrent.futures import Future
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from tokenforge.core.engine.generation import GenerationEngine
from tokenforge.core.errors import (
    ConfigInvalidError,
    InvalidTokenPathError,
    TokenforgeError,
)
from tokenforge.core.models.config import ProducerConfig
from tokenforge.core.models.generation import GenerationResult, RunMode
from tokenforge.core.services.tokens import write_token_tree

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = ("tailwind",)


@dataclass
class SingleFlightTicket:
    """One queued request and the future its caller waits on."""

    seq: int
    token_files: Any
    future: Future = field(default_factory=Future)

    def result(self, timeout: float | None = None) -> GenerationResult:
        return self.future.result(timeout=timeout)


class OnDemandGenerationService:
    """Serialises generation requests through one worker thread.

    Args:
        engine: Engine to run (default: built-in generators).
        profile: Generator names to run for previews.
        scratch_root: Parent directory for scratch dirs (default: system temp).

    Raises:
        ConfigInvalidError: A profile entry is not a valid generator name.
    """

    def __init__(
        self,
        engine: GenerationEngine | None = None,
        profile: Iterable[str] = DEFAULT_PROFILE,
        scratch_root: Path | None = None,
    ):
        self._engine = engine or GenerationEngine()
        self._profile = tuple(profile)
        try:
            self._config = ProducerConfig(
                tokens="tokens",
                output="build",
                generators={name: True for name in self._profile},
            )
        except ValidationError as e:
            problems = [err["msg"] for err in e.errors()]
            raise ConfigInvalidError("preview profile", problems) from e

        self._scratch_root = scratch_root

        self._queue: queue.Queue[SingleFlightTicket | None] = queue.Queue()
        self._lock = threading.Lock()
        self._seq = itertools.count(1)
        self._last_good: GenerationResult | None = None
        self._worker: threading.Thread | None = None
        self._closed = False

    # ── Properties ──────────────────────────────────────────────

    @property
    def last_good(self) -> GenerationResult | None:
        with self._lock:
            return self._last_good

    @property
    def profile(self) -> tuple[str, ...]:
        return self._profile

    @property
    def pending(self) -> int:
        """Tickets queued but not yet picked up by the worker."""
        return self._queue.qsize()

    # ── Submission ──────────────────────────────────────────────

    def enqueue(self, token_files: Any) -> SingleFlightTicket:
        """Append a request to the queue and return its ticket at once."""
        with self._lock:
            if self._closed:
                raise RuntimeError("OnDemandGenerationService is closed")
            ticket = SingleFlightTicket(seq=next(self._seq), token_files=token_files)
            self._ensure_worker()
            self._queue.put(ticket)
        logger.debug("Ticket %d enqueued", ticket.seq)
        return ticket

    def submit(self, token_files: Any, timeout: float | None = None) -> GenerationResult:
        """Enqueue and block until this request's turn has completed."""
        return self.enqueue(token_files).result(timeout=timeout)

    def close(self, timeout: float | None = None) -> None:
        """Stop accepting work; the worker exits after draining the queue."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            worker = self._worker
            if worker is not None:
                self._queue.put(None)
        if worker is not None:
            worker.join(timeout=timeout)

    # ── Worker ──────────────────────────────────────────────────

    def _ensure_worker(self) -> None:
        # caller holds _lock
        if self._worker is None or not self._worker.is_alive():
            self._worker = threading.Thread(
                target=self._work_loop,
                daemon=True,
                name="tokenforge-generate",
            )
            self._worker.start()

    def _work_loop(self) -> None:
        while True:
            ticket = self._queue.get()
            if ticket is None:
                break
            try:
                ticket.future.set_result(self._process(ticket))
            except Exception as e:
                logger.exception("Ticket %d crashed the worker step", ticket.seq)
                ticket.future.set_exception(e)

    def _process(self, ticket: SingleFlightTicket) -> GenerationResult:
        try:
            result = self._run(ticket)
        except Exception as e:
            message = e.detail if isinstance(e, TokenforgeError) else str(e) or type(e).__name__
            logger.warning("Ticket %d failed: %s", ticket.seq, message)
            with self._lock:
                fallback = self._last_good
            return GenerationResult.failure(
                message,
                fallback=fallback,
                failed_generator=getattr(e, "generator", None),
            )

        with self._lock:
            self._last_good = result
        logger.info("Ticket %d done (%d artifacts)", ticket.seq, len(result.artifacts))
        return result

    def _run(self, ticket: SingleFlightTicket) -> GenerationResult:
        if not isinstance(ticket.token_files, dict):
            raise InvalidTokenPathError(
                type(ticket.token_files).__name__,
                "is not a mapping of token file paths to token JSON",
            )

        scratch = Path(
            tempfile.mkdtemp(prefix=f"tokenforge-gen-{ticket.seq}-", dir=self._scratch_root)
        )
        try:
            tokens_dir = scratch / "tokens"
            tokens_dir.mkdir()
            write_token_tree(ticket.token_files, tokens_dir)
            return self._engine.run(
                self._config,
                tokens_dir,
                scratch / "build",
                mode=RunMode.WRITE,
                only=self._profile,
            )
        finally:
            shutil.rmtree(scratch, ignore_errors=True)
