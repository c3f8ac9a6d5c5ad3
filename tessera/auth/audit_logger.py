"""
Fire-and-forget audit logging for the tessera authentication engine.

The audit logger sits between the facade and an ``AuditProvider``. It
turns auth events into immutable ``AuditLogEntry`` records and hands them
to the provider without ever letting a provider failure reach the caller.

Security considerations:
- Audit context must never carry raw secrets or tokens; every context is
  passed through ``mask_sensitive_data`` before it is stored
- A failing audit write is logged at ERROR and counted, never raised
- Entries of one session are written in the order they were recorded
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from .providers.audit import AuditProvider
from .types import AuditAction, AuditLogEntry, AuditOutcome
from .utils import mask_sensitive_data, new_id

logger = logging.getLogger(__name__)

DISPATCH_MODES = ("inline", "background")


class AuditLogger:
    """
    Best-effort, append-only audit trail writer.

    Two dispatch modes are supported:

    - ``inline`` (default): ``record`` awaits the provider append inside a
      guard that swallows every exception.
    - ``background``: ``record`` enqueues the entry on a single
      ``asyncio.Queue`` drained by one worker task, so entries are
      written in the order they were recorded.

    Swallowed failures are counted in ``failures`` so tests and
    monitoring can observe them.

    Args:
        provider: Storage for audit entries
        config: Audit configuration (``dispatch``, ``queue_size``)
        clock: Callable returning the current aware UTC datetime
    """

    def __init__(
        self,
        provider: AuditProvider,
        config: dict[str, Any] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.provider = provider
        self.config = dict(config or {})
        self._validate_config(self.config)

        self.dispatch = self.config.get("dispatch", "inline")
        self.queue_size = self.config.get("queue_size", 0)
        self.clock = clock or (lambda: datetime.now(UTC))

        self.failures = 0
        self._queue: asyncio.Queue[AuditLogEntry] | None = None
        self._worker: asyncio.Task | None = None

    def _validate_config(self, config: dict[str, Any]) -> None:
        dispatch = config.get("dispatch", "inline")
        if dispatch not in DISPATCH_MODES:
            raise ValueError(f"Unknown audit dispatch mode: {dispatch}")
        if config.get("queue_size", 0) < 0:
            raise ValueError("Audit queue size cannot be negative")

    async def record(
        self,
        action: AuditAction,
        outcome: AuditOutcome,
        session_id: str | None = None,
        identity_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """
        Record one auth event. Never raises.

        Args:
            action: Kind of auth event
            outcome: Whether the operation succeeded
            session_id: Session the event belongs to, if known
            identity_id: Identity the event belongs to, if known
            context: Extra structured data; sensitive keys are masked
        """
        try:
            entry = AuditLogEntry(
                id=new_id(),
                action_type=action,
                outcome=outcome,
                session_id=session_id,
                identity_id=identity_id,
                context=mask_sensitive_data(context or {}),
                created_at=self.clock(),
            )

            if self.dispatch == "background":
                self._ensure_worker()
                self._queue.put_nowait(entry)
            else:
                await self.provider.append(entry)

        except Exception as e:
            self._record_failure(action, e)

    def _record_failure(self, action: AuditAction, error: Exception) -> None:
        self.failures += 1
        logger.error(
            f"Failed to write audit entry for {action.value}: {type(error).__name__}: {error}"
        )

    def _ensure_worker(self) -> None:
        if self._queue is None:
            self._queue = asyncio.Queue(maxsize=self.queue_size)
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run_worker())

    async def _run_worker(self) -> None:
        while True:
            entry = await self._queue.get()
            try:
                await self.provider.append(entry)
            except Exception as e:
                self._record_failure(entry.action_type, e)
            finally:
                self._queue.task_done()

    async def start(self) -> None:
        """Start the background worker. A no-op for inline dispatch."""
        if self.dispatch == "background":
            self._ensure_worker()

    async def drain(self) -> None:
        """Wait until every queued entry has been handed to the provider."""
        if self._queue is not None and self._worker is not None:
            await self._queue.join()

    async def close(self) -> None:
        """Drain the queue and stop the background worker."""
        await self.drain()
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None
