"""Keyboard-wedge scan assembly.

A wedge scanner types its payload as keystrokes, with no reliable
start or end marker.  :class:`ScanAssembler` rebuilds discrete scans
from that stream: a terminator key flushes at once, otherwise an idle
timer does.  The timer delay is asked for on every re-arm, so it can
follow the session state (short between items, longer for a location).

Scheduling is injected.  On a live loop the scheduler is the
:class:`asyncio.AbstractEventLoop` itself (``loop.call_later``); tests
pass a fake with a simulated clock.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any, Protocol

from scanledger.config import ScannerConfig
from scanledger.models._base import trim, utcnow
from scanledger.models.scan import ControlKey, ScanEvent
from scanledger.models.session import SessionState
from scanledger.session import ScanSession

_logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything with ``call_later`` semantics (e.g. an asyncio loop)."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class ScanAssembler:
    """Turn keystrokes into :class:`ScanEvent` objects.

    Parameters
    ----------
    on_scan : callable
        Receives each flushed scan.  It is called synchronously and must
        take ownership of the event before returning; the buffer is
        already empty by then.
    scheduler : Scheduler
        Used to arm the idle timer.  At most one timer is live.
    idle_timeout : callable
        Returns the delay to arm, or ``None`` to not arm a timer.
    terminator_keys : iterable of ControlKey
        Keys that flush immediately.
    clock : callable
        Timestamp source for :attr:`ScanEvent.received_at`.
    """

    def __init__(
        self,
        on_scan: Callable[[ScanEvent], None],
        *,
        scheduler: Scheduler,
        idle_timeout: Callable[[], float | None],
        terminator_keys: tuple[ControlKey, ...] = (ControlKey.ENTER, ControlKey.TAB),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._on_scan = on_scan
        self._scheduler = scheduler
        self._idle_timeout = idle_timeout
        self._terminators = frozenset(terminator_keys)
        self._clock = clock
        self._buffer: list[str] = []
        self._timer: TimerHandle | None = None

    @property
    def buffer(self) -> str:
        return "".join(self._buffer)

    @property
    def timer_armed(self) -> bool:
        return self._timer is not None

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def on_char(self, char: str) -> None:
        """Append one printable character."""
        if len(char) != 1:
            _logger.debug("Ignoring multi-character key %r", char)
            return
        self._buffer.append(char)
        self._arm()

    def on_control(self, key: ControlKey | str) -> None:
        """Handle a non-printable key: terminator, backspace or ignored."""
        try:
            key = ControlKey(key)
        except ValueError:
            _logger.debug("Ignoring control key %r", key)
            return
        if key in self._terminators:
            self.flush()
            return
        if key is ControlKey.BACKSPACE:
            if self._buffer:
                self._buffer.pop()
            self._arm()

    def on_field_value(self, value: str) -> None:
        """Replace the buffer with a side-channel value (e.g. a text field)."""
        if not value:
            return
        self._buffer = list(value)
        self._arm()

    def on_idle_timeout(self) -> None:
        self._timer = None
        _logger.debug("Idle timeout, flushing %d buffered chars", len(self._buffer))
        self.flush()

    # ------------------------------------------------------------------
    # Flush / timer
    # ------------------------------------------------------------------

    def flush(self) -> None:
        """Emit the buffer as one scan. An empty buffer emits nothing."""
        text = trim("".join(self._buffer))
        self._buffer = []
        self._cancel_timer()
        if not text:
            return
        self._on_scan(ScanEvent(text=text, received_at=self._clock()))

    def cancel(self) -> None:
        """Drop the buffer and any pending timer without emitting."""
        self._buffer = []
        self._cancel_timer()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _arm(self) -> None:
        self._cancel_timer()
        delay = self._idle_timeout()
        if delay is None:
            return
        self._timer = self._scheduler.call_later(delay, self.on_idle_timeout)


class ScannerInput:
    """Feed a :class:`ScanSession` from a keystroke source on an asyncio loop.

    Flushed scans go through a queue drained by one worker task, so each
    scan is fully handled (classified, decoded, committed) before the
    next one starts.  While scans are queued, the idle timer follows the
    state the session will reach once they are handled.  Leaving the
    context flushes any typed characters and waits for the queue.

    Usage::

        async with ScanSession(store) as session, ScannerInput(session) as scanner:
            for char in "A-01":
                scanner.on_char(char)
            scanner.on_control("Enter")
            await scanner.drain()
    """

    def __init__(
        self,
        session: ScanSession,
        *,
        config: ScannerConfig | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._session = session
        self._config = config or session.config
        self._scheduler = scheduler
        self._queue: asyncio.Queue[ScanEvent] = asyncio.Queue()
        self._assembler: ScanAssembler | None = None
        self._worker: asyncio.Task[None] | None = None
        self._pending = 0
        self._expected_state = session.state

    async def __aenter__(self) -> ScannerInput:
        loop = asyncio.get_running_loop()
        self._assembler = ScanAssembler(
            self._enqueue,
            scheduler=self._scheduler or loop,
            idle_timeout=lambda: self._config.idle_timeout_for(self.effective_state),
            terminator_keys=self._config.terminator_keys,
        )
        self._worker = loop.create_task(self._run())
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._assembler is not None:
            self._assembler.flush()
            self._assembler = None
        if self._worker is None:
            return
        if not self._worker.done():
            await self._queue.join()
        self._worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._worker
        self._worker = None
        while not self._queue.empty():
            event = self._queue.get_nowait()
            self._queue.task_done()
            _logger.error("Scan %r discarded: scanner input stopped before it was handled", event.text)

    @property
    def effective_state(self) -> SessionState:
        """Session state once every queued scan has been handled."""
        if self._pending:
            return self._expected_state
        return self._session.state

    def _enqueue(self, event: ScanEvent) -> None:
        self._expected_state = self._session.expected_state(event.text, self.effective_state)
        self._pending += 1
        self._queue.put_nowait(event)

    def _require_assembler(self) -> ScanAssembler:
        if self._assembler is None:
            raise RuntimeError("ScannerInput not started. Use 'async with ScannerInput(...) as scanner:'")
        return self._assembler

    def on_char(self, char: str) -> None:
        self._require_assembler().on_char(char)

    def on_control(self, key: ControlKey | str) -> None:
        self._require_assembler().on_control(key)

    def on_field_value(self, value: str) -> None:
        self._require_assembler().on_field_value(value)

    def feed(self, text: str) -> None:
        """Type *text* character by character, without a terminator."""
        assembler = self._require_assembler()
        for char in text:
            assembler.on_char(char)

    async def drain(self) -> None:
        """Wait until every flushed scan has been handled."""
        await self._queue.join()

    async def _run(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self._session.handle_scan(event.text)
            except Exception:
                _logger.exception("Scan handling failed for %r", event.text)
            finally:
                self._pending -= 1
                self._queue.task_done()
