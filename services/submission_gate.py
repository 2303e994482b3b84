"""Single entry point deciding whether a requested send goes ahead."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Protocol

from models import Message, SendSource, Sender
from services.message_log import MessageLog
from services.profile_service import ProfileStore


logger = logging.getLogger(__name__)

__all__ = [
    "InputBuffer",
    "REJECT_BUSY",
    "REJECT_EMPTY",
    "REJECT_TOO_SOON",
    "SendDecision",
    "SubmissionGate",
    "SubmissionLock",
]

REJECT_EMPTY = "empty"
REJECT_BUSY = "busy"
REJECT_TOO_SOON = "too-soon"


class InputBuffer(Protocol):
    """The editable text box the click and Enter paths read from."""

    def read(self) -> str: ...

    def clear(self) -> None: ...


@dataclass
class SubmissionLock:
    in_flight: bool = False
    last_send: float | None = None
    acquired_at: float | None = None

    def is_stale(self, now: float, failsafe: float) -> bool:
        return self.in_flight and self.acquired_at is not None and now - self.acquired_at >= failsafe


@dataclass(frozen=True)
class SendDecision:
    accepted: bool
    reason: str | None = None
    message: Message | None = None


class SubmissionGate:
    """Serialises sends from every trigger source.

    A request is accepted only when it carries non-blank text, nothing is in
    flight and at least ``min_interval`` seconds have passed since the last
    accepted send. The in-flight flag is released when ``dispatch`` returns
    or raises, and a lock older than ``failsafe`` seconds is treated as
    released regardless.
    """

    def __init__(
        self,
        message_log: MessageLog,
        profile_store: ProfileStore,
        dispatch: Callable[[str], object],
        *,
        input_buffer: InputBuffer | None = None,
        min_interval: float = 0.5,
        failsafe: float = 3.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._message_log = message_log
        self._profile_store = profile_store
        self._dispatch = dispatch
        self._input_buffer = input_buffer
        self._min_interval = min_interval
        self._failsafe = failsafe
        self._clock = clock
        self._lock = SubmissionLock()

    @property
    def min_interval(self) -> float:
        return self._min_interval

    @property
    def failsafe(self) -> float:
        return self._failsafe

    @property
    def lock(self) -> SubmissionLock:
        return self._lock

    @property
    def in_flight(self) -> bool:
        self._expire_stale_lock(self._clock())
        return self._lock.in_flight

    def attach_input_buffer(self, input_buffer: InputBuffer | None) -> None:
        self._input_buffer = input_buffer

    def release(self) -> None:
        self._lock.in_flight = False
        self._lock.acquired_at = None

    def _expire_stale_lock(self, now: float) -> None:
        if self._lock.is_stale(now, self._failsafe):
            logger.warning("Send lock held for over %.1fs; releasing via failsafe.", self._failsafe)
            self.release()

    def _read_text(self, source: SendSource, text_override: str | None) -> str:
        if text_override is not None:
            return text_override
        if source is SendSource.VOICE or self._input_buffer is None:
            return ""
        return self._input_buffer.read() or ""

    def _reject(self, source: SendSource, reason: str) -> SendDecision:
        logger.info("Send from %s rejected (%s)", source.value, reason)
        return SendDecision(accepted=False, reason=reason)

    def request_send(self, source: SendSource | str, text_override: str | None = None) -> SendDecision:
        """Accept or reject a send. Never raises."""

        try:
            source = SendSource(source)
        except ValueError:
            logger.warning("Unknown send source %r ignored", source)
            return SendDecision(accepted=False, reason="unknown-source")

        now = self._clock()
        self._expire_stale_lock(now)

        text = self._read_text(source, text_override).strip()
        if not text:
            return self._reject(source, REJECT_EMPTY)
        if self._lock.in_flight:
            return self._reject(source, REJECT_BUSY)
        if self._lock.last_send is not None and now - self._lock.last_send < self._min_interval:
            return self._reject(source, REJECT_TOO_SOON)

        self._lock.in_flight = True
        self._lock.acquired_at = now
        self._lock.last_send = now
        message: Message | None = None
        try:
            if source is not SendSource.VOICE and self._input_buffer is not None:
                self._input_buffer.clear()
            message = self._message_log.append(Sender.USER, text)
            self._profile_store.note_user_turn()
            logger.info("Send from %s accepted (%s chars)", source.value, len(text))
            self._dispatch(text)
        except Exception:
            logger.exception("Accepted send from %s failed to complete", source.value)
        finally:
            self.release()
        return SendDecision(accepted=True, message=message)
