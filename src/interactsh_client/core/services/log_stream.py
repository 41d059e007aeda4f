"""Stream continuo de logs.

`PollLoop` es una máquina de estados pura {WAITING_ON_TIMER, WAITING_ON_SERVER,
TERMINATED} que avanza con eventos externos (timer cumplido, respuesta
recibida, cancelación pedida). `LogStream` la conduce con asyncio y la expone
como iterador asíncrono; así las condiciones de carrera de la cancelación se
pueden testear sin depender del runtime.

La cancelación se comprueba solo entre iteraciones: como mucho un poll más
puede completarse tras pedirla.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator

from interactsh_client.core.domain.logs import LogEntry
from interactsh_client.core.errors import PollError
from interactsh_client.core.interfaces.session import PollingSession

logger = logging.getLogger(__name__)


class LogPollResultKind(str, Enum):
    NEW_LOG = "new_log"
    NO_NEW_LOGS = "no_new_logs"
    ERROR = "error"


@dataclass(frozen=True)
class LogPollResult:
    """Elemento emitido por el stream."""

    kind: LogPollResultKind
    entry: LogEntry | None = None
    error: PollError | None = None

    @classmethod
    def new_log(cls, entry: LogEntry) -> "LogPollResult":
        return cls(kind=LogPollResultKind.NEW_LOG, entry=entry)

    @classmethod
    def no_new_logs(cls) -> "LogPollResult":
        return cls(kind=LogPollResultKind.NO_NEW_LOGS)

    @classmethod
    def failure(cls, error: PollError) -> "LogPollResult":
        return cls(kind=LogPollResultKind.ERROR, error=error)

    @property
    def is_error(self) -> bool:
        return self.kind is LogPollResultKind.ERROR


class StreamState(str, Enum):
    WAITING_ON_TIMER = "waiting_on_timer"
    WAITING_ON_SERVER = "waiting_on_server"
    TERMINATED = "terminated"


class InvalidTransition(RuntimeError):
    pass


PollOutcome = list[LogEntry] | None | PollError


class PollLoop:
    """Máquina de estados del stream, sin I/O."""

    def __init__(self, *, emit_no_new_logs: bool = False) -> None:
        self._emit_no_new_logs = emit_no_new_logs
        self._state = StreamState.WAITING_ON_TIMER
        self._cancel_requested = False

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested

    def request_cancel(self) -> None:
        self._cancel_requested = True

    def _expect(self, state: StreamState) -> None:
        if self._state is not state:
            raise InvalidTransition(f"expected {state.value}, loop is {self._state.value}")

    def timer_fired(self, *, registered: bool) -> StreamState:
        """El periodo venció (o se pidió cancelar): decidir si se hace otro poll."""

        self._expect(StreamState.WAITING_ON_TIMER)
        if self._cancel_requested or not registered:
            self._state = StreamState.TERMINATED
        else:
            self._state = StreamState.WAITING_ON_SERVER
        return self._state

    def response_received(self, outcome: PollOutcome) -> list[LogPollResult]:
        """Traduce el resultado de un poll a elementos del stream."""

        self._expect(StreamState.WAITING_ON_SERVER)

        # Un deregister entre la comprobación de estado y el poll termina el stream.
        if isinstance(outcome, PollError) and outcome.kind is PollError.Kind.NOT_CURRENTLY_REGISTERED:
            self._state = StreamState.TERMINATED
            return []

        self._state = StreamState.WAITING_ON_TIMER
        if isinstance(outcome, PollError):
            return [LogPollResult.failure(outcome)]
        if not outcome:
            return [LogPollResult.no_new_logs()] if self._emit_no_new_logs else []
        return [LogPollResult.new_log(entry) for entry in outcome]


class LogStream:
    """Iterador asíncrono infinito hasta cancelar o desregistrar; no reiniciable.

        stream = client.log_stream(5.0)
        async for result in stream:
            ...
        # desde otra tarea: stream.cancel()
    """

    def __init__(
        self,
        session: PollingSession,
        poll_period: float,
        *,
        emit_no_new_logs: bool = False,
    ) -> None:
        if poll_period < 0:
            raise ValueError("poll_period must be >= 0")
        self._session = session
        self._poll_period = poll_period
        self._loop = PollLoop(emit_no_new_logs=emit_no_new_logs)
        self._cancelled = asyncio.Event()
        self._started = False

    @property
    def state(self) -> StreamState:
        return self._loop.state

    def cancel(self) -> None:
        self._loop.request_cancel()
        self._cancelled.set()

    def __aiter__(self) -> AsyncIterator[LogPollResult]:
        if self._started:
            raise RuntimeError("LogStream cannot be restarted")
        self._started = True
        return self._run()

    async def _wait_for_timer(self) -> None:
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout=self._poll_period)
        except asyncio.TimeoutError:
            pass

    async def _run(self) -> AsyncIterator[LogPollResult]:
        while True:
            await self._wait_for_timer()
            registered = await self._session.is_registered()
            if self._loop.timer_fired(registered=registered) is StreamState.TERMINATED:
                logger.debug(
                    "Log stream terminated (%s)",
                    "cancelled" if self._loop.cancel_requested else "client unregistered",
                )
                return

            outcome: PollOutcome
            try:
                outcome = await self._session.poll()
            except PollError as exc:
                logger.debug("Poll failed inside log stream: %s", exc)
                outcome = exc

            for item in self._loop.response_received(outcome):
                yield item
            if self._loop.state is StreamState.TERMINATED:
                logger.debug("Log stream terminated (client unregistered during poll)")
                return
