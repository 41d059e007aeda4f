"""Contrato mínimo que consume el stream de logs."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from interactsh_client.core.domain.logs import LogEntry


@runtime_checkable
class PollingSession(Protocol):
    """Lo único que `LogStream` necesita de una sesión.

    Permite conducir el stream con un doble de test que cambie de estado
    tras N polls.
    """

    async def is_registered(self) -> bool: ...

    async def poll(self) -> list[LogEntry] | None: ...
