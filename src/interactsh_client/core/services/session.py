"""Handle de sesión: identidad + canal + keyring detrás de un único objeto.

Sincronización:
- `poll()` y las consultas de estado toman el lock en modo lectura y pueden
  ejecutarse a la vez.
- `register()`/`deregister()` lo toman en modo escritura.
- `poll()` captura correlation-id/secret al adquirir la lectura, así un
  deregister concurrente no altera un poll en vuelo.
- Un deregister pendiente tiene prioridad: los polls que llegan después
  esperan a que termine y fallan con `NOT_CURRENTLY_REGISTERED`.
"""

from __future__ import annotations

import logging

from interactsh_client.adapters.server_channel import ServerChannel
from interactsh_client.core.domain.logs import LogEntry
from interactsh_client.core.domain.models import Registered, SessionStatus
from interactsh_client.core.interfaces.keyring import AsymmetricKeyPair, KeyringService
from interactsh_client.core.services.decryption import decrypt_poll_response
from interactsh_client.core.services.locks import ReadWriteLock
from interactsh_client.core.services.log_stream import LogStream

logger = logging.getLogger(__name__)


class InteractshClient:
    """Sesión con un servidor Interactsh.

    Se obtiene con `ClientBuilder.build()`. Uso típico:

        async with ClientBuilder.default().build() as client:
            fqdn = await client.register()
            logs = await client.poll()
    """

    def __init__(
        self,
        *,
        channel: ServerChannel,
        keyring: KeyringService,
        keypair: AsymmetricKeyPair,
        parse_logs: bool = True,
    ) -> None:
        self._channel = channel
        self._keyring = keyring
        self._keypair = keypair
        self._parse_logs = parse_logs
        self._lock = ReadWriteLock()

    @property
    def server(self) -> str:
        return self._channel.server

    @property
    def parse_logs(self) -> bool:
        return self._parse_logs

    @property
    def keyring(self) -> KeyringService:
        return self._keyring

    async def register(self) -> str:
        async with self._lock.write():
            return await self._channel.register()

    async def deregister(self) -> None:
        async with self._lock.write():
            await self._channel.deregister()

    async def force_deregister(self) -> None:
        async with self._lock.write():
            await self._channel.force_deregister()

    async def status(self) -> SessionStatus:
        async with self._lock.read():
            return self._channel.status

    async def is_registered(self) -> bool:
        async with self._lock.read():
            return isinstance(self._channel.status, Registered)

    async def interaction_fqdn(self) -> str | None:
        async with self._lock.read():
            return self._channel.interaction_fqdn()

    async def poll(self) -> list[LogEntry] | None:
        """Un poll + descifrado. `None` si el servidor no tiene datos nuevos."""

        async with self._lock.read():
            credentials = self._channel.credentials()
            response = await self._channel.poll(credentials)

        if response is None:
            return None
        entries = decrypt_poll_response(
            response,
            keyring=self._keyring,
            keypair=self._keypair,
            parse_logs=self._parse_logs,
        )
        logger.debug("Decrypted %d log entries", len(entries or []))
        return entries

    def log_stream(self, poll_period: float, *, emit_no_new_logs: bool = False) -> LogStream:
        """Stream cancelable de resultados de poll cada `poll_period` segundos."""

        return LogStream(self, poll_period, emit_no_new_logs=emit_no_new_logs)

    async def aclose(self) -> None:
        """Desregistro best-effort, cierre del cliente HTTP y borrado de la clave."""

        try:
            await self.force_deregister()
        finally:
            await self._channel.http_client.aclose()
            self._keypair.wipe()

    async def __aenter__(self) -> "InteractshClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
