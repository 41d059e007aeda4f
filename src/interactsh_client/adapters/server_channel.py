"""Canal con el servidor Interactsh: register / poll / deregister.

Estado: `Unregistered` -> `register()` -> `Registered` -> `deregister()` -> `Unregistered`.

Reglas:
- Un intento fallido nunca modifica el estado, así que reintentar es seguro.
- Exactamente un round trip HTTP por operación; sin reintentos ni caché.
- El canal no sincroniza: el acceso concurrente lo ordena `InteractshClient`.
"""

from __future__ import annotations

import logging
import random

import httpx
from pydantic import BaseModel, ValidationError

from interactsh_client.adapters.http_client import auth_headers
from interactsh_client.core.config import AuthScheme
from interactsh_client.core.domain.models import (
    UNREGISTERED,
    CorrelationConfig,
    DeregisterData,
    PollCredentials,
    PollResponse,
    RegisterData,
    Registered,
    SessionStatus,
)
from interactsh_client.core.errors import PollError, RegistrationError
from interactsh_client.core.services.correlation import generate_identity

logger = logging.getLogger(__name__)


def _server_message(response: httpx.Response) -> str:
    text = response.text.strip()
    return text or "Unknown error"


class ServerChannel:
    """Implementa el protocolo HTTP y es dueño del `SessionStatus`."""

    def __init__(
        self,
        *,
        server: str,
        http_client: httpx.AsyncClient,
        encoded_public_key: str,
        secret_key: str,
        auth_token: str | None = None,
        auth_scheme: AuthScheme = AuthScheme.SIMPLE,
        correlation_config: CorrelationConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._server = server
        self._http = http_client
        self._encoded_public_key = encoded_public_key
        self._secret_key = secret_key
        self._auth = auth_headers(auth_token, auth_scheme)
        self._correlation_config = correlation_config or CorrelationConfig()
        self._rng = rng
        self._status: SessionStatus = UNREGISTERED

    @property
    def server(self) -> str:
        return self._server

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def http_client(self) -> httpx.AsyncClient:
        return self._http

    def interaction_fqdn(self) -> str | None:
        if isinstance(self._status, Registered):
            return f"{self._status.subdomain}.{self._server}"
        return None

    def credentials(self) -> PollCredentials:
        """Credenciales actuales para un poll; falla si no hay registro."""

        if not isinstance(self._status, Registered):
            raise PollError(PollError.Kind.NOT_CURRENTLY_REGISTERED, "Not currently registered")
        return PollCredentials(
            correlation_id=self._status.correlation_id,
            secret_key=self._secret_key,
        )

    def _url(self, action: str) -> str:
        return f"https://{self._server}/{action}"

    async def register(self) -> str:
        """Registra una identidad nueva y devuelve el FQDN de interacción."""

        if isinstance(self._status, Registered):
            raise RegistrationError(RegistrationError.Kind.ALREADY_REGISTERED, "Already registered")

        identity = generate_identity(self._correlation_config, rng=self._rng)
        body = RegisterData(
            public_key=self._encoded_public_key,
            secret_key=self._secret_key,
            correlation_id=identity.correlation_id,
        )
        await self._registration_action("register", body)

        self._status = Registered.from_identity(identity)
        fqdn = f"{identity.subdomain}.{self._server}"
        logger.info("Registered with %s (correlation-id %s)", self._server, identity.correlation_id)
        return fqdn

    async def deregister(self) -> None:
        if not isinstance(self._status, Registered):
            raise RegistrationError(RegistrationError.Kind.NOT_CURRENTLY_REGISTERED, "Not currently registered")

        body = DeregisterData(
            correlation_id=self._status.correlation_id,
            secret_key=self._secret_key,
        )
        await self._registration_action("deregister", body)

        self._status = UNREGISTERED
        logger.info("Deregistered from %s", self._server)

    async def force_deregister(self) -> None:
        """Intenta desregistrar y deja el estado en `Unregistered` pase lo que pase."""

        try:
            await self.deregister()
        except RegistrationError as exc:
            logger.debug("Ignoring deregistration failure during forced teardown: %s", exc)
        self._status = UNREGISTERED

    async def poll(self, credentials: PollCredentials | None = None) -> PollResponse | None:
        """Un único `GET /poll`.

        Devuelve `None` si el servidor no tiene datos nuevos. `credentials`
        permite usar las capturadas por el llamador en vez del estado actual.
        """

        credentials = credentials or self.credentials()
        try:
            response = await self._http.get(
                self._url("poll"),
                params={"id": credentials.correlation_id, "secret": credentials.secret_key},
                headers=self._auth,
            )
        except httpx.RequestError as exc:
            raise PollError(PollError.Kind.REQUEST_SEND_FAILURE, "Client failed to poll the Interactsh server") from exc

        if not response.is_success:
            raise PollError(
                PollError.Kind.POLL_FAILURE,
                status_code=response.status_code,
                server_msg=_server_message(response),
            )

        try:
            poll_response = PollResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise PollError(PollError.Kind.RESPONSE_JSON_PARSE_FAILED, "Server response is not valid JSON") from exc

        if not poll_response.has_data:
            logger.debug("Poll returned no data")
            return None
        logger.debug("Poll returned %d payload(s)", len(poll_response.payloads or []))
        return poll_response

    async def _registration_action(self, action: str, body: BaseModel) -> None:
        try:
            response = await self._http.post(
                self._url(action),
                json=body.model_dump(by_alias=True),
                headers=self._auth,
            )
        except httpx.RequestError as exc:
            raise RegistrationError(
                RegistrationError.Kind.REQUEST_SEND_FAILURE,
                "Failed to send the request to the server",
            ) from exc

        if response.is_success:
            return
        if response.status_code == httpx.codes.UNAUTHORIZED:
            raise RegistrationError(
                RegistrationError.Kind.UNAUTHORIZED,
                "Server returned an Unauthorized status code",
                status_code=response.status_code,
            )
        raise RegistrationError(
            RegistrationError.Kind.REGISTRATION_FAILURE,
            status_code=response.status_code,
            server_msg=_server_message(response),
        )
