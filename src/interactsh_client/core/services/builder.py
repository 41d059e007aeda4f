"""Builder del cliente con validación diferida.

Por qué un builder:
- Las opciones se acumulan sin efectos secundarios; `build()` valida todo de
  una vez y devuelve errores tipados (`ClientBuildError`) en lugar de fallar a
  mitad de la configuración.
- `default()` y `from_settings()` cubren los dos orígenes habituales de
  configuración (valores públicos de Interactsh y variables de entorno).
"""

from __future__ import annotations

import logging
import random
import uuid

import httpx

from interactsh_client.adapters.crypto import build_keyring
from interactsh_client.adapters.http_client import build_async_client
from interactsh_client.adapters.server_channel import ServerChannel
from interactsh_client.core.config import (
    DEFAULT_RSA_KEY_BITS,
    DEFAULT_TIMEOUT_SECONDS,
    AppSettings,
    AuthScheme,
    pick_default_server,
)
from interactsh_client.core.domain.models import CorrelationConfig
from interactsh_client.core.errors import ClientBuildError, KeyringError
from interactsh_client.core.services.session import InteractshClient

logger = logging.getLogger(__name__)


class ClientBuilder:
    def __init__(self) -> None:
        self._rsa_key_size: int | None = None
        self._server: str | None = None
        self._auth_token: str | None = None
        self._auth_scheme = AuthScheme.SIMPLE
        self._correlation_config: CorrelationConfig | None = None
        self._proxy_url: str | None = None
        self._timeout: float = DEFAULT_TIMEOUT_SECONDS
        self._verify_ssl = False
        self._parse_logs = True
        self._crypto_backend = "cryptography"
        self._transport: httpx.AsyncBaseTransport | None = None
        self._rng: random.Random | None = None

    @classmethod
    def default(cls, rng: random.Random | None = None) -> "ClientBuilder":
        """Clave RSA de 2048 bits y un servidor aleatorio del pool público."""

        return (
            cls()
            .with_rsa_key_size(DEFAULT_RSA_KEY_BITS)
            .with_server(pick_default_server(rng))
            .with_timeout(DEFAULT_TIMEOUT_SECONDS)
        )

    @classmethod
    def from_settings(cls, settings: AppSettings, rng: random.Random | None = None) -> "ClientBuilder":
        builder = (
            cls()
            .with_rsa_key_size(settings.rsa_key_bits)
            .with_server(settings.server or pick_default_server(rng))
            .with_correlation_config(
                CorrelationConfig(
                    subdomain_length=settings.subdomain_length,
                    correlation_id_length=settings.correlation_id_length,
                )
            )
            .with_timeout(settings.http_timeout_seconds)
            .verify_ssl(settings.verify_ssl)
            .parse_logs(settings.parse_logs)
            .with_crypto_backend(settings.crypto_backend)
        )
        if settings.auth_token is not None:
            builder = builder.with_auth_token(
                settings.auth_token.get_secret_value(),
                bearer=settings.auth_scheme is AuthScheme.BEARER,
            )
        if settings.proxy_url:
            builder = builder.with_proxy(settings.proxy_url)
        return builder

    def with_rsa_key_size(self, num_bits: int) -> "ClientBuilder":
        self._rsa_key_size = num_bits
        return self

    def with_server(self, server: str) -> "ClientBuilder":
        self._server = server
        return self

    def with_auth_token(self, token: str, *, bearer: bool = False) -> "ClientBuilder":
        """Token opcional; si no se define no se envía cabecera Authorization."""

        self._auth_token = token
        self._auth_scheme = AuthScheme.BEARER if bearer else AuthScheme.SIMPLE
        return self

    def with_correlation_config(self, config: CorrelationConfig) -> "ClientBuilder":
        """Longitudes de subdominio/correlation-id; deben coincidir con el servidor."""

        self._correlation_config = config
        return self

    def with_proxy(self, proxy_url: str) -> "ClientBuilder":
        self._proxy_url = proxy_url
        return self

    def with_timeout(self, seconds: float) -> "ClientBuilder":
        self._timeout = seconds
        return self

    def verify_ssl(self, verify: bool) -> "ClientBuilder":
        self._verify_ssl = verify
        return self

    def parse_logs(self, parse: bool) -> "ClientBuilder":
        self._parse_logs = parse
        return self

    def with_crypto_backend(self, name: str) -> "ClientBuilder":
        self._crypto_backend = name
        return self

    def with_transport(self, transport: httpx.AsyncBaseTransport) -> "ClientBuilder":
        self._transport = transport
        return self

    def with_rng(self, rng: random.Random) -> "ClientBuilder":
        """Fuente aleatoria para subdominios (solo útil en tests)."""

        self._rng = rng
        return self

    def build(self) -> InteractshClient:
        server = (self._server or "").strip()
        if not server:
            raise ClientBuildError(ClientBuildError.Kind.MISSING_SERVER, "Interactsh server was not set")
        if self._rsa_key_size is None:
            raise ClientBuildError(ClientBuildError.Kind.MISSING_RSA_KEY_SIZE, "RSA key size was not set")

        try:
            keyring = build_keyring(self._crypto_backend)
        except KeyError as exc:
            raise ClientBuildError(
                ClientBuildError.Kind.UNKNOWN_CRYPTO_BACKEND,
                f"Unknown crypto backend: {self._crypto_backend!r}",
            ) from exc

        try:
            keypair = keyring.generate(self._rsa_key_size)
        except KeyringError as exc:
            raise ClientBuildError(
                ClientBuildError.Kind.KEY_GEN_FAILED,
                "Builder failed to generate the RSA private key",
            ) from exc

        try:
            encoded_public_key = keyring.encode_public_key(keypair)
        except KeyringError as exc:
            keypair.wipe()
            raise ClientBuildError(
                ClientBuildError.Kind.PUBLIC_KEY_ENCODE_FAILED,
                "Failed to encode the RSA public key",
            ) from exc

        try:
            http_client = build_async_client(
                timeout_seconds=self._timeout,
                verify_ssl=self._verify_ssl,
                proxy_url=self._proxy_url,
                transport=self._transport,
            )
        except (ValueError, TypeError, httpx.InvalidURL) as exc:
            keypair.wipe()
            raise ClientBuildError(
                ClientBuildError.Kind.HTTP_CLIENT_BUILD_FAILED,
                "Failed to build the HTTP client",
            ) from exc

        channel = ServerChannel(
            server=server,
            http_client=http_client,
            encoded_public_key=encoded_public_key,
            secret_key=str(uuid.uuid4()),
            auth_token=self._auth_token,
            auth_scheme=self._auth_scheme,
            correlation_config=self._correlation_config,
            rng=self._rng,
        )
        logger.debug("Built client for %s (%d-bit key, backend %s)", server, keypair.bit_length, keyring.name)
        return InteractshClient(
            channel=channel,
            keyring=keyring,
            keypair=keypair,
            parse_logs=self._parse_logs,
        )
