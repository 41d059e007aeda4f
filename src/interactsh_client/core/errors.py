"""Taxonomía de errores del cliente.

Por qué una sola jerarquía:
- Cada fase (clave, registro, poll, build) tiene su propia excepción con un
  discriminante `kind`, así el llamador puede decidir sin parsear mensajes.
- La causa original (httpx, cryptography, base64) se conserva con el
  encadenado estándar de Python (`raise ... from exc`).
"""

from __future__ import annotations

from enum import Enum


class InteractshError(Exception):
    """Base común de todos los errores del cliente."""

    def __init__(
        self,
        kind: Enum,
        message: str | None = None,
        *,
        status_code: int | None = None,
        server_msg: str | None = None,
    ) -> None:
        self.kind = kind
        self.status_code = status_code
        self.server_msg = server_msg
        super().__init__(message or self._default_message())

    def _default_message(self) -> str:
        if self.status_code is not None:
            return f"{self.kind.value}: {self.status_code} - {self.server_msg or 'Unknown error'}"
        return str(self.kind.value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={str(self)!r})"


class KeyringError(InteractshError):
    """Fallos al generar, codificar o usar el par de claves RSA."""

    class Kind(str, Enum):
        KEY_GEN_FAILED = "key_gen_failed"
        ENCODE_FAILED = "encode_failed"
        DECRYPT_FAILED = "decrypt_failed"
        KEY_WIPED = "key_wiped"


class RegistrationError(InteractshError):
    """Fallos de registro o desregistro con el servidor."""

    class Kind(str, Enum):
        REQUEST_SEND_FAILURE = "request_send_failure"
        UNAUTHORIZED = "unauthorized"
        REGISTRATION_FAILURE = "registration_failure"
        ALREADY_REGISTERED = "already_registered"
        NOT_CURRENTLY_REGISTERED = "not_currently_registered"


class PollError(InteractshError):
    """Fallos durante un poll o el descifrado de su respuesta."""

    class Kind(str, Enum):
        REQUEST_SEND_FAILURE = "request_send_failure"
        POLL_FAILURE = "poll_failure"
        RESPONSE_JSON_PARSE_FAILED = "response_json_parse_failed"
        NOT_CURRENTLY_REGISTERED = "not_currently_registered"
        AES_BASE64_DECODE_FAILED = "aes_base64_decode_failed"
        AES_KEY_DECRYPT_FAILED = "aes_key_decrypt_failed"
        DATA_BASE64_DECODE_FAILED = "data_base64_decode_failed"
        DATA_DECRYPT_FAILED = "data_decrypt_failed"


class ClientBuildError(InteractshError):
    """Validación diferida del `ClientBuilder`."""

    class Kind(str, Enum):
        MISSING_SERVER = "missing_server"
        MISSING_RSA_KEY_SIZE = "missing_rsa_key_size"
        UNKNOWN_CRYPTO_BACKEND = "unknown_crypto_backend"
        KEY_GEN_FAILED = "key_gen_failed"
        PUBLIC_KEY_ENCODE_FAILED = "public_key_encode_failed"
        HTTP_CLIENT_BUILD_FAILED = "http_client_build_failed"
