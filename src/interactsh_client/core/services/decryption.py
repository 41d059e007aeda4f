"""Pipeline de descifrado de respuestas de poll.

Pasos:
1. Sin payloads (`data` nulo o vacío) => `None`, sin tocar base64 ni cripto.
2. base64 + RSA-OAEP sobre `aes_key` => clave AES en claro.
3. Por payload: base64 + AES-CFB (IV = primeros 16 bytes).
4. UTF-8 con reemplazo de bytes inválidos y, si se pide, parseo tipado.

El orden de salida es el orden de los payloads.
"""

from __future__ import annotations

import base64
import binascii

from interactsh_client.core.domain.logs import LogEntry, build_log_entry
from interactsh_client.core.domain.models import PollResponse
from interactsh_client.core.errors import KeyringError, PollError
from interactsh_client.core.interfaces.keyring import AsymmetricKeyPair, KeyringService


def _b64decode(value: str) -> bytes:
    return base64.b64decode(value, validate=True)


def unwrap_aes_key(
    wrapped_aes_key: str,
    *,
    keyring: KeyringService,
    keypair: AsymmetricKeyPair,
) -> bytes:
    try:
        encrypted_key = _b64decode(wrapped_aes_key)
    except (binascii.Error, ValueError) as exc:
        raise PollError(PollError.Kind.AES_BASE64_DECODE_FAILED, "Base64 decoding of AES key failed") from exc
    try:
        return keyring.decrypt(keypair, encrypted_key)
    except KeyringError as exc:
        raise PollError(PollError.Kind.AES_KEY_DECRYPT_FAILED, "Failed to decrypt the AES key") from exc


def decrypt_payload(encoded: str, aes_key: bytes, *, keyring: KeyringService) -> str:
    try:
        blob = _b64decode(encoded)
    except (binascii.Error, ValueError) as exc:
        raise PollError(PollError.Kind.DATA_BASE64_DECODE_FAILED, "Base64 decoding of log data failed") from exc
    try:
        plain = keyring.decrypt_payload(aes_key, blob)
    except KeyringError as exc:
        raise PollError(PollError.Kind.DATA_DECRYPT_FAILED, "Failed to decrypt the received log data") from exc
    return plain.decode("utf-8", errors="replace")


def decrypt_poll_response(
    response: PollResponse,
    *,
    keyring: KeyringService,
    keypair: AsymmetricKeyPair,
    parse_logs: bool,
) -> list[LogEntry] | None:
    """Descifra una `PollResponse`; `None` significa "sin datos"."""

    if not response.payloads:
        return None

    aes_key = unwrap_aes_key(response.wrapped_aes_key, keyring=keyring, keypair=keypair)
    return [
        build_log_entry(decrypt_payload(encoded, aes_key, keyring=keyring), parse=parse_logs)
        for encoded in response.payloads
    ]
