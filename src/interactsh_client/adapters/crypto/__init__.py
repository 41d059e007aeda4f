"""Backends criptográficos.

Por qué un registro:
- El cliente trabaja contra `KeyringService`; aquí se elige exactamente un
  backend por nombre al construir la sesión (nunca dos a la vez).
"""

from __future__ import annotations

from typing import Callable

from interactsh_client.adapters.crypto.cryptography_backend import (
    CryptographyKeyPair,
    CryptographyKeyring,
)
from interactsh_client.core.interfaces.keyring import KeyringService

BACKENDS: dict[str, Callable[[], KeyringService]] = {
    CryptographyKeyring.name: CryptographyKeyring,
}


def build_keyring(name: str = "cryptography") -> KeyringService:
    """Instancia el backend `name`; lanza `KeyError` si no está registrado."""

    factory = BACKENDS[name.strip().lower()]
    return factory()


__all__ = [
    "BACKENDS",
    "CryptographyKeyPair",
    "CryptographyKeyring",
    "build_keyring",
]
