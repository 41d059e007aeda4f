"""Contrato del servicio de claves asimétricas.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Permite que exactamente un backend criptográfico (seleccionado al construir
  el cliente) lo satisfaga, y que los tests usen dobles sin claves reales.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class AsymmetricKeyPair(Protocol):
    """Par de claves propiedad exclusiva de una sesión."""

    @property
    def bit_length(self) -> int: ...

    def decrypt(self, ciphertext: bytes) -> bytes: ...

    def encode_public(self) -> str: ...

    def wipe(self) -> None:
        """Descarta el material privado; usos posteriores fallan."""

        ...


@runtime_checkable
class KeyringService(Protocol):
    """Operaciones del backend: generar, exportar la pública y descifrar.

    Reglas de diseño:
    - Los errores del backend se traducen a `KeyringError` con su `kind`.
    - `decrypt` usa RSA-OAEP con SHA-256 y sin label.
    """

    name: str

    def generate(self, bit_length: int) -> AsymmetricKeyPair: ...

    def encode_public_key(self, pair: AsymmetricKeyPair) -> str: ...

    def decrypt(self, pair: AsymmetricKeyPair, ciphertext: bytes) -> bytes: ...

    def decrypt_payload(self, aes_key: bytes, blob: bytes) -> bytes:
        """Descifra `[IV de 16 bytes][cifrado AES-CFB]` con la clave simétrica."""

        ...
