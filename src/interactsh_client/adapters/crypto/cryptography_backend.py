"""Backend criptográfico basado en `cryptography`.

Implementa:
- RSA-OAEP (MGF1 + SHA-256, sin label) para desenvolver la clave AES de cada poll.
- AES-CFB128 para los payloads: los primeros 16 bytes son el IV.
- Exportación de la clave pública como base64(PEM SubjectPublicKeyInfo).
"""

from __future__ import annotations

import base64
import logging

from cryptography.hazmat.decrepit.ciphers.modes import CFB
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms

from interactsh_client.core.errors import KeyringError
from interactsh_client.core.interfaces.keyring import AsymmetricKeyPair

logger = logging.getLogger(__name__)

MIN_KEY_BITS = 1024
MAX_KEY_BITS = 16384
PUBLIC_EXPONENT = 65537
AES_IV_SIZE = 16


def _oaep_sha256() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


class CryptographyKeyPair:
    """Par RSA propiedad de una sesión."""

    def __init__(self, private_key: rsa.RSAPrivateKey) -> None:
        self._private_key: rsa.RSAPrivateKey | None = private_key
        self._bit_length = private_key.key_size

    @property
    def bit_length(self) -> int:
        return self._bit_length

    @property
    def wiped(self) -> bool:
        return self._private_key is None

    def _require_key(self) -> rsa.RSAPrivateKey:
        if self._private_key is None:
            raise KeyringError(KeyringError.Kind.KEY_WIPED, "Key pair has been wiped")
        return self._private_key

    def public_key(self) -> rsa.RSAPublicKey:
        return self._require_key().public_key()

    def decrypt(self, ciphertext: bytes) -> bytes:
        key = self._require_key()
        try:
            return key.decrypt(ciphertext, _oaep_sha256())
        except ValueError as exc:
            raise KeyringError(KeyringError.Kind.DECRYPT_FAILED, "RSA-OAEP decryption failed") from exc

    def encode_public(self) -> str:
        key = self._require_key()
        try:
            pem = key.public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
        except ValueError as exc:
            raise KeyringError(KeyringError.Kind.ENCODE_FAILED, "Failed to encode the public key") from exc
        return base64.b64encode(pem).decode("ascii")

    def wipe(self) -> None:
        # Python no permite sobrescribir la memoria del objeto OpenSSL;
        # soltamos la única referencia para que el backend lo libere.
        self._private_key = None

    def __repr__(self) -> str:
        state = "wiped" if self.wiped else "active"
        return f"CryptographyKeyPair(bits={self._bit_length}, {state})"


class CryptographyKeyring:
    """`KeyringService` sobre la librería `cryptography`."""

    name = "cryptography"

    def generate(self, bit_length: int) -> CryptographyKeyPair:
        if not MIN_KEY_BITS <= bit_length <= MAX_KEY_BITS:
            raise KeyringError(
                KeyringError.Kind.KEY_GEN_FAILED,
                f"RSA key size must be between {MIN_KEY_BITS} and {MAX_KEY_BITS} bits (got {bit_length})",
            )
        try:
            private_key = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=bit_length)
        except (ValueError, TypeError) as exc:
            raise KeyringError(KeyringError.Kind.KEY_GEN_FAILED, "RSA key generation failed") from exc
        logger.debug("Generated %d-bit RSA key pair", bit_length)
        return CryptographyKeyPair(private_key)

    def encode_public_key(self, pair: AsymmetricKeyPair) -> str:
        return pair.encode_public()

    def decrypt(self, pair: AsymmetricKeyPair, ciphertext: bytes) -> bytes:
        return pair.decrypt(ciphertext)

    def decrypt_payload(self, aes_key: bytes, blob: bytes) -> bytes:
        if len(blob) < AES_IV_SIZE:
            raise KeyringError(
                KeyringError.Kind.DECRYPT_FAILED,
                f"Encrypted payload shorter than the {AES_IV_SIZE}-byte IV",
            )
        iv, ciphertext = blob[:AES_IV_SIZE], blob[AES_IV_SIZE:]
        try:
            decryptor = Cipher(algorithms.AES(aes_key), CFB(iv)).decryptor()
        except ValueError as exc:
            raise KeyringError(KeyringError.Kind.DECRYPT_FAILED, "Invalid AES key") from exc
        return decryptor.update(ciphertext) + decryptor.finalize()
