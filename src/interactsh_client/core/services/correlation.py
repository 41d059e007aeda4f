"""Generación de identidades de sesión (subdominio + correlation-id).

Ambos valores salen de la *misma* cadena aleatoria, así el correlation-id es
siempre prefijo del subdominio y el servidor puede enrutar las interacciones
del subdominio al buzón correcto.
"""

from __future__ import annotations

import random
import secrets
import string

from interactsh_client.core.domain.models import CorrelationConfig, SessionIdentity

ALPHABET = string.ascii_lowercase + string.digits

_system_random = secrets.SystemRandom()


def random_lowercase_alnum(length: int, rng: random.Random | None = None) -> str:
    chooser = rng or _system_random
    return "".join(chooser.choice(ALPHABET) for _ in range(length))


def generate_identity(
    config: CorrelationConfig | None = None,
    *,
    rng: random.Random | None = None,
) -> SessionIdentity:
    """Genera un `SessionIdentity` nuevo para una registración."""

    config = config or CorrelationConfig()
    base = random_lowercase_alnum(
        max(config.subdomain_length, config.correlation_id_length),
        rng,
    )
    return SessionIdentity(
        subdomain=base[: config.subdomain_length],
        correlation_id=base[: config.correlation_id_length],
    )
