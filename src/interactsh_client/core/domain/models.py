"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Los cuerpos del protocolo (register/deregister/poll) usan alias con guiones,
  así que serializar/validar queda declarado en un solo sitio.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from typing import Union

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict

from interactsh_client.core.config import (
    DEFAULT_CORRELATION_ID_LENGTH,
    DEFAULT_SUBDOMAIN_LENGTH,
)


class CorrelationConfig(BaseModel):
    """Longitudes de subdominio y correlation-id.

    Deben coincidir con la configuración del servidor: los servidores públicos
    esperan 33/20. Un desajuste no produce error, simplemente el servidor no
    correlaciona las interacciones.
    """

    model_config = ConfigDict(frozen=True)

    subdomain_length: int = Field(
        default=DEFAULT_SUBDOMAIN_LENGTH,
        ge=1,
        le=63,
        description="Longitud del subdominio generado (label DNS, máx. 63).",
    )
    correlation_id_length: int = Field(
        default=DEFAULT_CORRELATION_ID_LENGTH,
        ge=1,
        le=63,
        description="Longitud del correlation-id enviado al servidor.",
    )

    @model_validator(mode="after")
    def _correlation_is_prefix(self) -> "CorrelationConfig":
        if self.correlation_id_length > self.subdomain_length:
            raise ValueError("correlation_id_length must not exceed subdomain_length")
        return self


class SessionIdentity(BaseModel):
    """Subdominio + correlation-id de una registración.

    `correlation_id` es siempre prefijo de `subdomain` por construcción.
    """

    model_config = ConfigDict(frozen=True)

    subdomain: str = Field(..., min_length=1)
    correlation_id: str = Field(..., min_length=1)


class Unregistered(BaseModel):
    model_config = ConfigDict(frozen=True)

    def __bool__(self) -> bool:
        return False


class Registered(BaseModel):
    model_config = ConfigDict(frozen=True)

    subdomain: str
    correlation_id: str

    @classmethod
    def from_identity(cls, identity: SessionIdentity) -> "Registered":
        return cls(subdomain=identity.subdomain, correlation_id=identity.correlation_id)


SessionStatus = Union[Unregistered, Registered]

UNREGISTERED = Unregistered()


class PollCredentials(BaseModel):
    """Credenciales capturadas al inicio de un poll."""

    model_config = ConfigDict(frozen=True)

    correlation_id: str
    secret_key: str


class RegisterData(BaseModel):
    """Cuerpo JSON de `POST /register`."""

    model_config = ConfigDict(populate_by_name=True)

    public_key: str = Field(..., alias="public-key")
    secret_key: str = Field(..., alias="secret-key")
    correlation_id: str = Field(..., alias="correlation-id")


class DeregisterData(BaseModel):
    """Cuerpo JSON de `POST /deregister`."""

    model_config = ConfigDict(populate_by_name=True)

    correlation_id: str = Field(..., alias="correlation-id")
    secret_key: str = Field(..., alias="secret-key")


class PollResponse(BaseModel):
    """Respuesta de `GET /poll` (efímera, nunca se persiste).

    El servidor también envía `extra` y `tld_data`; se ignoran.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    wrapped_aes_key: str = Field(..., alias="aes_key")
    payloads: list[str] | None = Field(default=None, alias="data")

    @property
    def has_data(self) -> bool:
        return bool(self.payloads)
