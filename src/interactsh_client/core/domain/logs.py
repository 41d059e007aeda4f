"""Entradas de log de interacción.

Por qué una unión discriminada:
- El servidor etiqueta cada interacción con `protocol`; Pydantic elige la
  variante correcta y valida sus campos obligatorios de una vez.
- Cualquier fallo (etiqueta desconocida, campo ausente, timestamp inválido)
  degrada a `RawLog`; un log malformado nunca rompe el poll completo.
"""

from __future__ import annotations

import re
from enum import Enum
from ipaddress import IPv4Address, IPv6Address
from typing import Annotated, Literal, Union

from pydantic import (
    AwareDatetime,
    BaseModel,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic.config import ConfigDict

_RFC3339_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:[Zz]|[+-]\d{2}:\d{2})"
)
# Interactsh emite timestamps RFC3339 con nanosegundos; Python solo guarda 6 dígitos.
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


class RawLog(BaseModel):
    """Texto descifrado tal cual lo envió el servidor."""

    model_config = ConfigDict(frozen=True)

    text: str


class DnsQType(str, Enum):
    A = "A"
    NS = "NS"
    CNAME = "CNAME"
    SOA = "SOA"
    PTR = "PTR"
    MX = "MX"
    TXT = "TXT"
    AAAA = "AAAA"


class _ParsedLogBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    timestamp: AwareDatetime

    @field_validator("timestamp", mode="before")
    @classmethod
    def _rfc3339_string(cls, value: object) -> object:
        if not isinstance(value, str):
            raise ValueError("timestamp must be an RFC3339 string")
        if not _RFC3339_RE.fullmatch(value):
            raise ValueError(f"timestamp is not RFC3339: {value!r}")
        return _FRACTION_RE.sub(r"\1", value.upper())


class DnsLog(_ParsedLogBase):
    protocol: Literal["dns"]
    unique_id: str = Field(..., alias="unique-id")
    full_id: str = Field(..., alias="full-id")
    q_type: DnsQType | None = Field(default=None, alias="q-type")
    raw_request: str = Field(..., alias="raw-request")
    raw_response: str = Field(..., alias="raw-response")
    remote_address: IPv4Address | IPv6Address = Field(..., alias="remote-address")


class FtpLog(_ParsedLogBase):
    protocol: Literal["ftp"]
    remote_address: IPv4Address | IPv6Address = Field(..., alias="remote-address")
    raw_request: str = Field(..., alias="raw-request")


class HttpLog(_ParsedLogBase):
    protocol: Literal["http"]
    unique_id: str = Field(..., alias="unique-id")
    full_id: str = Field(..., alias="full-id")
    raw_request: str = Field(..., alias="raw-request")
    raw_response: str = Field(..., alias="raw-response")
    remote_address: IPv4Address | IPv6Address = Field(..., alias="remote-address")


class LdapLog(_ParsedLogBase):
    protocol: Literal["ldap"]
    unique_id: str = Field(..., alias="unique-id")
    full_id: str = Field(..., alias="full-id")
    raw_request: str = Field(..., alias="raw-request")
    raw_response: str = Field(..., alias="raw-response")
    remote_address: IPv4Address | IPv6Address = Field(..., alias="remote-address")


class SmbLog(_ParsedLogBase):
    protocol: Literal["smb"]
    raw_request: str = Field(..., alias="raw-request")


class SmtpLog(_ParsedLogBase):
    protocol: Literal["smtp"]
    unique_id: str = Field(..., alias="unique-id")
    full_id: str = Field(..., alias="full-id")
    raw_request: str = Field(..., alias="raw-request")
    smtp_from: str = Field(..., alias="smtp-from")
    remote_address: IPv4Address | IPv6Address = Field(..., alias="remote-address")


ParsedLog = Annotated[
    Union[DnsLog, FtpLog, HttpLog, LdapLog, SmbLog, SmtpLog],
    Field(discriminator="protocol"),
]

LogEntry = Union[RawLog, DnsLog, FtpLog, HttpLog, LdapLog, SmbLog, SmtpLog]

PARSED_LOG_TYPES: tuple[type[BaseModel], ...] = (DnsLog, FtpLog, HttpLog, LdapLog, SmbLog, SmtpLog)

_parsed_log_adapter: TypeAdapter = TypeAdapter(ParsedLog)


def is_parsed(entry: LogEntry) -> bool:
    return isinstance(entry, PARSED_LOG_TYPES)


def build_log_entry(text: str, *, parse: bool) -> LogEntry:
    """Convierte el texto descifrado en `LogEntry`.

    Con `parse=False` siempre devuelve `RawLog`. Con `parse=True` intenta la
    variante tipada y, si algo no valida, vuelve a `RawLog` sin error.
    """

    if not parse:
        return RawLog(text=text)
    try:
        return _parsed_log_adapter.validate_json(text)
    except ValidationError:
        return RawLog(text=text)
