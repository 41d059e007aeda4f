"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP/cripto) y el builder lean config de forma consistente.
"""

from __future__ import annotations

import os
import random
import sys
from enum import Enum
from pathlib import Path
from typing import Sequence

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Pool público mantenido por el equipo de Interactsh.
DEFAULT_SERVERS: tuple[str, ...] = (
    "oast.pro",
    "oast.live",
    "oast.site",
    "oast.online",
    "oast.fun",
)

DEFAULT_RSA_KEY_BITS = 2048
DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_SUBDOMAIN_LENGTH = 33
DEFAULT_CORRELATION_ID_LENGTH = 20

APP_DIR_NAME = "interactsh-client"


def pick_default_server(
    rng: random.Random | None = None,
    servers: Sequence[str] = DEFAULT_SERVERS,
) -> str:
    """Elige un servidor del pool por defecto.

    La aleatoriedad es inyectable para que los tests sean deterministas.
    """

    if not servers:
        return "oast.pro"
    return (rng or random).choice(list(servers))


class AuthScheme(str, Enum):
    """Cómo se envía el token en la cabecera `Authorization`."""

    SIMPLE = "simple"
    BEARER = "bearer"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (APPDATA, Application Support o XDG)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA") or Path.home())
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
    return base / APP_DIR_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    """`KEY=valor` por línea; ignora comentarios y quita comillas."""

    data: dict[str, str] = {}
    for line in (raw.strip() for raw in text.splitlines()):
        if line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        key = key.strip()
        if sep and key:
            data[key] = value.strip().strip("\"'")
    return data


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# interactsh-client user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central del cliente.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/builder.
    """

    model_config = SettingsConfigDict(
        env_prefix="INTERACTSH_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    server: str | None = Field(
        default=None,
        description="Servidor Interactsh (host). Si falta, se elige uno del pool público.",
    )
    auth_token: SecretStr | None = Field(
        default=None,
        description="Token de autenticación para servidores privados.",
    )
    auth_scheme: AuthScheme = Field(
        default=AuthScheme.SIMPLE,
        description="Formato de la cabecera Authorization (simple/bearer).",
    )
    rsa_key_bits: int = Field(
        default=DEFAULT_RSA_KEY_BITS,
        ge=1024,
        le=16384,
        description="Tamaño de la clave RSA generada por sesión.",
    )
    subdomain_length: int = Field(
        default=DEFAULT_SUBDOMAIN_LENGTH,
        ge=1,
        le=63,
        description="Longitud del subdominio (debe coincidir con el servidor).",
    )
    correlation_id_length: int = Field(
        default=DEFAULT_CORRELATION_ID_LENGTH,
        ge=1,
        le=63,
        description="Longitud del correlation-id (debe coincidir con el servidor).",
    )
    http_timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        description="Timeout por request (segundos).",
    )
    verify_ssl: bool = Field(
        default=False,
        description="Verificar el certificado TLS del servidor.",
    )
    proxy_url: str | None = Field(
        default=None,
        description="Proxy HTTP(S) opcional para todas las peticiones.",
    )
    parse_logs: bool = Field(
        default=True,
        description="Parsear las interacciones a modelos tipados (si falla, log crudo).",
    )
    poll_period_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Periodo entre polls del stream de logs.",
    )
    emit_no_new_logs: bool = Field(
        default=False,
        description="Emitir un marcador cuando un poll no trae datos.",
    )
    crypto_backend: str = Field(
        default="cryptography",
        min_length=1,
        description="Backend criptográfico (uno solo activo).",
    )

    @model_validator(mode="after")
    def _check_correlation_lengths(self) -> "AppSettings":
        if self.correlation_id_length > self.subdomain_length:
            raise ValueError("correlation_id_length must not exceed subdomain_length")
        return self
