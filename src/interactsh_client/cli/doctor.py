"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
import time

import typer
from rich.console import Console
from rich.table import Table

from interactsh_client.adapters.crypto import build_keyring
from interactsh_client.adapters.http_client import build_async_client
from interactsh_client.core.config import (
    DEFAULT_SERVERS,
    AppSettings,
    AuthScheme,
    write_user_env_vars,
)
from interactsh_client.core.errors import KeyringError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(server: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(
            timeout_seconds=settings.http_timeout_seconds,
            verify_ssl=settings.verify_ssl,
            proxy_url=settings.proxy_url,
        ) as client:
            response = await client.get(f"https://{server}/")
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


def _check_keygen(settings: AppSettings) -> tuple[bool, str]:
    """Generate and discard a key pair to detect crypto backend issues."""

    try:
        keyring = build_keyring(settings.crypto_backend)
    except KeyError:
        return False, f"Unknown backend {settings.crypto_backend!r}"
    started = time.perf_counter()
    try:
        pair = keyring.generate(settings.rsa_key_bits)
        keyring.encode_public_key(pair)
        pair.wipe()
    except KeyringError as exc:
        return False, str(exc)
    elapsed = time.perf_counter() - started
    return True, f"{settings.rsa_key_bits}-bit key in {elapsed:.2f}s ({keyring.name})"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="interactsh-client Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    if settings.server:
        table.add_row("Server", "OK", settings.server)
    else:
        table.add_row("Server", "DEFAULT", f"Random pick from {', '.join(DEFAULT_SERVERS)}")
    if settings.auth_token is not None:
        table.add_row("Auth token", "OK", f"{settings.auth_scheme.value} scheme")
    else:
        table.add_row("Auth token", "OPTIONAL", "No token set -> public servers only")
    table.add_row(
        "Correlation",
        "OK",
        f"subdomain={settings.subdomain_length} correlation-id={settings.correlation_id_length}",
    )

    # Crypto
    ok_key, detail_key = _check_keygen(settings)
    table.add_row("Key generation", "OK" if ok_key else "FAIL", detail_key)

    # Connectivity (best-effort)
    server = settings.server or DEFAULT_SERVERS[0]
    ok_http, detail_http = asyncio.run(_check_http(server, settings))
    table.add_row(f"HTTPS {server}", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not ok_http and settings.proxy_url:
        _console.print("\n[yellow]Note:[/yellow] Connectivity failed through the configured proxy.")


@app.command(name="setup")
def setup() -> None:
    """Interactive server setup (stores config in the user config .env)."""

    server = typer.prompt("Interactsh server", default=DEFAULT_SERVERS[0], show_default=True).strip()
    token = typer.prompt("Auth token (empty for none)", default="", show_default=False, hide_input=True).strip()
    scheme = typer.prompt("Auth scheme (simple/bearer)", default=AuthScheme.SIMPLE.value, show_default=True).strip().lower()

    if not server:
        raise typer.BadParameter("server is required")
    try:
        AuthScheme(scheme)
    except ValueError as exc:
        raise typer.BadParameter("auth scheme must be 'simple' or 'bearer'") from exc

    env_path = write_user_env_vars(
        {
            "INTERACTSH_SERVER": server,
            "INTERACTSH_AUTH_TOKEN": token or None,
            "INTERACTSH_AUTH_SCHEME": scheme,
        }
    )

    _console.print(f"[green]Saved server config to:[/green] {env_path}")
