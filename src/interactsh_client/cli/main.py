"""CLI principal (Typer).

Solo consume la API pública: construye el cliente, registra, muestra la URL de
interacción, consume el stream de logs hasta Ctrl-C y desregistra.
"""

from __future__ import annotations

import asyncio
import signal
import sys

import typer
from rich.console import Console

from interactsh_client.cli import doctor
from interactsh_client.cli.ui_components import (
    build_settings_table,
    print_banner,
    print_interaction_url,
    render_poll_result,
)
from interactsh_client.core.config import AppSettings
from interactsh_client.core.errors import ClientBuildError, RegistrationError
from interactsh_client.core.logging_config import setup_logging
from interactsh_client.core.services.builder import ClientBuilder

app = typer.Typer(
    no_args_is_help=True,
    help="Client for Interactsh servers: register, watch interactions, deregister.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()


async def _watch(builder: ClientBuilder, *, poll_period: float, emit_no_new_logs: bool) -> int:
    try:
        client = builder.build()
    except ClientBuildError as exc:
        _console.print(f"[red]Could not build the client:[/red] {exc}")
        return 1

    async with client:
        with _console.status("Registering..."):
            try:
                fqdn = await client.register()
            except RegistrationError as exc:
                _console.print(f"[red]Registration failed:[/red] {exc}")
                return 1
        print_interaction_url(_console, fqdn)

        stream = client.log_stream(poll_period, emit_no_new_logs=emit_no_new_logs)
        loop = asyncio.get_running_loop()
        handler_installed = True
        try:
            loop.add_signal_handler(signal.SIGINT, stream.cancel)
        except (NotImplementedError, RuntimeError):
            # Windows: Ctrl-C llega como KeyboardInterrupt y cancela la tarea.
            handler_installed = False

        try:
            with _console.status("Waiting for interactions (Ctrl-C to stop)..."):
                async for result in stream:
                    _console.print(render_poll_result(result))
        finally:
            if handler_installed:
                loop.remove_signal_handler(signal.SIGINT)

        try:
            await client.deregister()
            _console.print("[green]Deregistered.[/green]")
        except RegistrationError as exc:
            _console.print(f"[yellow]Deregistration failed:[/yellow] {exc}")
    return 0


@app.command()
def run(
    server: str | None = typer.Option(None, "--server", "-s", help="Interactsh server to connect to."),
    auth_token: str | None = typer.Option(None, "--auth-token", "-a", help="Auth token for the server."),
    bearer: bool = typer.Option(False, "--bearer", help="Send the token as 'Bearer <token>'."),
    key_size: int | None = typer.Option(None, "--key-size", "-k", help="RSA key size in bits."),
    timeout: float | None = typer.Option(None, "--timeout", "-t", help="Request timeout in seconds."),
    verify_ssl: bool = typer.Option(False, "--verify-ssl", "-v", help="Verify the server TLS certificate."),
    raw_logs: bool = typer.Option(False, "--raw-logs", "-r", help="Print raw logs instead of parsed logs."),
    poll_period: float | None = typer.Option(None, "--poll-period", "-p", help="Seconds between polls."),
    show_empty: bool = typer.Option(False, "--show-empty", help="Print a line when a poll has no new logs."),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
    no_banner: bool = typer.Option(False, "--no-banner", help="Do not print the banner."),
) -> None:
    """Register with a server and print interactions until interrupted."""

    setup_logging(verbose, console=_console)
    settings = AppSettings()
    if not no_banner:
        print_banner(_console)

    builder = ClientBuilder.from_settings(settings)
    if server:
        builder = builder.with_server(server)
    if auth_token:
        builder = builder.with_auth_token(auth_token, bearer=bearer)
    if key_size:
        builder = builder.with_rsa_key_size(key_size)
    if timeout:
        builder = builder.with_timeout(timeout)
    if verify_ssl:
        builder = builder.verify_ssl(True)
    if raw_logs:
        builder = builder.parse_logs(False)

    code = asyncio.run(
        _watch(
            builder,
            poll_period=poll_period or settings.poll_period_seconds,
            emit_no_new_logs=show_empty or settings.emit_no_new_logs,
        )
    )
    raise typer.Exit(code)


@app.command(name="config")
def show_config() -> None:
    """Show the effective settings (env vars + .env files)."""

    settings = AppSettings()
    rows = [
        (name, "***" if name == "auth_token" and value is not None else str(value))
        for name, value in settings.model_dump().items()
    ]
    _console.print(build_settings_table(rows))


def run_cli() -> None:
    # Workaround for UnicodeEncodeError on Windows terminals/CI (cp1252 vs utf-8).
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")
    app()


if __name__ == "__main__":
    run_cli()
