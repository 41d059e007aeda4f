"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar paneles de logs en `run` y en futuros comandos.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from interactsh_client.core.domain.logs import (
    DnsLog,
    FtpLog,
    HttpLog,
    LdapLog,
    LogEntry,
    SmbLog,
    SmtpLog,
    is_parsed,
)
from interactsh_client.core.services.log_stream import LogPollResult, LogPollResultKind

_LOG_COLORS: dict[type, str] = {
    DnsLog: "cyan",
    FtpLog: "magenta",
    HttpLog: "green",
    LdapLog: "yellow",
    SmbLog: "bright_blue",
    SmtpLog: "bright_magenta",
}


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("interactsh-client", style="bold cyan")
    subtitle = Text("OOB interactions • DNS • HTTP • SMTP • LDAP", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def print_interaction_url(console: Console, fqdn: str) -> None:
    console.print(Text.assemble(("Interaction URL: ", "bold green"), (f"https://{fqdn}", "green")))


def _fields_table(rows: list[tuple[str, str]]) -> Table:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold", no_wrap=True)
    table.add_column()
    for label, value in rows:
        table.add_row(label, value)
    return table


def build_log_panel(entry: LogEntry) -> Panel:
    """Panel para una entrada de log (parseada o cruda)."""

    if not is_parsed(entry):
        return Panel(Text(entry.text), title="Raw Log", border_style="blue")

    rows: list[tuple[str, str]] = []
    full_id = getattr(entry, "full_id", None)
    if full_id:
        rows.append(("ID", full_id))
    if isinstance(entry, DnsLog) and entry.q_type is not None:
        rows.append(("Q Type", entry.q_type.value))
    if isinstance(entry, SmtpLog):
        rows.append(("SMTP From", entry.smtp_from))
    remote_address = getattr(entry, "remote_address", None)
    if remote_address is not None:
        rows.append(("Remote Address", str(remote_address)))
    rows.append(("Timestamp", entry.timestamp.isoformat()))
    rows.append(("Raw Request", entry.raw_request.strip()))
    raw_response = getattr(entry, "raw_response", None)
    if raw_response:
        rows.append(("Raw Response", raw_response.strip()))

    color = _LOG_COLORS.get(type(entry), "white")
    return Panel(_fields_table(rows), title=f"{entry.protocol.upper()} Log", border_style=color)


def render_poll_result(result: LogPollResult) -> RenderableType:
    if result.kind is LogPollResultKind.NEW_LOG and result.entry is not None:
        return build_log_panel(result.entry)
    if result.kind is LogPollResultKind.ERROR:
        return Text(f"Poll error: {result.error}", style="red")
    return Text("No new logs", style="dim")


def build_settings_table(rows: list[tuple[str, str]], title: str = "Effective settings") -> Table:
    table = Table(title=title)
    table.add_column("Setting", style="bright_green", no_wrap=True)
    table.add_column("Value", style="white")
    for key, value in rows:
        table.add_row(key, value)
    return table
