"""Cliente asíncrono para servidores Interactsh (OOB interactions).

Flujo: `ClientBuilder` -> `InteractshClient.register()` -> `poll()` /
`log_stream()` -> `deregister()`.
"""

from interactsh_client.core.config import DEFAULT_SERVERS, AppSettings, AuthScheme
from interactsh_client.core.domain.logs import (
    DnsLog,
    DnsQType,
    FtpLog,
    HttpLog,
    LdapLog,
    LogEntry,
    RawLog,
    SmbLog,
    SmtpLog,
)
from interactsh_client.core.domain.models import (
    CorrelationConfig,
    Registered,
    SessionIdentity,
    SessionStatus,
    Unregistered,
)
from interactsh_client.core.errors import (
    ClientBuildError,
    InteractshError,
    KeyringError,
    PollError,
    RegistrationError,
)
from interactsh_client.core.services.builder import ClientBuilder
from interactsh_client.core.services.log_stream import (
    LogPollResult,
    LogPollResultKind,
    LogStream,
    StreamState,
)
from interactsh_client.core.services.session import InteractshClient

__version__ = "0.3.1"

__all__ = [
    "AppSettings",
    "AuthScheme",
    "ClientBuildError",
    "ClientBuilder",
    "CorrelationConfig",
    "DEFAULT_SERVERS",
    "DnsLog",
    "DnsQType",
    "FtpLog",
    "HttpLog",
    "InteractshClient",
    "InteractshError",
    "KeyringError",
    "LdapLog",
    "LogEntry",
    "LogPollResult",
    "LogPollResultKind",
    "LogStream",
    "PollError",
    "RawLog",
    "Registered",
    "RegistrationError",
    "SessionIdentity",
    "SessionStatus",
    "SmbLog",
    "SmtpLog",
    "StreamState",
    "Unregistered",
]
