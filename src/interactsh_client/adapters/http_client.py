"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers, verificación TLS y proxy en un único sitio.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
"""

from __future__ import annotations

import httpx

from interactsh_client.core.config import DEFAULT_TIMEOUT_SECONDS, AuthScheme

USER_AGENT = "interactsh-client/0.3 (+https://github.com/projectdiscovery/interactsh)"


def build_async_client(
    *,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    verify_ssl: bool = False,
    proxy_url: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    extra_headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` para hablar con el servidor Interactsh.

    Por qué un builder:
    - Centraliza timeouts/headers para que register/poll/deregister se comporten igual.
    - Sin reintentos: una petición por operación, el resultado se devuelve tal cual.
    """

    headers: dict[str, str] = {
        "User-Agent": USER_AGENT,
        "Accept": "application/json, text/plain;q=0.9, */*;q=0.8",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_seconds),
        verify=verify_ssl,
        proxy=proxy_url,
        transport=transport,
        follow_redirects=False,
        headers=headers,
    )


def auth_headers(token: str | None, scheme: AuthScheme = AuthScheme.SIMPLE) -> dict[str, str]:
    """Cabecera `Authorization` opcional según el esquema configurado."""

    if not token:
        return {}
    if scheme is AuthScheme.BEARER:
        return {"Authorization": f"Bearer {token}"}
    return {"Authorization": token}
