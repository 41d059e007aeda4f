from __future__ import annotations

import asyncio
import base64
import json
import os
from typing import Any

import httpx
import pytest
from cryptography.hazmat.decrepit.ciphers.modes import CFB
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms

from interactsh_client.adapters.crypto import CryptographyKeyring
from interactsh_client.adapters.http_client import build_async_client
from interactsh_client.adapters.server_channel import ServerChannel
from interactsh_client.core.config import AuthScheme
from interactsh_client.core.services.session import InteractshClient

TEST_SERVER = "oast.test"


def run(coro):
    return asyncio.run(coro)


def oaep_encrypt(public_key, message: bytes) -> bytes:
    return public_key.encrypt(
        message,
        padding.OAEP(
            mgf=padding.MGF1(algorithm=hashes.SHA256()),
            algorithm=hashes.SHA256(),
            label=None,
        ),
    )


def aes_cfb_encrypt(aes_key: bytes, plaintext: bytes, iv: bytes | None = None) -> bytes:
    iv = iv or os.urandom(16)
    encryptor = Cipher(algorithms.AES(aes_key), CFB(iv)).encryptor()
    return iv + encryptor.update(plaintext) + encryptor.finalize()


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def http_log_json(unique_id: str = "abc", **overrides: Any) -> str:
    payload = {
        "protocol": "http",
        "unique-id": unique_id,
        "full-id": f"{unique_id}123",
        "raw-request": "GET / HTTP/1.1",
        "raw-response": "HTTP/1.1 200 OK",
        "remote-address": "203.0.113.5",
        "timestamp": "2024-01-01T00:00:00Z",
    }
    payload.update(overrides)
    return json.dumps(payload)


class FakeInteractshServer:
    """Servidor Interactsh en memoria para `httpx.MockTransport`."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.register_status = 200
        self.register_body = ""
        self.deregister_status = 200
        self.deregister_body = ""
        self.poll_status = 200
        self.poll_body = ""
        self.poll_json: dict[str, Any] | None = None
        self.pending: list[bytes] = []
        self.aes_key = os.urandom(32)
        self.public_key = None
        self.registered: set[str] = set()
        self.fail_transport = False
        self.poll_gate: asyncio.Event | None = None
        self.poll_started: asyncio.Event | None = None

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def queue_log(self, text: str | bytes) -> None:
        self.pending.append(text.encode("utf-8") if isinstance(text, str) else text)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_transport:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path
        if path == "/register":
            if self.register_status == 200:
                body = json.loads(request.content)
                pem = base64.b64decode(body["public-key"])
                try:
                    self.public_key = serialization.load_pem_public_key(pem)
                except ValueError:
                    self.public_key = None
                self.registered.add(body["correlation-id"])
            return httpx.Response(self.register_status, text=self.register_body)

        if path == "/deregister":
            if self.deregister_status == 200:
                body = json.loads(request.content)
                self.registered.discard(body["correlation-id"])
            return httpx.Response(self.deregister_status, text=self.deregister_body)

        if path == "/poll":
            if self.poll_started is not None:
                self.poll_started.set()
            if self.poll_gate is not None:
                await self.poll_gate.wait()
            if self.poll_status != 200:
                return httpx.Response(self.poll_status, text=self.poll_body)
            if self.poll_json is not None:
                return httpx.Response(200, json=self.poll_json)
            return httpx.Response(200, json=self._drain())

        return httpx.Response(404, text="not found")

    def _drain(self) -> dict[str, Any]:
        if not self.pending:
            return {"aes_key": "", "data": None}
        wrapped = oaep_encrypt(self.public_key, self.aes_key)
        data = [b64(aes_cfb_encrypt(self.aes_key, item)) for item in self.pending]
        self.pending = []
        return {"aes_key": b64(wrapped), "data": data, "extra": None, "tld_data": None}


@pytest.fixture(scope="session")
def keyring() -> CryptographyKeyring:
    return CryptographyKeyring()


@pytest.fixture(scope="session")
def shared_keypair(keyring):
    # Compartido entre tests: no llamar a `wipe()` sobre él.
    return keyring.generate(2048)


@pytest.fixture
def fake_server() -> FakeInteractshServer:
    return FakeInteractshServer()


@pytest.fixture
def make_channel(fake_server):
    def factory(**kwargs: Any) -> ServerChannel:
        http_client = build_async_client(transport=fake_server.transport)
        options: dict[str, Any] = {
            "server": TEST_SERVER,
            "http_client": http_client,
            "encoded_public_key": b64(b"not-a-real-key"),
            "secret_key": "secret-token",
        }
        options.update(kwargs)
        return ServerChannel(**options)

    return factory


@pytest.fixture
def make_client(fake_server, keyring):
    def factory(*, parse_logs: bool = True, auth_token: str | None = None) -> InteractshClient:
        keypair = keyring.generate(1024)
        channel = ServerChannel(
            server=TEST_SERVER,
            http_client=build_async_client(transport=fake_server.transport),
            encoded_public_key=keyring.encode_public_key(keypair),
            secret_key="secret-token",
            auth_token=auth_token,
            auth_scheme=AuthScheme.SIMPLE,
        )
        return InteractshClient(channel=channel, keyring=keyring, keypair=keypair, parse_logs=parse_logs)

    return factory
