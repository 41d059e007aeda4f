from __future__ import annotations

import os
import random

import pytest
from pydantic import ValidationError

from interactsh_client.core.config import (
    DEFAULT_SERVERS,
    AppSettings,
    AuthScheme,
    pick_default_server,
    write_user_env_vars,
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in list(os.environ):
        if name.upper().startswith("INTERACTSH_"):
            monkeypatch.delenv(name)
    return monkeypatch


def test_pick_default_server_from_pool():
    rng = random.Random(3)

    picks = {pick_default_server(rng) for _ in range(200)}

    assert picks <= set(DEFAULT_SERVERS)
    assert len(picks) > 1


def test_pick_default_server_empty_pool():
    assert pick_default_server(servers=()) == "oast.pro"


def test_settings_defaults(clean_env):
    settings = AppSettings(_env_file=None)

    assert settings.server is None
    assert settings.auth_token is None
    assert settings.auth_scheme is AuthScheme.SIMPLE
    assert settings.rsa_key_bits == 2048
    assert settings.subdomain_length == 33
    assert settings.correlation_id_length == 20
    assert settings.verify_ssl is False
    assert settings.parse_logs is True
    assert settings.crypto_backend == "cryptography"


def test_settings_from_environment(clean_env):
    clean_env.setenv("INTERACTSH_SERVER", "oast.example")
    clean_env.setenv("INTERACTSH_AUTH_TOKEN", "s3cr3t-value")
    clean_env.setenv("INTERACTSH_AUTH_SCHEME", "bearer")
    clean_env.setenv("INTERACTSH_RSA_KEY_BITS", "4096")
    clean_env.setenv("INTERACTSH_PARSE_LOGS", "false")

    settings = AppSettings(_env_file=None)

    assert settings.server == "oast.example"
    assert settings.auth_token.get_secret_value() == "s3cr3t-value"
    assert settings.auth_scheme is AuthScheme.BEARER
    assert settings.rsa_key_bits == 4096
    assert settings.parse_logs is False
    assert "s3cr3t-value" not in repr(settings)
    assert "**********" in repr(settings)


def test_settings_from_env_file(clean_env, tmp_path):
    env_file = write_user_env_vars({"INTERACTSH_SERVER": "oast.file"}, env_path=tmp_path / ".env")

    settings = AppSettings(_env_file=env_file)

    assert settings.server == "oast.file"


@pytest.mark.parametrize(
    "overrides",
    [
        {"subdomain_length": 10, "correlation_id_length": 11},
        {"subdomain_length": 64},
        {"correlation_id_length": 0},
        {"rsa_key_bits": 512},
        {"http_timeout_seconds": 0},
    ],
)
def test_settings_validation(clean_env, overrides):
    with pytest.raises(ValidationError):
        AppSettings(_env_file=None, **overrides)


def test_write_user_env_vars_merges_existing(tmp_path):
    env_path = tmp_path / "nested" / ".env"
    env_path.parent.mkdir()
    env_path.write_text('# comment\nINTERACTSH_SERVER="oast.old"\nOTHER=1\n', encoding="utf-8")

    write_user_env_vars({"INTERACTSH_SERVER": "oast.new", "INTERACTSH_AUTH_TOKEN": None}, env_path=env_path)

    lines = env_path.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("#")
    assert "INTERACTSH_SERVER=oast.new" in lines
    assert "OTHER=1" in lines
    assert not any(line.startswith("INTERACTSH_AUTH_TOKEN") for line in lines)
