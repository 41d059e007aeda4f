from __future__ import annotations

import os

import pytest

from conftest import aes_cfb_encrypt, b64, http_log_json, oaep_encrypt
from interactsh_client.core.domain.logs import HttpLog, RawLog
from interactsh_client.core.domain.models import PollResponse
from interactsh_client.core.errors import PollError
from interactsh_client.core.services.decryption import decrypt_poll_response


class ExplodingKeyring:
    name = "exploding"

    def generate(self, bit_length):
        raise AssertionError("unexpected call")

    def encode_public_key(self, pair):
        raise AssertionError("unexpected call")

    def decrypt(self, pair, ciphertext):
        raise AssertionError("unexpected call")

    def decrypt_payload(self, aes_key, blob):
        raise AssertionError("unexpected call")


def _response(keypair, aes_key: bytes, plaintexts: list[bytes]) -> PollResponse:
    return PollResponse.model_validate(
        {
            "aes_key": b64(oaep_encrypt(keypair.public_key(), aes_key)),
            "data": [b64(aes_cfb_encrypt(aes_key, p)) for p in plaintexts],
        }
    )


@pytest.mark.parametrize("data", [None, []])
def test_empty_payload_list_is_no_data_without_crypto(data):
    response = PollResponse.model_validate({"aes_key": "%%% not base64 %%%", "data": data})

    result = decrypt_poll_response(
        response,
        keyring=ExplodingKeyring(),
        keypair=object(),
        parse_logs=True,
    )

    assert result is None


def test_missing_data_field_is_no_data():
    response = PollResponse.model_validate({"aes_key": ""})

    assert decrypt_poll_response(response, keyring=ExplodingKeyring(), keypair=object(), parse_logs=True) is None


def test_entries_are_returned_in_payload_order(keyring, shared_keypair):
    aes_key = os.urandom(32)
    response = _response(
        shared_keypair,
        aes_key,
        [http_log_json("first").encode(), b"plain text interaction", http_log_json("third").encode()],
    )

    entries = decrypt_poll_response(response, keyring=keyring, keypair=shared_keypair, parse_logs=True)

    assert [type(e) for e in entries] == [HttpLog, RawLog, HttpLog]
    assert entries[0].unique_id == "first"
    assert entries[1].text == "plain text interaction"
    assert entries[2].unique_id == "third"


def test_parse_disabled_yields_raw_logs(keyring, shared_keypair):
    text = http_log_json()
    response = _response(shared_keypair, os.urandom(16), [text.encode()])

    entries = decrypt_poll_response(response, keyring=keyring, keypair=shared_keypair, parse_logs=False)

    assert entries == [RawLog(text=text)]


@pytest.mark.parametrize("key_size", [16, 24, 32])
def test_server_chosen_aes_key_sizes(keyring, shared_keypair, key_size):
    response = _response(shared_keypair, os.urandom(key_size), [b"payload"])

    entries = decrypt_poll_response(response, keyring=keyring, keypair=shared_keypair, parse_logs=True)

    assert entries == [RawLog(text="payload")]


def test_invalid_utf8_is_decoded_lossily(keyring, shared_keypair):
    response = _response(shared_keypair, os.urandom(32), [b"abc\xff\xfedef"])

    entries = decrypt_poll_response(response, keyring=keyring, keypair=shared_keypair, parse_logs=True)

    assert entries == [RawLog(text="abc\ufffd\ufffddef")]


def test_bad_aes_key_base64(keyring, shared_keypair):
    response = PollResponse.model_validate({"aes_key": "%%%", "data": [b64(b"x" * 32)]})

    with pytest.raises(PollError) as excinfo:
        decrypt_poll_response(response, keyring=keyring, keypair=shared_keypair, parse_logs=True)

    assert excinfo.value.kind is PollError.Kind.AES_BASE64_DECODE_FAILED


def test_aes_key_for_another_keypair(keyring, shared_keypair):
    other = keyring.generate(1024)
    response = _response(other, os.urandom(32), [b"payload"])

    with pytest.raises(PollError) as excinfo:
        decrypt_poll_response(response, keyring=keyring, keypair=shared_keypair, parse_logs=True)

    assert excinfo.value.kind is PollError.Kind.AES_KEY_DECRYPT_FAILED


def test_bad_payload_base64(keyring, shared_keypair):
    aes_key = os.urandom(32)
    response = PollResponse.model_validate(
        {
            "aes_key": b64(oaep_encrypt(shared_keypair.public_key(), aes_key)),
            "data": ["***"],
        }
    )

    with pytest.raises(PollError) as excinfo:
        decrypt_poll_response(response, keyring=keyring, keypair=shared_keypair, parse_logs=True)

    assert excinfo.value.kind is PollError.Kind.DATA_BASE64_DECODE_FAILED


def test_payload_shorter_than_iv(keyring, shared_keypair):
    aes_key = os.urandom(32)
    response = PollResponse.model_validate(
        {
            "aes_key": b64(oaep_encrypt(shared_keypair.public_key(), aes_key)),
            "data": [b64(b"tiny")],
        }
    )

    with pytest.raises(PollError) as excinfo:
        decrypt_poll_response(response, keyring=keyring, keypair=shared_keypair, parse_logs=True)

    assert excinfo.value.kind is PollError.Kind.DATA_DECRYPT_FAILED


def test_unwrapped_key_with_invalid_length(keyring, shared_keypair):
    response = PollResponse.model_validate(
        {
            "aes_key": b64(oaep_encrypt(shared_keypair.public_key(), b"0123456789")),
            "data": [b64(os.urandom(16) + b"ciphertext")],
        }
    )

    with pytest.raises(PollError) as excinfo:
        decrypt_poll_response(response, keyring=keyring, keypair=shared_keypair, parse_logs=True)

    assert excinfo.value.kind is PollError.Kind.DATA_DECRYPT_FAILED
