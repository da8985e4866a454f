"""
Tests for artifact encryption and decoding.
"""

import json

import pytest
from Crypto.Random import get_random_bytes

from bookmark_profiles.transfer.categories import Category
from bookmark_profiles.transfer.crypto import (
    SEPARATOR,
    CryptoCodec,
    decrypt_text,
    derive_key_and_iv,
    encrypt_text,
)
from bookmark_profiles.transfer.document import ExportDocument
from bookmark_profiles.transfer.exceptions import DecryptionFailure


@pytest.fixture
def document():
    document = ExportDocument()
    document.details.timestamp_creation = "2024-05-01T10:00:00+00:00"
    document.include(Category.USER_SETTINGS, {"main": {"theme": "dark", "ünicode": "✓"}})
    document.export["profileDetail"] = {"name": "Alice", "userId": "u1", "timestampCreation": 1, "image": ""}
    return document


def test_key_derivation_is_deterministic():
    key, iv = derive_key_and_iv("secret", b"12345678")
    assert (key, iv) == derive_key_and_iv("secret", b"12345678")
    assert len(key) == 32 and len(iv) == 16
    assert derive_key_and_iv("secret", b"87654321") != (key, iv)


def test_blob_round_trip_and_salt_marker():
    blob = encrypt_text("hello", "pw")
    assert blob.startswith("U2FsdGVkX1")
    assert decrypt_text(blob, "pw") == "hello"


def test_plain_encode_is_json(document):
    text = CryptoCodec().encode(document)

    assert json.loads(text)["details"]["exportType"] == ["userSettings"]
    assert CryptoCodec().decode(text).to_wire() == document.to_wire()


def test_encrypted_round_trip(document):
    codec = CryptoCodec()
    text = codec.encode(document, "correct horse")

    assert text.count(SEPARATOR) == 1
    iv_blob, data_blob = text.split(SEPARATOR)
    assert iv_blob.startswith("U") and data_blob.startswith("U")
    assert codec.decode(text, "correct horse").to_wire() == document.to_wire()


def test_each_encryption_is_different(document):
    codec = CryptoCodec()
    assert codec.encode(document, "pw") != codec.encode(document, "pw")


def test_wrong_password_fails(document):
    codec = CryptoCodec()
    text = codec.encode(document, "right")
    with pytest.raises(DecryptionFailure):
        codec.decode(text, "wrong")


def test_data_blob_with_derived_iv_decodes(document):
    # Both blobs carry the password-derived IV, as CryptoJS writes them
    artifact = encrypt_text(get_random_bytes(16).hex(), "pw") + SEPARATOR + encrypt_text(document.to_json(), "pw")
    codec = CryptoCodec()

    assert codec.decode(artifact, "pw").to_wire() == document.to_wire()
    with pytest.raises(DecryptionFailure):
        codec.decode(artifact, "wrong")


@pytest.mark.parametrize(
    "text",
    [
        "U2FsdGVkX1",
        "U2FsdGVkX1*",
        "not base64 at all*still not",
        "U2FsdGVkX19hYmNkZWZnaA==*U2FsdGVkX19hYmNkZWZnaA==",
    ],
)
def test_corrupted_artifacts_fail(text):
    with pytest.raises(DecryptionFailure):
        CryptoCodec().decode(text, "pw")


def test_plain_text_that_is_not_json_fails():
    with pytest.raises(DecryptionFailure):
        CryptoCodec().decrypt_payload("{broken")


def test_json_that_is_not_a_document_fails():
    with pytest.raises(DecryptionFailure):
        CryptoCodec().decode('{"details": 42}')
