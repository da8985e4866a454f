"""
Password-based encryption of export artifacts.

Encrypted artifacts are `<ivBlob>*<dataBlob>`. Both blobs use the OpenSSL
passphrase format: base64 of `Salted__` + 8-byte salt + AES-256-CBC
ciphertext, with key material derived from the password by EVP_BytesToKey
(MD5). The data blob is encrypted with a random 16-byte IV; the IV's hex
text is encrypted into the IV blob with the derived IV. Artifacts whose data
blob was encrypted with the derived IV, as CryptoJS does for passphrases,
decode too.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Tuple

from Crypto.Cipher import AES
from Crypto.Hash import MD5
from Crypto.Random import get_random_bytes
from Crypto.Util.Padding import pad, unpad
from pydantic import ValidationError

from bookmark_profiles.transfer.document import ExportDocument
from bookmark_profiles.transfer.exceptions import DecryptionFailure

logger = logging.getLogger(__name__)

SEPARATOR = "*"
SALT_HEADER = b"Salted__"
SALT_SIZE = 8
KEY_SIZE = 32
IV_SIZE = 16


def derive_key_and_iv(password: str, salt: bytes) -> Tuple[bytes, bytes]:
    """OpenSSL EVP_BytesToKey with MD5, one iteration."""
    secret = password.encode("utf-8")
    derived = b""
    block = b""
    while len(derived) < KEY_SIZE + IV_SIZE:
        block = MD5.new(block + secret + salt).digest()
        derived += block
    return derived[:KEY_SIZE], derived[KEY_SIZE:KEY_SIZE + IV_SIZE]


def encrypt_text(plaintext: str, password: str, iv: bytes | None = None) -> str:
    """
    Encrypt text into an OpenSSL-format base64 blob.

    Args:
        plaintext: Text to encrypt
        password: Passphrase
        iv: Explicit IV; the password-derived IV is used when omitted
    """
    salt = get_random_bytes(SALT_SIZE)
    key, derived_iv = derive_key_and_iv(password, salt)
    cipher = AES.new(key, AES.MODE_CBC, iv or derived_iv)
    ciphertext = cipher.encrypt(pad(plaintext.encode("utf-8"), AES.block_size))
    return base64.b64encode(SALT_HEADER + salt + ciphertext).decode("ascii")


def decrypt_text(blob: str, password: str, iv: bytes | None = None) -> str:
    """
    Reverse encrypt_text.

    Raises:
        ValueError: On malformed input, bad padding or non-UTF-8 plaintext
    """
    try:
        raw = base64.b64decode(blob.strip(), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Blob is not base64: {e}") from e
    if not raw.startswith(SALT_HEADER) or len(raw) < len(SALT_HEADER) + SALT_SIZE + AES.block_size:
        raise ValueError("Blob is missing the salt header")

    salt = raw[len(SALT_HEADER):len(SALT_HEADER) + SALT_SIZE]
    ciphertext = raw[len(SALT_HEADER) + SALT_SIZE:]
    if len(ciphertext) % AES.block_size:
        raise ValueError("Ciphertext length is not a multiple of the block size")

    key, derived_iv = derive_key_and_iv(password, salt)
    cipher = AES.new(key, AES.MODE_CBC, iv or derived_iv)
    plaintext = unpad(cipher.decrypt(ciphertext), AES.block_size)
    return plaintext.decode("utf-8")


class CryptoCodec:
    """Serializes export documents to artifact text and back."""

    def encode(self, document: ExportDocument, password: str = "") -> str:
        """
        Serialize a document, encrypting it when a password is given.

        Returns:
            Plain JSON text, or `<ivBlob>*<dataBlob>`
        """
        payload = document.to_json()
        if not password:
            return payload

        iv = get_random_bytes(IV_SIZE)
        data_blob = encrypt_text(payload, password, iv)
        iv_blob = encrypt_text(iv.hex(), password)
        logger.info("Export document encrypted")
        return f"{iv_blob}{SEPARATOR}{data_blob}"

    def decrypt_payload(self, artifact_text: str, password: str = "") -> Any:
        """
        Decode artifact text into its raw JSON value.

        Raises:
            DecryptionFailure: On a wrong password, corrupted artifact or invalid JSON
        """
        if not password:
            try:
                return json.loads(artifact_text)
            except json.JSONDecodeError as e:
                raise DecryptionFailure("The file is not valid JSON; a password may be required") from e

        iv_blob, separator, data_blob = artifact_text.strip().partition(SEPARATOR)
        if not separator or not iv_blob or not data_blob:
            raise DecryptionFailure("The encrypted file is corrupted")

        try:
            iv = bytes.fromhex(decrypt_text(iv_blob, password))
            if len(iv) != IV_SIZE:
                raise ValueError("Recovered IV has the wrong length")
        except ValueError as e:
            logger.warning(f"Artifact IV could not be recovered: {type(e).__name__}")
            raise DecryptionFailure() from e

        # JSONDecodeError and UnicodeDecodeError are ValueErrors too
        try:
            return json.loads(decrypt_text(data_blob, password, iv))
        except ValueError:
            # CryptoJS passphrase encryption ignores a supplied IV
            logger.debug("Recovered IV did not decrypt the data, retrying with the derived IV")
        try:
            return json.loads(decrypt_text(data_blob, password))
        except ValueError as e:
            logger.warning(f"Artifact decryption failed: {type(e).__name__}")
            raise DecryptionFailure() from e

    def decode(self, artifact_text: str, password: str = "") -> ExportDocument:
        """
        Decode artifact text into an ExportDocument.

        Raises:
            DecryptionFailure: If the artifact cannot be decrypted or is not a document
        """
        payload = self.decrypt_payload(artifact_text, password)
        try:
            return ExportDocument.model_validate(payload)
        except ValidationError as e:
            raise DecryptionFailure("The decrypted file is not a profile export") from e
