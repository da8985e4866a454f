"""
Format sniffing for imported artifacts.

Artifacts carry no format header, so the classifier tries JSON first and
then looks for the leading character every encrypted blob starts with
(`U`, the first base64 character of `Salted__`). A plaintext artifact that
happens to fail JSON parsing and start with that character is
indistinguishable from an encrypted one; it is reported as encrypted and
fails at decryption.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from bookmark_profiles.transfer.crypto import CryptoCodec
from bookmark_profiles.transfer.exceptions import (
    DecryptionFailure,
    EmptyFileError,
    UnsupportedFormatError,
)

logger = logging.getLogger(__name__)


class ArtifactKind(str, Enum):
    PLAIN = "plain"
    ENCRYPTED = "encrypted"
    UNSUPPORTED = "unsupported"


@dataclass
class ClassifiedArtifact:
    """
    Tagged classification result.

    Attributes:
        kind: plain, encrypted or unsupported
        text: The artifact text as read
        payload: Parsed JSON value for plain artifacts, else None
    """

    kind: ArtifactKind
    text: str
    payload: Any = None

    def ensure_supported(self) -> "ClassifiedArtifact":
        """
        Raises:
            UnsupportedFormatError: If the artifact is neither plain nor encrypted
        """
        if self.kind is ArtifactKind.UNSUPPORTED:
            raise UnsupportedFormatError()
        return self


class ImportClassifier:
    """Decides whether artifact text is plain JSON or encrypted."""

    def __init__(self, codec: CryptoCodec | None = None, encrypted_marker: str = "U") -> None:
        self.codec = codec or CryptoCodec()
        self.encrypted_marker = encrypted_marker

    def classify(self, raw_text: str | None) -> ClassifiedArtifact:
        """
        Classify artifact text.

        Raises:
            EmptyFileError: If the text is empty or whitespace only
        """
        if raw_text is None or not raw_text.strip():
            raise EmptyFileError()

        try:
            payload = json.loads(raw_text)
        except json.JSONDecodeError:
            pass
        else:
            logger.info("Artifact classified as plain")
            return ClassifiedArtifact(ArtifactKind.PLAIN, raw_text, payload)

        if raw_text.lstrip().startswith(self.encrypted_marker):
            logger.info("Artifact classified as encrypted")
            return ClassifiedArtifact(ArtifactKind.ENCRYPTED, raw_text)

        logger.warning("Artifact format not supported")
        return ClassifiedArtifact(ArtifactKind.UNSUPPORTED, raw_text)

    def decrypt(self, artifact: ClassifiedArtifact, password: str) -> Any:
        """
        Return the decoded JSON value of a classified artifact.

        Raises:
            UnsupportedFormatError: For unsupported artifacts
            DecryptionFailure: If an encrypted artifact cannot be decrypted
        """
        artifact.ensure_supported()
        if artifact.kind is ArtifactKind.PLAIN:
            return artifact.payload
        if not password:
            raise DecryptionFailure("Enter the password the file was exported with")
        return self.codec.decrypt_payload(artifact.text, password)
