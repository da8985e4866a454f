"""
Artifact file I/O.

Export writes `<name>.<extension>` as UTF-8 text; import reads any file the
user picked as UTF-8 text, in full, before classification.
"""

from __future__ import annotations

import logging
from pathlib import Path

from bookmark_profiles.transfer.assembler import (
    FORBIDDEN_FILE_NAME_CHARS,
    MAX_FILE_NAME_LENGTH,
    sanitize_file_name,
)
from bookmark_profiles.transfer.exceptions import EmptyFileError, ExportValidationError, UnsupportedFormatError

logger = logging.getLogger(__name__)

MIME_TYPE = "text/plain"


class FileTransport:
    """
    Reads and writes artifacts on the local file system.

    Attributes:
        extension: Extension appended to written artifacts
        max_name_length: Names are truncated to this length
        forbidden: Characters stripped from names
    """

    def __init__(
        self,
        extension: str = "txt",
        max_name_length: int = MAX_FILE_NAME_LENGTH,
        forbidden: str = FORBIDDEN_FILE_NAME_CHARS,
    ) -> None:
        self.extension = extension.lstrip(".")
        self.max_name_length = max_name_length
        self.forbidden = forbidden

    def artifact_name(self, file_name_hint: str) -> str:
        """
        Raises:
            ExportValidationError: If nothing is left of the name after stripping
        """
        name = sanitize_file_name(file_name_hint, self.forbidden)[: self.max_name_length].strip()
        if not name:
            raise ExportValidationError("Enter a file name for the export")
        return f"{name}.{self.extension}"

    def write_artifact(self, text: str, file_name_hint: str, directory: str | Path = ".") -> Path:
        """
        Write artifact text to `<directory>/<name>.<extension>`.

        Returns:
            Path of the written file
        """
        target_dir = Path(directory)
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / self.artifact_name(file_name_hint)
        path.write_text(text, encoding="utf-8")
        logger.info(f"Artifact written: {path} ({MIME_TYPE}, {len(text)} chars)")
        return path

    def read_artifact(self, path: str | Path) -> str:
        """
        Read a user-selected artifact.

        Raises:
            EmptyFileError: If the file is empty
            UnsupportedFormatError: If the file is not UTF-8 text
            OSError: If the file cannot be read
        """
        source = Path(path)
        try:
            text = source.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise UnsupportedFormatError("The selected file is not a text file") from e
        if not text:
            raise EmptyFileError()
        logger.info(f"Artifact read: {source} ({len(text)} chars)")
        return text
