"""
Profile transfer service coordinating export and import.

This service handles:
- Export: selection -> document assembly -> optional encryption -> file write
- Import: file read -> classification -> decryption -> validation -> merge
- The session lock: one export or import step at a time against the live store
"""

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy.orm import Session

from bookmark_profiles.config import AppConfig
from bookmark_profiles.profiles.store import ProfileStore
from bookmark_profiles.transfer.assembler import ExportAssembler
from bookmark_profiles.transfer.classifier import ImportClassifier
from bookmark_profiles.transfer.crypto import CryptoCodec
from bookmark_profiles.transfer.document import ExportDocument
from bookmark_profiles.transfer.exceptions import SessionBusyError
from bookmark_profiles.transfer.merge import (
    ApplyReport,
    ImportSession,
    MergeDecisionEngine,
    MergeSide,
    PlacementNotice,
)
from bookmark_profiles.transfer.selector import ExportSession
from bookmark_profiles.transfer.transport import FileTransport
from bookmark_profiles.transfer.validator import StructuralValidator

logger = logging.getLogger(__name__)


class ProfileTransferService:
    """
    Service for exporting and importing user profiles.

    Errors from the transfer subsystem propagate to the caller as
    ProfileTransferError subclasses carrying a user-facing message.
    """

    def __init__(
        self,
        config: AppConfig,
        session: Session,
        store: Optional[ProfileStore] = None,
        validator: Optional[StructuralValidator] = None,
        editable_destinations: bool = False,
    ) -> None:
        """
        Initialize the service with configuration and dependencies.

        Args:
            config: Application configuration
            session: Database session backing the profile store
            store: Optional profile store (created from session if not provided)
            validator: Optional structural validator (pydantic default if not provided)
            editable_destinations: Let users switch allowed merge destinations off
        """
        self.config = config
        self.transfer_config = config.transfer
        self.store = store or ProfileStore(session, profile_id_length=config.transfer.profile_id_length)
        self.codec = CryptoCodec()
        self.assembler = ExportAssembler(environment=config.environment, transfer=config.transfer)
        self.transport = FileTransport(
            extension=config.transfer.extension,
            max_name_length=config.transfer.file_name_max_length,
            forbidden=config.transfer.forbidden_file_name_chars,
        )
        self.classifier = ImportClassifier(codec=self.codec, encrypted_marker=config.transfer.encrypted_marker)
        self.engine = MergeDecisionEngine(
            store=self.store,
            classifier=self.classifier,
            validator=validator,
            transfer=config.transfer,
            editable=editable_destinations,
        )
        self._lock = threading.Lock()

    @contextmanager
    def _exclusive(self, operation: str) -> Generator[None, None, None]:
        if not self._lock.acquire(blocking=False):
            logger.warning(f"Rejected {operation}: another transfer operation is running")
            raise SessionBusyError()
        try:
            yield
        finally:
            self._lock.release()

    # -- export -------------------------------------------------------------

    def new_export_session(self) -> ExportSession:
        return ExportSession()

    def build_document(self, export_session: ExportSession) -> ExportDocument:
        """Assemble the export document for the session's selection."""
        with self._exclusive("assemble"):
            snapshot = self.store.snapshot()
            return self.assembler.assemble(
                snapshot, export_session.selector.selection(), export_session.file_name
            )

    def export_text(self, export_session: ExportSession) -> str:
        """
        Produce the artifact text for an export session.

        The session's password is cleared once the artifact exists.
        """
        document = self.build_document(export_session)
        try:
            return self.codec.encode(document, export_session.password)
        finally:
            export_session.clear_password()

    def export_to_file(self, export_session: ExportSession, directory: str | Path = ".") -> Path:
        """
        Write the artifact for an export session to disk.

        Returns:
            Path of the written artifact
        """
        text = self.export_text(export_session)
        return self.transport.write_artifact(text, export_session.file_name, directory)

    # -- import -------------------------------------------------------------

    def new_import_session(self) -> ImportSession:
        return ImportSession()

    def load_text(self, import_session: ImportSession, raw_text: str) -> ImportSession:
        with self._exclusive("classify"):
            return self.engine.load(import_session, raw_text)

    def load_file(self, import_session: ImportSession, path: str | Path) -> ImportSession:
        """Read an artifact in full, then classify and (if plain) validate it."""
        raw_text = self.transport.read_artifact(path)
        return self.load_text(import_session, raw_text)

    def submit_password(self, import_session: ImportSession, password: str) -> ImportSession:
        with self._exclusive("decrypt"):
            return self.engine.submit_password(import_session, password)

    def toggle(
        self, import_session: ImportSession, tag: str, side: MergeSide | str, value: bool
    ) -> Optional[PlacementNotice]:
        return self.engine.toggle(import_session, tag, side, value)

    def apply(self, import_session: ImportSession) -> ApplyReport:
        with self._exclusive("apply"):
            return self.engine.apply(import_session)
