"""
Import review and merge into the live profile store.

An ImportSession moves through

    IDLE -> AWAITING_PASSWORD (encrypted only) -> VALIDATING
         -> AWAITING_SELECTION -> APPLYING -> DONE

with ERROR reachable from any step. Whole-profile categories only ever land
in new profiles and partial categories only in the active profile; the
destination of every category is pre-set from its placement class and
locked. Attempts to pick the other destination produce a PlacementNotice
instead of a state change.

All merge steps run against pending store changes. A failing step or a
failed persist discards everything, so an import either lands completely or
not at all.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from bookmark_profiles.config import TransferConfig
from bookmark_profiles.database.models import UserProfile
from bookmark_profiles.profiles.store import ProfileStoreProtocol
from bookmark_profiles.profiles.user_profile import (
    ROOT_FOLDER_ID,
    UserProfileData,
    default_bookmarks,
    now_ms,
)
from bookmark_profiles.transfer.bookmarks import (
    collect_ids,
    find_bookmark_by_key,
    import_title,
    next_max_index,
    rekey_tree,
)
from bookmark_profiles.transfer.categories import CATEGORY_TABLE, Category
from bookmark_profiles.transfer.classifier import ArtifactKind, ClassifiedArtifact, ImportClassifier
from bookmark_profiles.transfer.document import ExportDocument, ValidationResult
from bookmark_profiles.transfer.exceptions import (
    DecryptionFailure,
    InvalidSessionStateError,
    MergeApplyError,
    NothingSelectedError,
    NotRecognizedExportError,
    PersistFailedError,
    ProfileTransferError,
    SessionBusyError,
)
from bookmark_profiles.transfer.validator import (
    PROFILE_SCHEMA_NAME,
    ProfileExportValidator,
    StructuralValidator,
)

logger = logging.getLogger(__name__)


class ImportState(str, Enum):
    IDLE = "idle"
    AWAITING_PASSWORD = "awaitingPassword"
    VALIDATING = "validating"
    AWAITING_SELECTION = "awaitingSelection"
    APPLYING = "applying"
    DONE = "done"
    ERROR = "error"


BUSY_STATES = (ImportState.VALIDATING, ImportState.APPLYING)


class MergeSide(str, Enum):
    CURRENT = "applyToCurrent"
    NEW = "applyToNew"


@dataclass
class MergeSelection:
    """
    Destination choice for one imported category.

    Attributes:
        apply_to_current: Merge into the active profile
        apply_to_new: Create new profile(s)
        locked: Destination may not be changed by the user
    """

    apply_to_current: bool = False
    apply_to_new: bool = False
    locked: bool = True

    @property
    def enabled(self) -> bool:
        return self.apply_to_current or self.apply_to_new


@dataclass(frozen=True)
class PlacementNotice:
    """Non-fatal notice raised when a locked or disallowed destination is toggled."""

    tag: Category
    side: MergeSide
    message: str


@dataclass
class ApplyReport:
    applied: List[Category] = field(default_factory=list)
    created_profiles: List[str] = field(default_factory=list)


@dataclass
class ImportSession:
    """
    Draft state of one import, from file read to merge.

    The decoded document and password live here only until the merge
    succeeds or the session is reset.
    """

    state: ImportState = ImportState.IDLE
    artifact: Optional[ClassifiedArtifact] = None
    password: str = field(default="", repr=False)
    validation: Optional[ValidationResult] = None
    selections: Dict[Category, MergeSelection] = field(default_factory=dict)
    notices: List[PlacementNotice] = field(default_factory=list)
    error: Optional[ProfileTransferError] = None
    report: Optional[ApplyReport] = None

    @property
    def document(self) -> Optional[ExportDocument]:
        return self.validation.valid_object if self.validation else None

    def reset(self) -> None:
        self.state = ImportState.IDLE
        self.artifact = None
        self.password = ""
        self.validation = None
        self.selections = {}
        self.notices = []
        self.error = None
        self.report = None


def default_selection(tag: Category) -> MergeSelection:
    """Destination fixed by the category's placement class."""
    if CATEGORY_TABLE[tag].is_whole_profile:
        return MergeSelection(apply_to_new=True, locked=True)
    return MergeSelection(apply_to_current=True, locked=True)


def allowed_side(tag: Category) -> MergeSide:
    return MergeSide.NEW if CATEGORY_TABLE[tag].is_whole_profile else MergeSide.CURRENT


class MergeDecisionEngine:
    """
    Drives ImportSessions through classification, validation and merge.

    Attributes:
        store: Live profile store
        classifier: Artifact format sniffer and decryptor
        validator: Structural validator for decoded candidates
        transfer: Import rules (id lengths, title format)
        editable: Allow the user to switch the allowed destination off and on
    """

    def __init__(
        self,
        store: ProfileStoreProtocol,
        classifier: ImportClassifier | None = None,
        validator: StructuralValidator | None = None,
        transfer: TransferConfig | None = None,
        editable: bool = False,
    ) -> None:
        self.store = store
        self.transfer = transfer or TransferConfig()
        self.classifier = classifier or ImportClassifier(encrypted_marker=self.transfer.encrypted_marker)
        self.validator = validator or ProfileExportValidator()
        self.editable = editable
        self._steps: Dict[Category, Callable[[ExportDocument, ApplyReport], None]] = {
            Category.ALL_PROFILES: self._apply_all_profiles,
            Category.CURRENT_ALL_PROFILE: self._apply_current_all_profile,
            Category.CURRENT_BOOKMARKS: self._apply_bookmarks,
            Category.DEFAULT_FOLDER_STYLE: self._overwrite("folder_style"),
            Category.DEFAULT_BOOKMARKS_STYLE: self._overwrite("bookmark_style"),
            Category.USER_SETTINGS: self._overwrite("main_settings"),
            Category.CURRENT_USER_ACTIVITY_LOG: self._apply_activity_log,
        }

    # -- session flow -------------------------------------------------------

    def _fail(self, session: ImportSession, error: ProfileTransferError) -> ProfileTransferError:
        session.state = ImportState.ERROR
        session.error = error
        logger.warning(f"Import failed: {error.user_message}")
        return error

    def load(self, session: ImportSession, raw_text: str | None) -> ImportSession:
        """
        Start an import from artifact text.

        Raises:
            SessionBusyError: If the session is validating or applying
            EmptyFileError, UnsupportedFormatError, NotRecognizedExportError
        """
        if session.state in BUSY_STATES:
            raise SessionBusyError()
        session.reset()

        try:
            artifact = self.classifier.classify(raw_text).ensure_supported()
        except ProfileTransferError as e:
            raise self._fail(session, e) from e

        session.artifact = artifact
        if artifact.kind is ArtifactKind.ENCRYPTED:
            session.state = ImportState.AWAITING_PASSWORD
            logger.info("Encrypted artifact loaded, awaiting password")
            return session

        self._validate(session, artifact.payload)
        return session

    def submit_password(self, session: ImportSession, password: str) -> ImportSession:
        """
        Decrypt an encrypted artifact and validate it.

        A wrong password leaves the session awaiting another attempt.

        Raises:
            InvalidSessionStateError: If no password is awaited
            DecryptionFailure: If decryption fails
            NotRecognizedExportError: If the decrypted data is not a profile export
        """
        if session.state is not ImportState.AWAITING_PASSWORD or session.artifact is None:
            raise InvalidSessionStateError("No encrypted file is waiting for a password")

        try:
            payload = self.classifier.decrypt(session.artifact, password)
        except DecryptionFailure as e:
            session.error = e
            logger.warning("Decryption failed; waiting for another password")
            raise

        session.password = password
        self._validate(session, payload)
        return session

    def _validate(self, session: ImportSession, candidate: Any) -> None:
        session.state = ImportState.VALIDATING
        result = self.validator.validate(candidate, PROFILE_SCHEMA_NAME)
        if not result or not result.valid_object.categories():
            raise self._fail(session, NotRecognizedExportError())

        session.validation = result
        session.selections = {tag: default_selection(tag) for tag in result.valid_object.categories()}
        session.state = ImportState.AWAITING_SELECTION
        logger.info(f"Import ready for review: categories={[t.value for t in session.selections]}")

    def toggle(self, session: ImportSession, tag: Category | str, side: MergeSide | str, value: bool) -> Optional[PlacementNotice]:
        """
        Request a destination change for one category.

        Returns:
            A PlacementNotice when the change is not allowed, else None

        Raises:
            InvalidSessionStateError: If the session is not awaiting a selection
        """
        if session.state is not ImportState.AWAITING_SELECTION:
            raise InvalidSessionStateError()
        tag, side = Category(tag), MergeSide(side)
        spec = CATEGORY_TABLE[tag]
        selection = session.selections.get(tag)

        message: str | None = None
        if selection is None:
            message = f"{spec.title} is not part of this import"
        elif side is not allowed_side(tag):
            if spec.is_whole_profile:
                message = f"{spec.title} can only be imported as a new profile"
            else:
                message = f"{spec.title} can only be imported into the current profile"
        elif selection.locked and not self.editable:
            message = f"The destination of {spec.title} is fixed"

        if message is not None:
            notice = PlacementNotice(tag=tag, side=side, message=message)
            session.notices.append(notice)
            logger.info(f"Placement notice: {message}")
            return notice

        if side is MergeSide.NEW:
            selection.apply_to_new = value
        else:
            selection.apply_to_current = value
        return None

    def apply(self, session: ImportSession) -> ApplyReport:
        """
        Merge the enabled categories into the store and persist.

        Raises:
            InvalidSessionStateError: If the session is not awaiting a selection
            NothingSelectedError: If no destination is enabled
            MergeApplyError: If a merge step fails; nothing is changed
            PersistFailedError: If the store could not save; nothing is changed
        """
        if session.state is ImportState.APPLYING:
            raise SessionBusyError()
        if session.state is not ImportState.AWAITING_SELECTION or session.document is None:
            raise InvalidSessionStateError("There is no validated import to apply")

        enabled = [tag for tag in CATEGORY_TABLE if session.selections.get(tag, MergeSelection()).enabled]
        if not enabled:
            session.error = NothingSelectedError()
            raise session.error

        document = session.document
        report = ApplyReport()
        session.state = ImportState.APPLYING
        try:
            for tag in enabled:
                self._steps[tag](document, report)
                report.applied.append(tag)
                logger.info(f"Merge step applied: {tag.value}")
        except Exception as e:
            logger.error(f"Merge step failed, changes discarded: {type(e).__name__}: {e}")
            self._abort(session, MergeApplyError())
            raise session.error from e

        try:
            saved = self.store.persist()
        except Exception as e:
            logger.error(f"Persist raised, changes discarded: {type(e).__name__}: {e}")
            self._abort(session, PersistFailedError())
            raise session.error from e
        if not saved:
            self._abort(session, PersistFailedError())
            raise session.error

        session.report = report
        session.state = ImportState.DONE
        session.validation = None
        session.password = ""
        session.error = None
        logger.info(f"Import complete: applied={[t.value for t in report.applied]}")
        return report

    def _abort(self, session: ImportSession, error: ProfileTransferError) -> None:
        """Drop pending store changes and hand the selection back to the user."""
        self.store.discard()
        session.state = ImportState.AWAITING_SELECTION
        session.error = error

    # -- merge steps --------------------------------------------------------

    def _create_from_wire(self, data: Dict[str, Any]) -> str:
        profile = UserProfileData.from_export_dict(data)
        profile.active = False
        profile.timestamp_update = now_ms()
        return self.store.create_profile(profile)

    def _apply_all_profiles(self, document: ExportDocument, report: ApplyReport) -> None:
        for entry in document.slice(Category.ALL_PROFILES):
            report.created_profiles.append(self._create_from_wire(entry))

    def _apply_current_all_profile(self, document: ExportDocument, report: ApplyReport) -> None:
        report.created_profiles.append(self._create_from_wire(document.slice(Category.CURRENT_ALL_PROFILE)))

    def _active(self) -> UserProfile:
        return self.store.get_active_profile()

    def _apply_bookmarks(self, document: ExportDocument, report: ApplyReport) -> None:
        imported = copy.deepcopy(document.slice(Category.CURRENT_BOOKMARKS))
        subtree = imported[0]
        stamp = now_ms()

        profile = self._active()
        bookmarks = copy.deepcopy(profile.bookmarks or []) or default_bookmarks(stamp)
        root = find_bookmark_by_key(bookmarks, ROOT_FOLDER_ID) or bookmarks[0]
        siblings = root.setdefault("children", [])

        rekey_tree(
            subtree,
            parent_id=root["id"],
            taken=collect_ids(bookmarks),
            timestamp=stamp,
            id_length=self.transfer.bookmark_id_length,
        )
        subtree["index"] = next_max_index(siblings)
        subtree["lastEdited"] = stamp
        subtree["title"] = import_title(
            document.details.timestamp_creation,
            prefix=self.transfer.import_title_prefix,
            time_format=self.transfer.title_time_format,
        )
        siblings.append(subtree)
        root["lastEdited"] = stamp

        profile.bookmarks = bookmarks
        self.store.touch(profile)

    def _overwrite(self, attribute: str) -> Callable[[ExportDocument, ApplyReport], None]:
        tag = {
            "folder_style": Category.DEFAULT_FOLDER_STYLE,
            "bookmark_style": Category.DEFAULT_BOOKMARKS_STYLE,
            "main_settings": Category.USER_SETTINGS,
        }[attribute]

        def step(document: ExportDocument, report: ApplyReport) -> None:
            profile = self._active()
            setattr(profile, attribute, copy.deepcopy(document.slice(tag)))
            self.store.touch(profile)

        return step

    def _apply_activity_log(self, document: ExportDocument, report: ApplyReport) -> None:
        profile = self._active()
        entries = copy.deepcopy(profile.activity_log or [])
        for entry in document.slice(Category.CURRENT_USER_ACTIVITY_LOG):
            if entry not in entries:
                entries.append(copy.deepcopy(entry))
        profile.activity_log = entries
        self.store.touch(profile)
