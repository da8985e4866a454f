"""
Profile export/import subsystem.

Export path: ExportTypeSelector -> ExportAssembler -> CryptoCodec -> FileTransport.
Import path: FileTransport -> ImportClassifier -> CryptoCodec -> StructuralValidator
-> MergeDecisionEngine -> profile store.
"""

from bookmark_profiles.transfer.assembler import ExportAssembler, sanitize_file_name
from bookmark_profiles.transfer.categories import (
    CATEGORY_TABLE,
    PARTIAL_CATEGORIES,
    WHOLE_PROFILE_CATEGORIES,
    Category,
    PlacementClass,
)
from bookmark_profiles.transfer.classifier import ArtifactKind, ClassifiedArtifact, ImportClassifier
from bookmark_profiles.transfer.crypto import CryptoCodec
from bookmark_profiles.transfer.document import ExportDocument, ValidationResult, ValidationStatus
from bookmark_profiles.transfer.exceptions import (
    DecryptionFailure,
    EmptyFileError,
    ExportValidationError,
    InvalidSessionStateError,
    MergeApplyError,
    NothingSelectedError,
    NotRecognizedExportError,
    PersistFailedError,
    ProfileTransferError,
    SessionBusyError,
    UnsupportedFormatError,
)
from bookmark_profiles.transfer.merge import (
    ApplyReport,
    ImportSession,
    ImportState,
    MergeDecisionEngine,
    MergeSelection,
    MergeSide,
    PlacementNotice,
)
from bookmark_profiles.transfer.selector import ExportSession, ExportTypeSelector
from bookmark_profiles.transfer.transport import MIME_TYPE, FileTransport
from bookmark_profiles.transfer.validator import ProfileExportValidator, StructuralValidator

__all__ = [
    "ApplyReport",
    "ArtifactKind",
    "CATEGORY_TABLE",
    "Category",
    "ClassifiedArtifact",
    "CryptoCodec",
    "DecryptionFailure",
    "EmptyFileError",
    "ExportAssembler",
    "ExportDocument",
    "ExportSession",
    "ExportTypeSelector",
    "ExportValidationError",
    "FileTransport",
    "ImportClassifier",
    "ImportSession",
    "ImportState",
    "InvalidSessionStateError",
    "MIME_TYPE",
    "MergeApplyError",
    "MergeDecisionEngine",
    "MergeSelection",
    "MergeSide",
    "NothingSelectedError",
    "NotRecognizedExportError",
    "PARTIAL_CATEGORIES",
    "PersistFailedError",
    "PlacementClass",
    "PlacementNotice",
    "ProfileExportValidator",
    "ProfileTransferError",
    "SessionBusyError",
    "StructuralValidator",
    "UnsupportedFormatError",
    "ValidationResult",
    "ValidationStatus",
    "WHOLE_PROFILE_CATEGORIES",
    "sanitize_file_name",
]
