"""
Errors raised by the profile export/import subsystem.

Every error carries a message fit to show the user and leaves the session
that raised it in a retryable state; none of them is fatal to the process.
"""


class ProfileTransferError(Exception):
    """Base class for export/import errors."""

    default_message = "Profile export/import failed"

    def __init__(self, message: str | None = None) -> None:
        self.user_message = message or self.default_message
        super().__init__(self.user_message)


class ExportValidationError(ProfileTransferError):
    """Bad export selection or file name; the user corrects the input."""

    default_message = "Select at least one category and a valid file name"


class DecryptionFailure(ProfileTransferError):
    """Wrong password or corrupted encrypted artifact."""

    default_message = "Could not decrypt the file: wrong password or corrupted file"


class EmptyFileError(ProfileTransferError):
    default_message = "The selected file is empty"


class UnsupportedFormatError(ProfileTransferError):
    default_message = "The selected file is not a profile export"


class NotRecognizedExportError(ProfileTransferError):
    """The structural validator found no valid profile export."""

    default_message = "The file is not a recognized profile export"


class NothingSelectedError(ProfileTransferError):
    default_message = "Choose at least one destination for the imported data"


class MergeApplyError(ProfileTransferError):
    """A merge step failed; every pending change was discarded."""

    default_message = "Could not apply the imported data; nothing was changed"


class PersistFailedError(ProfileTransferError):
    """The merge was computed but the profile store could not save it."""

    default_message = "The imported data could not be saved; nothing was changed"


class SessionBusyError(ProfileTransferError):
    default_message = "Another export or import is in progress"


class InvalidSessionStateError(ProfileTransferError):
    """An operation was called in a state that does not allow it."""

    default_message = "This step is not available right now"
