class ReportError(Exception):
    """Base class for failures a report operation reports back to its caller."""

    default_message = 'Report operation failed'

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class InvalidArgument(ReportError):
    default_message = 'Invalid argument'


class NotFoundError(ReportError):
    default_message = 'Report not found.'


class NoEvidenceError(ReportError):
    default_message = 'No image to delete.'


class PayloadTooLargeError(ReportError):
    default_message = 'Image exceeds the upload size limit.'


class StorageError(ReportError):
    # Never carries driver details; those only go to the log.
    default_message = 'Server error while saving report.'
