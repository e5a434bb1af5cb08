class DmeExtractionError(Exception):
    """Base error for a note that could not be turned into a sent DME order."""
    kind = "Unexpected"
    exit_code = 5


class NoteNotFoundError(DmeExtractionError):
    kind = "NotFound"
    exit_code = 1

    def __init__(self, path):
        super().__init__(f"The file was not found: {path}")
        self.path = path


class InvalidNoteFormatError(DmeExtractionError):
    kind = "InvalidFormat"
    exit_code = 2


class TransportError(DmeExtractionError):
    kind = "TransportFailure"
    exit_code = 3

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class TransportTimeoutError(DmeExtractionError):
    kind = "Timeout"
    exit_code = 4


class UnexpectedError(DmeExtractionError):
    kind = "Unexpected"
    exit_code = 5
