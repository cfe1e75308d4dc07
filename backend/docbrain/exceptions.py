"""Domain errors. Each carries the HTTP status the API answers with."""


class DocBrainError(Exception):
    """Base class for errors the API knows how to answer."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(DocBrainError):
    """Bad input. Never leaves partial state behind."""

    status_code = 400
    message = "Invalid upload"


class MissingFileError(ValidationError):
    message = "No file uploaded"


class InvalidFileTypeError(ValidationError):
    message = "Only PDF files are allowed"


class PayloadTooLargeError(ValidationError):

    def __init__(self, max_bytes: int):
        self.max_bytes = max_bytes
        if max_bytes >= 1024 * 1024:
            limit = f"{max_bytes // (1024 * 1024)}MB"
        else:
            limit = f"{max_bytes} bytes"
        super().__init__(f"File too large. Maximum size is {limit}")


class NotFoundError(DocBrainError):
    status_code = 404
    message = "Not found"


class RecordNotFoundError(NotFoundError):
    message = "PDF not found"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__()


class BlobNotFoundError(NotFoundError):
    message = "PDF file not found on disk"

    def __init__(self, name: str):
        self.name = name
        super().__init__()


class DuplicateKeyError(DocBrainError):
    """Insert hit an existing primary key."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Record {record_id} already exists")
