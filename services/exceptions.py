class ServiceError(Exception):
    """Base class for errors that map onto an HTTP status."""
    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class UploadValidationError(ServiceError):
    """Raised when a filename or uploaded file fails validation (bad name, wrong extension, missing field)."""
    status_code = 400


class StoredFileNotFoundError(ServiceError):
    """Raised when the requested file is not in the upload folder."""
    status_code = 404


class AuthError(ServiceError):
    """Raised when authentication or access control fails."""
    status_code = 403


class WorkbookReadError(ServiceError):
    """Raised when a stored workbook can't be read or parsed."""
    status_code = 500
