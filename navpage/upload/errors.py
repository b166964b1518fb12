"""Upload proxy failures, each tied to the HTTP status it is reported with."""


class UploadError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ServiceUnavailable(UploadError):
    """No storage credential configured."""

    status_code = 501


class BadRequest(UploadError):
    """Missing payload, disallowed type or oversize file."""

    status_code = 400


class StorageFailure(UploadError):
    """The blob backend rejected or failed the operation."""

    status_code = 500
