"""Exception taxonomy raised by services and mapped to HTTP by main.py."""


class PhotoShareError(Exception):
    """Base exception for all application errors."""
    pass


class ValidationError(PhotoShareError):
    """User input is unacceptable; the caller can fix it and retry."""
    pass


class AccessDenied(PhotoShareError):
    """The access resolver said no."""
    pass


class NotFound(PhotoShareError):
    """Resource does not exist (or must look like it does not)."""
    pass


class StorageError(PhotoShareError):
    """Blob I/O failed independently of user input."""
    pass
