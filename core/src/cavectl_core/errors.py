"""Error taxonomy for the install queue.

Ordinary failures are ``InstallQueueError`` subclasses carrying a stable
numeric code that callers can switch on. ``EnvironmentFailure`` is kept
outside that hierarchy: it marks conditions no caller can recover from and is
only caught at the supervisor boundary (see ``install_queue.run_guarded``).
"""

from __future__ import annotations
from enum import IntEnum


class ErrorCode(IntEnum):
    """Codes surfaced to callers of the install queue."""

    VALIDATION = 400
    NOT_FOUND = 404
    OPERATION_ABORTED = 410
    INTERNAL = 500
    NO_COMPATIBLE_UPLOADS = 2001


class InstallQueueError(RuntimeError):
    """Base class for errors returned by the install queue."""

    code: ErrorCode = ErrorCode.INTERNAL

    def __init__(self, message: str, code: ErrorCode = None):
        super().__init__(message)
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return f"{super().__str__()} (code {int(self.code)})"


class ValidationError(InstallQueueError):
    """A required request field is missing or inconsistent."""

    code = ErrorCode.VALIDATION


class NotFoundError(InstallQueueError):
    """A cave, install location or upload has vanished."""

    code = ErrorCode.NOT_FOUND


class NoCompatibleUploadsError(InstallQueueError):
    """The catalog has no upload usable on this platform."""

    code = ErrorCode.NO_COMPATIBLE_UPLOADS

    def __init__(self, message: str = "No compatible uploads"):
        super().__init__(message)


class OperationAbortedError(InstallQueueError):
    """The user cancelled a prompt. Nothing went wrong."""

    code = ErrorCode.OPERATION_ABORTED

    def __init__(self, message: str = "Operation aborted"):
        super().__init__(message)


class EnvironmentFailure(Exception):
    """Non-recoverable environment failure.

    Raised when the random source cannot produce a UUID or when an install
    folder name cannot be made unique. Intermediate layers must let it
    through.
    """
