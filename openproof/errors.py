"""Exceptions raised by the OpenProof client.

Every error kind carries the process exit code the CLI reports for it, so
callers scripting ``openproof`` can tell failures apart without parsing
output.
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    OK = 0
    UNEXPECTED = 1
    USAGE = 2
    MISSING_CREDENTIAL = 3
    MISSING_FILE = 4
    REMOTE_REJECTED = 5
    TRANSPORT = 6
    MALFORMED_RESPONSE = 7
    TIMEOUT = 8
    CREDENTIAL_STORE = 9
    UNREADABLE_FILE = 10


class OpenProofError(Exception):
    """Base class for all client errors."""

    exit_code: ExitCode = ExitCode.UNEXPECTED

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def detail(self) -> str | None:
        """Extra diagnostic text shown below the message, if any."""
        return None


class MissingCredentialError(OpenProofError):
    """No token could be resolved for an authenticated command."""

    exit_code = ExitCode.MISSING_CREDENTIAL


class MissingFileError(OpenProofError):
    """A local file named on the command line does not exist."""

    exit_code = ExitCode.MISSING_FILE

    def __init__(self, path: str) -> None:
        super().__init__(f"File not found: {path}")
        self.path = path


class FileReadError(OpenProofError):
    """A local file exists but could not be read as UTF-8 text."""

    exit_code = ExitCode.UNREADABLE_FILE

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path


class RemoteRejectedError(OpenProofError):
    """The registry answered with a status outside ``[200, 300)``."""

    exit_code = ExitCode.REMOTE_REJECTED

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code
        self.body = body

    @property
    def detail(self) -> str | None:
        return self.body or None


class TransportError(OpenProofError):
    """The request never produced a response (DNS, connection, TLS)."""

    exit_code = ExitCode.TRANSPORT

    def __init__(self, cause: Exception) -> None:
        super().__init__(f"Request failed: {type(cause).__name__}: {cause}")
        self.cause = cause


class RequestTimeoutError(OpenProofError):
    """The request did not complete before its deadline."""

    exit_code = ExitCode.TIMEOUT

    def __init__(self, timeout: float) -> None:
        super().__init__(f"Request timed out after {timeout:g}s")
        self.timeout = timeout


class MalformedResponseError(OpenProofError):
    """A 2xx response was missing fields the command needs."""

    exit_code = ExitCode.MALFORMED_RESPONSE

    def __init__(self, message: str, raw: str) -> None:
        super().__init__(message)
        self.raw = raw

    @property
    def detail(self) -> str | None:
        return f"Response: {self.raw}"


class CredentialStoreError(OpenProofError):
    """The token file could not be read or written."""

    exit_code = ExitCode.CREDENTIAL_STORE
