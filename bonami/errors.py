"""Error codes, event kinds and the exception raised by the library."""

from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    """Result codes reported by the library and the daemon."""

    OK = 0
    BADPARAM = -1
    NOMEM = -2
    TIMEOUT = -3
    DUPLICATE = -4
    NOTFOUND = -5
    BADTYPE = -6
    BADNAME = -7
    BADPORT = -8
    BADTXT = -9
    BADQUERY = -10
    BADRESPONSE = -11
    NETWORK = -12
    NOTREADY = -13
    BUSY = -14
    CANCELLED = -15
    INVALID = -16
    NOT_RUNNING = -17
    RESOLVE = -18
    ABORTED = -19
    VERSION = -20

    @property
    def description(self) -> str:
        """Human readable meaning of the code."""
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    ErrorCode.OK: "Operation successful",
    ErrorCode.BADPARAM: "Invalid parameter",
    ErrorCode.NOMEM: "Out of memory",
    ErrorCode.TIMEOUT: "Operation timed out",
    ErrorCode.DUPLICATE: "Service already registered",
    ErrorCode.NOTFOUND: "Service not found",
    ErrorCode.BADTYPE: "Invalid service type",
    ErrorCode.BADNAME: "Invalid service name",
    ErrorCode.BADPORT: "Invalid port number",
    ErrorCode.BADTXT: "Invalid TXT record",
    ErrorCode.BADQUERY: "Invalid DNS query",
    ErrorCode.BADRESPONSE: "Invalid DNS response",
    ErrorCode.NETWORK: "Network error",
    ErrorCode.NOTREADY: "Network not ready",
    ErrorCode.BUSY: "Operation in progress",
    ErrorCode.CANCELLED: "Operation cancelled",
    ErrorCode.INVALID: "Invalid argument",
    ErrorCode.NOT_RUNNING: "Daemon not running",
    ErrorCode.RESOLVE: "Host name could not be resolved",
    ErrorCode.ABORTED: "Operation aborted",
    ErrorCode.VERSION: "Unsupported library version",
}


class Event(IntEnum):
    """Kinds of discovery events passed to callbacks."""

    ADDED = 1
    REMOVED = 2
    UPDATED = 3


class BonAmiError(Exception):
    """Raised when an operation fails; carries an ErrorCode."""

    def __init__(self, code, message=None):
        self.code = ErrorCode(code)
        if self.code is ErrorCode.OK:
            raise ValueError("ErrorCode.OK does not describe an error")
        self.message = message or self.code.description
        super().__init__(self.code, self.message)

    def __str__(self) -> str:
        return f"{self.message} ({self.code.name})"