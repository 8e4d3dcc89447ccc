"""Errors raised by the client and the services."""

from __future__ import annotations

import enum


class StatusCode(enum.IntEnum):
    """Status codes of a failed remote call."""

    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16


class RpcError(Exception):
    """A remote call failed with a status code and message."""

    def __init__(self, code: StatusCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"status: {self.code.name}, message: {self.message}"

    @classmethod
    def invalid_argument(cls, message: str) -> "RpcError":
        return cls(StatusCode.INVALID_ARGUMENT, message)

    @classmethod
    def unimplemented(cls, message: str) -> "RpcError":
        return cls(StatusCode.UNIMPLEMENTED, message)

    @classmethod
    def not_found(cls, message: str) -> "RpcError":
        return cls(StatusCode.NOT_FOUND, message)

    @classmethod
    def already_exists(cls, message: str) -> "RpcError":
        return cls(StatusCode.ALREADY_EXISTS, message)


class ClientError(Exception):
    """Base class of client errors."""


class EtcdError(ClientError):
    """The etcd-compatible transport reported an error."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"etcd_client error {self.message}"


class ProposeError(ClientError):
    """Proposing a command to the consensus layer failed."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"propose error {self.message}"