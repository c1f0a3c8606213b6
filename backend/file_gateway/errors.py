"""
Error taxonomy shared by the validator, the services and the HTTP layer.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    UNKNOWN_REGION = "UnknownRegion"
    BUCKET_NOT_ALLOWED = "BucketNotAllowed"
    MISSING_FILE = "MissingFile"
    MISSING_TARGET = "MissingTarget"
    INVALID_FILENAME = "InvalidFilename"
    OBJECT_NOT_FOUND = "ObjectNotFound"
    BACKEND_FAILURE = "BackendFailure"


STATUS_CODES = {
    ErrorKind.UNKNOWN_REGION: 400,
    ErrorKind.BUCKET_NOT_ALLOWED: 400,
    ErrorKind.MISSING_FILE: 400,
    ErrorKind.MISSING_TARGET: 400,
    ErrorKind.INVALID_FILENAME: 400,
    ErrorKind.OBJECT_NOT_FOUND: 404,
    ErrorKind.BACKEND_FAILURE: 500,
}


class ConfigurationError(RuntimeError):
    """Startup configuration is incomplete; the process must not serve."""


class GatewayError(Exception):
    kind: ErrorKind = ErrorKind.BACKEND_FAILURE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]


class UnknownRegion(GatewayError):
    kind = ErrorKind.UNKNOWN_REGION


class BucketNotAllowed(GatewayError):
    kind = ErrorKind.BUCKET_NOT_ALLOWED


class MissingFile(GatewayError):
    kind = ErrorKind.MISSING_FILE


class MissingTarget(GatewayError):
    kind = ErrorKind.MISSING_TARGET


class InvalidFilename(GatewayError):
    kind = ErrorKind.INVALID_FILENAME


class ObjectNotFound(GatewayError):
    kind = ErrorKind.OBJECT_NOT_FOUND


class BackendFailure(GatewayError):
    kind = ErrorKind.BACKEND_FAILURE
