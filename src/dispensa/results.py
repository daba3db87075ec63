"""Outcome of a service operation, reported instead of raising."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class OperationStatus(str, Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    FETCH_FAILED = "fetch_failed"
    DUPLICATE = "duplicate"
    INVALID = "invalid"


@dataclass
class OperationResult:
    """Status plus an optional human-readable message and payload."""

    status: OperationStatus
    message: str = ""
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.status is OperationStatus.SUCCESS

    @classmethod
    def success(cls, data: Any = None, message: str = "") -> "OperationResult":
        return cls(OperationStatus.SUCCESS, message, data)

    @classmethod
    def not_found(cls, message: str) -> "OperationResult":
        return cls(OperationStatus.NOT_FOUND, message)

    @classmethod
    def fetch_failed(cls, message: str) -> "OperationResult":
        return cls(OperationStatus.FETCH_FAILED, message)

    @classmethod
    def duplicate(cls, message: str, data: Any = None) -> "OperationResult":
        return cls(OperationStatus.DUPLICATE, message, data)

    @classmethod
    def invalid(cls, message: str) -> "OperationResult":
        return cls(OperationStatus.INVALID, message)
