"""Uniform outcome envelope for every operation.

Usage:
    result = OperationResult.created(tenant, "Tenant 'Acme' created successfully")
    if result.is_success:
        print(result.message)
"""
from __future__ import annotations
import enum
from dataclasses import dataclass
from typing import Any, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")

DEFAULT_SUCCESS_MESSAGE = "Operation completed successfully"


class ResultStatus(enum.Enum):
    SUCCESS = "success"
    CREATED = "created"
    ALREADY_EXISTS = "alreadyExists"
    FAILURE = "failure"


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of an operation.

    The success family (SUCCESS, CREATED, ALREADY_EXISTS) carries ``data`` and
    ``message``; FAILURE carries only ``error_message`` plus, for batch calls,
    every ``(identifier, reason)`` pair the backend reported in ``failures``.
    """
    status: ResultStatus
    data: Optional[T] = None
    message: Optional[str] = None
    error_message: Optional[str] = None
    failures: Tuple[Tuple[str, str], ...] = ()

    def __post_init__(self):
        if self.status is ResultStatus.FAILURE:
            if not self.error_message:
                raise ValueError("Error message cannot be empty")
            if self.data is not None or self.message is not None:
                raise ValueError("Failure results carry no data or message")
        elif self.error_message is not None or self.failures:
            raise ValueError("Successful results carry no error message")
        object.__setattr__(self, "failures", tuple(tuple(pair) for pair in self.failures))

    @classmethod
    def success(cls, data: T, message: str = DEFAULT_SUCCESS_MESSAGE) -> "OperationResult[T]":
        return cls(ResultStatus.SUCCESS, data=data, message=message)

    @classmethod
    def created(cls, data: T, message: str = DEFAULT_SUCCESS_MESSAGE) -> "OperationResult[T]":
        return cls(ResultStatus.CREATED, data=data, message=message)

    @classmethod
    def already_exists(cls, data: T, message: str = DEFAULT_SUCCESS_MESSAGE) -> "OperationResult[T]":
        return cls(ResultStatus.ALREADY_EXISTS, data=data, message=message)

    @classmethod
    def failure(cls, error_message: str, failures=()) -> "OperationResult[T]":
        return cls(ResultStatus.FAILURE, error_message=error_message, failures=tuple(failures))

    @property
    def is_success(self) -> bool:
        return self.status is not ResultStatus.FAILURE

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation (data objects exposing to_dict are expanded)."""
        payload: dict[str, Any] = {"status": self.status.value, "success": self.is_success}
        if self.is_success:
            payload["message"] = self.message
            payload["data"] = _to_jsonable(self.data)
        else:
            payload["errorMessage"] = self.error_message
            if self.failures:
                payload["failures"] = [
                    {"identifier": identifier, "reason": reason} for identifier, reason in self.failures
                ]
        return payload


def _to_jsonable(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {key: _to_jsonable(item) for key, item in value.items()}
    return value
