# gymtrack/core/result.py

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")

NOT_FOUND = "not_found"
INVALID = "invalid"
BACKEND = "backend"


@dataclass(frozen=True)
class RepositoryError:
    """Typed failure of a data-store call"""
    kind: str
    message: str


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: RepositoryError

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[Any], Err]


def not_found(message: str) -> Err:
    return Err(RepositoryError(NOT_FOUND, message))


def invalid(message: str) -> Err:
    return Err(RepositoryError(INVALID, message))


def backend_error(message: str) -> Err:
    return Err(RepositoryError(BACKEND, message))
