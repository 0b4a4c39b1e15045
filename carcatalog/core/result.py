"""Success/error envelope returned by every outward call, and exception classification."""
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

import httpx

from carcatalog.core.errors import RemoteError, TransportError

T = TypeVar("T")

CONNECTION_MESSAGE = "check your connection"
STATUS_MESSAGE = "Erro na requisição: {status}"


class ResultError(Exception):
    """Raised by Error.unwrap()."""


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    def __post_init__(self) -> None:
        if self.value is None:
            raise ValueError("Success requires a non-null value")

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value

    def value_or(self, default: Any) -> T:
        return self.value


@dataclass(frozen=True)
class Error:
    message: str

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self):
        raise ResultError(self.message)

    def value_or(self, default: Any) -> Any:
        return default


ResourceResult = Union[Success[T], Error]


def from_status(status: int) -> Error:
    return Error(STATUS_MESSAGE.format(status=status))


def classify(exc: BaseException) -> Error:
    """Map an exception to an Error.

    Priority: connectivity failure, then non-2xx status, then the exception's
    own text (class name if it has none).
    """
    if isinstance(exc, (TransportError, httpx.TransportError)):
        return Error(CONNECTION_MESSAGE)
    if isinstance(exc, RemoteError):
        return from_status(exc.status)
    if isinstance(exc, httpx.HTTPStatusError):
        return from_status(exc.response.status_code)
    return Error(str(exc) or type(exc).__name__)
