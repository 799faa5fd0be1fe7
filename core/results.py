"""
core/results.py -- Success/Failure values returned by the service layer.

Services never raise for expected outcomes such as "post not found" or
"wrong password". They return Success(value) or Failure(kind, message) and
the HTTP layer maps ErrorKind to a status code from a fixed table
(api/errors.py). Exceptions are left for the unexpected: a dropped database
connection or a bug still propagates and ends up in the 500 handler.

Usage:
    result = post_service.get_by_id(7)
    if isinstance(result, Failure):
        ...
    post = result.value

Layer rule: core/ is the kernel. No imports from api/, auth/, or posts/.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    DUPLICATE_USERNAME = "duplicate_username"
    USER_NOT_FOUND = "user_not_found"
    INVALID_CREDENTIALS = "invalid_credentials"
    POST_NOT_FOUND = "post_not_found"
    PASSWORD_MISMATCH = "password_mismatch"


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    """An expected, terminal failure of a service call.

    field_errors is only populated for INVALID_INPUT and maps each offending
    request field to a human-readable message.
    """

    kind: ErrorKind
    message: str
    field_errors: dict[str, str] = field(default_factory=dict)


Result = Union[Success[T], Failure]


def invalid_input(field_errors: dict[str, str]) -> Failure:
    return Failure(ErrorKind.INVALID_INPUT, "Input values are not valid.", dict(field_errors))
