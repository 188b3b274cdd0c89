"""Domain fault kinds raised by the business operations.

Faults are assigned only where their meaning is unambiguous for the
operation. Anything else raised by the store or a collaborator propagates
unchanged and is never wrapped into one of these.
"""

from __future__ import annotations

import enum


class FaultKind(enum.Enum):
    """Closed set of domain fault kinds."""

    NOT_FOUND = "not_found"
    ALREADY_USED = "already_used"
    INCORRECT_CREDENTIAL = "incorrect_credential"
    SAME_VALUE = "same_value"


class DomainError(Exception):
    """Base class for domain faults. ``kind`` identifies the fault."""

    kind: FaultKind

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.kind.value.replace("_", " ")
        super().__init__(self.message)


class NotFoundError(DomainError):
    """The targeted row does not exist or is outside the caller's scope."""

    kind = FaultKind.NOT_FOUND


class AlreadyUsedError(DomainError):
    """A domain-level uniqueness rule would be violated."""

    kind = FaultKind.ALREADY_USED


class IncorrectCredentialError(DomainError):
    """A presented secret does not match the stored digest."""

    kind = FaultKind.INCORRECT_CREDENTIAL


class SameValueError(DomainError):
    """A proposed value equals the current one where a no-op change is refused."""

    kind = FaultKind.SAME_VALUE
