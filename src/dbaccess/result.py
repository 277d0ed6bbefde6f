"""
Per-call operation results.
"""
from dataclasses import dataclass
from typing import Generic, TypeVar

from dbaccess.exceptions import DatabaseError

T = TypeVar('T')


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """Outcome of one data access call.

    `value` holds the operation's value on success. On failure it holds
    the operation's documented fallback (False, an empty table, an empty
    list, None or -1) and `error` holds the failure, so an empty but
    successful result can be told apart from a failed one.

    `rollback_error` is set only by the dry-run probe when the rollback
    itself failed after the statement ran.
    """
    value: T
    error: DatabaseError | None = None
    rollback_error: DatabaseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, raising the recorded error on failure.
        """
        if self.error is not None:
            raise self.error
        return self.value
