"""Error values and exceptions for sqlitelib.

Failures reported by SQLite itself are returned to the caller as
``SQLiteError`` values. Programming errors (invalid field definitions,
using a closed database, ...) raise subclasses of ``SQLiteLibError``.
"""

import sqlite3
from dataclasses import dataclass


# Primary result codes, see https://www.sqlite.org/rescode.html
_PRIMARY_CODE_NAMES = {
    0: "SQLITE_OK",
    1: "SQLITE_ERROR",
    2: "SQLITE_INTERNAL",
    3: "SQLITE_PERM",
    4: "SQLITE_ABORT",
    5: "SQLITE_BUSY",
    6: "SQLITE_LOCKED",
    7: "SQLITE_NOMEM",
    8: "SQLITE_READONLY",
    9: "SQLITE_INTERRUPT",
    10: "SQLITE_IOERR",
    11: "SQLITE_CORRUPT",
    12: "SQLITE_NOTFOUND",
    13: "SQLITE_FULL",
    14: "SQLITE_CANTOPEN",
    15: "SQLITE_PROTOCOL",
    16: "SQLITE_EMPTY",
    17: "SQLITE_SCHEMA",
    18: "SQLITE_TOOBIG",
    19: "SQLITE_CONSTRAINT",
    20: "SQLITE_MISMATCH",
    21: "SQLITE_MISUSE",
    22: "SQLITE_NOLFS",
    23: "SQLITE_AUTH",
    24: "SQLITE_FORMAT",
    25: "SQLITE_RANGE",
    26: "SQLITE_NOTADB",
    27: "SQLITE_NOTICE",
    28: "SQLITE_WARNING",
}


class SQLiteLibError(Exception):
    """Base exception for all sqlitelib errors."""

    pass


class FieldDefinitionError(SQLiteLibError):
    """Raised when a field descriptor or a type's field list is invalid."""

    pass


class NotPersistableError(SQLiteLibError):
    """Raised when a type that does not implement Persistable is mapped."""

    pass


class ConnectionClosedError(SQLiteLibError):
    """Raised when an operation is attempted on a closed database."""

    pass


class DatabaseNotConfiguredError(SQLiteLibError):
    """Raised when trying to use the default database before configuration."""

    pass


class BindError(SQLiteLibError):
    """
    Raised by the value binder when a field value cannot be bound.

    Carries SQLITE_MISMATCH so it can be reported like a native failure.
    """

    def __init__(self, message: str, code: int = sqlite3.SQLITE_MISMATCH):
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class SQLiteError:
    """
    A failed operation: native SQLite result code plus a readable message.

    ``code`` may be an extended result code (e.g. 1555 for a primary key
    violation); use ``primary_code`` to branch on the failure class.
    """

    code: int
    message: str

    @property
    def primary_code(self) -> int:
        """The primary result code (low byte of the extended code)."""
        return self.code & 0xFF

    @property
    def name(self) -> str:
        """Symbolic name of the primary result code, e.g. 'SQLITE_CONSTRAINT'."""
        return _PRIMARY_CODE_NAMES.get(self.primary_code, f"SQLITE_{self.code}")

    @classmethod
    def from_exception(cls, exc: Exception) -> "SQLiteError":
        """
        Build an error value from an exception raised while talking to SQLite.

        Args:
            exc: A sqlite3.Error or a BindError

        Returns:
            SQLiteError carrying the native code when one is available
        """
        if isinstance(exc, BindError):
            return cls(exc.code, str(exc))

        code = getattr(exc, "sqlite_errorcode", None)
        if code is None:
            # Raised by the sqlite3 module itself rather than the engine
            if isinstance(exc, (sqlite3.ProgrammingError, sqlite3.InterfaceError)):
                code = sqlite3.SQLITE_MISUSE
            else:
                code = sqlite3.SQLITE_ERROR
        return cls(code, str(exc))

    def raise_for_error(self) -> None:
        """Raise this error as a SQLiteOperationError."""
        raise SQLiteOperationError(self)

    def __str__(self) -> str:
        return f"{self.name} ({self.code}): {self.message}"


class SQLiteOperationError(SQLiteLibError):
    """Exception form of a SQLiteError, for callers that prefer raising."""

    def __init__(self, error: SQLiteError):
        super().__init__(str(error))
        self.error = error

    @property
    def code(self) -> int:
        return self.error.code


class DatabaseOpenError(SQLiteOperationError):
    """Raised when the database file cannot be opened."""

    pass
