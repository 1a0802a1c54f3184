"""
sqlitelib: a lightweight object mapper for SQLite

Describe a type's persisted shape once and let sqlitelib:
- Derive CREATE TABLE / DROP TABLE statements
- Bind field values into parameterized INSERT statements
- Insert nested collections of objects into linked child tables
- Report SQLite failures as (code, message) error values

Example:
    from sqlitelib import (
        FieldType, Persistable, SQLiteConfig, SQLiteField, SQLiteFieldExtra,
        open_database,
    )

    class Note(Persistable):
        def __init__(self, id, text):
            self.id = id
            self.text = text

        @classmethod
        def sqlite_fields(cls):
            return [
                SQLiteField.field("id", FieldType.INTEGER,
                                  [SQLiteFieldExtra.primary_key()]),
                SQLiteField.field("text", FieldType.STRING),
            ]

    with open_database(SQLiteConfig("notes.db")) as db:
        db.create_table(Note)
        error = db.insert(Note(1, "hello"))
        if error is not None:
            print(error.name, error.message)
"""

import logging

from .binder import MISSING, bind_parameters, bind_value
from .config import SQLiteConfig
from .database import SQLiteDatabase, configure_database, get_database, open_database
from .exceptions import (
    BindError,
    ConnectionClosedError,
    DatabaseNotConfiguredError,
    DatabaseOpenError,
    FieldDefinitionError,
    NotPersistableError,
    SQLiteError,
    SQLiteLibError,
    SQLiteOperationError,
)
from .fields import FieldExtraType, FieldType, SQLiteField, SQLiteFieldExtra
from .persistable import Persistable

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Core classes
    "SQLiteDatabase",
    "SQLiteConfig",
    "Persistable",
    "SQLiteField",
    "SQLiteFieldExtra",
    "FieldType",
    "FieldExtraType",
    # Opening
    "open_database",
    "configure_database",
    "get_database",
    # Binding
    "bind_value",
    "bind_parameters",
    "MISSING",
    # Errors
    "SQLiteError",
    "SQLiteLibError",
    "SQLiteOperationError",
    "DatabaseOpenError",
    "ConnectionClosedError",
    "DatabaseNotConfiguredError",
    "FieldDefinitionError",
    "NotPersistableError",
    "BindError",
]
