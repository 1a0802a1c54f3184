"""Base class for types that can be stored by sqlitelib."""

import re
from abc import ABC, abstractmethod
from functools import cache
from typing import TYPE_CHECKING, ClassVar

from .exceptions import FieldDefinitionError, NotPersistableError

if TYPE_CHECKING:
    from .fields import SQLiteField


class Persistable(ABC):
    """
    Abstract base class for all persisted types.

    Subclasses must implement:
    - sqlite_fields(): the ordered field descriptors of the type

    Subclasses may set:
    - sqlite_table_name: explicit table name (default: snake_case class name)

    Example:
        class Comment(Persistable):
            sqlite_table_name = "comments"

            def __init__(self, id, body):
                self.id = id
                self.body = body

            @classmethod
            def sqlite_fields(cls):
                return [
                    SQLiteField.field("id", FieldType.INTEGER,
                                      [SQLiteFieldExtra.primary_key()]),
                    SQLiteField.field("body", FieldType.STRING),
                ]
    """

    sqlite_table_name: ClassVar[str | None] = None

    @classmethod
    @abstractmethod
    def sqlite_fields(cls) -> "list[SQLiteField]":
        """
        The persisted fields of this type, in column order.

        Returns:
            list of SQLiteField
        """
        pass

    @classmethod
    def table_name(cls) -> str:
        """
        Get the SQLite table name for this type.

        Uses sqlite_table_name when set, otherwise converts the CamelCase
        class name to snake_case.

        Returns:
            str: Table name (e.g., "blog_post")
        """
        if cls.sqlite_table_name:
            return cls.sqlite_table_name
        name = cls.__name__
        # Insert underscore before uppercase letters, then lowercase
        return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def check_persistable(cls: type) -> type:
    """
    Make sure ``cls`` is a Persistable subclass.

    Raises:
        NotPersistableError: If it is not
    """
    if not (isinstance(cls, type) and issubclass(cls, Persistable)):
        raise NotPersistableError(
            f"{cls!r} is not a Persistable type. "
            "Subclass sqlitelib.Persistable and implement sqlite_fields()."
        )
    return cls


@cache
def fields_of(cls: type) -> "tuple[SQLiteField, ...]":
    """
    The validated field descriptors of a Persistable type.

    Computed once per type.

    Raises:
        NotPersistableError: If cls is not Persistable
        FieldDefinitionError: If the field list is empty or has duplicate names
    """
    from .fields import SQLiteField

    check_persistable(cls)
    fields = tuple(cls.sqlite_fields() or ())
    if not fields:
        raise FieldDefinitionError(f"{cls.__name__} declares no fields")

    seen = set()
    for f in fields:
        if not isinstance(f, SQLiteField):
            raise FieldDefinitionError(
                f"{cls.__name__}.sqlite_fields() returned {f!r}, expected SQLiteField"
            )
        if f.name in seen:
            raise FieldDefinitionError(
                f"{cls.__name__} declares field '{f.name}' more than once"
            )
        seen.add(f.name)

    return fields
