"""Schema mapping: table names and DDL derived from field descriptors.

Columns are emitted in field declaration order and the value binder
produces parameters in the same order, so parameter 1 always belongs to
the first column.

Nested objects (ARRAY fields with an item_class extra) get no column in
the parent table. The child table carries one extra link column named
``<parent_table>_id`` that references the parent's primary key, or the
parent's rowid when the parent has no primary key.
"""

from typing import Iterator

from .exceptions import FieldDefinitionError
from .fields import SQLiteField
from .persistable import check_persistable, fields_of

ROWID_TYPE = "INTEGER"


def quote(identifier: str) -> str:
    """Quote an SQL identifier."""
    return '"' + identifier.replace('"', '""') + '"'


def table_name(cls: type) -> str:
    """
    Get the table name of a Persistable type.

    Pure and deterministic: the sqlite_table_name override when set,
    else the snake_case class name.
    """
    return check_persistable(cls).table_name()


def column_fields(cls: type) -> tuple[SQLiteField, ...]:
    """Fields that map to a column, in declaration order."""
    return tuple(f for f in fields_of(cls) if f.sqlite_field_type() is not None)


def relation_fields(cls: type) -> tuple[SQLiteField, ...]:
    """ARRAY fields holding nested persisted objects."""
    return tuple(f for f in fields_of(cls) if f.is_relation)


def link_column(parent_cls: type) -> tuple[str, str]:
    """
    Name and SQL type of the column linking child rows to ``parent_cls``.

    Returns:
        ("<parent_table>_id", type of the parent's primary key or INTEGER)
    """
    pk = SQLiteField.primary_key_field(parent_cls)
    sql_type = pk.sqlite_field_type() if pk is not None else ROWID_TYPE
    return f"{table_name(parent_cls)}_id", sql_type


def column_names(cls: type, parent: type | None = None) -> list[str]:
    """Column names of the table for ``cls``, link column last."""
    names = [f.name for f in column_fields(cls)]
    if parent is not None:
        names.append(link_column(parent)[0])
    return names


def create_table_sql(cls: type, parent: type | None = None) -> str:
    """
    CREATE TABLE statement for ``cls``.

    Args:
        cls: The Persistable type
        parent: The owning type when ``cls`` is stored as nested objects

    Returns:
        str: DDL text
    """
    clauses = [
        f"{quote(f.name)} {f.sqlite_field_type()}" for f in column_fields(cls)
    ]

    if parent is not None:
        link_name, link_type = link_column(parent)
        clauses.append(f"{quote(link_name)} {link_type}")

    # Only the first annotated field becomes the key
    pk = SQLiteField.primary_key_field(cls)
    if pk is not None:
        clauses.append(f"PRIMARY KEY ({quote(pk.name)})")

    # A rowid is not a valid foreign key target, so keyless parents get a plain column
    parent_pk = SQLiteField.primary_key_field(parent) if parent is not None else None
    if parent_pk is not None:
        clauses.append(
            f"FOREIGN KEY ({quote(link_name)}) "
            f"REFERENCES {quote(table_name(parent))} ({quote(parent_pk.name)})"
        )

    if not clauses:
        raise FieldDefinitionError(f"{cls.__name__} has no columns to create")

    body = ", ".join(clauses)
    return f"CREATE TABLE {quote(table_name(cls))} ({body})"


def drop_table_sql(cls: type) -> str:
    """DROP TABLE statement for ``cls``; succeeds when the table is absent."""
    return f"DROP TABLE IF EXISTS {quote(table_name(cls))}"


def insert_sql(cls: type, parent: type | None = None) -> str:
    """Parameterized INSERT with one placeholder per column."""
    names = column_names(cls, parent)
    columns = ", ".join(quote(name) for name in names)
    placeholders = ", ".join("?" for _ in names)
    return f"INSERT INTO {quote(table_name(cls))} ({columns}) VALUES ({placeholders})"


def table_plan(cls: type) -> Iterator[tuple[type, type | None]]:
    """
    Tables backing ``cls`` in creation order.

    Yields (type, parent) pairs: first ``cls`` itself with no parent, then
    every nested item class, depth first, paired with its owner.

    Raises:
        FieldDefinitionError: If an item class is nested more than once
            (including recursive relations)
    """
    seen = set()

    def walk(current, parent):
        if current in seen:
            raise FieldDefinitionError(
                f"{current.__name__} is used as a nested item class more than "
                "once; each nested type can only belong to one parent"
            )
        seen.add(current)
        yield current, parent
        for f in relation_fields(current):
            yield from walk(f.item_class, current)

    yield from walk(check_persistable(cls), None)
