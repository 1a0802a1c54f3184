"""Database connection: sequences schema and insert operations against SQLite."""

import logging
import sqlite3
import threading
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Any, Callable, Iterable

from . import schema
from .binder import bind_parameters, relation_items
from .config import SQLiteConfig
from .exceptions import (
    BindError,
    ConnectionClosedError,
    DatabaseNotConfiguredError,
    DatabaseOpenError,
    SQLiteError,
)
from .fields import FieldType, SQLiteField
from .persistable import check_persistable, fields_of

logger = logging.getLogger(__name__)

# Global database instance (thread-local for safety)
_local = threading.local()

_SAVEPOINT = "sqlitelib_op"


def open_database(config: SQLiteConfig | str | Path) -> "SQLiteDatabase":
    """
    Open (or create) the database described by ``config``.

    Args:
        config: SQLiteConfig, or a database path

    Returns:
        An open SQLiteDatabase

    Raises:
        DatabaseOpenError: If the file cannot be opened or is not a database
    """
    if not isinstance(config, SQLiteConfig):
        config = SQLiteConfig(config)
    return SQLiteDatabase(config)


def configure_database(config: SQLiteConfig | str | Path) -> "SQLiteDatabase":
    """
    Open a database and make it the default for this thread.

    Returns:
        The SQLiteDatabase instance
    """
    _local.database = open_database(config)
    return _local.database


def get_database() -> "SQLiteDatabase":
    """
    Get the default database.

    Raises:
        DatabaseNotConfiguredError: If configure_database() hasn't been called
    """
    db = getattr(_local, "database", None)
    if db is None:
        raise DatabaseNotConfiguredError(
            "Database not configured. Call configure_database(path) first."
        )
    return db


class SQLiteDatabase:
    """
    Owns one SQLite connection and maps Persistable types onto it.

    Every fallible operation returns None on success or a SQLiteError
    describing the failure. Operations on a closed database raise
    ConnectionClosedError.

    Example:
        with open_database(SQLiteConfig("blog.db")) as db:
            db.create_table(Post)
            error = db.insert(Post(id=1, title="Hello"))
            if error is not None:
                print(error.code, error.message)
    """

    def __init__(self, config: SQLiteConfig):
        """
        Open the connection described by ``config``.

        Raises:
            DatabaseOpenError: If the file cannot be opened or is not a database
        """
        self.config = config
        self._conn: sqlite3.Connection | None = None

        try:
            conn = sqlite3.connect(config.database_uri(), isolation_level=None)
        except sqlite3.Error as exc:
            error = SQLiteError.from_exception(exc)
            logger.warning("Could not open %s: %s", config.path, error)
            raise DatabaseOpenError(error) from exc

        try:
            # Reading the schema version fails early on files that are not databases
            conn.execute("PRAGMA schema_version").fetchone()
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as exc:
            conn.close()
            error = SQLiteError.from_exception(exc)
            logger.warning("Could not open %s: %s", config.path, error)
            raise DatabaseOpenError(error) from exc

        self._conn = conn
        logger.info("Opened database %s", config.path)

    @property
    def connection(self) -> sqlite3.Connection | None:
        """The underlying sqlite3 connection, None once closed."""
        return self._conn

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def _check_open(self) -> sqlite3.Connection:
        if self._conn is None:
            raise ConnectionClosedError(f"Database {self.config.path} is closed")
        return self._conn

    def __copy__(self):
        raise TypeError("SQLiteDatabase owns its connection and cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("SQLiteDatabase owns its connection and cannot be copied")

    # --- statement execution ---

    def _execute(self, sql: str, params: list | tuple = ()) -> int | None:
        """Run one statement; the cursor is closed on every path."""
        logger.debug("Executing %s with %s", sql, params)
        with closing(self._conn.cursor()) as cursor:
            cursor.execute(sql, params)
            return cursor.lastrowid

    @contextmanager
    def _savepoint(self):
        """Make the enclosed statements succeed or fail as a unit."""
        self._conn.execute(f"SAVEPOINT {_SAVEPOINT}")
        try:
            yield
        except BaseException:
            self._conn.execute(f"ROLLBACK TO {_SAVEPOINT}")
            self._conn.execute(f"RELEASE {_SAVEPOINT}")
            raise
        self._conn.execute(f"RELEASE {_SAVEPOINT}")

    def _run(self, description: str, work: Callable[[], Any]) -> SQLiteError | None:
        try:
            with self._savepoint():
                work()
        except (sqlite3.Error, BindError) as exc:
            error = SQLiteError.from_exception(exc)
            logger.warning("%s failed: %s", description, error)
            return error
        return None

    def execute_sql(self, sql: str) -> SQLiteError | None:
        """
        Compile and run one SQL statement without parameters.

        Args:
            sql: A single SQL statement

        Returns:
            None on success, SQLiteError on failure
        """
        self._check_open()
        try:
            self._execute(sql)
        except sqlite3.Error as exc:
            error = SQLiteError.from_exception(exc)
            logger.warning("SQL failed: %s", error)
            return error
        return None

    # --- schema ---

    def table_name(self, cls: type) -> str:
        """The table name used for ``cls``."""
        return schema.table_name(cls)

    def create_table(self, cls: type) -> SQLiteError | None:
        """
        Create the table for ``cls``, plus one table per nested item class.

        Returns:
            None on success, SQLiteError on failure (nothing is created)
        """
        self._check_open()
        statements = [
            schema.create_table_sql(table_cls, parent)
            for table_cls, parent in schema.table_plan(cls)
        ]

        def work():
            for sql in statements:
                self._execute(sql)

        return self._run(f"Create table {self.table_name(cls)}", work)

    def drop_table(self, cls: type) -> SQLiteError | None:
        """
        Drop the table for ``cls`` and its nested item class tables.

        Tables that do not exist are skipped.
        """
        self._check_open()
        # Children first, so no foreign key points at a dropped table
        statements = [
            schema.drop_table_sql(table_cls)
            for table_cls, _ in reversed(list(schema.table_plan(cls)))
        ]

        def work():
            for sql in statements:
                self._execute(sql)

        return self._run(f"Drop table {self.table_name(cls)}", work)

    # --- inserts ---

    def _insert_object(
        self,
        cls: type,
        obj: Any,
        parent: type | None,
        link_value: Any,
        assigned: list,
    ) -> None:
        # Nested rows use the declared item class, subclasses included
        fields = fields_of(cls)

        params = bind_parameters(fields, obj)
        if parent is not None:
            params.append(link_value)

        rowid = self._execute(schema.insert_sql(cls, parent), params)

        # Value children use to point back at this row
        pk = SQLiteField.primary_key_field(cls)
        if pk is None:
            key = rowid
        else:
            key = params[schema.column_names(cls).index(pk.name)]
            if key is None and pk.type is FieldType.INTEGER:
                key = rowid
                assigned.append((pk, obj, rowid))

        for f in schema.relation_fields(cls):
            for item in relation_items(f, obj):
                self._insert_object(f.item_class, item, cls, key, assigned)

    def insert(self, obj: Any) -> SQLiteError | None:
        """
        Insert one object, then its nested objects.

        The object's row and all nested rows are committed together. When
        the primary key is an INTEGER left as None, the id assigned by
        SQLite is written back to the object.

        Args:
            obj: Instance of a Persistable type

        Returns:
            None on success, SQLiteError on failure (nothing is inserted)
        """
        self._check_open()
        cls = check_persistable(type(obj))
        assigned = []

        error = self._run(
            f"Insert into {self.table_name(cls)}",
            lambda: self._insert_object(cls, obj, None, None, assigned),
        )
        if error is None:
            for pk, target, rowid in assigned:
                pk.setter(target, rowid)
        return error

    def insert_all(self, objects: Iterable[Any]) -> SQLiteError | None:
        """
        Insert objects in order, stopping at the first failure.

        Each object is committed on its own, so objects inserted before a
        failure stay in the database and objects after it are not attempted.

        Returns:
            None if every insert succeeded, else the first SQLiteError
        """
        self._check_open()
        for index, obj in enumerate(objects):
            error = self.insert(obj)
            if error is not None:
                logger.warning("insert_all stopped at item %d", index)
                return error
        return None

    # --- lifecycle ---

    def close(self) -> SQLiteError | None:
        """
        Close the connection. Closing twice is a no-op.

        Returns:
            None on success, SQLiteError if SQLite reported a failure
        """
        if self._conn is None:
            return None

        conn, self._conn = self._conn, None
        try:
            conn.close()
        except sqlite3.Error as exc:
            error = SQLiteError.from_exception(exc)
            logger.warning("Closing %s failed: %s", self.config.path, error)
            return error
        logger.info("Closed database %s", self.config.path)
        return None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
