"""Pytest configuration and shared fixtures for sqlitelib tests."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlitelib import (
    FieldType,
    Persistable,
    SQLiteConfig,
    SQLiteField,
    SQLiteFieldExtra,
    open_database,
)
from sqlitelib.database import _local


@pytest.fixture
def temp_db_path(tmp_path):
    """Provide a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def db(temp_db_path):
    """Provide a fresh open database."""
    db = open_database(SQLiteConfig(temp_db_path))
    yield db
    db.close()


@pytest.fixture(autouse=True)
def clear_global_db():
    """Clear default database state before and after each test."""
    if hasattr(_local, "database"):
        delattr(_local, "database")
    yield
    db = getattr(_local, "database", None)
    if db is not None:
        db.close()
        delattr(_local, "database")


def rows(db, sql):
    """Fetch all rows of a query as plain tuples."""
    return [tuple(row) for row in db.connection.execute(sql).fetchall()]


# --- Sample persisted types ---

@dataclass
class Note(Persistable):
    """Integer key plus text."""

    id: int | None
    text: str | None = None

    @classmethod
    def sqlite_fields(cls):
        return [
            SQLiteField.field("id", FieldType.INTEGER, [SQLiteFieldExtra.primary_key()]),
            SQLiteField.field("text", FieldType.STRING),
        ]


@dataclass
class Reading(Persistable):
    """One field of every scalar type."""

    id: int
    active: bool
    value: float
    label: str | None
    taken_at: datetime | None

    @classmethod
    def sqlite_fields(cls):
        return [
            SQLiteField.field("id", FieldType.INTEGER, [SQLiteFieldExtra.primary_key()]),
            SQLiteField.field("active", FieldType.BOOLEAN),
            SQLiteField.field("value", FieldType.FLOAT),
            SQLiteField.field("label", FieldType.STRING),
            SQLiteField.field("taken_at", FieldType.DATETIME),
        ]


@dataclass
class Comment(Persistable):
    sqlite_table_name = "comments"

    id: int
    body: str

    @classmethod
    def sqlite_fields(cls):
        return [
            SQLiteField.field("id", FieldType.INTEGER, [SQLiteFieldExtra.primary_key()]),
            SQLiteField.field("body", FieldType.STRING),
        ]


@dataclass
class BlogPost(Persistable):
    """Owns a list of comments stored in a child table."""

    id: int
    title: str
    comments: list = field(default_factory=list)

    @classmethod
    def sqlite_fields(cls):
        return [
            SQLiteField.field("id", FieldType.INTEGER, [SQLiteFieldExtra.primary_key()]),
            SQLiteField.field("title", FieldType.STRING),
            SQLiteField.field(
                "comments", FieldType.ARRAY, [SQLiteFieldExtra.item_class(Comment)]
            ),
        ]


@dataclass
class Track(Persistable):
    title: str

    @classmethod
    def sqlite_fields(cls):
        return [SQLiteField.field("title", FieldType.STRING)]


@dataclass
class Album(Persistable):
    """No primary key: tracks link to the album's rowid."""

    name: str
    tracks: list = field(default_factory=list)

    @classmethod
    def sqlite_fields(cls):
        return [
            SQLiteField.field("name", FieldType.STRING),
            SQLiteField.field(
                "tracks", FieldType.ARRAY, [SQLiteFieldExtra.item_class(Track)]
            ),
        ]


@pytest.fixture
def note_class():
    return Note


@pytest.fixture
def reading_class():
    return Reading


@pytest.fixture
def post_class():
    return BlogPost


@pytest.fixture
def comment_class():
    return Comment


@pytest.fixture
def album_class():
    return Album


@pytest.fixture
def track_class():
    return Track
