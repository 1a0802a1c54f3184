"""Database configuration."""

from dataclasses import dataclass
from pathlib import Path

MEMORY_PATH = ":memory:"


@dataclass(frozen=True)
class SQLiteConfig:
    """
    Identifies the SQLite database file to open.

    Example:
        config = SQLiteConfig("experiment.db")
        db = open_database(config)

    Attributes:
        path: Path to the database file, or ":memory:" for an in-memory database
    """

    path: Path | str

    def __post_init__(self):
        if isinstance(self.path, str) and self.path == MEMORY_PATH:
            return
        if not str(self.path):
            raise ValueError("SQLiteConfig.path must not be empty")
        object.__setattr__(self, "path", Path(self.path))

    @property
    def is_memory(self) -> bool:
        return self.path == MEMORY_PATH

    def database_uri(self) -> str:
        """The string handed to sqlite3.connect()."""
        return str(self.path)
