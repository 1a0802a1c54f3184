"""Field descriptors: the persisted shape of a Persistable type."""

from dataclasses import dataclass, field
from enum import Enum
from operator import attrgetter
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

from .exceptions import FieldDefinitionError
from .persistable import Persistable, fields_of


class FieldType(Enum):
    """Scalar kind of a persisted field."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    DATETIME = "datetime"
    ARRAY = "array"


class FieldExtraType(Enum):
    """Kind of annotation attached to a field."""

    PRIMARY_KEY = "primary_key"
    ITEM_CLASS = "item_class"  # params: {"item_class": cls}


# DATETIME is stored as ISO-8601 text, see binder.bind_datetime
_COLUMN_TYPES = {
    FieldType.BOOLEAN: "INTEGER",
    FieldType.INTEGER: "INTEGER",
    FieldType.FLOAT: "REAL",
    FieldType.STRING: "TEXT",
    FieldType.DATETIME: "TEXT",
    FieldType.ARRAY: None,
}


@dataclass(frozen=True)
class SQLiteFieldExtra:
    """
    An annotation refining a field's role.

    Build these through the factories rather than the constructor:

        SQLiteFieldExtra.primary_key()
        SQLiteFieldExtra.item_class(Comment)
    """

    type: FieldExtraType
    params: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )

    @classmethod
    def primary_key(cls) -> "SQLiteFieldExtra":
        return cls(FieldExtraType.PRIMARY_KEY)

    @classmethod
    def item_class(cls, item_class: type) -> "SQLiteFieldExtra":
        """Mark an ARRAY field as holding nested objects of ``item_class``."""
        if not (isinstance(item_class, type) and issubclass(item_class, Persistable)):
            raise FieldDefinitionError(
                f"Item class must be a Persistable subclass, got {item_class!r}"
            )
        return cls(
            FieldExtraType.ITEM_CLASS,
            MappingProxyType({"item_class": item_class}),
        )


def _attribute_setter(name: str) -> Callable[[Any, Any], None]:
    def setter(obj, value):
        setattr(obj, name, value)

    return setter


@dataclass(frozen=True)
class SQLiteField:
    """
    Describes one persisted attribute of a type.

    ``getter`` and ``setter`` are the field's accessor pair. When omitted
    they default to reading and writing the attribute called ``name``.
    A getter signals an absent field by raising AttributeError or KeyError;
    returning None means the field is null.

    Example:
        class Post(Persistable):
            @classmethod
            def sqlite_fields(cls):
                return [
                    SQLiteField.field("id", FieldType.INTEGER,
                                      [SQLiteFieldExtra.primary_key()]),
                    SQLiteField.field("title", FieldType.STRING),
                    SQLiteField.field("comments", FieldType.ARRAY,
                                      [SQLiteFieldExtra.item_class(Comment)]),
                ]
    """

    name: str
    type: FieldType
    extra: tuple[SQLiteFieldExtra, ...] = ()
    getter: Callable[[Any], Any] | None = field(default=None, compare=False, repr=False)
    setter: Callable[[Any, Any], None] | None = field(
        default=None, compare=False, repr=False
    )

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise FieldDefinitionError("Field name must be a non-empty string")
        if not isinstance(self.type, FieldType):
            raise FieldDefinitionError(
                f"Field '{self.name}' has invalid type {self.type!r}"
            )

        extra = tuple(self.extra or ())
        for item in extra:
            if not isinstance(item, SQLiteFieldExtra):
                raise FieldDefinitionError(
                    f"Field '{self.name}' has invalid extra {item!r}"
                )
            if item.type is FieldExtraType.ITEM_CLASS and self.type is not FieldType.ARRAY:
                raise FieldDefinitionError(
                    f"Field '{self.name}': item_class is only valid on ARRAY fields"
                )
            if item.type is FieldExtraType.PRIMARY_KEY and self.type is FieldType.ARRAY:
                raise FieldDefinitionError(
                    f"Field '{self.name}': an ARRAY field cannot be a primary key"
                )
        object.__setattr__(self, "extra", extra)

        if self.getter is None:
            object.__setattr__(self, "getter", attrgetter(self.name))
        if self.setter is None:
            object.__setattr__(self, "setter", _attribute_setter(self.name))

    @classmethod
    def field(
        cls,
        name: str,
        type: FieldType,
        extra: Iterable[SQLiteFieldExtra] | None = None,
        getter: Callable[[Any], Any] | None = None,
        setter: Callable[[Any, Any], None] | None = None,
    ) -> "SQLiteField":
        return cls(name, type, tuple(extra or ()), getter=getter, setter=setter)

    def contains_extra_type(self, extra_type: FieldExtraType) -> bool:
        return any(item.type is extra_type for item in self.extra)

    def extra_of_type(self, extra_type: FieldExtraType) -> SQLiteFieldExtra | None:
        for item in self.extra:
            if item.type is extra_type:
                return item
        return None

    @property
    def item_class(self) -> type | None:
        """The nested Persistable type of an ARRAY field, if declared."""
        item = self.extra_of_type(FieldExtraType.ITEM_CLASS)
        return item.params["item_class"] if item is not None else None

    @property
    def is_relation(self) -> bool:
        """True for ARRAY fields whose elements are nested persisted objects."""
        return self.type is FieldType.ARRAY and self.item_class is not None

    @property
    def is_primary_key(self) -> bool:
        return self.contains_extra_type(FieldExtraType.PRIMARY_KEY)

    def sqlite_field_type(self) -> str | None:
        """SQLite column type for this field, None when it has no column."""
        return _COLUMN_TYPES[self.type]

    @staticmethod
    def primary_key_field(obj_or_cls: Any) -> "SQLiteField | None":
        """
        Find the primary key field of a Persistable type or instance.

        When several fields are annotated, the first one in declaration
        order is the primary key.
        """
        cls = obj_or_cls if isinstance(obj_or_cls, type) else type(obj_or_cls)
        for f in fields_of(cls):
            if f.is_primary_key:
                return f
        return None
