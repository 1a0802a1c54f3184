"""Tests for sqlitelib.fields module."""

import pytest

from sqlitelib.exceptions import FieldDefinitionError
from sqlitelib.fields import FieldExtraType, FieldType, SQLiteField, SQLiteFieldExtra
from sqlitelib.persistable import Persistable


class TestFieldExtra:
    """Test SQLiteFieldExtra factories."""

    def test_primary_key(self):
        extra = SQLiteFieldExtra.primary_key()
        assert extra.type is FieldExtraType.PRIMARY_KEY
        assert dict(extra.params) == {}

    def test_item_class_stores_class(self, comment_class):
        extra = SQLiteFieldExtra.item_class(comment_class)
        assert extra.type is FieldExtraType.ITEM_CLASS
        assert extra.params["item_class"] is comment_class

    def test_item_class_requires_persistable(self):
        class Plain:
            pass

        with pytest.raises(FieldDefinitionError):
            SQLiteFieldExtra.item_class(Plain)

    def test_item_class_rejects_instance(self, comment_class):
        with pytest.raises(FieldDefinitionError):
            SQLiteFieldExtra.item_class(comment_class(1, "x"))

    def test_extras_compare_by_value(self):
        assert SQLiteFieldExtra.primary_key() == SQLiteFieldExtra.primary_key()

    def test_params_are_read_only(self, comment_class):
        extra = SQLiteFieldExtra.item_class(comment_class)
        with pytest.raises(TypeError):
            extra.params["item_class"] = None


class TestFieldConstruction:
    """Test SQLiteField construction and validation."""

    def test_field_factory(self):
        f = SQLiteField.field("title", FieldType.STRING)
        assert f.name == "title"
        assert f.type is FieldType.STRING
        assert f.extra == ()

    def test_extra_list_becomes_tuple(self):
        f = SQLiteField.field("id", FieldType.INTEGER, [SQLiteFieldExtra.primary_key()])
        assert f.extra == (SQLiteFieldExtra.primary_key(),)

    def test_empty_name_rejected(self):
        with pytest.raises(FieldDefinitionError):
            SQLiteField.field("", FieldType.STRING)

    def test_invalid_type_rejected(self):
        with pytest.raises(FieldDefinitionError):
            SQLiteField.field("x", "string")

    def test_invalid_extra_rejected(self):
        with pytest.raises(FieldDefinitionError):
            SQLiteField.field("x", FieldType.STRING, ["primary_key"])

    def test_item_class_only_on_array(self, comment_class):
        with pytest.raises(FieldDefinitionError, match="ARRAY"):
            SQLiteField.field(
                "x", FieldType.STRING, [SQLiteFieldExtra.item_class(comment_class)]
            )

    def test_array_cannot_be_primary_key(self):
        with pytest.raises(FieldDefinitionError, match="primary key"):
            SQLiteField.field("x", FieldType.ARRAY, [SQLiteFieldExtra.primary_key()])

    def test_fields_are_immutable(self):
        f = SQLiteField.field("x", FieldType.STRING)
        with pytest.raises(AttributeError):
            f.name = "y"

    def test_equality_ignores_accessors(self):
        a = SQLiteField.field("x", FieldType.STRING)
        b = SQLiteField.field("x", FieldType.STRING, getter=lambda obj: obj["x"])
        assert a == b


class TestFieldExtras:
    """Test extra lookups on SQLiteField."""

    def test_contains_extra_type(self):
        f = SQLiteField.field("id", FieldType.INTEGER, [SQLiteFieldExtra.primary_key()])
        assert f.contains_extra_type(FieldExtraType.PRIMARY_KEY)
        assert not f.contains_extra_type(FieldExtraType.ITEM_CLASS)
        assert f.is_primary_key

    def test_extra_of_type(self, comment_class):
        extra = SQLiteFieldExtra.item_class(comment_class)
        f = SQLiteField.field("comments", FieldType.ARRAY, [extra])
        assert f.extra_of_type(FieldExtraType.ITEM_CLASS) == extra
        assert f.extra_of_type(FieldExtraType.PRIMARY_KEY) is None

    def test_relation_field(self, comment_class):
        f = SQLiteField.field(
            "comments", FieldType.ARRAY, [SQLiteFieldExtra.item_class(comment_class)]
        )
        assert f.item_class is comment_class
        assert f.is_relation

    def test_generic_array_is_not_relation(self):
        f = SQLiteField.field("samples", FieldType.ARRAY)
        assert f.item_class is None
        assert not f.is_relation


class TestColumnTypes:
    """Test FieldType to SQLite column type mapping."""

    @pytest.mark.parametrize(
        "field_type, expected",
        [
            (FieldType.BOOLEAN, "INTEGER"),
            (FieldType.INTEGER, "INTEGER"),
            (FieldType.FLOAT, "REAL"),
            (FieldType.STRING, "TEXT"),
            (FieldType.DATETIME, "TEXT"),
            (FieldType.ARRAY, None),
        ],
    )
    def test_sqlite_field_type(self, field_type, expected):
        assert SQLiteField.field("x", field_type).sqlite_field_type() == expected


class TestAccessors:
    """Test default and custom getters/setters."""

    def test_default_getter_reads_attribute(self, note_class):
        f = SQLiteField.field("text", FieldType.STRING)
        assert f.getter(note_class(1, "hi")) == "hi"

    def test_default_setter_writes_attribute(self, note_class):
        f = SQLiteField.field("text", FieldType.STRING)
        note = note_class(1, "hi")
        f.setter(note, "bye")
        assert note.text == "bye"

    def test_custom_getter(self):
        f = SQLiteField.field("text", FieldType.STRING, getter=lambda obj: obj["t"])
        assert f.getter({"t": "value"}) == "value"


class TestPrimaryKeyField:
    """Test SQLiteField.primary_key_field()."""

    def test_from_class(self, note_class):
        assert SQLiteField.primary_key_field(note_class).name == "id"

    def test_from_instance(self, note_class):
        assert SQLiteField.primary_key_field(note_class(1, "x")).name == "id"

    def test_none_without_primary_key(self, track_class):
        assert SQLiteField.primary_key_field(track_class) is None

    def test_first_annotated_field_wins(self):
        class TwoKeys(Persistable):
            @classmethod
            def sqlite_fields(cls):
                return [
                    SQLiteField.field("a", FieldType.STRING),
                    SQLiteField.field("b", FieldType.INTEGER, [SQLiteFieldExtra.primary_key()]),
                    SQLiteField.field("c", FieldType.INTEGER, [SQLiteFieldExtra.primary_key()]),
                ]

        assert SQLiteField.primary_key_field(TwoKeys).name == "b"
