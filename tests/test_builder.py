"""
tests/test_builder.py
Unit tests for attribute building and model assembly.
"""

from __future__ import annotations

from typing import List

import pytest
from pydantic import ValidationError

from modelgen.builder import (
    assemble_model,
    build_attribute,
    build_reserved_attributes,
    split_attribute_token,
)
from modelgen.models import NULLS_IMPORT, TIME_IMPORT, ModelSpec
from modelgen.utils import transform_name


# ===========================================================================
# AttributeBuilder
# ===========================================================================


class TestBuildAttribute:

    def test_text_attribute(self) -> None:
        attr = build_attribute("title", "text")
        assert attr.names.original == "title"
        assert attr.names.proper == "Title"
        assert attr.raw_type == "text"
        assert attr.resolved_type == "string"
        assert attr.nullable is False
        assert attr.schema_type == "text"

    def test_missing_type_defaults_to_string(self) -> None:
        attr = build_attribute("slug")
        assert attr.raw_type == "string"
        assert attr.resolved_type == "string"
        assert attr.nullable is False

    def test_empty_type_defaults_to_string(self) -> None:
        assert build_attribute("slug", "").resolved_type == "string"

    def test_nullable_attribute(self) -> None:
        attr = build_attribute("body", "nulls.String")
        assert attr.nullable is True
        assert attr.resolved_type == "nulls.String"
        assert attr.schema_type == "string"

    def test_id_gets_acronym_proper_name(self) -> None:
        attr = build_attribute("id", "int")
        assert attr.names.proper == "ID"
        assert attr.resolved_type == "int"
        assert attr.schema_type == "integer"

    def test_id_suffix_keeps_generic_rule(self) -> None:
        assert build_attribute("user_id", "int").names.proper == "UserId"

    def test_schema_type_is_stored_on_the_attribute(self) -> None:
        attr = build_attribute("score", "nulls.Int")
        assert attr.model_dump()["schema_type"] == "integer"

    def test_acronym_attribute_keeps_capitals(self) -> None:
        attr = build_attribute("userID", "int")
        assert attr.names.proper == "UserID"
        assert attr.names.original == "userID"

    def test_override_does_not_leak_into_shared_names(self) -> None:
        build_attribute("id", "int")
        assert transform_name("id").proper == "Id"


class TestReservedAttributes:

    def test_order_and_types(self) -> None:
        reserved = build_reserved_attributes()
        assert [a.names.original for a in reserved] == ["id", "created_at", "updated_at"]
        assert [a.names.proper for a in reserved] == ["ID", "CreatedAt", "UpdatedAt"]
        assert [a.resolved_type for a in reserved] == ["int", "time.Time", "time.Time"]
        assert all(a.is_reserved for a in reserved)
        assert not any(a.nullable for a in reserved)


# ===========================================================================
# Token splitting
# ===========================================================================


class TestSplitAttributeToken:

    @pytest.mark.parametrize(
        "token, expected",
        [
            ("title:text", ("title", "text")),
            ("slug", ("slug", None)),
            ("slug:", ("slug", "")),
            (":text", ("", "text")),
            ("a:b:c", ("a", "b:c")),
            ("body:nulls.String", ("body", "nulls.String")),
        ],
    )
    def test_split(self, token: str, expected: tuple) -> None:
        assert split_attribute_token(token) == expected


# ===========================================================================
# ModelAssembler
# ===========================================================================


class TestAssembleModel:

    def test_widget_without_attributes(self) -> None:
        spec = assemble_model("widget")
        assert spec.package_name == "models"
        assert spec.imports == (TIME_IMPORT,)
        assert spec.names.proper == "Widget"
        assert spec.names.table == "widgets"
        assert [a.names.original for a in spec.attributes] == [
            "id",
            "created_at",
            "updated_at",
        ]
        assert spec.user_attributes == ()
        assert spec.has_nullable is False

    def test_user_attributes_follow_reserved_in_order(self, post_tokens: List[str]) -> None:
        spec = assemble_model("post", post_tokens)
        assert [a.names.original for a in spec.attributes] == [
            "id",
            "created_at",
            "updated_at",
            "title",
            "body",
            "views",
            "published_at",
        ]
        assert [a.names.original for a in spec.user_attributes] == [
            "title",
            "body",
            "views",
            "published_at",
        ]

    def test_nullable_adds_nulls_import(self) -> None:
        spec = assemble_model("comment", ["body:nulls.String"])
        assert spec.imports == (TIME_IMPORT, NULLS_IMPORT)
        assert spec.has_nullable is True

    def test_nulls_import_added_once(self) -> None:
        spec = assemble_model("comment", ["body:nulls.String", "score:nulls.Int"])
        assert spec.imports.count(NULLS_IMPORT) == 1

    def test_no_nulls_import_without_nullable(self) -> None:
        spec = assemble_model("post", ["title:text", "views:int"])
        assert NULLS_IMPORT not in spec.imports

    def test_custom_package(self) -> None:
        assert assemble_model("widget", package_name="records").package_name == "records"

    def test_spec_is_frozen(self) -> None:
        spec = assemble_model("widget")
        with pytest.raises(ValidationError):
            spec.package_name = "other"  # type: ignore[misc]

    def test_reserved_attributes_must_lead(self) -> None:
        attrs = build_reserved_attributes()
        with pytest.raises(ValidationError):
            ModelSpec(names=transform_name("widget"), attributes=attrs[1:])

    def test_duplicate_imports_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ModelSpec(
                names=transform_name("widget"),
                imports=(TIME_IMPORT, TIME_IMPORT),
                attributes=build_reserved_attributes(),
            )
