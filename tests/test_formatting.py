"""Tests for attribute formatting."""

from __future__ import annotations

import pytest

from conftest import rooted
from kcl_docgen.formatting import build_attribute, build_attributes, format_literal, type_token
from kcl_docgen.schema import Decorator, SchemaType, TypeKind


@pytest.mark.parametrize(
    ("schema", "expected"),
    [
        (SchemaType(type="string"), "str"),
        (SchemaType(type="integer"), "int"),
        (SchemaType(type="number"), "float"),
        (SchemaType(type="boolean"), "bool"),
        (SchemaType(), "any"),
        (SchemaType(type="str"), "str"),
        (SchemaType(type="array", items=SchemaType(type="string")), "[str]"),
        (SchemaType(type="array"), "[any]"),
        (
            SchemaType(
                type="object",
                additional_properties=SchemaType(type="array", items=SchemaType(type="integer")),
            ),
            "{str:[int]}",
        ),
        (
            SchemaType(
                type="object",
                additional_properties=SchemaType(type="boolean"),
                dict_key_type=SchemaType(type="integer"),
            ),
            "{int:bool}",
        ),
        (SchemaType(type="string", enum=["a", "b"]), '"a" | "b"'),
        (SchemaType(type="integer", enum=[1, 2]), "1 | 2"),
        (
            SchemaType(union_types=[SchemaType(type="string"), rooted("Person")]),
            "str | Person",
        ),
        (SchemaType(type="object", properties={"a": SchemaType(type="string")}), "dict"),
        (rooted("Person"), "Person"),
    ],
)
def test_type_token(schema: SchemaType, expected: str) -> None:
    assert type_token(schema) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("x", '"x"'),
        (True, "True"),
        (None, "None"),
        (1.5, "1.5"),
        ([1, "a"], '[1, "a"]'),
        ({"k": False}, '{"k": False}'),
    ],
)
def test_format_literal(value: object, expected: str) -> None:
    assert format_literal(value) == expected


def test_kind_is_computed_from_structure() -> None:
    assert rooted("Person").kind is TypeKind.REFERENCE
    assert SchemaType(type="array", items=SchemaType(type="string")).kind is TypeKind.ARRAY
    assert SchemaType(type="string", enum=["a"]).kind is TypeKind.ENUM
    assert SchemaType(type="object", properties={"a": SchemaType()}).kind is TypeKind.OBJECT
    assert SchemaType(type="string").kind is TypeKind.SCALAR


def test_required_flag_matches_required_set() -> None:
    schema = SchemaType(
        type="object",
        properties={name: SchemaType(type="string") for name in ("c", "a", "b")},
        required=["b", "c"],
    )

    attributes = build_attributes(schema)

    assert [attribute.name for attribute in attributes] == ["a", "b", "c"]
    assert {attribute.name for attribute in attributes if attribute.required} == {"b", "c"}


def test_array_of_inline_objects_has_children() -> None:
    element = SchemaType(type="object", properties={"x": SchemaType(type="integer")})

    attribute = build_attribute(
        "points",
        SchemaType(type="array", items=element),
        required=False,
    )

    assert attribute.type_token == "[dict]"
    assert [child.name for child in attribute.children] == ["x"]


def test_reference_element_is_linked() -> None:
    attribute = build_attribute(
        "friends",
        SchemaType(type="array", items=rooted("Person")),
        required=False,
        resolve_link=lambda schema: "doc_Person.md",
    )

    assert attribute.type_token == "[Person]"
    assert attribute.link == "doc_Person.md"
    assert attribute.children == []


def test_deprecated_attributes_are_dropped_when_ignored() -> None:
    schema = SchemaType(
        type="object",
        properties={
            "old": SchemaType(type="string", decorators=[Decorator(name="deprecated")]),
            "new": SchemaType(type="string"),
        },
    )

    assert [a.name for a in build_attributes(schema, ignore_deprecated=True)] == ["new"]
    kept = build_attributes(schema)
    assert [a.deprecated for a in kept] == [False, True]
