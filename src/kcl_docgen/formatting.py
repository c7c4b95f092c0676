"""Format-independent views of schema attributes."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable

from kcl_docgen.schema import SchemaType, TypeKind

LinkResolver = Callable[[SchemaType], "str | None"]

_SCALAR_TYPES = {
    "": "any",
    "any": "any",
    "string": "str",
    "integer": "int",
    "number": "float",
    "boolean": "bool",
    "bool": "bool",
    "null": "None",
    "object": "dict",
}


@dataclass
class AttributeView:
    """Everything a document builder needs to render one attribute."""

    name: str
    type_token: str
    required: bool = False
    read_only: bool = False
    deprecated: bool = False
    description: str = ""
    default: str | None = None
    link: str | None = None
    children: list[AttributeView] = field(default_factory=list)


def type_token(schema: SchemaType) -> str:
    """Return the KCL spelling of the type of *schema*."""
    kind = schema.kind
    if kind is TypeKind.REFERENCE and schema.model_type is not None:
        return schema.model_type.type_name
    if kind is TypeKind.UNION:
        return " | ".join(type_token(member) for member in schema.union_types)
    if kind is TypeKind.ENUM and schema.enum is not None:
        if not schema.enum:
            return _scalar_token(schema.type)
        return " | ".join(format_literal(value) for value in schema.enum)
    if kind is TypeKind.ARRAY:
        if schema.items is None:
            return "[any]"
        return f"[{type_token(schema.items)}]"
    if kind is TypeKind.MAP and schema.additional_properties is not None:
        key = type_token(schema.dict_key_type) if schema.dict_key_type is not None else "str"
        return f"{{{key}:{type_token(schema.additional_properties)}}}"
    if kind is TypeKind.OBJECT:
        return "dict"
    return _scalar_token(schema.type)


def _scalar_token(type_name: str) -> str:
    return _SCALAR_TYPES.get(type_name, type_name)


def format_literal(value: Any) -> str:
    """Return the KCL literal spelling of *value*."""
    if value is None:
        return "None"
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, list):
        return f"[{', '.join(format_literal(item) for item in value)}]"
    if isinstance(value, dict):
        entries = ", ".join(
            f"{format_literal(key)}: {format_literal(item)}" for key, item in value.items()
        )
        return f"{{{entries}}}"
    return str(value)


def element_type(schema: SchemaType) -> SchemaType:
    """Follow array items and map values down to the element schema."""
    current = schema
    while True:
        kind = current.kind
        if kind is TypeKind.ARRAY and current.items is not None:
            current = current.items
        elif kind is TypeKind.MAP and current.additional_properties is not None:
            current = current.additional_properties
        else:
            return current


def build_attribute(
    name: str,
    schema: SchemaType,
    *,
    required: bool,
    ignore_deprecated: bool = False,
    resolve_link: LinkResolver | None = None,
) -> AttributeView:
    """Describe the attribute *name* of type *schema*."""
    element = element_type(schema)
    link = None
    if element.kind is TypeKind.REFERENCE and resolve_link is not None:
        link = resolve_link(element)
    children: list[AttributeView] = []
    if element.kind is TypeKind.OBJECT:
        children = build_attributes(
            element, ignore_deprecated=ignore_deprecated, resolve_link=resolve_link
        )
    return AttributeView(
        name=name,
        type_token=type_token(schema),
        required=required,
        read_only=schema.read_only,
        deprecated=schema.deprecated,
        description=schema.description.strip(),
        default=format_literal(schema.default) if schema.has_default else None,
        link=link,
        children=children,
    )


def build_attributes(
    schema: SchemaType,
    *,
    ignore_deprecated: bool = False,
    resolve_link: LinkResolver | None = None,
) -> list[AttributeView]:
    """Describe the attributes of *schema* in lexical order."""
    required = set(schema.required)
    attributes: list[AttributeView] = []
    for name in sorted(schema.properties):
        prop = schema.properties[name]
        if ignore_deprecated and prop.deprecated:
            continue
        attributes.append(
            build_attribute(
                name,
                prop,
                required=name in required,
                ignore_deprecated=ignore_deprecated,
                resolve_link=resolve_link,
            )
        )
    return attributes
