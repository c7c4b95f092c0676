"""Tests for Markdown generation."""

from __future__ import annotations

import pytest

from conftest import rooted
from kcl_docgen.codegen_markdown import MarkdownBuilder
from kcl_docgen.errors import RenderError
from kcl_docgen.gendoc import GenContext
from kcl_docgen.paths import UNIX, WINDOWS
from kcl_docgen.render import DocFormat, render_schema_doc
from kcl_docgen.schema import Decorator, Example, SchemaType

PERSON_UNIX = """## Schema Person

Description of Schema Person

### Attributes

**name** *required*

`str`

name of the person


## Source Files

- [models.Person](models/person.k)
"""

PERSON_WINDOWS = PERSON_UNIX.replace("models/person.k", "models\\person.k").replace("\n", "\r\n")


def test_render_person_unix(person: SchemaType) -> None:
    context = GenContext(package_path=".", ignore_deprecated=True, platform=UNIX)
    assert context.render_schema_doc_content(person) == PERSON_UNIX


def test_render_person_windows(person: SchemaType) -> None:
    context = GenContext(package_path=".", ignore_deprecated=True, platform=WINDOWS)
    rendered = context.render_schema_doc_content(person)
    assert rendered == PERSON_WINDOWS
    assert "- [models.Person](models\\person.k)\r\n" in rendered


def test_render_is_idempotent(person: SchemaType) -> None:
    first = render_schema_doc(person, platform=UNIX)
    second = render_schema_doc(person, platform=UNIX)
    assert first == second


def test_required_marker_only_on_required_attributes() -> None:
    schema = rooted(
        "Server",
        properties={
            "host": SchemaType(type="string"),
            "port": SchemaType(type="integer"),
            "labels": SchemaType(type="object", additional_properties=SchemaType(type="string")),
        },
        required=["port"],
    )

    rendered = render_schema_doc(schema, platform=UNIX)

    assert rendered is not None
    assert "**port** *required*" in rendered
    assert "**host**\n" in rendered
    assert "**labels**\n" in rendered
    assert rendered.count("*required*") == 1
    assert "`{str:str}`" in rendered


def test_empty_descriptions_are_omitted() -> None:
    schema = rooted("Empty", properties={"value": SchemaType(type="number")})

    rendered = render_schema_doc(schema, platform=UNIX)

    assert rendered == (
        "## Schema Empty\n"
        "\n"
        "### Attributes\n"
        "\n"
        "**value**\n"
        "\n"
        "`float`\n"
        "\n"
        "\n"
        "## Source Files\n"
        "\n"
        "- [models.Empty](models/empty.k)\n"
    )


def test_attribute_order_is_lexical() -> None:
    forward = rooted(
        "Order",
        properties={"b": SchemaType(type="string"), "a": SchemaType(type="string")},
    )
    backward = rooted(
        "Order",
        properties={"a": SchemaType(type="string"), "b": SchemaType(type="string")},
    )

    rendered = render_schema_doc(forward, platform=UNIX)

    assert rendered == render_schema_doc(backward, platform=UNIX)
    assert rendered is not None
    assert rendered.index("**a**") < rendered.index("**b**")


def test_nested_attributes_render_as_block_quote() -> None:
    schema = rooted(
        "Outer",
        properties={
            "inner": SchemaType(
                type="object",
                properties={"leaf": SchemaType(type="boolean", description="a flag")},
                required=["leaf"],
            )
        },
    )

    rendered = render_schema_doc(schema, platform=UNIX)

    assert rendered is not None
    assert "`dict`\n\n> **leaf** *required*\n>\n> `bool`\n>\n> a flag\n" in rendered


def test_defaults_and_read_only_markers() -> None:
    schema = rooted(
        "Flags",
        properties={
            "mode": SchemaType(type="string", default="fast", read_only=True),
            "sizes": SchemaType(
                type="array",
                items=SchemaType(type="integer"),
                default=[1, 2],
            ),
        },
    )

    rendered = render_schema_doc(schema, platform=UNIX)

    assert rendered is not None
    assert "**mode** *readOnly*\n\n`str`\n\nDefault: `\"fast\"`" in rendered
    assert "`[int]`\n\nDefault: `[1, 2]`" in rendered


def test_deprecated_schema_is_marked_or_skipped() -> None:
    schema = rooted(
        "Old",
        decorators=[Decorator(name="deprecated", keywords={"reason": "use New"})],
    )

    assert render_schema_doc(schema, platform=UNIX, ignore_deprecated=True) is None
    rendered = render_schema_doc(schema, platform=UNIX, ignore_deprecated=False)
    assert rendered is not None
    assert rendered.startswith("## Schema Old\n\n*Deprecated: use New*\n")


def test_deprecated_attributes_follow_ignore_flag() -> None:
    schema = rooted(
        "Mixed",
        properties={
            "old": SchemaType(type="string", decorators=[Decorator(name="deprecated")]),
            "new": SchemaType(type="string"),
        },
    )

    kept = render_schema_doc(schema, platform=UNIX)
    dropped = render_schema_doc(schema, platform=UNIX, ignore_deprecated=True)

    assert kept is not None and dropped is not None
    assert "**old** *deprecated*" in kept
    assert "**old**" not in dropped
    assert "**new**" in dropped


def test_examples_section() -> None:
    schema = rooted(
        "Sample",
        examples=[Example(summary="Minimal", value='s = Sample {\n    name = "x"\n}')],
    )

    rendered = render_schema_doc(schema, platform=UNIX)

    assert rendered is not None
    assert '### Examples\n\n#### Minimal\n\n```python\ns = Sample {\n    name = "x"\n}\n```\n' in rendered
    assert rendered.index("### Examples") < rendered.index("## Source Files")


def test_escape_html_in_descriptions() -> None:
    schema = rooted("Tag", description="Use <b> tags & more")

    plain = render_schema_doc(schema, platform=UNIX)
    escaped = render_schema_doc(schema, platform=UNIX, escape_html=True)

    assert plain is not None and escaped is not None
    assert "Use <b> tags & more" in plain
    assert "Use &lt;b&gt; tags &amp; more" in escaped


def test_root_package_source_link() -> None:
    schema = rooted("Main", package="", alias="main.k")

    rendered = render_schema_doc(schema, platform=UNIX)

    assert rendered is not None
    assert "- [Main](main.k)\n" in rendered


def test_dangling_required_attribute_raises() -> None:
    schema = rooted("Broken", properties={"a": SchemaType(type="string")}, required=["b"])

    with pytest.raises(RenderError, match=r"models\.Broken.*required attribute 'b'"):
        render_schema_doc(schema, platform=UNIX)


def test_schema_without_type_info_raises() -> None:
    builder = MarkdownBuilder(platform=UNIX)
    with pytest.raises(RenderError, match="x-kcl-type"):
        builder.render_schema(SchemaType(type="object"))


def test_reference_links_use_resolver() -> None:
    address = rooted("Address")
    schema = rooted("Person", properties={"home": address})

    rendered = render_schema_doc(
        schema,
        doc_format=DocFormat.MARKDOWN,
        platform=UNIX,
        resolve_link=lambda target: f"doc_{target.model_type.type_name}.md",
    )

    assert rendered is not None
    assert "[`Address`](doc_Address.md)" in rendered


def test_template_failure_names_format(person: SchemaType) -> None:
    builder = MarkdownBuilder(platform=UNIX)
    builder.schema_template = "missing.md.j2"

    with pytest.raises(RenderError, match="markdown template 'missing.md.j2' failed") as excinfo:
        builder.render_schema(person)

    assert excinfo.value.schema_id == "models.Person"


def test_carriage_returns_in_descriptions_are_normalized() -> None:
    schema = rooted("Note", description="first line\r\nsecond line")

    unix = render_schema_doc(schema, platform=UNIX)
    windows = render_schema_doc(schema, platform=WINDOWS)

    assert unix is not None and windows is not None
    assert "first line\nsecond line" in unix
    assert "\r" not in unix
    assert "first line\r\nsecond line" in windows
    assert "\r\r\n" not in windows
