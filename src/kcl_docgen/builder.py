"""Shared document assembly for all output formats."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError, select_autoescape

from kcl_docgen.errors import RenderError
from kcl_docgen.formatting import AttributeView, LinkResolver, build_attributes
from kcl_docgen.paths import Platform
from kcl_docgen.schema import Decorator, Example, SchemaType, check_schema

_TEMPLATE_ENV = Environment(
    loader=FileSystemLoader(Path(__file__).resolve().parent / "templates"),
    trim_blocks=True,
    lstrip_blocks=False,
    keep_trailing_newline=True,
    undefined=StrictUndefined,
    autoescape=select_autoescape(enabled_extensions=("html.j2",), default_for_string=False),
)


@dataclass
class IndexEntry:
    """One schema listed in a package index."""

    name: str
    link: str
    alias_of: str | None = None
    deprecated: bool = False


@dataclass
class PackageLink:
    name: str
    link: str


class DocumentBuilder:
    """Render schema documents and package indexes in one output format.

    Subclasses provide the markup of single fragments; section order and
    template context are fixed here.
    """

    name = ""
    extension = ""
    schema_template = ""
    index_template = ""

    def __init__(self, *, platform: Platform, escape_html: bool = False) -> None:
        self.platform = platform
        self.escape_html = escape_html

    def format_text(self, text: str) -> Any:
        raise NotImplementedError

    def format_attribute(self, attribute: AttributeView) -> Any:
        raise NotImplementedError

    def format_example(self, example: Example) -> Any:
        raise NotImplementedError

    def index_filename(self) -> str:
        return f"index.{self.extension}"

    def doc_filename(self, type_name: str) -> str:
        return f"doc_{type_name}.{self.extension}"

    def render_schema(
        self,
        schema: SchemaType,
        *,
        ignore_deprecated: bool = False,
        resolve_link: LinkResolver | None = None,
    ) -> str:
        """Render the document body of the top-level *schema*."""
        problem = check_schema(schema, rooted=True)
        if problem:
            raise RenderError(problem, schema.qualified_name or None)
        model_type = schema.model_type
        if model_type is None:
            raise RenderError("top-level schema must define 'x-kcl-type'")
        package = model_type.import_info.package
        source_parts = package.split(".") if package else []
        source_parts.append(model_type.import_info.alias)

        attributes = build_attributes(
            schema, ignore_deprecated=ignore_deprecated, resolve_link=resolve_link
        )
        context = {
            "name": model_type.type_name,
            "deprecation": self._deprecation_text(schema.deprecation),
            "description": self.format_text(schema.description),
            "attributes": [self.format_attribute(attribute) for attribute in attributes],
            "examples": [self.format_example(example) for example in schema.examples],
            "source_label": schema.qualified_name,
            "source_path": self.platform.join(source_parts),
        }
        return self._render(self.schema_template, context, schema.qualified_name)

    def render_index(
        self,
        *,
        name: str,
        description: str,
        entries: list[IndexEntry],
        subpackages: list[PackageLink],
    ) -> str:
        """Render the index document of one package."""
        context = {
            "name": name,
            "description": self.format_text(description),
            "entries": entries,
            "subpackages": subpackages,
        }
        return self._render(self.index_template, context, None)

    def _deprecation_text(self, decorator: Decorator | None) -> str | None:
        if decorator is None:
            return None
        text = "Deprecated"
        version = decorator.keywords.get("version")
        if version:
            text += f" since {version}"
        reason = decorator.keywords.get("reason")
        if reason:
            text += f": {reason}"
        return self.format_text(text)

    def _render(self, template_name: str, context: dict[str, Any], schema_id: str | None) -> str:
        try:
            rendered = _TEMPLATE_ENV.get_template(template_name).render(context)
        except TemplateError as err:
            raise RenderError(
                f"{self.name} template '{template_name}' failed: {err}", schema_id
            ) from err
        return self.platform.apply_newlines(rendered)
