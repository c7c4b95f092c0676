"""Output format selection and single schema rendering."""

from __future__ import annotations

import enum

from kcl_docgen.builder import DocumentBuilder
from kcl_docgen.codegen_html import HtmlBuilder
from kcl_docgen.codegen_markdown import MarkdownBuilder
from kcl_docgen.formatting import LinkResolver
from kcl_docgen.paths import Platform
from kcl_docgen.schema import SchemaType


class DocFormat(enum.Enum):
    """Supported output formats."""

    MARKDOWN = "markdown"
    HTML = "html"

    @classmethod
    def parse(cls, value: str | DocFormat) -> DocFormat:
        if isinstance(value, DocFormat):
            return value
        key = value.strip().lower()
        aliases = {"md": cls.MARKDOWN, "markdown": cls.MARKDOWN, "html": cls.HTML}
        if key not in aliases:
            raise ValueError(f"unsupported doc format '{value}' (expected md or html)")
        return aliases[key]


_BUILDERS: dict[DocFormat, type[DocumentBuilder]] = {
    DocFormat.MARKDOWN: MarkdownBuilder,
    DocFormat.HTML: HtmlBuilder,
}


def get_builder(
    doc_format: DocFormat,
    *,
    platform: Platform,
    escape_html: bool = False,
) -> DocumentBuilder:
    """Return the document builder for *doc_format*."""
    return _BUILDERS[doc_format](platform=platform, escape_html=escape_html)


def render_schema_doc(
    schema: SchemaType,
    *,
    doc_format: DocFormat = DocFormat.MARKDOWN,
    platform: Platform | None = None,
    ignore_deprecated: bool = False,
    escape_html: bool = False,
    resolve_link: LinkResolver | None = None,
) -> str | None:
    """Render the document of *schema*.

    Returns ``None`` when *schema* is deprecated and *ignore_deprecated* is
    set, since no document is produced for it.
    """
    if ignore_deprecated and schema.deprecated:
        return None
    builder = get_builder(
        doc_format,
        platform=platform if platform is not None else Platform.host(),
        escape_html=escape_html,
    )
    return builder.render_schema(
        schema, ignore_deprecated=ignore_deprecated, resolve_link=resolve_link
    )
