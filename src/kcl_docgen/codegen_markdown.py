"""Markdown documentation generation."""

from __future__ import annotations

from markupsafe import escape

from kcl_docgen.builder import DocumentBuilder
from kcl_docgen.formatting import AttributeView
from kcl_docgen.schema import Example


class MarkdownBuilder(DocumentBuilder):
    """Build Markdown documents."""

    name = "markdown"
    extension = "md"
    schema_template = "schema.md.j2"
    index_template = "index.md.j2"

    def format_text(self, text: str) -> str:
        if self.escape_html:
            return str(escape(text))
        return text

    def format_attribute(self, attribute: AttributeView) -> str:
        """Return the Markdown fragment describing *attribute*.

        Nested attributes of inline objects are rendered as a block quote
        below their parent, one quote level per nesting level.
        """
        head = f"**{attribute.name}**"
        if attribute.required:
            head += " *required*"
        if attribute.read_only:
            head += " *readOnly*"
        if attribute.deprecated:
            head += " *deprecated*"

        token = f"`{attribute.type_token}`"
        if attribute.link:
            token = f"[{token}]({attribute.link})"

        blocks = [head, token]
        if attribute.default is not None:
            blocks.append(f"Default: `{attribute.default}`")
        if attribute.description:
            blocks.append(self.format_text(attribute.description))
        if attribute.children:
            nested = "\n\n".join(self.format_attribute(child) for child in attribute.children)
            blocks.append(_block_quote(nested))
        return "\n\n".join(blocks)

    def format_example(self, example: Example) -> str:
        blocks = []
        if example.summary:
            blocks.append(f"#### {self.format_text(example.summary)}")
        if example.description:
            blocks.append(self.format_text(example.description))
        if example.value:
            blocks.append(f"```python\n{example.value}\n```")
        return "\n\n".join(blocks)


def _block_quote(text: str) -> str:
    return "\n".join(f"> {line}" if line else ">" for line in text.split("\n"))
