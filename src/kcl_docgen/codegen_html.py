"""HTML documentation generation."""

from __future__ import annotations

from markupsafe import Markup, escape

from kcl_docgen.builder import DocumentBuilder
from kcl_docgen.formatting import AttributeView
from kcl_docgen.schema import Example


class HtmlBuilder(DocumentBuilder):
    """Build standalone HTML documents."""

    name = "html"
    extension = "html"
    schema_template = "schema.html.j2"
    index_template = "index.html.j2"

    def format_text(self, text: str) -> Markup:
        return escape(text)

    def format_attribute(self, attribute: AttributeView) -> Markup:
        head = Markup("<strong>{}</strong>").format(attribute.name)
        for flag, marker in (
            (attribute.required, "required"),
            (attribute.read_only, "readOnly"),
            (attribute.deprecated, "deprecated"),
        ):
            if flag:
                head += Markup(" <em>{}</em>").format(marker)

        token = Markup("<code>{}</code>").format(attribute.type_token)
        if attribute.link:
            token = Markup('<a href="{}">{}</a>').format(attribute.link, token)

        lines = [Markup("<dt>{}</dt>").format(head), Markup("<dd>"), Markup("<p>{}</p>").format(token)]
        if attribute.default is not None:
            lines.append(Markup("<p>Default: <code>{}</code></p>").format(attribute.default))
        if attribute.description:
            lines.append(Markup("<p>{}</p>").format(attribute.description))
        if attribute.children:
            lines.append(Markup("<dl>"))
            lines.extend(self.format_attribute(child) for child in attribute.children)
            lines.append(Markup("</dl>"))
        lines.append(Markup("</dd>"))
        return Markup("\n").join(lines)

    def format_example(self, example: Example) -> Markup:
        lines = []
        if example.summary:
            lines.append(Markup("<h4>{}</h4>").format(example.summary))
        if example.description:
            lines.append(Markup("<p>{}</p>").format(example.description))
        if example.value:
            lines.append(Markup("<pre><code>{}</code></pre>").format(example.value))
        return Markup("\n").join(lines)
