"""Package walking and documentation tree generation."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from kcl_docgen.builder import DocumentBuilder, IndexEntry, PackageLink
from kcl_docgen.dedup import Declaration, ImportPlan, plan_imports
from kcl_docgen.errors import GenerationError, OutputError, RenderError
from kcl_docgen.paths import Platform
from kcl_docgen.render import DocFormat, get_builder, render_schema_doc
from kcl_docgen.schema import KclPackage, SchemaType, load_package_tree

logger = logging.getLogger(__name__)

MARKER_FILENAME = ".kcl-docgen"

Extractor = Callable[[Path], KclPackage]


@dataclass
class GenContext:
    """Settings of one documentation run."""

    package_path: str | Path
    target: str | Path = "docs"
    doc_format: DocFormat = DocFormat.MARKDOWN
    ignore_deprecated: bool = False
    escape_html: bool = False
    platform: Platform = field(default_factory=Platform.host)
    extractor: Extractor = load_package_tree

    def builder(self) -> DocumentBuilder:
        return get_builder(self.doc_format, platform=self.platform, escape_html=self.escape_html)

    def render_schema_doc_content(self, schema: SchemaType) -> str | None:
        """Render one schema on its own, without links to other documents."""
        return render_schema_doc(
            schema,
            doc_format=self.doc_format,
            platform=self.platform,
            ignore_deprecated=self.ignore_deprecated,
            escape_html=self.escape_html,
        )

    def load(self) -> KclPackage:
        return self.extractor(Path(self.package_path))

    def gen_doc(self) -> list[Path]:
        """Generate the documentation tree and return the written files.

        All documents are rendered before anything is written, so a schema
        that fails to render leaves the target untouched.
        """
        root = self.load()
        plan = plan_imports(root)
        logger.info(
            "documenting %d schemas (%d re-exports) from %s",
            len(plan.canonical),
            len(plan.aliases),
            self.package_path,
        )
        documents = _DocumentPlanner(self, plan).plan(root)

        target = Path(self.target)
        prepare_target(target)
        written: list[Path] = []
        for parts, text in documents.items():
            path = target.joinpath(*parts)
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(text, encoding="utf-8", newline="")
            except OSError as err:
                raise OutputError(f"cannot write {path}: {err}") from err
            written.append(path)
        logger.info("wrote %d files to %s", len(written), target)
        return written


class _DocumentPlanner:
    """Render every document of a run into memory."""

    def __init__(self, context: GenContext, plan: ImportPlan) -> None:
        self.context = context
        self.imports = plan
        self.builder = context.builder()
        self.platform = context.platform

    def plan(self, root: KclPackage) -> dict[tuple[str, ...], str]:
        documents: dict[tuple[str, ...], str] = {}
        by_package: dict[str, list[Declaration]] = {}
        for declaration in self.imports.declarations:
            by_package.setdefault(declaration.package.path, []).append(declaration)
        for package in root.walk():
            logger.info("rendering package '%s'", package.path or package.name)
            entries: list[IndexEntry] = []
            for declaration in by_package.get(package.path, []):
                entry = self._render_declaration(declaration, documents)
                if entry is not None:
                    entries.append(entry)
            documents[tuple(package.parts) + (self.builder.index_filename(),)] = (
                self._render_index(package, entries)
            )
        return documents

    def _render_declaration(
        self,
        declaration: Declaration,
        documents: dict[tuple[str, ...], str],
    ) -> IndexEntry | None:
        canonical = self.imports.canonical_for(declaration)
        if canonical is None:
            raise GenerationError(
                "no canonical declaration planned",
                schema_id=declaration.identifier,
                package=declaration.package.path,
            )
        if self.context.ignore_deprecated and canonical.schema.deprecated:
            logger.debug("skipping deprecated schema '%s'", declaration.identifier)
            return None
        package_parts = declaration.package.parts
        if not self.imports.is_canonical(declaration):
            logger.debug(
                "'%s' re-exports '%s', linking instead of rendering",
                declaration.identifier,
                canonical.identifier,
            )
            return IndexEntry(
                name=declaration.name,
                link=self.platform.relative_link(self._doc_parts(canonical), package_parts),
                alias_of=str(canonical.key),
                deprecated=canonical.schema.deprecated,
            )

        try:
            text = self.builder.render_schema(
                declaration.schema,
                ignore_deprecated=self.context.ignore_deprecated,
                resolve_link=lambda schema: self._link(schema, package_parts),
            )
        except RenderError as err:
            raise GenerationError(
                err.reason,
                schema_id=declaration.identifier,
                package=declaration.package.path,
            ) from err
        filename = self.builder.doc_filename(declaration.name)
        documents[tuple(package_parts) + (filename,)] = text
        return IndexEntry(
            name=declaration.name,
            link=filename,
            deprecated=declaration.schema.deprecated,
        )

    def _render_index(self, package: KclPackage, entries: list[IndexEntry]) -> str:
        index_name = self.builder.index_filename()
        subpackages = [
            PackageLink(name=name, link=self.platform.join([name, index_name]))
            for name in sorted(package.subpackages)
        ]
        try:
            return self.builder.render_index(
                name=package.path or package.name,
                description=package.description,
                entries=entries,
                subpackages=subpackages,
            )
        except RenderError as err:
            raise GenerationError(err.reason, package=package.path) from err

    def _doc_parts(self, declaration: Declaration) -> list[str]:
        return declaration.package.parts + [self.builder.doc_filename(declaration.name)]

    def _link(self, schema: SchemaType, start: list[str]) -> str | None:
        canonical = self.imports.canonical_for(schema)
        if canonical is None:
            return None
        if self.context.ignore_deprecated and canonical.schema.deprecated:
            return None
        return self.platform.relative_link(self._doc_parts(canonical), start)


def prepare_target(target: Path) -> None:
    """Make *target* an empty directory owned by this tool.

    A missing or empty directory is used as is. A directory holding the
    marker of an earlier run is emptied. Anything else is refused.
    """
    if target.exists() and not target.is_dir():
        raise OutputError(f"target {target} exists and is not a directory")
    try:
        if target.is_dir() and any(target.iterdir()):
            if not (target / MARKER_FILENAME).is_file():
                raise OutputError(
                    f"target directory {target} is not empty and was not created by kcl-docgen"
                )
            logger.info("removing output of a previous run in %s", target)
            for child in target.iterdir():
                if child.is_dir() and not child.is_symlink():
                    shutil.rmtree(child)
                else:
                    child.unlink()
        target.mkdir(parents=True, exist_ok=True)
        (target / MARKER_FILENAME).write_text("generated by kcl-docgen\n", encoding="utf-8")
    except OSError as err:
        raise OutputError(f"cannot prepare target directory {target}: {err}") from err
