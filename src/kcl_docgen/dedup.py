"""Detection of schemas re-exported under several import paths."""

from __future__ import annotations

from dataclasses import dataclass, field

from kcl_docgen.errors import ExtractionError
from kcl_docgen.schema import KclPackage, SchemaType


@dataclass(frozen=True)
class SchemaKey:
    """Resolved origin of a schema: origin package plus declared name."""

    package: str
    type_name: str

    @classmethod
    def of(cls, schema: SchemaType) -> SchemaKey:
        model_type = schema.model_type
        if model_type is None:
            raise ExtractionError("schema without 'x-kcl-type' has no origin")
        return cls(package=model_type.import_info.package, type_name=model_type.type_name)

    def __str__(self) -> str:
        if self.package:
            return f"{self.package}.{self.type_name}"
        return self.type_name


@dataclass(eq=False)
class Declaration:
    """A schema as visible under one name in one package."""

    package: KclPackage
    name: str
    schema: SchemaType
    order: int

    @property
    def key(self) -> SchemaKey:
        return SchemaKey.of(self.schema)

    @property
    def location(self) -> tuple[str, str]:
        return (self.package.path, self.name)

    @property
    def identifier(self) -> str:
        if self.package.path:
            return f"{self.package.path}.{self.name}"
        return self.name

    @property
    def in_origin_package(self) -> bool:
        return self.package.path == self.key.package


@dataclass
class ImportPlan:
    """Partition of all declarations of a run into canonical ones and aliases."""

    declarations: list[Declaration] = field(default_factory=list)
    canonical: dict[SchemaKey, Declaration] = field(default_factory=dict)
    aliases: list[Declaration] = field(default_factory=list)

    def canonical_for(self, target: Declaration | SchemaType) -> Declaration | None:
        schema = target.schema if isinstance(target, Declaration) else target
        if schema.model_type is None:
            return None
        return self.canonical.get(SchemaKey.of(schema))

    def is_canonical(self, declaration: Declaration) -> bool:
        canonical = self.canonical.get(declaration.key)
        return canonical is not None and canonical.location == declaration.location


def iter_declarations(root: KclPackage) -> list[Declaration]:
    """Return every declaration below *root* in traversal order.

    Packages are visited depth first with sub-packages sorted by name, and
    schemas within a package sorted by their visible name.
    """
    declarations: list[Declaration] = []
    for package in root.walk():
        for name in sorted(package.schemas):
            declarations.append(
                Declaration(
                    package=package,
                    name=name,
                    schema=package.schemas[name],
                    order=len(declarations),
                )
            )
    return declarations


def plan_imports(root: KclPackage) -> ImportPlan:
    """Choose one canonical declaration per underlying schema.

    A declaration in the schema's own origin package under its declared name
    wins, then any declaration in the origin package, then the first one in
    traversal order.
    """
    plan = ImportPlan(declarations=iter_declarations(root))
    groups: dict[SchemaKey, list[Declaration]] = {}
    for declaration in plan.declarations:
        groups.setdefault(declaration.key, []).append(declaration)

    for key, candidates in groups.items():
        canonical = min(candidates, key=_canonical_rank)
        plan.canonical[key] = canonical
        plan.aliases.extend(item for item in candidates if item is not canonical)
    plan.aliases.sort(key=lambda item: item.order)
    return plan


def _canonical_rank(declaration: Declaration) -> tuple[int, int]:
    if declaration.in_origin_package:
        if declaration.name == declaration.key.type_name:
            return (0, declaration.order)
        return (1, declaration.order)
    return (2, declaration.order)
