"""Schema type tree and schema dump loading utilities."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from kcl_docgen.errors import ExtractionError

SCHEMA_FILENAMES = ("swagger.json", "swagger.yaml", "swagger.yml")
_REF_PREFIX = "#/definitions/"


class _NoDefault:
    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Any = _NoDefault()


class TypeKind(enum.Enum):
    """Structural variant of a schema node."""

    SCALAR = "scalar"
    ENUM = "enum"
    ARRAY = "array"
    MAP = "map"
    UNION = "union"
    OBJECT = "object"
    REFERENCE = "reference"


@dataclass(frozen=True)
class ImportInfo:
    """Origin of a schema declaration."""

    package: str
    alias: str


@dataclass(frozen=True)
class ModelTypeInfo:
    """Declared name and origin of a schema."""

    type_name: str
    import_info: ImportInfo


@dataclass(frozen=True)
class Extensions:
    """Provenance metadata carried by top-level schema declarations."""

    model_type: ModelTypeInfo | None = None


@dataclass
class Decorator:
    name: str
    arguments: list[str] = field(default_factory=list)
    keywords: dict[str, str] = field(default_factory=dict)


@dataclass
class Example:
    summary: str = ""
    description: str = ""
    value: str = ""


@dataclass(eq=False)
class SchemaType:
    """One node of the schema type tree."""

    type: str = ""
    description: str = ""
    properties: dict[str, SchemaType] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)
    items: SchemaType | None = None
    additional_properties: SchemaType | None = None
    dict_key_type: SchemaType | None = None
    enum: list[Any] | None = None
    default: Any = NO_DEFAULT
    read_only: bool = False
    union_types: list[SchemaType] = field(default_factory=list)
    decorators: list[Decorator] = field(default_factory=list)
    examples: list[Example] = field(default_factory=list)
    extensions: Extensions | None = None

    @property
    def model_type(self) -> ModelTypeInfo | None:
        if self.extensions is None:
            return None
        return self.extensions.model_type

    @property
    def kind(self) -> TypeKind:
        if self.model_type is not None:
            return TypeKind.REFERENCE
        if self.union_types:
            return TypeKind.UNION
        if self.enum is not None:
            return TypeKind.ENUM
        if self.type == "array":
            return TypeKind.ARRAY
        if self.additional_properties is not None:
            return TypeKind.MAP
        if self.properties:
            return TypeKind.OBJECT
        return TypeKind.SCALAR

    @property
    def qualified_name(self) -> str:
        """Return ``package.TypeName`` for rooted schemas."""
        model_type = self.model_type
        if model_type is None:
            return ""
        package = model_type.import_info.package
        if package:
            return f"{package}.{model_type.type_name}"
        return model_type.type_name

    @property
    def deprecation(self) -> Decorator | None:
        for decorator in self.decorators:
            if decorator.name == "deprecated":
                return decorator
        return None

    @property
    def deprecated(self) -> bool:
        return self.deprecation is not None

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT


@dataclass
class KclPackage:
    """One package of the documented package hierarchy."""

    name: str
    path: str = ""
    description: str = ""
    schemas: dict[str, SchemaType] = field(default_factory=dict)
    subpackages: dict[str, KclPackage] = field(default_factory=dict)

    @property
    def parts(self) -> list[str]:
        return self.path.split(".") if self.path else []

    def walk(self) -> list[KclPackage]:
        """Return this package and all sub-packages in traversal order."""
        ordered = [self]
        for name in sorted(self.subpackages):
            ordered.extend(self.subpackages[name].walk())
        return ordered


def check_schema(schema: SchemaType, *, rooted: bool = False) -> str | None:
    """Return the first structural problem found in *schema*, if any."""
    if rooted and schema.model_type is None:
        return "top-level schema must define 'x-kcl-type'"
    return _check_node(schema, "", set())


def _check_node(schema: SchemaType, location: str, seen: set[int]) -> str | None:
    if id(schema) in seen:
        return None
    seen.add(id(schema))
    for name in schema.required:
        if name not in schema.properties:
            where = f" of '{location}'" if location else ""
            return f"required attribute '{name}'{where} is not a declared property"
    # references are checked where they are declared
    if schema.kind is TypeKind.REFERENCE and location:
        return None
    children: list[tuple[str, SchemaType]] = [
        (f"{location}.{name}" if location else name, prop)
        for name, prop in schema.properties.items()
    ]
    for label, child in (
        ("items", schema.items),
        ("additionalProperties", schema.additional_properties),
    ):
        if child is not None:
            children.append((f"{location}[{label}]" if location else label, child))
    for index, member in enumerate(schema.union_types):
        children.append((f"{location}|{index}", member))
    for child_location, child in children:
        problem = _check_node(child, child_location, seen)
        if problem:
            return problem
    return None


def load_schema(path: str | Path) -> dict[str, Any]:
    """Load a schema dump from *path*.

    Parameters
    ----------
    path:
        Location of the dump file, or of a package directory holding one of
        ``swagger.json``, ``swagger.yaml`` or ``swagger.yml``.
    """
    schema_path = _resolve_schema_file(Path(path))
    text = schema_path.read_text(encoding="utf-8")
    try:
        if schema_path.suffix == ".json":
            document = json.loads(text)
        else:
            document = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as err:
        raise ExtractionError(f"failed to parse schema dump {schema_path}: {err}") from err
    if not isinstance(document, dict):
        raise ExtractionError(f"schema dump {schema_path} must be a mapping")
    return document


def _resolve_schema_file(path: Path) -> Path:
    if path.is_dir():
        for name in SCHEMA_FILENAMES:
            candidate = path / name
            if candidate.is_file():
                return candidate
        raise ExtractionError(
            f"no schema dump found in {path} (expected one of {', '.join(SCHEMA_FILENAMES)})"
        )
    if not path.is_file():
        raise ExtractionError(f"schema dump not found: {path}")
    return path


def load_package_tree(path: str | Path) -> KclPackage:
    """Build the package tree described by the schema dump at *path*."""
    source = Path(path)
    document = load_schema(source)
    default_name = source.resolve().name if source.is_dir() else source.resolve().parent.name
    return build_package_tree(document, default_name=default_name)


def build_package_tree(document: dict[str, Any], *, default_name: str = "main") -> KclPackage:
    """Build a package tree from an already parsed schema dump."""
    info = document.get("info") or {}
    if not isinstance(info, dict):
        raise ExtractionError("schema dump 'info' must be a mapping")
    definitions = document.get("definitions")
    if definitions is None:
        definitions = {}
    if not isinstance(definitions, dict):
        raise ExtractionError("schema dump 'definitions' must be a mapping")

    root = KclPackage(
        name=str(info.get("title") or default_name),
        description=str(info.get("description") or "").strip(),
    )
    parser = _DefinitionParser(definitions)
    for key in definitions:
        schema = parser.resolve(key)
        problem = check_schema(schema, rooted=True)
        if problem:
            raise ExtractionError(f"definition '{key}': {problem}")
        package_path, _, visible_name = key.rpartition(".")
        package = _ensure_package(root, package_path)
        package.schemas[visible_name] = schema
    return root


def _ensure_package(root: KclPackage, package_path: str) -> KclPackage:
    current = root
    if not package_path:
        return current
    parts = package_path.split(".")
    for index, part in enumerate(parts):
        if not part:
            raise ExtractionError(f"invalid package path '{package_path}'")
        child = current.subpackages.get(part)
        if child is None:
            child = KclPackage(name=part, path=".".join(parts[: index + 1]))
            current.subpackages[part] = child
        current = child
    return current


class _DefinitionParser:
    """Turn raw definitions into linked SchemaType nodes."""

    def __init__(self, definitions: dict[str, Any]) -> None:
        self._definitions = definitions
        self._resolved: dict[str, SchemaType] = {}

    def resolve(self, key: str) -> SchemaType:
        schema = self._resolved.get(key)
        if schema is not None:
            return schema
        raw = self._definitions.get(key)
        if not isinstance(raw, dict):
            raise ExtractionError(f"definition '{key}' must be an object")
        # registered before parsing so self references terminate
        schema = SchemaType()
        self._resolved[key] = schema
        self._fill(schema, raw, key)
        return schema

    def parse(self, raw: Any, location: str) -> SchemaType:
        if not isinstance(raw, dict):
            raise ExtractionError(f"'{location}' must be an object")
        ref = raw.get("$ref")
        if ref is not None:
            if not isinstance(ref, str) or not ref.startswith(_REF_PREFIX):
                raise ExtractionError(f"'{location}' has unsupported $ref {ref!r}")
            target = ref[len(_REF_PREFIX) :]
            if target not in self._definitions:
                raise ExtractionError(f"'{location}' references unknown definition '{target}'")
            referenced = self.resolve(target)
            # attribute level keywords next to a reference describe the attribute
            return replace(
                referenced,
                description=_optional_str(raw, "description", location).strip(),
                default=raw.get("default", NO_DEFAULT),
                read_only=bool(raw.get("readOnly", False)),
                decorators=_parse_decorators(raw.get("x-kcl-decorators"), location),
                examples=[],
            )
        schema = SchemaType()
        self._fill(schema, raw, location)
        return schema

    def _fill(self, schema: SchemaType, raw: dict[str, Any], location: str) -> None:
        if "x-kcl-type" in raw:
            schema.extensions = Extensions(model_type=_parse_model_type(raw["x-kcl-type"], location))
        schema.type = _optional_str(raw, "type", location)
        schema.description = _optional_str(raw, "description", location).strip()
        schema.read_only = bool(raw.get("readOnly", False))
        if "default" in raw:
            schema.default = raw["default"]

        properties = raw.get("properties") or {}
        if not isinstance(properties, dict):
            raise ExtractionError(f"'{location}' properties must be a mapping")
        schema.properties = {
            str(name): self.parse(prop, f"{location}.{name}") for name, prop in properties.items()
        }

        required = raw.get("required") or []
        if not isinstance(required, list) or not all(isinstance(item, str) for item in required):
            raise ExtractionError(f"'{location}' required must be a list of names")
        schema.required = list(dict.fromkeys(required))

        if "items" in raw:
            schema.items = self.parse(raw["items"], f"{location}[items]")
        additional = raw.get("additionalProperties")
        if isinstance(additional, dict):
            schema.additional_properties = self.parse(additional, f"{location}[value]")
        if "enum" in raw:
            enum_values = raw["enum"]
            if not isinstance(enum_values, list):
                raise ExtractionError(f"'{location}' enum must be a list")
            schema.enum = list(enum_values)

        if "x-kcl-dict-key-type" in raw:
            schema.dict_key_type = self.parse(raw["x-kcl-dict-key-type"], f"{location}[key]")
        union_types = raw.get("x-kcl-union-types") or []
        if not isinstance(union_types, list):
            raise ExtractionError(f"'{location}' x-kcl-union-types must be a list")
        schema.union_types = [
            self.parse(member, f"{location}|{index}") for index, member in enumerate(union_types)
        ]
        schema.decorators = _parse_decorators(raw.get("x-kcl-decorators"), location)
        schema.examples = _parse_examples(raw.get("examples"), location)


def _optional_str(raw: dict[str, Any], key: str, location: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ExtractionError(f"'{location}' {key} must be a string")
    return value


def _parse_model_type(raw: Any, location: str) -> ModelTypeInfo:
    if not isinstance(raw, dict):
        raise ExtractionError(f"'{location}' x-kcl-type must be an object")
    type_name = raw.get("type")
    if not isinstance(type_name, str) or not type_name:
        raise ExtractionError(f"'{location}' x-kcl-type must define 'type'")
    import_raw = raw.get("import") or {}
    if not isinstance(import_raw, dict):
        raise ExtractionError(f"'{location}' x-kcl-type import must be an object")
    package = import_raw.get("package") or ""
    alias = import_raw.get("alias") or ""
    if not isinstance(package, str) or not isinstance(alias, str):
        raise ExtractionError(f"'{location}' x-kcl-type import entries must be strings")
    return ModelTypeInfo(type_name=type_name, import_info=ImportInfo(package=package, alias=alias))


def _parse_decorators(raw: Any, location: str) -> list[Decorator]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ExtractionError(f"'{location}' x-kcl-decorators must be a list")
    decorators: list[Decorator] = []
    for entry in raw:
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            raise ExtractionError(f"'{location}' decorator entries must define a name")
        arguments = entry.get("arguments") or []
        keywords = entry.get("keywords") or {}
        if not isinstance(arguments, list) or not isinstance(keywords, dict):
            raise ExtractionError(f"'{location}' decorator '{entry['name']}' is malformed")
        decorators.append(
            Decorator(
                name=entry["name"],
                arguments=[str(argument) for argument in arguments],
                keywords={str(key): str(value) for key, value in keywords.items()},
            )
        )
    return decorators


def _parse_examples(raw: Any, location: str) -> list[Example]:
    if raw is None:
        return []
    if not isinstance(raw, dict):
        raise ExtractionError(f"'{location}' examples must be a mapping")
    examples: list[Example] = []
    for name in sorted(raw):
        entry = raw[name]
        if not isinstance(entry, dict):
            raise ExtractionError(f"'{location}' example '{name}' must be an object")
        examples.append(
            Example(
                summary=str(entry.get("summary") or "").strip(),
                description=str(entry.get("description") or "").strip(),
                value=str(entry.get("value") or "").strip("\n"),
            )
        )
    return examples
