"""Shared test helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from kcl_docgen.gendoc import MARKER_FILENAME
from kcl_docgen.schema import Extensions, ImportInfo, ModelTypeInfo, SchemaType

FIXTURES = Path(__file__).resolve().parent / "fixtures"


def compare_dirs(expected: Path, actual: Path) -> None:
    """Assert that *actual* holds the same files with the same lines as *expected*."""
    expected_names = sorted(p.name for p in expected.iterdir() if p.name != MARKER_FILENAME)
    actual_names = sorted(p.name for p in actual.iterdir() if p.name != MARKER_FILENAME)
    assert expected_names == actual_names, f"different entries in {expected} and {actual}"
    for name in expected_names:
        expected_path = expected / name
        actual_path = actual / name
        if expected_path.is_dir():
            assert actual_path.is_dir(), f"{actual_path} is not a directory"
            compare_dirs(expected_path, actual_path)
            continue
        expected_lines = expected_path.read_text(encoding="utf-8").splitlines()
        actual_lines = actual_path.read_text(encoding="utf-8").splitlines()
        for number, (want, got) in enumerate(zip(expected_lines, actual_lines), start=1):
            assert want == got, f"{actual_path}:{number}: expected {want!r}, got {got!r}"
        assert len(expected_lines) == len(actual_lines), f"{actual_path}: line count differs"


def rooted(
    type_name: str,
    *,
    package: str = "models",
    alias: str | None = None,
    **kwargs: object,
) -> SchemaType:
    """Build a top-level schema declared as *type_name* in *package*."""
    return SchemaType(
        type="object",
        extensions=Extensions(
            model_type=ModelTypeInfo(
                type_name=type_name,
                import_info=ImportInfo(
                    package=package,
                    alias=alias or f"{type_name.lower()}.k",
                ),
            )
        ),
        **kwargs,  # type: ignore[arg-type]
    )


@pytest.fixture
def person() -> SchemaType:
    return rooted(
        "Person",
        alias="person.k",
        description="Description of Schema Person",
        properties={"name": SchemaType(type="string", description="name of the person")},
        required=["name"],
    )
