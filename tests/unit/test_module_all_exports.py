from __future__ import annotations

import ast
from pathlib import Path

import pytest

PACKAGE_ROOT = Path(__file__).resolve().parents[2] / "src" / "wsdot_api_client"
SOURCE_FILES = sorted(PACKAGE_ROOT.rglob("*.py"))


def _dunder_all(module: ast.Module) -> list[str] | None:
    for node in module.body:
        if isinstance(node, ast.Assign):
            targets = list(node.targets)
        elif isinstance(node, ast.AnnAssign):
            targets = [node.target]
        else:
            continue
        for target in targets:
            if isinstance(target, ast.Name) and target.id == "__all__":
                return [ast.literal_eval(element) for element in node.value.elts]
    return None


def _top_level_names(module: ast.Module) -> set[str]:
    names: set[str] = set()
    for node in module.body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            names.add(node.name)
        elif isinstance(node, ast.Assign):
            names.update(target.id for target in node.targets if isinstance(target, ast.Name))
        elif isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
            names.add(node.target.id)
        elif isinstance(node, (ast.Import, ast.ImportFrom)):
            names.update((alias.asname or alias.name).split(".")[0] for alias in node.names)
    return names


def test_all_source_modules_define_dunder_all() -> None:
    missing = [
        path.relative_to(PACKAGE_ROOT).as_posix()
        for path in SOURCE_FILES
        if _dunder_all(ast.parse(path.read_text(encoding="utf-8"))) is None
    ]
    assert missing == []


@pytest.mark.parametrize("path", SOURCE_FILES, ids=lambda path: path.relative_to(PACKAGE_ROOT).as_posix())
def test_dunder_all_lists_only_defined_names_without_duplicates(path: Path) -> None:
    module = ast.parse(path.read_text(encoding="utf-8"))
    exported = _dunder_all(module) or []

    assert len(exported) == len(set(exported))
    assert sorted(set(exported) - _top_level_names(module)) == []


def test_core_package_stays_a_namespace_package() -> None:
    assert not (PACKAGE_ROOT / "core" / "__init__.py").exists()
    assert (PACKAGE_ROOT / "apis" / "__init__.py").exists()
