from __future__ import annotations

import ast
from collections.abc import Iterable

from .diagnostics import DiagnosticReport
from .options import SynthesisOptions


def has_runtime_import(module: ast.Module, options: SynthesisOptions) -> bool:
    for stmt in module.body:
        if not isinstance(stmt, ast.Import):
            continue
        for alias in stmt.names:
            if alias.name == options.runtime_module and alias.asname == options.runtime_alias:
                return True
    return False


def insert_runtime_import(
    module: ast.Module,
    names: set[str],
    options: SynthesisOptions,
    report: DiagnosticReport,
) -> bool:
    """
    Bind the runtime module under its alias, after the docstring and any
    `from __future__` imports.

    Returns False, with an error reported, if the alias is bound to something
    else.
    """
    if has_runtime_import(module, options):
        return True
    if options.runtime_alias in names:
        report.error(
            "name-collision",
            f"{options.runtime_alias} is already bound in this module; "
            "choose another runtime alias.",
        )
        return False

    position = 0
    for index, stmt in enumerate(module.body):
        if index == 0 and isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Constant) and isinstance(stmt.value.value, str):
            position = 1
        elif isinstance(stmt, ast.ImportFrom) and stmt.module == "__future__":
            position = index + 1
        else:
            break

    statement = ast.Import(names=[ast.alias(name=options.runtime_module, asname=options.runtime_alias)])
    module.body.insert(position, statement)
    return True


def append_declarations(module: ast.Module, declarations: Iterable[ast.stmt]) -> None:
    module.body.extend(declarations)


def emit(module: ast.Module) -> str:
    """Render a module back to source text."""
    ast.fix_missing_locations(module)
    return ast.unparse(module) + "\n"
