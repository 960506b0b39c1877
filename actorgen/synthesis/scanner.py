"""
Declaration scanner.

Classifies the top-level statements of a module by surface form only. Nothing
is validated and nothing is mutated here.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .diagnostics import DiagnosticReport


class DeclarationKind(str, Enum):
    MESSAGE_SET = "message_set"
    STATE = "state"
    OTHER = "other"


def is_dataclass_decorator(decorator: ast.expr) -> bool:
    """
    Matches:
      @dataclass
      @dataclasses.dataclass
      @dataclass(...)
      @dataclasses.dataclass(...)
    """
    if isinstance(decorator, ast.Call):
        return is_dataclass_decorator(decorator.func)
    if isinstance(decorator, ast.Name):
        return decorator.id == "dataclass"
    if isinstance(decorator, ast.Attribute):
        return decorator.attr == "dataclass"
    return False


def dataclass_decorator(node: ast.ClassDef) -> Optional[ast.expr]:
    for decorator in node.decorator_list:
        if is_dataclass_decorator(decorator):
            return decorator
    return None


def is_frozen_dataclass(node: ast.ClassDef) -> bool:
    decorator = dataclass_decorator(node)
    if not isinstance(decorator, ast.Call):
        return False
    for keyword in decorator.keywords:
        if keyword.arg == "frozen":
            return isinstance(keyword.value, ast.Constant) and keyword.value.value is True
    return False


def annotated_fields(node: ast.ClassDef) -> list[ast.AnnAssign]:
    """Return the `name: type` statements declared directly in a class body."""
    return [
        stmt
        for stmt in node.body
        if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name)
    ]


def body_names(node: ast.ClassDef) -> set[str]:
    """Every name bound directly in a class body."""
    names: set[str] = set()
    for stmt in node.body:
        names.update(_bound_names(stmt))
    return names


def _bound_names(stmt: ast.stmt) -> list[str]:
    if isinstance(stmt, (ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)):
        return [stmt.name]
    if isinstance(stmt, ast.Assign):
        return [t.id for t in stmt.targets if isinstance(t, ast.Name)]
    if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
        return [stmt.target.id]
    if isinstance(stmt, ast.Import):
        return [alias.asname or alias.name.split(".")[0] for alias in stmt.names]
    if isinstance(stmt, ast.ImportFrom):
        return [alias.asname or alias.name for alias in stmt.names if alias.name != "*"]
    return []


@dataclass(slots=True)
class Declaration:
    """A top-level declaration together with its classification."""

    name: str
    kind: DeclarationKind
    node: ast.ClassDef

    @property
    def has_named_fields(self) -> bool:
        """True for dataclass states, the only state shape that can be paired."""
        return dataclass_decorator(self.node) is not None

    @property
    def variants(self) -> list[ast.ClassDef]:
        return [stmt for stmt in self.node.body if isinstance(stmt, ast.ClassDef)]

    @property
    def link(self) -> Optional[str]:
        """Message set named by a `@serves(...)` decorator, if any."""
        for decorator in self.node.decorator_list:
            if not isinstance(decorator, ast.Call):
                continue
            func = decorator.func
            name = func.id if isinstance(func, ast.Name) else getattr(func, "attr", None)
            if name != "serves" or len(decorator.args) != 1:
                continue
            target = decorator.args[0]
            if isinstance(target, ast.Name):
                return target.id
            if isinstance(target, ast.Constant) and isinstance(target.value, str):
                return target.value
            return ast.unparse(target)
        return None


@dataclass(slots=True)
class Namespace:
    """
    The scanned module.

    `message_sets` and `states` are keyed by identifier in source order. When a
    class name is bound twice, the later definition wins, as it does at import
    time.
    """

    module: ast.Module
    message_sets: dict[str, Declaration] = field(default_factory=dict)
    states: dict[str, Declaration] = field(default_factory=dict)
    names: set[str] = field(default_factory=set)

    def linked_message_sets(self) -> set[str]:
        return {state.link for state in self.states.values() if state.link is not None}


def classify(node: ast.stmt) -> DeclarationKind:
    if not isinstance(node, ast.ClassDef):
        return DeclarationKind.OTHER
    if dataclass_decorator(node) is not None:
        return DeclarationKind.STATE
    if any(isinstance(stmt, ast.ClassDef) for stmt in node.body):
        return DeclarationKind.MESSAGE_SET
    return DeclarationKind.STATE


def scan(module: ast.Module, report: DiagnosticReport) -> Namespace:
    """Classify every top-level statement of `module`."""
    namespace = Namespace(module=module)

    for stmt in module.body:
        namespace.names.update(_bound_names(stmt))

        kind = classify(stmt)
        if kind is DeclarationKind.OTHER:
            continue

        decl = Declaration(name=stmt.name, kind=kind, node=stmt)
        if stmt.name in namespace.message_sets or stmt.name in namespace.states:
            report.warning(
                "duplicate-declaration",
                f"Class {stmt.name} is defined more than once; the last definition is used.",
                declaration=stmt.name,
                node=stmt,
            )
            namespace.message_sets.pop(stmt.name, None)
            namespace.states.pop(stmt.name, None)

        table = namespace.message_sets if kind is DeclarationKind.MESSAGE_SET else namespace.states
        table[stmt.name] = decl

    return namespace
