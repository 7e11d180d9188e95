"""Semantic checks on a parsed schema: unique type names and resolvable references."""

from __future__ import annotations

from typing import Iterable, Sequence

from polygen.ast_model import (
    Definition,
    Embed,
    EnumDefinition,
    InlineEmbedField,
    Namespace,
    RegularField,
    Table,
    TableMember,
    TypePath,
)
from polygen.error import DuplicateDefinitionError, TypeNotFoundError

Scope = tuple[str, ...]


def validate_ast(definitions: Iterable[Definition]) -> None:
    """Check that every type is defined once and every referenced type exists.

    Raises DuplicateDefinitionError or TypeNotFoundError.
    """
    definitions = list(definitions)
    defined_types: set[str] = set()
    _collect_definitions(definitions, (), defined_types)
    _check_definitions(definitions, (), defined_types)


def _required_name(item: Table | Embed | InlineEmbedField, kind: str) -> str:
    if item.name is None:
        raise ValueError(f"{kind} must have a name")
    return item.name


def _register(scope: Scope, name: str, types: set[str]) -> None:
    fqn = ".".join((*scope, name))
    if fqn in types:
        raise DuplicateDefinitionError(fqn)
    types.add(fqn)


def _collect_members(
    members: Sequence[TableMember], scope: Scope, types: set[str]
) -> None:
    for member in members:
        if isinstance(member, Embed):
            name = _required_name(member, "Embed")
            _register(scope, name, types)
            _collect_members(member.members, (*scope, name), types)
        elif isinstance(member, EnumDefinition):
            if member.name is not None:
                _register(scope, member.name, types)
        elif isinstance(member, InlineEmbedField):
            name = _required_name(member, "Inline embed")
            _register(scope, name, types)
            _collect_members(member.members, (*scope, name), types)


def _collect_definitions(
    definitions: Sequence[Definition], scope: Scope, types: set[str]
) -> None:
    for definition in definitions:
        if isinstance(definition, Namespace):
            _collect_definitions(
                definition.definitions, (*scope, *definition.path), types
            )
        elif isinstance(definition, (Table, Embed)):
            kind = "Table" if isinstance(definition, Table) else "Embed"
            name = _required_name(definition, kind)
            _register(scope, name, types)
            _collect_members(definition.members, (*scope, name), types)
        elif isinstance(definition, EnumDefinition):
            if definition.name is not None:
                _register(scope, definition.name, types)


def _resolve(type_path: Sequence[str], scope: Scope, types: set[str]) -> None:
    """Resolve a type path as written, then relative to each enclosing scope."""
    used = ".".join(type_path)
    if used in types:
        return
    for depth in range(len(scope), -1, -1):
        if ".".join((*scope[:depth], *type_path)) in types:
            return
    raise TypeNotFoundError(used)


def _check_members(
    members: Sequence[TableMember], scope: Scope, types: set[str]
) -> None:
    for member in members:
        if isinstance(member, RegularField):
            base = member.field_type.base_type
            if isinstance(base, TypePath):
                _resolve(base.parts, scope, types)
        elif isinstance(member, InlineEmbedField):
            name = _required_name(member, "Inline embed")
            _check_members(member.members, (*scope, name), types)
        elif isinstance(member, Embed):
            name = _required_name(member, "Embed")
            _check_members(member.members, (*scope, name), types)


def _check_definitions(
    definitions: Sequence[Definition], scope: Scope, types: set[str]
) -> None:
    for definition in definitions:
        if isinstance(definition, Namespace):
            _check_definitions(
                definition.definitions, (*scope, *definition.path), types
            )
        elif isinstance(definition, (Table, Embed)):
            kind = "Table" if isinstance(definition, Table) else "Embed"
            name = _required_name(definition, kind)
            _check_members(definition.members, (*scope, name), types)