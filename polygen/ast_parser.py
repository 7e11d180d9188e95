"""Build the AST of a schema file from its parse tree.

The small shared pieces (literals, types, constraints, enums, metadata) are
built in :mod:`polygen.ast_elements`; this module assembles definitions,
namespaces, tables, fields and embeds, and the root of a file.
"""

from __future__ import annotations

import re
from os import PathLike
from pathlib import Path

from polygen.ast_elements import (
    extract_comment_content,
    parse_cardinality,
    parse_constraint,
    parse_enum,
    parse_enum_variant,
    parse_metadata,
    parse_path,
    parse_type_with_cardinality,
)
from polygen.ast_model import (
    Annotation,
    AstRoot,
    Comment,
    Definition,
    DocComment,
    Embed,
    FieldDefinition,
    InlineEmbedField,
    InlineEnumField,
    Namespace,
    NamespaceImport,
    RegularField,
    Table,
    TableMember,
)
from polygen.error import InvalidValueError, MissingElementError, UnexpectedRuleError
from polygen.parse_tree import Pair, Rule

_FIELD_NUMBER_TEXT = re.compile(r"\+?[0-9]+")
_U32_MAX = 2**32 - 1


def _require_first(pair: Pair, rule: Rule, element: str) -> Pair:
    child = pair.first()
    if child is None:
        line, col = pair.line_col()
        raise MissingElementError(rule, element, line, col)
    return child


def _parse_field_number(pair: Pair) -> int:
    line, col = pair.line_col()
    value_pair = pair.first()
    if value_pair is None:
        raise MissingElementError(Rule.field_number, "integer value", line, col)
    text = value_pair.text
    if _FIELD_NUMBER_TEXT.fullmatch(text):
        value = int(text)
        if value <= _U32_MAX:
            return value
    raise InvalidValueError("field_number", text, line, col)


def build_ast_from_pairs(main_pair: Pair, path: str | PathLike[str]) -> AstRoot:
    """Build the AST of one schema file from its ``main`` parse-tree node."""
    root = AstRoot(path=Path(path))
    for pair in main_pair:
        if pair.rule is Rule.EOI:
            continue
        line, col = pair.line_col()
        if pair.rule is not Rule.toplevel_item:
            raise UnexpectedRuleError("definition", pair.rule, line, col)

        item = pair.first()
        if item is None:
            raise MissingElementError(
                Rule.toplevel_item, "file_import or definition", line, col
            )
        if item.rule is Rule.file_import:
            literal = _require_first(item, Rule.file_import, "path")
            root.file_imports.append(literal.text[1:-1])
        elif item.rule is Rule.definition:
            root.definitions.append(parse_definition(item))
        elif item.rule is Rule.doc_comment:
            root.definitions.append(Comment(extract_comment_content(item)))
        else:
            raise UnexpectedRuleError("file_import or definition", item.rule, line, col)
    return root


def parse_definition(pair: Pair) -> Definition:
    """Build a namespace, table, enum or embed together with its metadata."""
    metadata, rest = parse_metadata(pair)
    if not rest:
        line, col = pair.line_col()
        raise MissingElementError(
            Rule.definition, "namespace, table, enum, or embed", line, col
        )
    def_pair = rest[0]
    rule = def_pair.rule

    if rule is Rule.namespace:
        namespace = parse_namespace(def_pair)
        leading: list[Definition] = [
            Comment(meta.text) if isinstance(meta, DocComment) else meta
            for meta in metadata
        ]
        namespace.definitions = leading + namespace.definitions
        return namespace
    if rule is Rule.table:
        table = parse_table(def_pair)
        table.metadata = metadata
        return table
    if rule is Rule.enum_def:
        enum = parse_enum(def_pair)
        enum.metadata = metadata
        return enum
    if rule is Rule.embed_def:
        embed = parse_embed(def_pair)
        embed.metadata = metadata
        return embed
    line, col = def_pair.line_col()
    raise UnexpectedRuleError("namespace, table, enum, or embed", rule, line, col)


def parse_namespace(pair: Pair) -> Namespace:
    """Build a namespace with its imports and nested definitions."""
    line, col = pair.line_col()
    children = iter(pair)
    path_pair = next(children, None)
    if path_pair is None:
        raise MissingElementError(Rule.namespace, "path", line, col)

    namespace = Namespace(path=parse_path(path_pair))
    for child in children:
        if child.rule is not Rule.namespace_body_item:
            continue
        item = _require_first(child, Rule.namespace_body_item, "item")
        if item.rule is Rule.namespace_import:
            namespace.imports.append(parse_namespace_import(item))
        elif item.rule is Rule.definition:
            namespace.definitions.append(parse_definition(item))
        elif item.rule is Rule.doc_comment:
            namespace.definitions.append(Comment(extract_comment_content(item)))
    return namespace


def parse_namespace_import(pair: Pair) -> NamespaceImport:
    """Build ``import a.b;`` or, when a trailing ``.*`` is present, ``import a.b.*;``."""
    children = iter(pair)
    path_pair = next(children, None)
    if path_pair is None:
        line, col = pair.line_col()
        raise MissingElementError(Rule.namespace_import, "path", line, col)
    return NamespaceImport(
        path=parse_path(path_pair), all=next(children, None) is not None
    )


def parse_table(pair: Pair) -> Table:
    """Build a table; its metadata is attached by the caller."""
    name = ""
    members: list[TableMember] = []
    for child in pair:
        if child.rule is Rule.IDENT:
            name = child.text
        elif child.rule is Rule.table_member:
            members.append(parse_table_member(child))
        elif child.rule is Rule.doc_comment:
            members.append(Comment(extract_comment_content(child)))
        else:
            line, col = child.line_col()
            raise UnexpectedRuleError("IDENT or table_member", child.rule, line, col)
    return Table(name=name, members=members)


def parse_table_member(pair: Pair) -> TableMember:
    """Build a field, embed or enum member and attach its leading metadata."""
    line, col = pair.line_col()
    metadata, rest = parse_metadata(pair)
    if not rest:
        raise MissingElementError(
            Rule.table_member, "field or embed definition", line, col
        )
    member_pair = rest[0]
    rule = member_pair.rule

    member: RegularField | InlineEmbedField | InlineEnumField | Embed
    if rule is Rule.field_definition:
        member = parse_field_definition(member_pair)
    elif rule is Rule.embed_def:
        member = parse_embed(member_pair)
    elif rule is Rule.enum_def:
        member = parse_enum(member_pair)
    else:
        m_line, m_col = member_pair.line_col()
        raise UnexpectedRuleError(
            "field_definition, embed_def, or enum_def", rule, m_line, m_col
        )
    member.metadata = metadata
    return member


def parse_field_definition(pair: Pair) -> FieldDefinition:
    """Build a regular, inline-embed or inline-enum field."""
    inner = _require_first(
        pair, Rule.field_definition, "regular_field or inline_embed_field"
    )
    if inner.rule is Rule.regular_field:
        return parse_regular_field(inner)
    if inner.rule is Rule.inline_embed_field:
        return parse_inline_embed_field(inner)
    if inner.rule is Rule.inline_enum_field:
        return parse_inline_enum_field(inner)
    line, col = inner.line_col()
    raise UnexpectedRuleError(
        "regular_field, inline_embed_field, or inline_enum_field", inner.rule, line, col
    )


def parse_regular_field(pair: Pair) -> RegularField:
    """Build a field with a type, constraints and an optional field number."""
    line, col = pair.line_col()
    children = iter(pair)
    name_pair = next(children, None)
    if name_pair is None:
        raise MissingElementError(Rule.regular_field, "name", line, col)
    type_pair = next(children, None)
    if type_pair is None:
        raise MissingElementError(Rule.regular_field, "type_with_cardinality", line, col)

    field = RegularField(
        name=name_pair.text, field_type=parse_type_with_cardinality(type_pair)
    )
    for child in children:
        if child.rule is Rule.constraint:
            field.constraints.append(parse_constraint(child))
        elif child.rule is Rule.field_number:
            field.field_number = _parse_field_number(child)
        else:
            c_line, c_col = child.line_col()
            raise UnexpectedRuleError(
                "constraint or field_number", child.rule, c_line, c_col
            )
    return field


def parse_inline_embed_field(pair: Pair) -> InlineEmbedField:
    """Build a field whose type is a structure declared in place."""
    name = ""
    field = InlineEmbedField(name=None)
    for child in pair:
        if child.rule is Rule.IDENT:
            name = child.text
        elif child.rule is Rule.table_member:
            field.members.append(parse_table_member(child))
        elif child.rule is Rule.cardinality:
            field.cardinality = parse_cardinality(child)
        elif child.rule is Rule.field_number:
            field.field_number = _parse_field_number(child)
        elif child.rule is Rule.doc_comment:
            field.members.append(Comment(extract_comment_content(child)))
        else:
            c_line, c_col = child.line_col()
            raise UnexpectedRuleError(
                "IDENT, table_member, cardinality, or field_number",
                child.rule,
                c_line,
                c_col,
            )
    if not name:
        line, col = pair.line_col()
        raise MissingElementError(Rule.inline_embed_field, "name", line, col)
    field.name = name
    return field


def parse_inline_enum_field(pair: Pair) -> InlineEnumField:
    """Build a field whose type is an enum declared in place."""
    line, col = pair.line_col()
    children = iter(pair)
    name_pair = next(children, None)
    if name_pair is None:
        raise MissingElementError(Rule.inline_enum_field, "name (IDENT)", line, col)

    field = InlineEnumField(name=name_pair.text)
    for child in children:
        if child.rule is Rule.enum_variant:
            field.variants.append(parse_enum_variant(child))
        elif child.rule is Rule.cardinality:
            field.cardinality = parse_cardinality(child)
        elif child.rule is Rule.field_number:
            field.field_number = _parse_field_number(child)
        else:
            c_line, c_col = child.line_col()
            raise UnexpectedRuleError(
                "enum_variant, cardinality, or field_number", child.rule, c_line, c_col
            )
    return field


def parse_embed(pair: Pair) -> Embed:
    """Build a named embed; its metadata is attached by the caller."""
    line, col = pair.line_col()
    children = iter(pair)
    name_pair = next(children, None)
    if name_pair is None:
        raise MissingElementError(Rule.embed_def, "name", line, col)

    embed = Embed(name=name_pair.text)
    for child in children:
        if child.rule is Rule.table_member:
            embed.members.append(parse_table_member(child))
        elif child.rule is Rule.doc_comment:
            embed.members.append(Comment(extract_comment_content(child)))
        else:
            c_line, c_col = child.line_col()
            raise UnexpectedRuleError(
                "table_member or doc_comment", child.rule, c_line, c_col
            )
    return embed


__all__ = [
    "Annotation",
    "build_ast_from_pairs",
    "parse_definition",
    "parse_embed",
    "parse_field_definition",
    "parse_inline_embed_field",
    "parse_inline_enum_field",
    "parse_namespace",
    "parse_namespace_import",
    "parse_regular_field",
    "parse_table",
    "parse_table_member",
]