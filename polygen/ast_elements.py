"""Builders that turn small parse-tree nodes into AST elements.

These cover paths, literals, comments, metadata, annotations, types,
constraints and enums: the pieces shared by every kind of definition.
"""

from __future__ import annotations

import re
from typing import Iterable

from polygen.ast_model import (
    Annotation,
    AnnotationParam,
    BasicType,
    Cardinality,
    Constraint,
    Default,
    DocComment,
    EnumDefinition,
    EnumVariant,
    ForeignKey,
    Literal,
    LiteralKind,
    MaxLength,
    Metadata,
    PrimaryKey,
    Range,
    Regex,
    TypeName,
    TypePath,
    TypeWithCardinality,
    Unique,
)
from polygen.error import InvalidValueError, MissingElementError, UnexpectedRuleError
from polygen.parse_tree import Pair, Rule

_INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1
U32_MAX = 2**32 - 1


def _parse_int(text: str, low: int, high: int) -> int | None:
    """Parse a plain decimal integer in ``[low, high]``; None if it does not fit."""
    if not _INTEGER_TEXT.fullmatch(text):
        return None
    value = int(text)
    if not low <= value <= high:
        return None
    return value


def _parse_float(text: str) -> float | None:
    if not text or "_" in text or text != text.strip():
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _strip_quotes(text: str) -> str:
    return text[1:-1]


def _require_first(pair: Pair, rule: Rule, element: str) -> Pair:
    child = pair.first()
    if child is None:
        line, col = pair.line_col()
        raise MissingElementError(rule, element, line, col)
    return child


def parse_path(pair: Pair) -> list[str]:
    """Return the identifiers of a dotted path such as ``game.common``."""
    return [child.text for child in pair if child.rule is Rule.IDENT]


def parse_literal(pair: Pair) -> Literal:
    """Build a literal from a wrapper node or directly from a token node."""
    token = pair.first() or pair
    rule = token.rule
    text = token.text
    line, col = token.line_col()

    if rule is Rule.STRING_LITERAL:
        return Literal(LiteralKind.STRING, _strip_quotes(text))
    if rule is Rule.INTEGER:
        value = _parse_int(text, I64_MIN, I64_MAX)
        if value is None:
            raise InvalidValueError("integer", text, line, col)
        return Literal(LiteralKind.INTEGER, value)
    if rule is Rule.FLOAT:
        number = _parse_float(text)
        if number is None:
            raise InvalidValueError("float", text, line, col)
        return Literal(LiteralKind.FLOAT, number)
    if rule is Rule.BOOLEAN:
        if text not in ("true", "false"):
            raise InvalidValueError("boolean", text, line, col)
        return Literal(LiteralKind.BOOLEAN, text == "true")
    if rule is Rule.IDENT:
        return Literal(LiteralKind.IDENTIFIER, text)
    raise UnexpectedRuleError("a literal value", rule, line, col)


def extract_comment_content(pair: Pair) -> str:
    """Return the text of a comment without its markers and surrounding space."""
    text = pair.text
    if text.startswith("///"):
        return text[3:].strip()
    if text.startswith("//"):
        return text[2:].strip()
    if text.startswith("/*"):
        body = text[2:]
        while body.endswith("*/"):
            body = body[:-2]
        return body.strip()
    return text.strip()


def parse_metadata(pairs: Iterable[Pair]) -> tuple[list[Metadata], list[Pair]]:
    """Consume leading doc comments and annotations.

    Returns the metadata found and the pairs that follow it.
    """
    remaining = list(pairs)
    metadata: list[Metadata] = []
    consumed = 0
    for pair in remaining:
        if pair.rule is Rule.doc_comment:
            metadata.append(DocComment(extract_comment_content(pair)))
        elif pair.rule is Rule.annotation:
            metadata.append(parse_annotation(pair))
        else:
            break
        consumed += 1
    return metadata, remaining[consumed:]


def parse_annotation(pair: Pair) -> Annotation:
    """Build an annotation with its name and key/value parameters."""
    line, col = pair.line_col()
    children = iter(pair)
    name_pair = next(children, None)
    if name_pair is None:
        raise MissingElementError(Rule.annotation, "name", line, col)

    params: list[AnnotationParam] = []
    params_list = next(children, None)
    if params_list is not None:
        for param in params_list:
            if param.rule is not Rule.annotation_param:
                continue
            p_line, p_col = param.line_col()
            parts = iter(param)
            key_pair = next(parts, None)
            if key_pair is None:
                raise MissingElementError(Rule.annotation_param, "key", p_line, p_col)
            value_pair = next(parts, None)
            if value_pair is None:
                raise MissingElementError(Rule.annotation_param, "value", p_line, p_col)
            params.append(AnnotationParam(key_pair.text, parse_literal(value_pair)))
    return Annotation(name=name_pair.text, params=params)


def parse_cardinality(pair: Pair) -> Cardinality:
    """Map ``?`` and ``[]`` to their cardinality."""
    if pair.text == "?":
        return Cardinality.OPTIONAL
    if pair.text == "[]":
        return Cardinality.ARRAY
    line, col = pair.line_col()
    raise InvalidValueError("cardinality", pair.text, line, col)


def parse_type_with_cardinality(pair: Pair) -> TypeWithCardinality:
    """Build a type reference together with its optional cardinality."""
    line, col = pair.line_col()
    children = iter(pair)
    type_pair = next(children, None)
    if type_pair is None:
        raise MissingElementError(Rule.type_with_cardinality, "type_name", line, col)
    base_type = parse_type_name(type_pair)

    cardinality = None
    card_pair = next(children, None)
    if card_pair is not None:
        if card_pair.rule is not Rule.cardinality:
            c_line, c_col = card_pair.line_col()
            raise UnexpectedRuleError("cardinality", card_pair.rule, c_line, c_col)
        cardinality = parse_cardinality(card_pair)
    return TypeWithCardinality(base_type=base_type, cardinality=cardinality)


def parse_type_name(pair: Pair) -> TypeName:
    """Build a named path, a basic type or an anonymous enum."""
    expected = "path, basic_type or anonymous_enum_def"
    inner = _require_first(pair, Rule.type_name, expected)
    line, col = inner.line_col()

    if inner.rule is Rule.path:
        return TypePath(parse_path(inner))
    if inner.rule is Rule.basic_type:
        try:
            return BasicType(inner.text)
        except ValueError:
            raise InvalidValueError("basic_type", inner.text, line, col) from None
    if inner.rule is Rule.anonymous_enum_def:
        return parse_enum(inner)
    raise UnexpectedRuleError(expected, inner.rule, line, col)


def parse_constraint(pair: Pair) -> Constraint:
    """Build one field constraint."""
    inner = _require_first(pair, Rule.constraint, "constraint type")
    line, col = inner.line_col()
    rule = inner.rule

    if rule is Rule.primary_key:
        return PrimaryKey()
    if rule is Rule.unique:
        return Unique()
    if rule is Rule.max_length:
        value_pair = inner.first()
        if value_pair is None:
            raise MissingElementError(Rule.max_length, "integer value", line, col)
        length = _parse_int(value_pair.text, 0, U32_MAX)
        if length is None:
            raise InvalidValueError("max_length", value_pair.text, line, col)
        return MaxLength(length)
    if rule is Rule.default_val:
        value_pair = inner.first()
        if value_pair is None:
            raise MissingElementError(Rule.default_val, "literal value", line, col)
        return Default(parse_literal(value_pair))
    if rule is Rule.range_val:
        values = iter(inner)
        low = next(values, None)
        if low is None:
            raise MissingElementError(Rule.range_val, "first value", line, col)
        low_literal = parse_literal(low)
        high = next(values, None)
        if high is None:
            raise MissingElementError(Rule.range_val, "second value", line, col)
        return Range(low_literal, parse_literal(high))
    if rule is Rule.regex_val:
        value_pair = inner.first()
        if value_pair is None:
            raise MissingElementError(Rule.regex_val, "string literal", line, col)
        return Regex(_strip_quotes(value_pair.text))
    if rule is Rule.foreign_key_val:
        parts = iter(inner)
        path_pair = next(parts, None)
        if path_pair is None:
            raise MissingElementError(Rule.foreign_key_val, "path", line, col)
        alias_pair = next(parts, None)
        alias = alias_pair.text if alias_pair is not None else None
        return ForeignKey(parse_path(path_pair), alias)
    raise UnexpectedRuleError("a constraint type", rule, line, col)


def parse_enum_variant(pair: Pair) -> EnumVariant:
    """Build an enum variant with its metadata and optional explicit value."""
    line, col = pair.line_col()
    metadata, rest = parse_metadata(pair)
    if not rest:
        raise MissingElementError(Rule.enum_variant, "name", line, col)
    name = rest[0].text

    value = None
    if len(rest) > 1 and rest[1].rule is Rule.INTEGER:
        text = rest[1].text
        value = _parse_int(text, I64_MIN, I64_MAX)
        if value is None:
            raise InvalidValueError("enum variant value", text, line, col)
    return EnumVariant(name=name, value=value, metadata=metadata)


def parse_enum(pair: Pair) -> EnumDefinition:
    """Build a named or anonymous enum; metadata is left to the caller."""
    children = list(pair)
    name = None
    if children and children[0].rule is Rule.IDENT:
        name = children.pop(0).text
    variants = [
        parse_enum_variant(child) for child in children if child.rule is Rule.enum_variant
    ]
    return EnumDefinition(name=name, variants=variants)