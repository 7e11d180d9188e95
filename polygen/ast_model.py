"""The abstract syntax tree of a schema file."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Union


class Cardinality(Enum):
    """How many values a field holds beyond exactly one."""

    OPTIONAL = "?"
    ARRAY = "[]"


class BasicType(Enum):
    """Built-in scalar types; the value is the schema keyword."""

    STRING = "string"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    F32 = "f32"
    F64 = "f64"
    BOOL = "bool"
    BYTES = "bytes"


class LiteralKind(Enum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    IDENTIFIER = "identifier"


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


@dataclass(frozen=True)
class Literal:
    """A literal value written in the schema."""

    kind: LiteralKind
    value: str | int | float | bool

    def __str__(self) -> str:
        if self.kind is LiteralKind.BOOLEAN:
            return "true" if self.value else "false"
        if self.kind is LiteralKind.FLOAT:
            return _format_float(float(self.value))
        return str(self.value)


@dataclass
class Comment:
    """A comment kept in the tree so generators can reproduce it."""

    text: str


@dataclass
class DocComment:
    """A doc comment attached to the item that follows it."""

    text: str


@dataclass
class AnnotationParam:
    key: str
    value: Literal


@dataclass
class Annotation:
    """An annotation such as ``@cache(strategy: full_load)``."""

    name: str | None
    params: list[AnnotationParam] = field(default_factory=list)


@dataclass
class TypePath:
    """A reference to a named type, e.g. ``game.common.Position``."""

    parts: list[str]


@dataclass
class EnumVariant:
    name: str | None
    value: int | None = None
    metadata: list[Metadata] = field(default_factory=list)


@dataclass
class EnumDefinition:
    """A named or anonymous enum."""

    name: str | None
    variants: list[EnumVariant] = field(default_factory=list)
    metadata: list[Metadata] = field(default_factory=list)


@dataclass
class TypeWithCardinality:
    base_type: TypeName
    cardinality: Cardinality | None = None


@dataclass(frozen=True)
class PrimaryKey:
    pass


@dataclass(frozen=True)
class Unique:
    pass


@dataclass(frozen=True)
class MaxLength:
    length: int


@dataclass(frozen=True)
class Default:
    value: Literal


@dataclass(frozen=True)
class Range:
    low: Literal
    high: Literal


@dataclass(frozen=True)
class Regex:
    pattern: str


@dataclass
class ForeignKey:
    path: list[str]
    alias: str | None = None


@dataclass
class RegularField:
    name: str | None
    field_type: TypeWithCardinality
    constraints: list[Constraint] = field(default_factory=list)
    field_number: int | None = None
    metadata: list[Metadata] = field(default_factory=list)


@dataclass
class InlineEmbedField:
    name: str | None
    members: list[TableMember] = field(default_factory=list)
    cardinality: Cardinality | None = None
    field_number: int | None = None
    metadata: list[Metadata] = field(default_factory=list)


@dataclass
class InlineEnumField:
    name: str | None
    variants: list[EnumVariant] = field(default_factory=list)
    cardinality: Cardinality | None = None
    field_number: int | None = None
    metadata: list[Metadata] = field(default_factory=list)


@dataclass
class Embed:
    """A named embedded structure."""

    name: str | None
    members: list[TableMember] = field(default_factory=list)
    metadata: list[Metadata] = field(default_factory=list)


@dataclass
class Table:
    name: str | None
    members: list[TableMember] = field(default_factory=list)
    metadata: list[Metadata] = field(default_factory=list)


@dataclass
class NamespaceImport:
    """``import a.b.*;`` (``all`` set) or ``import a.b.Type;``."""

    path: list[str]
    all: bool = False


@dataclass
class Namespace:
    path: list[str]
    imports: list[NamespaceImport] = field(default_factory=list)
    definitions: list[Definition] = field(default_factory=list)


@dataclass
class AstRoot:
    """The whole content of one schema file."""

    path: Path = field(default_factory=Path)
    file_imports: list[str] = field(default_factory=list)
    definitions: list[Definition] = field(default_factory=list)


Metadata = Union[DocComment, Annotation]
TypeName = Union[TypePath, BasicType, EnumDefinition]
Constraint = Union[PrimaryKey, Unique, MaxLength, Default, Range, Regex, ForeignKey]
FieldDefinition = Union[RegularField, InlineEmbedField, InlineEnumField]
TableMember = Union[RegularField, InlineEmbedField, InlineEnumField, Embed, EnumDefinition, Comment]
Definition = Union[Namespace, Table, EnumDefinition, Embed, Comment, Annotation]