"""The intermediate representation handed to code templates."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass
class AnnotationParam:
    key: str
    value: str


@dataclass
class AnnotationDef:
    name: str
    params: list[AnnotationParam] = field(default_factory=list)


@dataclass
class FieldDef:
    """A struct field; ``field_type`` is a generic string such as ``List<Position>``."""

    name: str
    field_type: str
    attributes: list[str] = field(default_factory=list)


@dataclass
class EnumMember:
    name: str
    value: int | None = None


@dataclass
class EnumDef:
    """An enum; items are members or comment strings in declaration order."""

    name: str
    items: list[EnumItem] = field(default_factory=list)


@dataclass
class StructDef:
    """A struct or class; items are fields, comment strings or annotations."""

    name: str
    header: list[StructItem] = field(default_factory=list)
    items: list[StructItem] = field(default_factory=list)
    is_embed: bool = False
    embedded_structs: list[StructDef] = field(default_factory=list)
    inline_enums: list[EnumDef] = field(default_factory=list)


@dataclass
class NamespaceDef:
    """A namespace; an empty name marks the global namespace."""

    name: str = ""
    items: list[NamespaceItem] = field(default_factory=list)


@dataclass
class FileDef:
    path: str = ""
    namespaces: list[NamespaceDef] = field(default_factory=list)


@dataclass
class SchemaContext:
    """The root object given to the template engine."""

    files: list[FileDef] = field(default_factory=list)


StructItem = Union[FieldDef, str, AnnotationDef]
EnumItem = Union[EnumMember, str]
NamespaceItem = Union[StructDef, EnumDef, str, NamespaceDef]