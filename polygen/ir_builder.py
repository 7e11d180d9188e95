"""Turn schema ASTs into the template-friendly intermediate representation."""

from __future__ import annotations

from itertools import groupby, pairwise
from typing import Iterable, Iterator, Sequence

from polygen import ast_model as ast
from polygen.ir_model import (
    AnnotationDef,
    AnnotationParam,
    EnumDef,
    EnumItem,
    EnumMember,
    FieldDef,
    FileDef,
    NamespaceDef,
    NamespaceItem,
    SchemaContext,
    StructDef,
    StructItem,
)


def _split_word(word: str) -> Iterator[str]:
    """Split an alphanumeric run at lower-to-upper and acronym boundaries."""
    start = 0
    mode: str | None = None
    for index, (current, following) in enumerate(pairwise(word)):
        if current.islower():
            next_mode = "lower"
        elif current.isupper():
            next_mode = "upper"
        else:
            next_mode = mode
        if next_mode == "lower" and following.isupper():
            yield word[start : index + 1]
            start = index + 1
            mode = None
        elif mode == "upper" and current.isupper() and following.islower():
            yield word[start:index]
            start = index
            mode = None
        else:
            mode = next_mode
    yield word[start:]


def to_pascal_case(text: str) -> str:
    """Convert an identifier such as ``player_name`` to ``PlayerName``."""
    words = (
        word
        for is_alnum, chars in groupby(text, key=str.isalnum)
        if is_alnum
        for word in _split_word("".join(chars))
    )
    return "".join(word[0].upper() + word[1:].lower() for word in words)


def _required(name: str | None, what: str) -> str:
    if name is None:
        raise ValueError(f"{what} must have a name")
    return name


def build_ir(asts: Iterable[ast.AstRoot]) -> SchemaContext:
    """Build the schema context from the ASTs of all parsed files."""
    context = SchemaContext()
    for root in asts:
        file_name = root.path.name
        if file_name == "..":
            file_name = ""

        namespaces: list[NamespaceDef] = []
        global_items: list[NamespaceItem] = []
        for definition in root.definitions:
            if isinstance(definition, ast.Namespace):
                namespaces.append(_convert_namespace(definition))
            else:
                _add_definition(global_items, definition)

        if global_items:
            namespaces.insert(0, NamespaceDef(name="", items=global_items))

        context.files.append(FileDef(path=file_name, namespaces=namespaces))
    return context


def _convert_namespace(namespace: ast.Namespace) -> NamespaceDef:
    items: list[NamespaceItem] = []
    for definition in namespace.definitions:
        _add_definition(items, definition)
    return NamespaceDef(name=".".join(namespace.path), items=items)


def _add_definition(items: list[NamespaceItem], definition: ast.Definition) -> None:
    if isinstance(definition, ast.Namespace):
        items.append(_convert_namespace(definition))
    elif isinstance(definition, ast.Table):
        items.append(
            _convert_struct(
                _required(definition.name, "Table"),
                definition.members,
                definition.metadata,
            )
        )
    elif isinstance(definition, ast.EnumDefinition):
        items.append(_convert_enum(definition))
    elif isinstance(definition, ast.Embed):
        items.append(_convert_embed(definition))
    elif isinstance(definition, ast.Comment):
        items.append(definition.text)
    # Annotations at definition level produce no IR item of their own.


def _metadata_items(metadata: Sequence[ast.Metadata]) -> Iterator[StructItem]:
    for meta in metadata:
        if isinstance(meta, ast.DocComment):
            yield meta.text
        else:
            yield _convert_annotation(meta)


def _convert_struct(
    name: str,
    members: Sequence[ast.TableMember],
    metadata: Sequence[ast.Metadata],
    is_embed: bool = False,
) -> StructDef:
    struct = StructDef(name=name, header=list(_metadata_items(metadata)), is_embed=is_embed)
    for member in members:
        if isinstance(member, (ast.RegularField, ast.InlineEmbedField, ast.InlineEnumField)):
            struct.items.extend(_metadata_items(member.metadata))
            field_def, nested_structs, nested_enums = _convert_field(member)
            struct.items.append(field_def)
            struct.embedded_structs.extend(nested_structs)
            struct.inline_enums.extend(nested_enums)
        elif isinstance(member, ast.Embed):
            struct.embedded_structs.append(_convert_embed(member))
        elif isinstance(member, ast.EnumDefinition):
            struct.inline_enums.append(_convert_enum(member))
        elif isinstance(member, ast.Comment):
            struct.items.append(member.text)
    return struct


def _convert_embed(embed: ast.Embed) -> StructDef:
    return _convert_struct(
        _required(embed.name, "Embed"), embed.members, embed.metadata, is_embed=True
    )


def _convert_field(
    field: ast.FieldDefinition,
) -> tuple[FieldDef, list[StructDef], list[EnumDef]]:
    if isinstance(field, ast.RegularField):
        name = _required(field.name, "Regular field")
        attributes = _constraints_to_attributes(field.constraints)
        base = field.field_type.base_type
        if isinstance(base, ast.EnumDefinition):
            enum_name = f"{to_pascal_case(name)}_Enum"
            field_type = _format_cardinality(enum_name, field.field_type.cardinality)
            enums = [_convert_enum(base, enum_name)]
        else:
            field_type = _format_type(field.field_type)
            enums = []
        return FieldDef(name, field_type, attributes), [], enums

    if isinstance(field, ast.InlineEmbedField):
        name = _required(field.name, "Inline embed field")
        struct_name = to_pascal_case(name)
        nested = _convert_struct(struct_name, field.members, field.metadata, is_embed=True)
        field_type = _format_cardinality(struct_name, field.cardinality)
        return FieldDef(name, field_type, []), [nested], []

    name = _required(field.name, "Inline enum")
    enum_name = f"{to_pascal_case(name)}__Enum"
    enum_ast = ast.EnumDefinition(
        name=field.name, variants=list(field.variants), metadata=list(field.metadata)
    )
    field_type = _format_cardinality(enum_name, field.cardinality)
    return FieldDef(name, field_type, []), [], [_convert_enum(enum_ast, enum_name)]


def _constraints_to_attributes(constraints: Sequence[ast.Constraint]) -> list[str]:
    attributes = []
    for constraint in constraints:
        if isinstance(constraint, ast.PrimaryKey):
            attributes.append("Key")
        elif isinstance(constraint, ast.Unique):
            attributes.append("Index(IsUnique = true)")
        elif isinstance(constraint, ast.MaxLength):
            attributes.append(f"MaxLength({constraint.length})")
    return attributes


def _convert_enum(enum: ast.EnumDefinition, name_override: str | None = None) -> EnumDef:
    items: list[EnumItem] = []
    doc = next((m.text for m in enum.metadata if isinstance(m, ast.DocComment)), None)
    if doc is not None:
        items.append(doc)

    counter = 0
    for variant in enum.variants:
        items.extend(m.text for m in variant.metadata if isinstance(m, ast.DocComment))
        if variant.value is not None:
            counter = variant.value
            value = variant.value
        else:
            value = counter
            counter += 1
        items.append(EnumMember(name=_required(variant.name, "Enum variant"), value=value))

    name = name_override if name_override is not None else _required(enum.name, "Named enum")
    return EnumDef(name=name, items=items)


def _format_type(type_with_cardinality: ast.TypeWithCardinality) -> str:
    base = type_with_cardinality.base_type
    if isinstance(base, ast.TypePath):
        text = ".".join(base.parts)
    elif isinstance(base, ast.BasicType):
        text = base.value
    else:
        text = "__ANONYMOUS_ENUM__"
    return _format_cardinality(text, type_with_cardinality.cardinality)


def _format_cardinality(base: str, cardinality: ast.Cardinality | None) -> str:
    if cardinality is ast.Cardinality.OPTIONAL:
        return f"Option<{base}>"
    if cardinality is ast.Cardinality.ARRAY:
        return f"List<{base}>"
    return base


def _convert_annotation(annotation: ast.Annotation) -> AnnotationDef:
    return AnnotationDef(
        name=_required(annotation.name, "Annotation"),
        params=[AnnotationParam(p.key, str(p.value)) for p in annotation.params],
    )