from pathlib import Path

import pytest

from polygen.ast_model import (
    Annotation,
    AnnotationParam as AstAnnotationParam,
    AstRoot,
    BasicType,
    Cardinality,
    Comment,
    Default,
    DocComment,
    Embed,
    EnumDefinition,
    EnumVariant,
    ForeignKey,
    InlineEmbedField,
    InlineEnumField,
    Literal,
    LiteralKind,
    MaxLength,
    Namespace,
    PrimaryKey,
    RegularField,
    Table,
    TypePath,
    TypeWithCardinality,
    Unique,
)
from polygen.ir_builder import build_ir, to_pascal_case
from polygen.ir_model import (
    AnnotationDef,
    AnnotationParam,
    EnumDef,
    EnumMember,
    FieldDef,
    NamespaceDef,
    SchemaContext,
    StructDef,
)


def root(*definitions, path="schemas/game.poly"):
    return AstRoot(path=Path(path), definitions=list(definitions))


def basic(name, basic_type, cardinality=None, constraints=()):
    return RegularField(
        name=name,
        field_type=TypeWithCardinality(basic_type, cardinality),
        constraints=list(constraints),
    )


def single_struct(definition):
    context = build_ir([root(definition)])
    (struct,) = context.files[0].namespaces[0].items
    return struct


@pytest.mark.parametrize(
    "text, expected",
    [("player_name", "PlayerName"), ("HTTPServer", "HttpServer"), ("stats", "Stats")],
)
def test_to_pascal_case(text, expected):
    assert to_pascal_case(text) == expected


def test_to_pascal_case_of_empty_text():
    assert to_pascal_case("") == ""


def test_no_asts_gives_empty_context():
    assert build_ir([]) == SchemaContext()


def test_file_path_is_the_file_name():
    context = build_ir([root(Table("A")), root(Table("B"), path="other/items.poly")])
    assert [f.path for f in context.files] == ["game.poly", "items.poly"]


def test_global_items_form_the_first_namespace():
    context = build_ir([root(Namespace(["game", "common"], definitions=[Table("A")]), Table("B"))])
    namespaces = context.files[0].namespaces
    assert [ns.name for ns in namespaces] == ["", "game.common"]
    assert [item.name for item in namespaces[0].items] == ["B"]
    assert [item.name for item in namespaces[1].items] == ["A"]


def test_no_global_namespace_without_global_items():
    context = build_ir([root(Namespace(["game"], definitions=[Table("A")]))])
    assert [ns.name for ns in context.files[0].namespaces] == ["game"]


def test_nested_namespaces_and_comments():
    inner = Namespace(["inner"], definitions=[Comment("about"), Table("T")])
    outer = Namespace(["game"], definitions=[Annotation("skip"), inner])
    (namespace,) = build_ir([root(outer)]).files[0].namespaces
    (nested,) = namespace.items
    assert isinstance(nested, NamespaceDef)
    assert nested.name == "inner"
    assert nested.items[0] == "about"
    assert nested.items[1].name == "T"


def test_table_header_and_attributes():
    annotation = Annotation(
        "cache", [AstAnnotationParam("strategy", Literal(LiteralKind.IDENTIFIER, "full_load"))]
    )
    table = Table(
        "Player",
        members=[
            basic("id", BasicType.U32, constraints=[PrimaryKey()]),
            basic(
                "name",
                BasicType.STRING,
                constraints=[Unique(), MaxLength(30), Default(Literal(LiteralKind.STRING, "x"))],
            ),
            RegularField(
                "owner",
                TypeWithCardinality(TypePath(["User"])),
                constraints=[ForeignKey(["User", "id"], "owner")],
            ),
        ],
        metadata=[DocComment("doc"), annotation],
    )
    struct = single_struct(table)
    assert struct.header == ["doc", AnnotationDef("cache", [AnnotationParam("strategy", "full_load")])]
    assert struct.is_embed is False
    assert struct.items == [
        FieldDef("id", "u32", ["Key"]),
        FieldDef("name", "string", ["Index(IsUnique = true)", "MaxLength(30)"]),
        FieldDef("owner", "User", []),
    ]


def test_cardinality_formatting():
    table = Table(
        "T",
        members=[
            basic("a", BasicType.U32, Cardinality.OPTIONAL),
            RegularField("b", TypeWithCardinality(TypePath(["Position"]), Cardinality.ARRAY)),
            RegularField("c", TypeWithCardinality(TypePath(["game", "common", "Position"]))),
        ],
    )
    struct = single_struct(table)
    assert [f.field_type for f in struct.items] == [
        "Option<u32>",
        "List<Position>",
        "game.common.Position",
    ]


def test_field_metadata_precedes_field():
    field = basic("hp", BasicType.I32)
    field.metadata = [DocComment("note"), Annotation("tag")]
    struct = single_struct(Table("T", members=[field, Comment("tail")]))
    assert struct.items == [
        "note",
        AnnotationDef("tag", []),
        FieldDef("hp", "i32", []),
        "tail",
    ]


def test_inline_embed_field_becomes_nested_struct():
    inline = InlineEmbedField(
        "stats",
        members=[basic("hp", BasicType.U32)],
        cardinality=Cardinality.ARRAY,
        metadata=[DocComment("d")],
    )
    struct = single_struct(Table("Player", members=[inline]))
    assert struct.items == ["d", FieldDef("stats", "List<Stats>", [])]
    (nested,) = struct.embedded_structs
    assert nested.name == "Stats"
    assert nested.is_embed is True
    assert nested.header == ["d"]
    assert nested.items == [FieldDef("hp", "u32", [])]


def test_inline_enum_field():
    inline = InlineEnumField("status", variants=[EnumVariant("On"), EnumVariant("Off")])
    struct = single_struct(Table("T", members=[inline]))
    (field,) = struct.items
    (enum,) = struct.inline_enums
    assert field.field_type == "Status__Enum"
    assert enum.name == field.field_type
    assert enum.items == [EnumMember("On", 0), EnumMember("Off", 1)]


def test_regular_field_with_anonymous_enum_type():
    anon = EnumDefinition(None, [EnumVariant("A")])
    field = RegularField("status", TypeWithCardinality(anon, Cardinality.OPTIONAL))
    struct = single_struct(Table("T", members=[field]))
    (enum,) = struct.inline_enums
    assert struct.items[0].field_type == f"Option<{enum.name}>"
    assert enum.name == "Status_Enum"


def test_enum_values_count_up_from_zero():
    enum = EnumDefinition("Color", [EnumVariant(n) for n in ["Red", "Green", "Blue"]])
    converted = single_struct(enum)
    assert [m.value for m in converted.items] == list(range(3))
    assert [m.name for m in converted.items] == ["Red", "Green", "Blue"]


def test_explicit_enum_value_resets_counter_without_advancing():
    enum = EnumDefinition(
        "E", [EnumVariant("a"), EnumVariant("b", 5), EnumVariant("c"), EnumVariant("d")]
    )
    converted = single_struct(enum)
    assert [m.value for m in converted.items] == [0, 5, 5, 6]


def test_enum_comments():
    enum = EnumDefinition(
        "E",
        [EnumVariant("a", metadata=[DocComment("first"), Annotation("x"), DocComment("second")])],
        metadata=[DocComment("top"), DocComment("ignored")],
    )
    assert single_struct(enum) == EnumDef("E", ["top", "first", "second", EnumMember("a", 0)])


def test_embeds_and_enums_inside_table():
    table = Table("T", members=[Embed("Inner", members=[basic("x", BasicType.F32)]), EnumDefinition("Kind")])
    struct = single_struct(table)
    assert struct.items == []
    assert struct.embedded_structs == [
        StructDef("Inner", items=[FieldDef("x", "f32", [])], is_embed=True)
    ]
    assert struct.inline_enums == [EnumDef("Kind", [])]


def test_top_level_embed_is_marked():
    struct = single_struct(Embed("Pos", metadata=[DocComment("p")]))
    assert struct.name == "Pos"
    assert struct.is_embed is True
    assert struct.header == ["p"]


def test_annotation_literal_values_are_stringified():
    annotation = Annotation(
        "a",
        [
            AstAnnotationParam("flag", Literal(LiteralKind.BOOLEAN, True)),
            AstAnnotationParam("count", Literal(LiteralKind.INTEGER, 3)),
        ],
    )
    struct = single_struct(Table("T", metadata=[annotation]))
    assert [p.value for p in struct.header[0].params] == ["true", "3"]


def test_unnamed_table_is_rejected():
    with pytest.raises(ValueError):
        build_ir([root(Table(None))])