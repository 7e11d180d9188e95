import pytest

from polygen.ast_model import (
    BasicType,
    Cardinality,
    Comment,
    Embed,
    EnumDefinition,
    EnumVariant,
    InlineEmbedField,
    InlineEnumField,
    Namespace,
    RegularField,
    Table,
    TypePath,
    TypeWithCardinality,
)
from polygen.error import DuplicateDefinitionError, TypeNotFoundError, ValidationError
from polygen.validation import validate_ast


def table(name, *members):
    return Table(name=name, members=list(members))


def ref(field_name, *parts):
    return RegularField(
        name=field_name, field_type=TypeWithCardinality(TypePath(list(parts)))
    )


def ns(path, *definitions):
    return Namespace(path=path.split("."), definitions=list(definitions))


def resolution_schema(field):
    return [
        ns("game.common", table("Position", Embed("Vec"))),
        ns("game.char", table("Player", field)),
    ]


def test_duplicate_table_in_namespace():
    defs = [ns("game", table("Player"), table("Player"))]
    with pytest.raises(DuplicateDefinitionError) as excinfo:
        validate_ast(defs)
    assert excinfo.value.type_name == "game.Player"


def test_duplicate_across_namespace_blocks():
    defs = [ns("game", table("Player")), ns("game", table("Player"))]
    with pytest.raises(DuplicateDefinitionError) as excinfo:
        validate_ast(defs)
    assert excinfo.value.type_name == "game.Player"


def test_duplicate_is_a_validation_error():
    defs = [table("Player"), EnumDefinition("Player")]
    with pytest.raises(ValidationError, match="Duplicate definition for type: 'Player'"):
        validate_ast(defs)


def test_embed_and_enum_inside_table_clash():
    defs = [ns("game", table("Player", Embed("Stats"), EnumDefinition("Stats")))]
    with pytest.raises(DuplicateDefinitionError) as excinfo:
        validate_ast(defs)
    assert excinfo.value.type_name == "game.Player.Stats"


def test_inline_embed_clashes_with_named_embed():
    defs = [table("Player", InlineEmbedField("info"), Embed("info"))]
    with pytest.raises(DuplicateDefinitionError) as excinfo:
        validate_ast(defs)
    assert excinfo.value.type_name == "Player.info"


def test_top_level_embed_clashes_with_table():
    defs = [Embed("Pos"), table("Pos")]
    with pytest.raises(DuplicateDefinitionError) as excinfo:
        validate_ast(defs)
    assert excinfo.value.type_name == "Pos"


def test_anonymous_enums_are_not_registered():
    defs = [table("T", EnumDefinition(None), EnumDefinition(None))]
    assert validate_ast(defs) is None


def test_unknown_type_reports_path_as_written():
    defs = [ns("game", table("Player", ref("pos", "game", "Missing")))]
    with pytest.raises(TypeNotFoundError) as excinfo:
        validate_ast(defs)
    assert excinfo.value.type_name == "game.Missing"
    assert str(excinfo.value) == "Type not found: 'game.Missing'"


@pytest.mark.parametrize(
    "parts",
    [
        ("common", "Position"),
        ("game", "common", "Position"),
        ("common", "Position", "Vec"),
        ("Player",),
        ("char", "Player"),
    ],
)
def test_references_resolve_through_enclosing_scopes(parts):
    assert validate_ast(resolution_schema(ref("f", *parts))) is None


@pytest.mark.parametrize(
    "parts",
    [
        ("Position",),
        ("Vec",),
        ("Position", "Vec"),
        ("other", "Position"),
    ],
)
def test_unresolvable_references(parts):
    with pytest.raises(TypeNotFoundError) as excinfo:
        validate_ast(resolution_schema(ref("f", *parts)))
    assert excinfo.value.type_name == ".".join(parts)


def test_scope_lookup_does_not_descend_into_other_tables():
    nested_ok = [ns("game", table("Player", Embed("Stats")), table("Item", ref("s", "Player", "Stats")))]
    assert validate_ast(nested_ok) is None
    nested_bad = [ns("game", table("Player", Embed("Stats")), table("Item", ref("s", "Stats")))]
    with pytest.raises(TypeNotFoundError) as excinfo:
        validate_ast(nested_bad)
    assert excinfo.value.type_name == "Stats"


def test_inline_embed_members_resolve_in_their_own_scope():
    defs = [
        table(
            "Player",
            Embed("Stats"),
            InlineEmbedField("info", members=[Embed("Deep"), ref("d", "Deep"), ref("s", "Stats")]),
        ),
        table("Item", ref("i", "Player", "info"), ref("d", "Player", "info", "Deep")),
    ]
    assert validate_ast(defs) is None


def test_inline_embed_member_with_unknown_type():
    defs = [table("Player", InlineEmbedField("info", members=[ref("x", "Ghost")]))]
    with pytest.raises(TypeNotFoundError) as excinfo:
        validate_ast(defs)
    assert excinfo.value.type_name == "Ghost"


def test_top_level_embed_members_are_checked():
    defs = [Embed("Pos", members=[ref("x", "Nope")])]
    with pytest.raises(TypeNotFoundError) as excinfo:
        validate_ast(defs)
    assert excinfo.value.type_name == "Nope"


def test_basic_types_and_inline_enums_are_not_checked():
    defs = [
        table(
            "T",
            RegularField("a", TypeWithCardinality(BasicType.U32, Cardinality.ARRAY)),
            RegularField("b", TypeWithCardinality(EnumDefinition(None, [EnumVariant("X")]))),
            InlineEnumField("c", variants=[EnumVariant("Y")]),
            Comment("note"),
        )
    ]
    assert validate_ast(defs) is None


def test_duplicates_are_reported_before_missing_types():
    defs = [table("A", ref("x", "Missing")), table("A")]
    with pytest.raises(DuplicateDefinitionError) as excinfo:
        validate_ast(defs)
    assert excinfo.value.type_name == "A"


def test_definitions_split_across_files_can_reference_each_other():
    first_file = [ns("game.common", table("Position"))]
    second_file = [ns("game", table("Player", ref("p", "common", "Position")))]
    assert validate_ast(first_file + second_file) is None
    with pytest.raises(TypeNotFoundError):
        validate_ast(second_file)


def test_table_without_name_is_rejected():
    with pytest.raises(ValueError):
        validate_ast([Table(name=None)])