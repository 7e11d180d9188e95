# polygen

`polygen` is the front end of a code generator driven by a small schema
language. Schemas describe namespaces, tables, embedded structures, enums,
fields with cardinalities (`?` for optional, `[]` for arrays) and field
constraints such as `primary_key`, `unique`, `max_length`, `default`,
`range`, `regex` and `foreign_key`, together with doc comments and
annotations.

The package takes a schema from its parse tree to a representation that
templates can render directly.

## Pipeline

1. **Parse tree**: `polygen.parse_tree` defines the grammar `Rule` kinds
   and the `Pair` node: a matched span of source text (`text`) with its
   `children`, its `line` and `col`, `Pair.line_col()` and `Pair.first()`
   (the first child, or `None`). Iterating over a `Pair` yields its children.
2. **AST**: `polygen.ast_parser.build_ast_from_pairs(main_pair, path)`
   turns the tree of one schema file into an `AstRoot` holding the file's
   path, its file imports and its definitions. The parser functions for
   definitions, namespaces, namespace imports, tables, table members, fields
   and embeds are in `polygen.ast_parser`; the smaller building blocks
   (paths, literals, comments, metadata, annotations, cardinalities,
   constraints, type names, enum variants and enums) are in
   `polygen.ast_elements`. The node classes are in `polygen.ast_model`.
   Malformed trees raise a subclass of `polygen.error.AstBuildError`:
   `InvalidValueError`, `UnexpectedRuleError` or `MissingElementError`, each
   carrying the line and column involved.
3. **Validation**: `polygen.validation.validate_ast(definitions)` collects
   the fully qualified name of every table, embed, inline embed field and
   named enum, then checks that every type path a field refers to can be
   resolved, either as written or relative to the enclosing scope, walking
   outwards one level at a time. It raises `DuplicateDefinitionError` for a
   name defined twice and `TypeNotFoundError` for a reference that does not
   resolve; both derive from `polygen.error.ValidationError`.
4. **IR**: `polygen.ir_builder.build_ir(asts)` produces a
   `polygen.ir_model.SchemaContext`: one `FileDef` per schema file (its
   `path` is the file name), each with its namespaces (items outside any
   namespace go into a leading namespace with an empty name), `StructDef`s
   with their header comments and annotations, fields, embedded structs and
   inline enums, and `EnumDef`s whose members are numbered sequentially,
   continuing from any explicitly assigned value. Comments appear in the IR
   as plain strings.

## Type strings in the IR

Field types in the IR are plain strings that templates interpret:

| Schema        | IR field type     |
|---------------|-------------------|
| `u32`         | `u32`             |
| `u32?`        | `Option<u32>`     |
| `game.Item[]` | `List<game.Item>` |

Inline embeds become a nested struct named after the field in PascalCase
(see `polygen.ir_builder.to_pascal_case`); inline enums declared on a
field's type are named `<Field>_Enum`, and inline enum fields
`<Field>__Enum`.

Constraints that map onto attributes are carried on `FieldDef.attributes`:
`primary_key` becomes `Key`, `unique` becomes `Index(IsUnique = true)` and
`max_length(n)` becomes `MaxLength(n)`. Other constraints stay in the AST
only.

## Example

```python
from polygen.ast_parser import build_ast_from_pairs
from polygen.ir_builder import build_ir
from polygen.parse_tree import Pair, Rule
from polygen.validation import validate_ast

field = Pair(Rule.table_member, children=[
    Pair(Rule.field_definition, children=[
        Pair(Rule.regular_field, children=[
            Pair(Rule.IDENT, "name"),
            Pair(Rule.type_with_cardinality, children=[
                Pair(Rule.type_name, children=[Pair(Rule.basic_type, "string")]),
            ]),
        ]),
    ]),
])
table = Pair(Rule.table, children=[Pair(Rule.IDENT, "Player"), field])
main = Pair(Rule.main, children=[
    Pair(Rule.toplevel_item, children=[Pair(Rule.definition, children=[table])]),
    Pair(Rule.EOI),
])

asts = [build_ast_from_pairs(main, "game.poly")]
validate_ast(d for ast in asts for d in ast.definitions)
context = build_ir(asts)

for file_def in context.files:
    for namespace in file_def.namespaces:
        print(file_def.path, namespace.name or "<global>")
```

## What the package does not do

- It does not read schema text: there is no grammar or tokenizer here, so
  the `Pair` tree must be produced by the caller.
- It does not load schema files from disk or follow their file imports;
  `AstRoot.file_imports` only records them.
- It does not render templates or write generated code; it stops at the
  `SchemaContext`.
- It has no command-line program.

The package has no runtime dependencies beyond the Python standard library
and supports Python 3.10 and later.