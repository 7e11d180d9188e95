"""Parse-tree nodes produced by the schema grammar and consumed by the AST builder."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator


class Rule(Enum):
    """Grammar rules that can label a parse-tree node."""

    main = auto()
    toplevel_item = auto()
    file_import = auto()
    definition = auto()
    doc_comment = auto()
    namespace = auto()
    namespace_body_item = auto()
    namespace_import = auto()
    import_all = auto()
    table = auto()
    table_member = auto()
    annotation = auto()
    annotation_params = auto()
    annotation_param = auto()
    field_definition = auto()
    regular_field = auto()
    inline_embed_field = auto()
    inline_enum_field = auto()
    type_with_cardinality = auto()
    type_name = auto()
    cardinality = auto()
    path = auto()
    basic_type = auto()
    anonymous_enum_def = auto()
    enum_def = auto()
    enum_variant = auto()
    embed_def = auto()
    constraint = auto()
    primary_key = auto()
    unique = auto()
    max_length = auto()
    default_val = auto()
    range_val = auto()
    regex_val = auto()
    foreign_key_val = auto()
    field_number = auto()
    literal = auto()
    IDENT = auto()
    STRING_LITERAL = auto()
    INTEGER = auto()
    FLOAT = auto()
    BOOLEAN = auto()
    EOI = auto()


@dataclass
class Pair:
    """A matched rule: its text, its position and the rules matched inside it."""

    rule: Rule
    text: str = ""
    children: list[Pair] = field(default_factory=list)
    line: int = 1
    col: int = 1

    def line_col(self) -> tuple[int, int]:
        """Return the 1-based line and column where the match starts."""
        return self.line, self.col

    def first(self) -> Pair | None:
        """Return the first inner pair, or None when there is none."""
        return self.children[0] if self.children else None

    def __iter__(self) -> Iterator[Pair]:
        return iter(self.children)