"""Schema language front end: parse-tree nodes, AST building, validation and template-ready IR."""

__version__ = "0.1.0"

__all__ = [
    "ast_elements",
    "ast_model",
    "ast_parser",
    "error",
    "ir_builder",
    "ir_model",
    "parse_tree",
    "validation",
]