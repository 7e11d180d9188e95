"""Errors raised while building and validating schema ASTs."""

from __future__ import annotations

from polygen.parse_tree import Rule


class AstBuildError(Exception):
    """The parse tree could not be turned into an AST."""


class InvalidValueError(AstBuildError):
    """A token held a value that could not be interpreted."""

    def __init__(self, element: str, value: str, line: int, col: int) -> None:
        self.element = element
        self.value = value
        self.line = line
        self.col = col
        super().__init__(f"Invalid value '{value}' for {element} at {line}:{col}")


class UnexpectedRuleError(AstBuildError):
    """A rule turned up where a different one was expected."""

    def __init__(self, expected: str, found: Rule, line: int, col: int) -> None:
        self.expected = expected
        self.found = found
        self.line = line
        self.col = col
        super().__init__(
            f"Unexpected rule '{found.name}' at {line}:{col}, expected {expected}"
        )


class MissingElementError(AstBuildError):
    """A rule lacked an element it must contain."""

    def __init__(self, rule: Rule, element: str, line: int, col: int) -> None:
        self.rule = rule
        self.element = element
        self.line = line
        self.col = col
        super().__init__(
            f"Missing element '{element}' for rule '{rule.name}' at {line}:{col}"
        )


class ValidationError(Exception):
    """The AST is well formed but not semantically valid."""


class TypeNotFoundError(ValidationError):
    """A referenced type is not defined anywhere in the schema."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"Type not found: '{type_name}'")


class DuplicateDefinitionError(ValidationError):
    """A type with the same fully-qualified name is defined twice."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"Duplicate definition for type: '{type_name}'")