"""Abstract Syntax Tree (AST) definitions for DNCL.

Every node records the ``[start, end)`` character range of the source it
was parsed from in ``span``. That range is the only link between a runtime
error and the program text, so synthesized nodes use ``SystemLiteral``
with whatever range best describes them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

Span = Tuple[int, int]


@dataclass(frozen=True)
class Node:
    """Base class for all AST nodes."""
    span: Span

    @property
    def start(self) -> int:
        return self.span[0]

    @property
    def end(self) -> int:
        return self.span[1]


# Literals

@dataclass(frozen=True)
class IntLiteral(Node):
    value: int


@dataclass(frozen=True)
class StringLiteral(Node):
    value: str


@dataclass(frozen=True)
class ArrayLiteral(Node):
    elements: List[Node]


@dataclass(frozen=True)
class SystemLiteral(Node):
    text: str


# Expressions

@dataclass(frozen=True)
class Identifier(Node):
    name: str


@dataclass(frozen=True)
class UnaryExpression(Node):
    op: str
    operand: Node


@dataclass(frozen=True)
class BinaryExpression(Node):
    op: str
    left: Node
    right: Node


@dataclass(frozen=True)
class IndexExpression(Node):
    target: Node
    index: Node


@dataclass(frozen=True)
class CallExpression(Node):
    function: Node
    arguments: List[Node]


@dataclass(frozen=True)
class FunctionLiteral(Node):
    params: List[str]
    body: 'Block'


@dataclass(frozen=True)
class SystemCommandExpression(Node):
    command: str  # text between 【 and 】


# Statements

@dataclass(frozen=True)
class Block(Node):
    statements: List[Node]


@dataclass(frozen=True)
class AssignStatement(Node):
    target: Node  # Identifier or IndexExpression
    value: Node


@dataclass(frozen=True)
class IfStatement(Node):
    condition: Node
    then_block: Block
    else_block: Optional[Block]


@dataclass(frozen=True)
class ForStatement(Node):
    variable: Identifier
    start_value: Node
    end_value: Node
    step: Node
    ascending: bool
    body: Block


@dataclass(frozen=True)
class WhileStatement(Node):
    condition: Node
    body: Block
    until: bool = False  # post-test loop that stops once condition holds


@dataclass(frozen=True)
class FunctionStatement(Node):
    name: str
    function: FunctionLiteral


@dataclass(frozen=True)
class ReturnStatement(Node):
    value: Node


@dataclass(frozen=True)
class ExpressionStatement(Node):
    expression: Node


@dataclass(frozen=True)
class Program(Node):
    statements: List[Node]
