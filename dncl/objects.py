"""Runtime values for DNCL.

Every value produced by the evaluator is a :class:`DnclObject` carrying the
AST node it came from, so any value (errors in particular) can be traced
back to a position in the source. Errors are ordinary values here: a
failing operation returns an ``ErrorVal`` or ``TypeErrorVal`` instead of
raising, and callers inspect or print it like anything else.

``ast_node`` is left out of equality, so ``IntVal(3, a) == IntVal(3, b)``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Optional, Set, Tuple

from .ast import Block, Node

if TYPE_CHECKING:
    from .environment import Environment


class DnclObject:
    """Base class of all runtime values."""
    ast_node: Node


@dataclass
class IntVal(DnclObject):
    value: int
    ast_node: Node = field(compare=False, repr=False)


@dataclass
class FloatVal(DnclObject):
    value: float
    ast_node: Node = field(compare=False, repr=False)


@dataclass
class StrVal(DnclObject):
    value: str
    ast_node: Node = field(compare=False, repr=False)


@dataclass
class BoolVal(DnclObject):
    value: bool
    ast_node: Node = field(compare=False, repr=False)


@dataclass
class ArrayVal(DnclObject):
    """A mutable sequence; assignment shares it by reference."""
    value: List[DnclObject]
    ast_node: Node = field(compare=False, repr=False)


@dataclass
class NullVal(DnclObject):
    ast_node: Node = field(compare=False, repr=False)


@dataclass(eq=False)
class FunctionVal(DnclObject):
    """A closure over the environment it was defined in.

    ``env`` is the defining scope itself, not a copy, so later changes to
    bindings visible there are seen by the function body.
    """
    name: str
    params: List[str]
    body: Block
    env: 'Environment' = field(repr=False)
    ast_node: Node = field(repr=False)


@dataclass
class ErrorVal(DnclObject):
    """A runtime error value.

    Errors flow through evaluation like any other value; an error operand
    turns the enclosing expression into the same error.
    """
    message: str
    ast_node: Node = field(compare=False, repr=False)


@dataclass
class TypeErrorVal(ErrorVal):
    """Operand types that no operation rule covers."""


@dataclass
class ReturnVal(DnclObject):
    """Signals early exit from a function call with ``value``."""
    value: DnclObject
    ast_node: Node = field(compare=False, repr=False)


def type_name(value: Any) -> str:
    """Return the DNCL type name of a runtime value."""
    if isinstance(value, IntVal):
        return '整数'
    if isinstance(value, FloatVal):
        return '実数'
    if isinstance(value, StrVal):
        return '文字列'
    if isinstance(value, BoolVal):
        return '真偽値'
    if isinstance(value, ArrayVal):
        return '配列'
    if isinstance(value, NullVal):
        return 'なし'
    if isinstance(value, FunctionVal):
        return '関数'
    if isinstance(value, TypeErrorVal):
        return '型エラー'
    if isinstance(value, ErrorVal):
        return 'エラー'
    if isinstance(value, ReturnVal):
        return type_name(value.value)
    return type(value).__name__


def to_string(value: Any, active: Optional[Set[int]] = None) -> str:
    """Convert a DNCL value to the text ``表示する`` shows for it.

    An array that contains itself is shown as ``[...]`` where it recurs.
    """
    if isinstance(value, (IntVal, StrVal)):
        return str(value.value)
    if isinstance(value, FloatVal):
        return repr(value.value)
    if isinstance(value, BoolVal):
        return '真' if value.value else '偽'
    if isinstance(value, ArrayVal):
        if active is None:
            active = set()
        if id(value) in active:
            return '[...]'
        # only arrays on the current path count, shared siblings print in full
        active.add(id(value))
        text = '[' + ', '.join(to_string(item, active) for item in value.value) + ']'
        active.discard(id(value))
        return text
    if isinstance(value, NullVal):
        return 'なし'
    if isinstance(value, FunctionVal):
        return f"<関数 {value.name}({', '.join(value.params)})>"
    if isinstance(value, ErrorVal):
        return f"<{type_name(value)}: {value.message}>"
    if isinstance(value, ReturnVal):
        return to_string(value.value, active)
    return str(value)


def values_equal(
    left: DnclObject, right: DnclObject, seen: Optional[Set[Tuple[int, int]]] = None
) -> bool:
    """Structural equality used by ``==``; values of different types differ.

    Integers and reals compare numerically. A pair of arrays met again while
    comparing self-referencing arrays counts as equal.
    """
    numeric = (IntVal, FloatVal)
    if isinstance(left, numeric) and isinstance(right, numeric):
        return left.value == right.value
    if type(left) is not type(right):
        return False
    if isinstance(left, ArrayVal):
        if seen is None:
            seen = set()
        pair = (id(left), id(right))
        if pair in seen:
            return True
        seen.add(pair)
        return len(left.value) == len(right.value) and all(
            values_equal(a, b, seen) for a, b in zip(left.value, right.value)
        )
    if isinstance(left, NullVal):
        return True
    if isinstance(left, FunctionVal):
        return left is right
    if isinstance(left, ErrorVal):
        return left.message == right.message
    return left.value == right.value
