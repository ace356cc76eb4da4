import sys

from .basic_io import BasicIO
from dncl.ast import SystemLiteral
from dncl.builtin_function import BuiltInFunction, BuiltinHandler, Input, SystemCommand, SystemCommandHandler
from dncl.environment import Environment
from dncl.errors import DnclFatalError
from dncl.evaluator import RECURSION_LIMIT, Evaluator
from dncl.objects import (
    ArrayVal, DnclObject, ErrorVal, IntVal, NullVal, ReturnVal, StrVal, TypeErrorVal, to_string,
)
from dncl.parser import parse_program
from typing import List, Optional

# stands in for a source node when a built-in is called with no arguments
NO_SOURCE = SystemLiteral((0, 0), '')

ARITY = {
    BuiltInFunction.LENGTH: 1,
    BuiltInFunction.DIFF: 1,
    BuiltInFunction.RETURN: 1,
}


def make_builtin_handler(basic_io: BasicIO, separator: str = ' ') -> BuiltinHandler:
        def std_print(args: List[DnclObject]) -> DnclObject:
            basic_io.write_line(separator.join(to_string(a) for a in args))
            return NullVal(args[0].ast_node if args else NO_SOURCE)

        def std_length(args: List[DnclObject]) -> DnclObject:
            arr = args[0]
            if not isinstance(arr, ArrayVal):
                return TypeErrorVal('要素数 expects an array', arr.ast_node)
            return IntVal(len(arr.value), arr.ast_node)

        def std_diff(args: List[DnclObject]) -> DnclObject:
            s = args[0]
            if not isinstance(s, StrVal) or len(s.value) != 1:
                return TypeErrorVal('差分 expects a single character', s.ast_node)
            if s.value == ' ':
                return IntVal(-1, s.ast_node)
            return IntVal(ord(s.value) - ord('a'), s.ast_node)

        def std_return(args: List[DnclObject]) -> DnclObject:
            return ReturnVal(args[0], args[0].ast_node)

        handlers = {
            BuiltInFunction.PRINT: std_print,
            BuiltInFunction.LENGTH: std_length,
            BuiltInFunction.DIFF: std_diff,
            BuiltInFunction.RETURN: std_return,
        }

        def handle(fn: BuiltInFunction, args: List[DnclObject]) -> DnclObject:
            expected = ARITY.get(fn)
            if expected is not None and len(args) != expected:
                node = args[0].ast_node if args else NO_SOURCE
                return ErrorVal(f'{fn.value} expects {expected} argument, got {len(args)}', node)
            handler = handlers.get(fn)
            if handler is None:
                raise DnclFatalError(f"no handler for {fn!r}")
            return handler(args)

        return handle


def make_system_command_handler(basic_io: BasicIO) -> SystemCommandHandler:
        def handle(command: SystemCommand) -> DnclObject:
            if isinstance(command, Input):
                line = basic_io.read_line()
                if line is None:
                    return NullVal(command.ast_node)
                text = line.strip()
                digits = text[1:] if text.startswith('-') else text
                if digits.isdecimal():
                    return IntVal(int(text), command.ast_node)
                return StrVal(text, command.ast_node)
            return NullVal(command.ast_node)

        return handle


def run_program(
    source: str,
    basic_io: Optional[BasicIO] = None,
    origin: int = 1,
    separator: str = ' ',
    env: Optional[Environment] = None,
) -> DnclObject:
    """Parse and evaluate ``source`` with the console handlers.

    Raises ``LexError``/``ParseError`` for malformed source; runtime errors
    come back as the returned value.
    """
    basic_io = basic_io or BasicIO()
    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))
    evaluator = Evaluator(
        make_builtin_handler(basic_io, separator),
        make_system_command_handler(basic_io),
        origin,
    )
    return evaluator.eval_program(parse_program(source), env)


__all__ = ['BasicIO', 'make_builtin_handler', 'make_system_command_handler', 'run_program']
