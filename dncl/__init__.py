# DNCL language package
# This package provides a lexer, parser and tree-walking evaluator for DNCL,
# the Japanese pseudocode used in the common university entrance test.
from .lexer import Lexer, tokenize
from .parser import Parser, parse_program
from .evaluator import Evaluator
from .environment import Environment
from .builtin_function import BuiltInFunction
from .diagnostics import explain
from .errors import DnclSyntaxError, LexError, ParseError, DnclFatalError

__all__ = [
    'Lexer',
    'tokenize',
    'Parser',
    'parse_program',
    'Evaluator',
    'Environment',
    'BuiltInFunction',
    'explain',
    'DnclSyntaxError',
    'LexError',
    'ParseError',
    'DnclFatalError',
]
