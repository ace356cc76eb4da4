"""Recursive-descent parser for DNCL.

The parser pulls tokens from a :class:`~dncl.lexer.Lexer` with two tokens
of lookahead and stops at the first malformed construct, raising
``ParseError`` anchored at the offending token. Blocks are delimited by the
``INDENT``/``DEDENT`` pairs the lexer produces, and function bodies are
additionally closed by ``と定義する``.

Precedence, loosest first::

    または < かつ < でない < == != < < <= > >= < + - < * / ÷ % < unary - < call/index
"""

from __future__ import annotations

from typing import List, Optional

from lark import Token

from .ast import (
    Node, Program, Block, IntLiteral, StringLiteral, ArrayLiteral,
    Identifier, UnaryExpression, BinaryExpression, IndexExpression,
    CallExpression, FunctionLiteral, SystemCommandExpression,
    AssignStatement, IfStatement, ForStatement, WhileStatement,
    FunctionStatement, ReturnStatement, ExpressionStatement,
)
from .errors import ParseError
from .lexer import Lexer

EQUALITY_OPS = {'EQ': '==', 'NE': '!='}
COMPARISON_OPS = {'LT': '<', 'LE': '<=', 'GT': '>', 'GE': '>='}
ADDITIVE_OPS = {'PLUS': '+', 'MINUS': '-'}
MULTIPLICATIVE_OPS = {'STAR': '*', 'SLASH': '/', 'IDIV': '÷', 'MOD': '%'}


def describe(token: Token) -> str:
    if token.type == 'EOF':
        return 'end of input'
    if token.type == 'NEWLINE':
        return 'end of line'
    if token.type in ('INDENT', 'DEDENT'):
        return 'change of indentation'
    return repr(str(token))


def token_span(token: Token):
    return (token.start_pos, token.end_pos)


class Parser:
    def __init__(self, lexer: Lexer):
        # Priming the lookahead may already raise LexError.
        self.lexer = lexer
        self.current: Token = next(lexer)
        self.peek: Token = self.current if self.current.type == 'EOF' else next(lexer)

    # Token helpers

    def advance(self) -> Token:
        token = self.current
        self.current = self.peek
        if self.peek.type != 'EOF':
            self.peek = next(self.lexer)
        return token

    def check(self, *types: str) -> bool:
        return self.current.type in types

    def accept(self, *types: str) -> Optional[Token]:
        if self.current.type in types:
            return self.advance()
        return None

    def expect(self, token_type: str, what: str) -> Token:
        if self.current.type != token_type:
            raise ParseError(f"expected {what}, got {describe(self.current)}", token_span(self.current))
        return self.advance()

    def unexpected(self) -> ParseError:
        return ParseError(f"unexpected {describe(self.current)}", token_span(self.current))

    def end_of_line(self):
        if self.check('EOF'):
            return
        self.expect('NEWLINE', 'end of line')

    # Statements

    def parse_program(self) -> Program:
        statements: List[Node] = []
        while self.accept('NEWLINE'):
            pass
        while not self.check('EOF'):
            statements.extend(self.parse_statement())
        return Program((0, len(self.lexer.source)), statements)

    def parse_statement(self) -> List[Node]:
        if self.check('IF'):
            return [self.parse_if()]
        if self.check('FUNCTION'):
            return [self.parse_function()]
        if self.check('DO'):
            return [self.parse_do_until()]
        first = self.parse_simple(allow_loop=True)
        if isinstance(first, (ForStatement, WhileStatement)):
            return [first]
        statements = [first]
        while self.accept('COMMA'):
            statements.append(self.parse_simple(allow_loop=False))
        self.end_of_line()
        return statements

    def parse_block(self, closing: Optional[str] = None) -> Block:
        """Parse an indented block or a one-line body after a header.

        A one-line body may be followed by ``closing`` on the same line
        instead of the end of the line.
        """
        self.accept('COLON')
        if self.accept('NEWLINE'):
            self.expect('INDENT', 'an indented block')
            statements: List[Node] = []
            while not self.check('DEDENT', 'EOF'):
                statements.extend(self.parse_statement())
            self.expect('DEDENT', 'end of block')
        else:
            statements = [self.parse_simple(allow_loop=False)]
            while self.accept('COMMA'):
                statements.append(self.parse_simple(allow_loop=False))
            if closing is None or not self.check(closing):
                self.end_of_line()
        return Block((statements[0].start, statements[-1].end), statements)

    def parse_if(self) -> IfStatement:
        head = self.accept('IF', 'ELIF')
        if head is None:
            raise self.unexpected()
        condition = self.parse_expression()
        self.expect('THEN', "'ならば'")
        then_block = self.parse_block()
        else_block: Optional[Block] = None
        if self.check('ELIF'):
            nested = self.parse_if()
            else_block = Block(nested.span, [nested])
        elif self.accept('ELSE'):
            else_block = self.parse_block()
        end = (else_block or then_block).end
        return IfStatement((head.start_pos, end), condition, then_block, else_block)

    def parse_function(self) -> FunctionStatement:
        head = self.expect('FUNCTION', "'関数'")
        name = self.expect('IDENT', 'function name')
        self.expect('LPAR', "'('")
        params: List[str] = []
        if not self.check('RPAR'):
            params.append(str(self.expect('IDENT', 'parameter name')))
            while self.accept('COMMA'):
                params.append(str(self.expect('IDENT', 'parameter name')))
        self.expect('RPAR', "')'")
        self.accept('WO')
        body = self.parse_block('DEFINE_END')
        closing = self.expect('DEFINE_END', "'と定義する'")
        self.end_of_line()
        span = (head.start_pos, closing.end_pos)
        return FunctionStatement(span, str(name), FunctionLiteral(span, params, body))

    def parse_do_until(self) -> WhileStatement:
        head = self.expect('DO', "'繰り返し'")
        body = self.parse_block()
        self.accept('WO')
        self.accept('COMMA')
        condition = self.parse_expression()
        closing = self.expect('UNTIL', "'になるまで実行する'")
        self.end_of_line()
        return WhileStatement((head.start_pos, closing.end_pos), condition, body, until=True)

    def parse_simple(self, allow_loop: bool) -> Node:
        expr = self.parse_expression()
        if self.accept('ASSIGN'):
            self.check_target(expr)
            value = self.parse_expression()
            return AssignStatement((expr.start, value.end), expr, value)
        if self.accept('WO'):
            if self.check('RETURN'):
                closing = self.advance()
                return ReturnStatement((expr.start, closing.end_pos), expr)
            amount = self.parse_expression()
            if self.check('INCREMENT', 'DECREMENT'):
                closing = self.advance()
                self.check_target(expr)
                span = (expr.start, closing.end_pos)
                op = '+' if closing.type == 'INCREMENT' else '-'
                return AssignStatement(span, expr, BinaryExpression(span, op, expr, amount))
            if self.check('FROM') and allow_loop:
                return self.parse_counted_loop(expr, amount)
            raise self.unexpected()
        if self.check('WHILE') and allow_loop:
            self.advance()
            body = self.parse_block()
            return WhileStatement((expr.start, body.end), expr, body)
        return ExpressionStatement(expr.span, expr)

    def parse_counted_loop(self, variable: Node, start_value: Node) -> ForStatement:
        if not isinstance(variable, Identifier):
            raise ParseError('loop variable must be a name', variable.span)
        self.expect('FROM', "'から'")
        end_value = self.parse_expression()
        self.expect('TO', "'まで'")
        step = self.parse_expression()
        self.expect('STEP', "'ずつ'")
        kind = self.accept('INC_LOOP', 'DEC_LOOP')
        if kind is None:
            raise ParseError(
                f"expected '増やしながら繰り返す' or '減らしながら繰り返す', got {describe(self.current)}",
                token_span(self.current),
            )
        body = self.parse_block()
        return ForStatement(
            (variable.start, body.end), variable, start_value, end_value, step,
            kind.type == 'INC_LOOP', body,
        )

    def check_target(self, expr: Node):
        if not isinstance(expr, (Identifier, IndexExpression)):
            raise ParseError('cannot assign to this expression', expr.span)

    # Expressions

    def parse_expression(self) -> Node:
        return self.parse_or()

    def parse_or(self) -> Node:
        node = self.parse_and()
        while self.accept('OR'):
            right = self.parse_and()
            node = BinaryExpression((node.start, right.end), 'または', node, right)
        return node

    def parse_and(self) -> Node:
        node = self.parse_not()
        while self.accept('AND'):
            right = self.parse_not()
            node = BinaryExpression((node.start, right.end), 'かつ', node, right)
        return node

    def parse_not(self) -> Node:
        node = self.parse_equality()
        while self.check('NOT'):
            closing = self.advance()
            node = UnaryExpression((node.start, closing.end_pos), 'でない', node)
        return node

    def parse_binary(self, operand, ops) -> Node:
        node = operand()
        while self.current.type in ops:
            op = ops[self.advance().type]
            right = operand()
            node = BinaryExpression((node.start, right.end), op, node, right)
        return node

    def parse_equality(self) -> Node:
        return self.parse_binary(self.parse_comparison, EQUALITY_OPS)

    def parse_comparison(self) -> Node:
        return self.parse_binary(self.parse_additive, COMPARISON_OPS)

    def parse_additive(self) -> Node:
        return self.parse_binary(self.parse_multiplicative, ADDITIVE_OPS)

    def parse_multiplicative(self) -> Node:
        return self.parse_binary(self.parse_unary, MULTIPLICATIVE_OPS)

    def parse_unary(self) -> Node:
        if self.check('MINUS'):
            op_token = self.advance()
            operand = self.parse_unary()
            return UnaryExpression((op_token.start_pos, operand.end), '-', operand)
        return self.parse_postfix()

    def parse_postfix(self) -> Node:
        node = self.parse_primary()
        while True:
            if self.accept('LPAR'):
                args = self.parse_arguments('RPAR')
                closing = self.expect('RPAR', "')'")
                node = CallExpression((node.start, closing.end_pos), node, args)
                continue
            if self.accept('LSQB'):
                # A[i, j] is shorthand for A[i][j]
                indices = self.parse_arguments('RSQB')
                closing = self.expect('RSQB', "']'")
                if not indices:
                    raise ParseError('missing index', token_span(closing))
                for index in indices:
                    node = IndexExpression((node.start, closing.end_pos), node, index)
                continue
            break
        return node

    def parse_arguments(self, closing: str) -> List[Node]:
        args: List[Node] = []
        if not self.check(closing):
            args.append(self.parse_expression())
            while self.accept('COMMA'):
                args.append(self.parse_expression())
        return args

    def parse_primary(self) -> Node:
        token = self.current
        if token.type == 'INT':
            self.advance()
            return IntLiteral(token_span(token), int(token))
        if token.type == 'STRING':
            self.advance()
            return StringLiteral(token_span(token), str(token))
        if token.type == 'IDENT':
            self.advance()
            return Identifier(token_span(token), str(token))
        if token.type == 'SYSTEM':
            self.advance()
            return SystemCommandExpression(token_span(token), str(token))
        if token.type == 'LPAR':
            self.advance()
            expr = self.parse_expression()
            self.expect('RPAR', "')'")
            return expr
        if token.type in ('LSQB', 'LBRACE'):
            closing_type = 'RSQB' if token.type == 'LSQB' else 'RBRACE'
            self.advance()
            elements = self.parse_arguments(closing_type)
            closing = self.expect(closing_type, repr(']' if closing_type == 'RSQB' else '}'))
            return ArrayLiteral((token.start_pos, closing.end_pos), elements)
        raise self.unexpected()


def parse_program(source: str) -> Program:
    """Parse DNCL source code into a Program AST.

    Raises ``LexError`` or ``ParseError`` on the first problem found.
    """
    return Parser(Lexer(source)).parse_program()
