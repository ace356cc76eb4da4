import pytest

from dncl.ast import (
    AssignStatement, BinaryExpression, CallExpression, ExpressionStatement,
    ForStatement, FunctionStatement, Identifier, IfStatement, IndexExpression,
    IntLiteral, ReturnStatement, UnaryExpression, WhileStatement,
)
from dncl.errors import LexError, ParseError
from dncl.lexer import Lexer
from dncl.parser import Parser, parse_program


def single(source):
    program = parse_program(source)
    assert len(program.statements) == 1
    return program.statements[0]


def expr(source):
    stmt = single(source)
    assert isinstance(stmt, ExpressionStatement)
    return stmt.expression


def test_missing_paren_reports_first_unexpected_token():
    with pytest.raises(ParseError) as excinfo:
        parse_program('表示する(1 + 2\nx = 3\n')
    assert excinfo.value.span == (11, 12)
    assert excinfo.value.message == "expected ')', got 'x'"


def test_missing_paren_at_end_of_input():
    with pytest.raises(ParseError) as excinfo:
        parse_program('f(1')
    assert excinfo.value.message.startswith("expected ')'")
    assert excinfo.value.span == (3, 3)


def test_lex_error_surfaces_from_constructor():
    with pytest.raises(LexError):
        Parser(Lexer('"abc'))


def test_assignment_span():
    stmt = single('x = 10')
    assert isinstance(stmt, AssignStatement)
    assert stmt.span == (0, 6)
    assert stmt.target == Identifier((0, 1), 'x')
    assert stmt.value == IntLiteral((4, 6), 10)


def test_cannot_assign_to_literal():
    with pytest.raises(ParseError) as excinfo:
        parse_program('1 = 2')
    assert excinfo.value.span == (0, 1)


def test_precedence():
    node = expr('1 + 2 * 3')
    assert node.op == '+'
    assert isinstance(node.right, BinaryExpression) and node.right.op == '*'

    node = expr('(1 + 2) * 3')
    assert node.op == '*'
    assert node.left.op == '+'


def test_left_associative():
    node = expr('1 - 2 - 3')
    assert node.op == '-'
    assert isinstance(node.left, BinaryExpression) and node.left.op == '-'
    assert node.right.value == 3


def test_logical_operators():
    node = expr('a かつ b または c')
    assert node.op == 'または'
    assert node.left.op == 'かつ'

    node = expr('x == 1 でない')
    assert isinstance(node, UnaryExpression) and node.op == 'でない'
    assert node.operand.op == '=='


def test_unary_minus():
    node = expr('-x * 2')
    assert node.op == '*'
    assert isinstance(node.left, UnaryExpression) and node.left.op == '-'


def test_chained_calls():
    node = expr('add(1)(2)')
    assert isinstance(node, CallExpression)
    assert isinstance(node.function, CallExpression)
    assert node.function.function == Identifier((0, 3), 'add')
    assert [a.value for a in node.arguments] == [2]


def test_multi_index_is_nested():
    node = expr('A[1, 2]')
    assert isinstance(node, IndexExpression)
    assert node.index.value == 2
    assert isinstance(node.target, IndexExpression)
    assert node.target.index.value == 1
    assert node.target.target.name == 'A'


def test_array_literal_with_braces():
    node = expr('{1, 2, 3}')
    assert [e.value for e in node.elements] == [1, 2, 3]


def test_if_elif_else_nests():
    stmt = single(
        'もし a ならば:\n'
        '    x = 1\n'
        'そうでなくもし b ならば:\n'
        '    x = 2\n'
        'そうでなければ:\n'
        '    x = 3\n'
    )
    assert isinstance(stmt, IfStatement)
    inner = stmt.else_block.statements[0]
    assert isinstance(inner, IfStatement)
    assert inner.condition.name == 'b'
    assert inner.else_block.statements[0].value.value == 3


def test_inline_if():
    stmt = single('もし x > 0 ならば 表示する(x)')
    assert isinstance(stmt, IfStatement)
    assert isinstance(stmt.then_block.statements[0], ExpressionStatement)
    assert stmt.else_block is None


def test_function_definition():
    stmt = single('関数 f(a, b) を:\n    a + b を返す\nと定義する\n')
    assert isinstance(stmt, FunctionStatement)
    assert stmt.name == 'f'
    assert stmt.function.params == ['a', 'b']
    assert isinstance(stmt.function.body.statements[0], ReturnStatement)


def test_function_requires_closing_phrase():
    with pytest.raises(ParseError):
        parse_program('関数 f(x) を:\n    x を返す\n')


def test_counted_loop():
    stmt = single('i を 1 から 10 まで 2 ずつ増やしながら繰り返す:\n    表示する(i)\n')
    assert isinstance(stmt, ForStatement)
    assert stmt.ascending
    assert stmt.variable.name == 'i'
    assert (stmt.start_value.value, stmt.end_value.value, stmt.step.value) == (1, 10, 2)

    stmt = single('i を 10 から 1 まで 1 ずつ減らしながら繰り返す:\n    表示する(i)\n')
    assert not stmt.ascending


def test_while_and_do_until():
    stmt = single('x < 3 の間繰り返す:\n    x = x + 1\n')
    assert isinstance(stmt, WhileStatement) and not stmt.until

    stmt = single('繰り返し:\n    x = x + 1\nを，x >= 3 になるまで実行する\n')
    assert isinstance(stmt, WhileStatement) and stmt.until
    assert stmt.condition.op == '>='


def test_increment_desugars_to_assignment():
    stmt = single('x を 2 増やす')
    assert isinstance(stmt, AssignStatement)
    assert stmt.value.op == '+'
    assert stmt.value.left.name == 'x'
    assert stmt.value.right.value == 2


def test_comma_separated_statements():
    program = parse_program('a = 1, b = 2\n')
    assert [s.target.name for s in program.statements] == ['a', 'b']


def test_program_span_covers_source():
    source = 'x = 1\n\ny = 2\n'
    assert parse_program(source).span == (0, len(source))


def test_one_line_function_definition():
    stmt = single('関数 f(x) を: x を返す と定義する\n')
    assert isinstance(stmt, FunctionStatement)
    assert isinstance(stmt.function.body.statements[0], ReturnStatement)
    assert stmt.span == (0, len('関数 f(x) を: x を返す と定義する'))


def test_one_line_body_needs_end_of_line_elsewhere():
    with pytest.raises(ParseError):
        parse_program('もし x ならば y = 1 と定義する\n')
