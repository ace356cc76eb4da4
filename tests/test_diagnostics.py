import pytest

from dncl.ast import Identifier
from dncl.diagnostics import Location, display_width, explain, is_half_width, locate
from dncl.errors import ParseError
from dncl.objects import ErrorVal
from dncl.parser import parse_program
from dncl.std.io import run_program


def test_half_width_classes():
    assert is_half_width('a')
    assert is_half_width(' ')
    assert is_half_width('ｱ')
    assert not is_half_width('あ')
    assert not is_half_width('（')
    assert display_width('表示(a)') == 7


def test_locate_ascii():
    source = 'x = 1\ny = zz\n'
    assert locate(source, 0) == Location(0, 0, 0)
    assert locate(source, 10) == Location(1, 4, 4)


def test_locate_full_width():
    source = '表示する(1)\n表示する(y)\n'
    assert locate(source, 13) == Location(1, 5, 9)


def test_locate_past_end_falls_back():
    assert locate('x', 50) == Location(0, 0, 0)


def test_explain_runtime_error():
    source = '表示する(1)\n表示する(y)\n'
    result = run_program(source)
    assert isinstance(result, ErrorVal)
    assert explain(source, result) == (
        'line: 1, column: 5\n'
        'undefined name y\n'
        '表示する(1)\n'
        '表示する(y)\n'
        '         ^'
    )


def test_caret_covers_span():
    error = ErrorVal('bad', Identifier((0, 3), 'abc'))
    assert explain('abc = 1', error).splitlines()[-1] == '^^^'


def test_explain_syntax_error():
    source = '表示する(1 + 2\nx = 3\n'
    with pytest.raises(ParseError) as excinfo:
        parse_program(source)
    lines = explain(source, excinfo.value).splitlines()
    assert lines[0] == 'line: 1, column: 0'
    assert lines[-1] == '^'


def test_context_is_clipped():
    source = '\n'.join(f'x{i} = {i}' for i in range(10)) + '\ny'
    result = run_program(source)
    lines = explain(source, result).splitlines()
    assert lines[0] == 'line: 10, column: 0'
    # five lines before the failing one, then the line itself
    assert lines[2:8] == ['x5 = 5', 'x6 = 6', 'x7 = 7', 'x8 = 8', 'x9 = 9', 'y']
    assert lines[-1] == '^'
