import pytest

from dncl.errors import LexError
from dncl.lexer import Lexer, tokenize


def types(source):
    return [t.type for t in tokenize(source)]


def test_keywords_split_without_spaces():
    assert types('iを1から10まで1ずつ増やしながら繰り返す:') == [
        'IDENT', 'WO', 'INT', 'FROM', 'INT', 'TO', 'INT', 'STEP', 'INC_LOOP', 'COLON', 'NEWLINE', 'EOF',
    ]


def test_longest_keyword_wins():
    assert types('そうでなくもし x ならば:')[:1] == ['ELIF']
    assert types('そうでなければ:')[:1] == ['ELSE']
    assert types('x < 3 でない')[-3] == 'NOT'


def test_japanese_identifier():
    tokens = tokenize('合計 = 合計 + 1')
    assert [(t.type, str(t)) for t in tokens[:5]] == [
        ('IDENT', '合計'), ('ASSIGN', '='), ('IDENT', '合計'), ('PLUS', '+'), ('INT', '1'),
    ]


def test_builtin_names_split_from_neighbours():
    tokens = tokenize('表示する(要素数(A))')
    assert [str(t) for t in tokens if t.type == 'IDENT'] == ['表示する', '要素数', 'A']


def test_multi_character_operators():
    assert types('a <= b == c != d >= e')[:9] == [
        'IDENT', 'LE', 'IDENT', 'EQ', 'IDENT', 'NE', 'IDENT', 'GE', 'IDENT',
    ]
    assert types('a ≦ b ≠ c')[:5] == ['IDENT', 'LE', 'IDENT', 'NE', 'IDENT']


def test_offsets():
    tokens = tokenize('x = 10')
    assert [(t.start_pos, t.end_pos) for t in tokens[:3]] == [(0, 1), (2, 3), (4, 6)]


def test_string_literals():
    tokens = tokenize('"a\\"b" 「こんにちは」')
    assert tokens[0].type == 'STRING' and str(tokens[0]) == 'a"b'
    assert tokens[1].type == 'STRING' and str(tokens[1]) == 'こんにちは'
    assert (tokens[1].start_pos, tokens[1].end_pos) == (7, 14)


def test_unterminated_string_anchored_at_start():
    with pytest.raises(LexError) as excinfo:
        tokenize('x = "abc')
    assert excinfo.value.span == (4, 5)


def test_newline_inside_string_is_unterminated():
    with pytest.raises(LexError) as excinfo:
        tokenize('x = "ab\ny = 1\n')
    assert excinfo.value.span == (4, 5)


def test_illegal_character():
    with pytest.raises(LexError) as excinfo:
        tokenize('x = 1 $ 2')
    assert excinfo.value.span == (6, 7)


def test_comments_are_skipped():
    assert types('x = 1 # comment\n// whole line\ny = 2') == [
        'IDENT', 'ASSIGN', 'INT', 'NEWLINE', 'IDENT', 'ASSIGN', 'INT', 'NEWLINE', 'EOF',
    ]


def test_indent_and_dedent():
    assert types('もし x ならば:\n    y = 1\n\nz = 2\n') == [
        'IF', 'IDENT', 'THEN', 'COLON', 'NEWLINE',
        'INDENT', 'IDENT', 'ASSIGN', 'INT', 'NEWLINE',
        'DEDENT', 'IDENT', 'ASSIGN', 'INT', 'NEWLINE', 'EOF',
    ]


def test_dedents_closed_at_end_of_input():
    assert types('もし x ならば:\n    y = 1')[-3:] == ['NEWLINE', 'DEDENT', 'EOF']


def test_block_rules_count_as_indentation():
    result = types('もし x ならば:\n｜ y = 1\n⎿ z = 2\n')
    assert result.count('INDENT') == 1
    assert result.count('DEDENT') == 1


def test_inconsistent_dedent():
    with pytest.raises(LexError):
        tokenize('もし x ならば:\n    y = 1\n  z = 2\n')


def test_newlines_ignored_inside_brackets():
    assert types('A = [1,\n  2]\n') == [
        'IDENT', 'ASSIGN', 'LSQB', 'INT', 'COMMA', 'INT', 'RSQB', 'NEWLINE', 'EOF',
    ]


def test_system_command():
    tokens = tokenize('x = 【外部からの入力】')
    assert tokens[2].type == 'SYSTEM'
    assert str(tokens[2]) == '外部からの入力'


def test_errors_are_raised_lazily():
    lexer = Lexer('x = "abc')
    assert next(lexer).type == 'IDENT'
    assert next(lexer).type == 'ASSIGN'
    with pytest.raises(LexError):
        next(lexer)
