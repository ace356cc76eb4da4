"""Tokenizer for DNCL source text.

The lexer walks the source once and yields ``lark.Token`` objects whose
``start_pos``/``end_pos`` give the ``[start, end)`` character range of each
token. DNCL keywords are Japanese phrases written without surrounding
spaces (``iを1から10まで1ずつ増やしながら繰り返す:``), so at every position
the keyword table is tried longest-spelling-first before an identifier is
scanned, and identifiers stop as soon as a keyword begins inside them.

Block structure is carried by indentation in DNCL listings. Indentation
changes at the start of each logical line are turned into explicit
``INDENT``/``DEDENT`` tokens so that the parser only deals with paired
delimiters. Newlines inside brackets do not end a line.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

from lark import Token

from .errors import LexError

KEYWORDS = {
    'もし': 'IF',
    'ならば': 'THEN',
    'そうでなくもし': 'ELIF',
    'そうでなければ': 'ELSE',
    '関数': 'FUNCTION',
    'と定義する': 'DEFINE_END',
    'を': 'WO',
    'から': 'FROM',
    'まで': 'TO',
    'ずつ': 'STEP',
    '増やしながら繰り返す': 'INC_LOOP',
    '減らしながら繰り返す': 'DEC_LOOP',
    'の間繰り返す': 'WHILE',
    '繰り返し': 'DO',
    'になるまで実行する': 'UNTIL',
    '増やす': 'INCREMENT',
    '減らす': 'DECREMENT',
    '返す': 'RETURN',
    'かつ': 'AND',
    'または': 'OR',
    'でない': 'NOT',
    # Built-in function names are ordinary identifiers, but they are listed
    # here so they split cleanly from neighbouring text.
    '表示する': 'IDENT',
    '要素数': 'IDENT',
    '差分': 'IDENT',
    '戻り値': 'IDENT',
}

# longest spelling first
KEYWORD_TABLE: List[Tuple[str, str]] = sorted(KEYWORDS.items(), key=lambda kv: -len(kv[0]))

OPERATORS = {
    '==': 'EQ', '!=': 'NE', '<=': 'LE', '>=': 'GE',
    '≠': 'NE', '≦': 'LE', '≧': 'GE', '≤': 'LE', '≥': 'GE',
    '<': 'LT', '>': 'GT', '＜': 'LT', '＞': 'GT',
    '=': 'ASSIGN', '＝': 'ASSIGN',
    '+': 'PLUS', '＋': 'PLUS',
    '-': 'MINUS', '－': 'MINUS', '−': 'MINUS',
    '*': 'STAR', '＊': 'STAR', '×': 'STAR',
    '/': 'SLASH', '／': 'SLASH',
    '÷': 'IDIV',
    '%': 'MOD', '％': 'MOD',
    '(': 'LPAR', '（': 'LPAR', ')': 'RPAR', '）': 'RPAR',
    '[': 'LSQB', '［': 'LSQB', ']': 'RSQB', '］': 'RSQB',
    '{': 'LBRACE', '｛': 'LBRACE', '}': 'RBRACE', '｝': 'RBRACE',
    ',': 'COMMA', '，': 'COMMA', '、': 'COMMA',
    ':': 'COLON', '：': 'COLON',
}

OPERATOR_TABLE: List[Tuple[str, str]] = sorted(OPERATORS.items(), key=lambda kv: -len(kv[0]))

OPENING = {'LPAR', 'LSQB', 'LBRACE'}
CLOSING = {'RPAR', 'RSQB', 'RBRACE'}

INLINE_SPACE = ' \t\r　'
# vertical rules used to draw blocks in printed listings
BLOCK_RULES = '｜⎿└'

ESCAPES = {'n': '\n', 't': '\t', '"': '"', '\\': '\\'}


def indent_width(ch: str) -> int:
    if ch == '\t':
        return 4
    if ch == '　':
        return 2
    return 1


class Lexer:
    """Iterator over the tokens of one DNCL source string.

    Errors are raised lazily: a malformed string literal only raises
    ``LexError`` once the scan reaches it.
    """

    def __init__(self, source: str):
        self.source = source
        self.indents: List[int] = [0]
        self.depth = 0
        self._gen = self._tokens()

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        return next(self._gen)

    def keyword_at(self, pos: int) -> Optional[Tuple[str, str]]:
        for spelling, kind in KEYWORD_TABLE:
            if self.source.startswith(spelling, pos):
                return spelling, kind
        return None

    def _comment_at(self, pos: int) -> bool:
        return self.source.startswith('#', pos) or self.source.startswith('//', pos)

    def _skip_comment(self, pos: int) -> int:
        end = self.source.find('\n', pos)
        return len(self.source) if end < 0 else end

    def _tokens(self) -> Iterator[Token]:
        src = self.source
        n = len(src)
        pos = 0
        line_start = True
        while pos < n:
            if line_start:
                width = 0
                p = pos
                while p < n and (src[p] in INLINE_SPACE or src[p] in BLOCK_RULES):
                    width += indent_width(src[p])
                    p += 1
                if p < n and self._comment_at(p):
                    p = self._skip_comment(p)
                if p >= n:
                    pos = p
                    break
                if src[p] == '\n':
                    # blank lines never change indentation
                    pos = p + 1
                    continue
                yield from self._indentation(width, p)
                pos = p
                line_start = False
                continue

            ch = src[pos]
            if ch == '\n':
                if self.depth == 0:
                    yield Token('NEWLINE', '\n', pos, end_pos=pos + 1)
                    line_start = True
                pos += 1
                continue
            if ch in INLINE_SPACE:
                pos += 1
                continue
            if self._comment_at(pos):
                pos = self._skip_comment(pos)
                continue
            if ch == '"':
                token, pos = self._string(pos, '"')
                yield token
                continue
            if ch == '「':
                token, pos = self._string(pos, '」')
                yield token
                continue
            if ch == '【':
                token, pos = self._system_command(pos)
                yield token
                continue
            if ch.isdecimal():
                start = pos
                while pos < n and src[pos].isdecimal():
                    pos += 1
                yield Token('INT', src[start:pos], start, end_pos=pos)
                continue
            keyword = self.keyword_at(pos)
            if keyword is not None:
                spelling, kind = keyword
                yield Token(kind, spelling, pos, end_pos=pos + len(spelling))
                pos += len(spelling)
                continue
            if ch.isalpha() or ch == '_':
                start = pos
                pos += 1
                while pos < n and (src[pos].isalnum() or src[pos] == '_'):
                    if ord(src[pos]) > 0x7F and self.keyword_at(pos) is not None:
                        break
                    pos += 1
                yield Token('IDENT', src[start:pos], start, end_pos=pos)
                continue
            operator = self._operator_at(pos)
            if operator is not None:
                spelling, kind = operator
                if kind in OPENING:
                    self.depth += 1
                elif kind in CLOSING and self.depth > 0:
                    self.depth -= 1
                yield Token(kind, spelling, pos, end_pos=pos + len(spelling))
                pos += len(spelling)
                continue
            raise LexError(f"unexpected character {ch!r}", (pos, pos + 1))

        if not line_start:
            yield Token('NEWLINE', '', n, end_pos=n)
        while len(self.indents) > 1:
            self.indents.pop()
            yield Token('DEDENT', '', n, end_pos=n)
        yield Token('EOF', '', n, end_pos=n)

    def _indentation(self, width: int, pos: int) -> Iterator[Token]:
        if width > self.indents[-1]:
            self.indents.append(width)
            yield Token('INDENT', '', pos, end_pos=pos)
            return
        while width < self.indents[-1]:
            self.indents.pop()
            yield Token('DEDENT', '', pos, end_pos=pos)
        if width != self.indents[-1]:
            raise LexError('unindent does not match any outer indentation level', (pos, pos + 1))

    def _operator_at(self, pos: int) -> Optional[Tuple[str, str]]:
        for spelling, kind in OPERATOR_TABLE:
            if self.source.startswith(spelling, pos):
                return spelling, kind
        return None

    def _string(self, start: int, closing: str) -> Tuple[Token, int]:
        src = self.source
        pos = start + 1
        chars: List[str] = []
        while pos < len(src):
            ch = src[pos]
            if ch == '\n':
                break
            if ch == closing:
                return Token('STRING', ''.join(chars), start, end_pos=pos + 1), pos + 1
            if ch == '\\' and closing == '"' and pos + 1 < len(src) and src[pos + 1] in ESCAPES:
                chars.append(ESCAPES[src[pos + 1]])
                pos += 2
                continue
            chars.append(ch)
            pos += 1
        raise LexError('unterminated string literal', (start, start + 1))

    def _system_command(self, start: int) -> Tuple[Token, int]:
        src = self.source
        end = src.find('】', start + 1)
        newline = src.find('\n', start + 1)
        if end < 0 or (0 <= newline < end):
            raise LexError('unterminated system command', (start, start + 1))
        return Token('SYSTEM', src[start + 1:end].strip(), start, end_pos=end + 1), end + 1


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens, ending with ``EOF``."""
    return list(Lexer(source))
