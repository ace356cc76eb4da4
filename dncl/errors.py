from typing import Tuple


class DnclSyntaxError(Exception):
    """Raised when source text cannot be turned into an AST."""
    def __init__(self, message: str, span: Tuple[int, int]):
        super().__init__(f"{message} at {span[0]}")
        self.message = message
        self.span = span


class LexError(DnclSyntaxError):
    """Unterminated literal, illegal character or broken indentation."""


class ParseError(DnclSyntaxError):
    """First malformed construct found by the parser."""


class DnclFatalError(Exception):
    """Internal invariant violation; aborts the whole evaluation."""
    def __init__(self, message: str):
        super().__init__(f"DnclFatalError: {message}")
        self.message = message
