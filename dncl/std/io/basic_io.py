import builtins
from typing import Callable, List, Optional, TextIO


class BasicIO:
    """Console state shared by the default handlers.

    Output goes to ``stdout`` when one is given, and is always kept in
    ``lines`` so a host (or a test) can read back what a program printed.
    """
    def __init__(self, stdout: Optional[TextIO] = None, input_fn: Optional[Callable[[], str]] = None):
        self.stdout = stdout
        self.input_fn = input_fn
        self.lines: List[str] = []

    @property
    def output(self) -> str:
        return ''.join(line + '\n' for line in self.lines)

    def write_line(self, text: str):
        self.lines.append(text)
        if self.stdout is not None:
            self.stdout.write(text + '\n')
            self.stdout.flush()

    def read_line(self) -> Optional[str]:
        try:
            if self.input_fn is None:
                return builtins.input()
            return self.input_fn()
        except EOFError:
            return None
