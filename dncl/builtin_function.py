from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Union

from dncl.ast import Node
from dncl.objects import DnclObject


class BuiltInFunction(Enum):
    """Built-in functions the evaluator dispatches by name.

    Their behaviour is supplied by the host through a handler.
    """
    PRINT = '表示する'
    LENGTH = '要素数'
    DIFF = '差分'
    RETURN = '戻り値'

    @classmethod
    def from_name(cls, name: str) -> Optional['BuiltInFunction']:
        for member in cls:
            if member.value == name:
                return member
        return None

    def __repr__(self) -> str:
        return f"<builtin {self.value}>"


INPUT_COMMANDS = ('外部からの入力', '入力')


@dataclass
class Input:
    ast_node: Node


@dataclass
class Unknown:
    command: str
    ast_node: Node


SystemCommand = Union[Input, Unknown]

BuiltinHandler = Callable[[BuiltInFunction, List[DnclObject]], DnclObject]
SystemCommandHandler = Callable[[SystemCommand], DnclObject]


def system_command(command: str, node: Node) -> SystemCommand:
    if command in INPUT_COMMANDS:
        return Input(node)
    return Unknown(command, node)
