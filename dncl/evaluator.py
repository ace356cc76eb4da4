"""Tree-walking evaluator for DNCL programs.

Ordinary program faults (undefined names, type mismatches, wrong argument
counts, indices out of range) never raise: they are returned as
``ErrorVal``/``TypeErrorVal`` values and travel through the same channel as
any other result. ``DnclFatalError`` is raised only when the evaluator
itself is misused, e.g. a host handler that returns something that is not
a DNCL value.

``ReturnVal`` is the control-flow signal for leaving a function. Every
statement sequence stops at the first statement that yields a ``ReturnVal``
or an error, and hands it to its caller; function calls unwrap the
``ReturnVal`` and ``eval_program`` unwraps one that reaches the top level.

Printing and input are not done here. The host passes in a built-in
handler and a system-command handler (see :mod:`dncl.std.io`).
"""

from __future__ import annotations

import math
from typing import List, Optional, TextIO, Union

from .ast import (
    Node, Program, Block, IntLiteral, StringLiteral, ArrayLiteral, SystemLiteral,
    Identifier, UnaryExpression, BinaryExpression, IndexExpression,
    CallExpression, FunctionLiteral, SystemCommandExpression,
    AssignStatement, IfStatement, ForStatement, WhileStatement,
    FunctionStatement, ReturnStatement, ExpressionStatement,
)
from .builtin_function import BuiltInFunction, BuiltinHandler, SystemCommandHandler, system_command
from .environment import Environment
from .errors import DnclFatalError
from .objects import (
    DnclObject, IntVal, FloatVal, StrVal, BoolVal, ArrayVal, NullVal,
    FunctionVal, ErrorVal, TypeErrorVal, ReturnVal,
    to_string, type_name, values_equal,
)

# Each DNCL call takes several Python frames; hosts raise the interpreter
# limit to this before a run.
RECURSION_LIMIT = 10000

COMPARISONS = {
    '<': lambda a, b: a < b,
    '<=': lambda a, b: a <= b,
    '>': lambda a, b: a > b,
    '>=': lambda a, b: a >= b,
}


def is_signal(value: DnclObject) -> bool:
    """True for values that end the enclosing statement sequence."""
    return isinstance(value, (ReturnVal, ErrorVal))


class Evaluator:
    """Evaluates a parsed DNCL program.

    ``origin`` (0 or 1) is the index of the first array element as seen by
    DNCL programs. It is fixed for the lifetime of the evaluator.
    """
    def __init__(
        self,
        builtin_handler: BuiltinHandler,
        system_command_handler: SystemCommandHandler,
        origin: int = 1,
        debug_level: int = 0,
        debug_fp: Optional[TextIO] = None,
    ):
        if origin not in (0, 1):
            raise ValueError(f"array origin must be 0 or 1, not {origin!r}")
        self.builtin_handler = builtin_handler
        self.system_command_handler = system_command_handler
        self.origin = origin
        self.debug_level = debug_level
        self.debug_fp = debug_fp

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    # Public API
    def eval_program(self, program: Program, env: Optional[Environment] = None) -> DnclObject:
        if env is None:
            env = Environment()
        if self.debug_level >= 1:
            self.debug(f"run program: {len(program.statements)} statements, origin {self.origin}")
        result: DnclObject = NullVal(program)
        for stmt in program.statements:
            try:
                result = self.execute(stmt, env)
            except RecursionError:
                result = ErrorVal('maximum recursion depth exceeded', stmt)
            if is_signal(result):
                break
        if isinstance(result, ReturnVal):
            result = result.value
        if self.debug_level >= 1:
            self.debug(f"program result: {to_string(result)}")
        return result

    # Statements

    def execute_block(self, statements: List[Node], env: Environment, owner: Node) -> DnclObject:
        result: DnclObject = NullVal(owner)
        for stmt in statements:
            result = self.execute(stmt, env)
            if is_signal(result):
                return result
        return result

    def execute(self, node: Node, env: Environment) -> DnclObject:
        if isinstance(node, ExpressionStatement):
            return self.evaluate(node.expression, env)
        if isinstance(node, AssignStatement):
            return self.execute_assign(node, env)
        if isinstance(node, IfStatement):
            cond = self.evaluate(node.condition, env)
            if is_signal(cond):
                return cond
            if not isinstance(cond, BoolVal):
                return TypeErrorVal(f"condition must be 真偽値, got {type_name(cond)}", node.condition)
            if self.debug_level >= 3:
                self.debug(f"if condition -> {to_string(cond)}")
            branch = node.then_block if cond.value else node.else_block
            if branch is not None:
                res = self.execute_block(branch.statements, env.child(), branch)
                if is_signal(res):
                    return res
            return NullVal(node)
        if isinstance(node, ForStatement):
            return self.execute_for(node, env)
        if isinstance(node, WhileStatement):
            return self.execute_while(node, env)
        if isinstance(node, FunctionStatement):
            func_value = self.make_function(node.function, env, node.name)
            env.define(node.name, func_value)
            if self.debug_level >= 2:
                self.debug(f"define function {node.name}({', '.join(node.function.params)})")
            return NullVal(node)
        if isinstance(node, ReturnStatement):
            value = self.evaluate(node.value, env)
            if is_signal(value):
                return value
            return ReturnVal(value, node)
        if isinstance(node, Block):
            return self.execute_block(node.statements, env.child(), node)
        raise DnclFatalError(f"execute: unexpected node type {type(node).__name__}")

    def execute_assign(self, node: AssignStatement, env: Environment) -> DnclObject:
        value = self.evaluate(node.value, env)
        if is_signal(value):
            return value
        target = node.target
        if isinstance(target, Identifier):
            env.set(target.name, value)
            if self.debug_level >= 2:
                self.debug(f"assign {target.name} = {to_string(value)}")
            return NullVal(node)
        if isinstance(target, IndexExpression):
            container = self.evaluate(target.target, env)
            if is_signal(container):
                return container
            index = self.evaluate(target.index, env)
            if is_signal(index):
                return index
            if not isinstance(container, ArrayVal):
                return TypeErrorVal(f"cannot assign into {type_name(container)}", target.target)
            slot = self.array_slot(container, index, target)
            if isinstance(slot, ErrorVal):
                return slot
            container.value[slot] = value
            if self.debug_level >= 2:
                self.debug(f"assign [{to_string(index)}] = {to_string(value)}")
            return NullVal(node)
        raise DnclFatalError(f"assignment to {type(target).__name__}")

    def execute_for(self, node: ForStatement, env: Environment) -> DnclObject:
        bounds = []
        for expr in (node.start_value, node.end_value, node.step):
            value = self.evaluate(expr, env)
            if is_signal(value):
                return value
            if not isinstance(value, IntVal):
                return TypeErrorVal(f"loop bound must be 整数, got {type_name(value)}", expr)
            bounds.append(value.value)
        start, end, step = bounds
        if step <= 0:
            return ErrorVal('loop step must be positive', node.step)
        name = node.variable.name
        env.set(name, IntVal(start, node.variable))
        while True:
            current = env.get(name)
            if not isinstance(current, IntVal):
                return TypeErrorVal(f"loop variable {name} must be 整数, got {type_name(current)}", node.variable)
            if (node.ascending and current.value > end) or (not node.ascending and current.value < end):
                break
            if self.debug_level >= 3:
                self.debug(f"loop {name} = {current.value}")
            res = self.execute_block(node.body.statements, env.child(), node.body)
            if is_signal(res):
                return res
            current = env.get(name)
            if not isinstance(current, IntVal):
                return TypeErrorVal(f"loop variable {name} must be 整数, got {type_name(current)}", node.variable)
            next_value = current.value + step if node.ascending else current.value - step
            env.set(name, IntVal(next_value, node.variable))
        return NullVal(node)

    def execute_while(self, node: WhileStatement, env: Environment) -> DnclObject:
        while True:
            if node.until:
                res = self.execute_block(node.body.statements, env.child(), node.body)
                if is_signal(res):
                    return res
            cond = self.evaluate(node.condition, env)
            if is_signal(cond):
                return cond
            if not isinstance(cond, BoolVal):
                return TypeErrorVal(f"condition must be 真偽値, got {type_name(cond)}", node.condition)
            if self.debug_level >= 3:
                self.debug(f"loop condition -> {to_string(cond)}")
            if cond.value == node.until:
                break
            if not node.until:
                res = self.execute_block(node.body.statements, env.child(), node.body)
                if is_signal(res):
                    return res
        return NullVal(node)

    # Expressions

    def evaluate(self, node: Node, env: Environment) -> DnclObject:
        if isinstance(node, IntLiteral):
            return IntVal(node.value, node)
        if isinstance(node, StringLiteral):
            return StrVal(node.value, node)
        if isinstance(node, SystemLiteral):
            return NullVal(node)
        if isinstance(node, ArrayLiteral):
            items = self.evaluate_all(node.elements, env)
            if isinstance(items, DnclObject):
                return items
            return ArrayVal(items, node)
        if isinstance(node, Identifier):
            value = env.get(node.name)
            if value is None:
                return ErrorVal(f"undefined name {node.name}", node)
            return value
        if isinstance(node, BinaryExpression):
            return self.evaluate_binary(node, env)
        if isinstance(node, UnaryExpression):
            operand = self.evaluate(node.operand, env)
            if is_signal(operand):
                return operand
            if node.op == '-' and isinstance(operand, IntVal):
                return IntVal(-operand.value, node)
            if node.op == '-' and isinstance(operand, FloatVal):
                return FloatVal(-operand.value, node)
            if node.op == 'でない' and isinstance(operand, BoolVal):
                return BoolVal(not operand.value, node)
            return TypeErrorVal(f"bad operand type for {node.op}: {type_name(operand)}", node)
        if isinstance(node, IndexExpression):
            return self.evaluate_index(node, env)
        if isinstance(node, CallExpression):
            return self.evaluate_call(node, env)
        if isinstance(node, FunctionLiteral):
            return self.make_function(node, env, '')
        if isinstance(node, SystemCommandExpression):
            result = self.system_command_handler(system_command(node.command, node))
            return self.checked(result, f"system command {node.command}")
        raise DnclFatalError(f"evaluate: unexpected node type {type(node).__name__}")

    def evaluate_all(self, nodes: List[Node], env: Environment) -> Union[List[DnclObject], DnclObject]:
        """Evaluate left to right; returns the first signal instead of a list."""
        values: List[DnclObject] = []
        for expr in nodes:
            value = self.evaluate(expr, env)
            if is_signal(value):
                return value
            values.append(value)
        return values

    def evaluate_binary(self, node: BinaryExpression, env: Environment) -> DnclObject:
        left = self.evaluate(node.left, env)
        if is_signal(left):
            return left
        if node.op in ('かつ', 'または'):
            if not isinstance(left, BoolVal):
                return TypeErrorVal(f"operand of {node.op} must be 真偽値, got {type_name(left)}", node.left)
            if left.value == (node.op == 'または'):
                return BoolVal(left.value, node)
            right = self.evaluate(node.right, env)
            if is_signal(right):
                return right
            if not isinstance(right, BoolVal):
                return TypeErrorVal(f"operand of {node.op} must be 真偽値, got {type_name(right)}", node.right)
            return BoolVal(right.value, node)
        right = self.evaluate(node.right, env)
        if is_signal(right):
            return right
        return self.apply_binary(node, left, right)

    def apply_binary(self, node: BinaryExpression, left: DnclObject, right: DnclObject) -> DnclObject:
        op = node.op
        if op == '==':
            return BoolVal(values_equal(left, right), node)
        if op == '!=':
            return BoolVal(not values_equal(left, right), node)
        numeric = (IntVal, FloatVal)
        if isinstance(left, numeric) and isinstance(right, numeric):
            a, b = left.value, right.value
            integral = isinstance(left, IntVal) and isinstance(right, IntVal)
            if op in COMPARISONS:
                return BoolVal(COMPARISONS[op](a, b), node)
            if op in ('/', '÷', '%') and b == 0:
                return ErrorVal('division by zero', node)
            if op == '+':
                result = a + b
            elif op == '-':
                result = a - b
            elif op == '*':
                result = a * b
            elif op == '/':
                if integral and a % b == 0:
                    return IntVal(a // b, node)
                return FloatVal(a / b, node)
            elif op == '÷':
                return IntVal(math.floor(a / b) if not integral else a // b, node)
            elif op == '%':
                result = a % b
            else:
                result = None
            if result is not None:
                return IntVal(result, node) if integral else FloatVal(result, node)
        if isinstance(left, StrVal) and isinstance(right, StrVal):
            if op == '+':
                return StrVal(left.value + right.value, node)
            if op in COMPARISONS:
                return BoolVal(COMPARISONS[op](left.value, right.value), node)
        if isinstance(left, ArrayVal) and isinstance(right, ArrayVal) and op == '+':
            return ArrayVal(left.value + right.value, node)
        return TypeErrorVal(
            f"unsupported operand types for {op}: {type_name(left)} and {type_name(right)}", node
        )

    def array_slot(self, container: DnclObject, index: DnclObject, node: Node) -> Union[int, ErrorVal]:
        """Translate a DNCL index into a 0-based slot of ``container``."""
        if not isinstance(index, IntVal):
            return TypeErrorVal(f"index must be 整数, got {type_name(index)}", node)
        size = len(container.value)
        slot = index.value - self.origin
        if slot < 0 or slot >= size:
            return ErrorVal(
                f"index {index.value} out of range {self.origin}..{self.origin + size - 1}", node
            )
        return slot

    def evaluate_index(self, node: IndexExpression, env: Environment) -> DnclObject:
        container = self.evaluate(node.target, env)
        if is_signal(container):
            return container
        index = self.evaluate(node.index, env)
        if is_signal(index):
            return index
        if not isinstance(container, (ArrayVal, StrVal)):
            return TypeErrorVal(f"{type_name(container)} cannot be indexed", node)
        slot = self.array_slot(container, index, node)
        if isinstance(slot, ErrorVal):
            return slot
        if isinstance(container, StrVal):
            return StrVal(container.value[slot], node)
        return container.value[slot]

    def evaluate_call(self, node: CallExpression, env: Environment) -> DnclObject:
        callee = node.function
        if isinstance(callee, Identifier) and callee.name not in env:
            builtin = BuiltInFunction.from_name(callee.name)
            if builtin is not None:
                return self.call_builtin(builtin, node, env)
        function = self.evaluate(callee, env)
        if is_signal(function):
            return function
        if not isinstance(function, FunctionVal):
            return TypeErrorVal(f"{type_name(function)} is not callable", node)
        args = self.evaluate_all(node.arguments, env)
        if isinstance(args, DnclObject):
            return args
        return self.call_function(function, args, node)

    def call_builtin(self, builtin: BuiltInFunction, node: CallExpression, env: Environment) -> DnclObject:
        args = self.evaluate_all(node.arguments, env)
        if isinstance(args, DnclObject):
            return args
        if self.debug_level >= 3:
            self.debug(f"call builtin {builtin.value}({', '.join(to_string(a) for a in args)})")
        try:
            result = self.builtin_handler(builtin, args)
        except RecursionError:
            return ErrorVal('maximum recursion depth exceeded', node)
        return self.checked(result, builtin.value)

    def call_function(self, function: FunctionVal, args: List[DnclObject], node: Node) -> DnclObject:
        if len(args) != len(function.params):
            return ErrorVal(
                f"{function.name or 'function'} takes {len(function.params)} arguments but {len(args)} were given",
                node,
            )
        # parameters live in a child of the defining scope, never the caller's
        call_env = function.env.child()
        for name, value in zip(function.params, args):
            call_env.define(name, value)
        if self.debug_level >= 3:
            self.debug(f"call {function.name}({', '.join(to_string(a) for a in args)})")
        try:
            result = self.execute_block(function.body.statements, call_env, function.body)
        except RecursionError:
            return ErrorVal('maximum recursion depth exceeded', node)
        if isinstance(result, ReturnVal):
            return result.value
        if isinstance(result, ErrorVal):
            return result
        return NullVal(node)

    def make_function(self, literal: FunctionLiteral, env: Environment, name: str) -> FunctionVal:
        return FunctionVal(name, list(literal.params), literal.body, env, literal)

    def checked(self, result, source: str) -> DnclObject:
        if not isinstance(result, DnclObject):
            raise DnclFatalError(f"{source} handler returned {result!r}, not a DNCL value")
        return result
