"""JSON serialization/deserialization for the DNCL AST.

This module converts between AST dataclasses and plain dict/list
structures suitable for JSON encoding. Spans are kept, so an AST loaded
back from JSON still produces errors that ``diagnostics.explain`` can
place in the original source.
"""

from __future__ import annotations

from typing import Any

from .ast import (
    Program,
    Block,
    IntLiteral,
    StringLiteral,
    ArrayLiteral,
    SystemLiteral,
    Identifier,
    UnaryExpression,
    BinaryExpression,
    IndexExpression,
    CallExpression,
    FunctionLiteral,
    SystemCommandExpression,
    AssignStatement,
    IfStatement,
    ForStatement,
    WhileStatement,
    FunctionStatement,
    ReturnStatement,
    ExpressionStatement,
)


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None
    span = list(node.span)

    if isinstance(node, Program):
        return {"type": "Program", "span": span, "statements": [ast_to_obj(s) for s in node.statements]}
    if isinstance(node, Block):
        return {"type": "Block", "span": span, "statements": [ast_to_obj(s) for s in node.statements]}
    if isinstance(node, IntLiteral):
        return {"type": "IntLiteral", "span": span, "value": node.value}
    if isinstance(node, StringLiteral):
        return {"type": "StringLiteral", "span": span, "value": node.value}
    if isinstance(node, ArrayLiteral):
        return {"type": "ArrayLiteral", "span": span, "elements": [ast_to_obj(e) for e in node.elements]}
    if isinstance(node, SystemLiteral):
        return {"type": "SystemLiteral", "span": span, "text": node.text}
    if isinstance(node, Identifier):
        return {"type": "Identifier", "span": span, "name": node.name}
    if isinstance(node, UnaryExpression):
        return {"type": "UnaryExpression", "span": span, "op": node.op, "operand": ast_to_obj(node.operand)}
    if isinstance(node, BinaryExpression):
        return {
            "type": "BinaryExpression",
            "span": span,
            "op": node.op,
            "left": ast_to_obj(node.left),
            "right": ast_to_obj(node.right),
        }
    if isinstance(node, IndexExpression):
        return {
            "type": "IndexExpression",
            "span": span,
            "target": ast_to_obj(node.target),
            "index": ast_to_obj(node.index),
        }
    if isinstance(node, CallExpression):
        return {
            "type": "CallExpression",
            "span": span,
            "function": ast_to_obj(node.function),
            "arguments": [ast_to_obj(a) for a in node.arguments],
        }
    if isinstance(node, FunctionLiteral):
        return {"type": "FunctionLiteral", "span": span, "params": list(node.params), "body": ast_to_obj(node.body)}
    if isinstance(node, SystemCommandExpression):
        return {"type": "SystemCommandExpression", "span": span, "command": node.command}
    if isinstance(node, AssignStatement):
        return {"type": "AssignStatement", "span": span, "target": ast_to_obj(node.target), "value": ast_to_obj(node.value)}
    if isinstance(node, IfStatement):
        return {
            "type": "IfStatement",
            "span": span,
            "condition": ast_to_obj(node.condition),
            "then_block": ast_to_obj(node.then_block),
            "else_block": ast_to_obj(node.else_block),
        }
    if isinstance(node, ForStatement):
        return {
            "type": "ForStatement",
            "span": span,
            "variable": ast_to_obj(node.variable),
            "start_value": ast_to_obj(node.start_value),
            "end_value": ast_to_obj(node.end_value),
            "step": ast_to_obj(node.step),
            "ascending": node.ascending,
            "body": ast_to_obj(node.body),
        }
    if isinstance(node, WhileStatement):
        return {
            "type": "WhileStatement",
            "span": span,
            "condition": ast_to_obj(node.condition),
            "body": ast_to_obj(node.body),
            "until": node.until,
        }
    if isinstance(node, FunctionStatement):
        return {"type": "FunctionStatement", "span": span, "name": node.name, "function": ast_to_obj(node.function)}
    if isinstance(node, ReturnStatement):
        return {"type": "ReturnStatement", "span": span, "value": ast_to_obj(node.value)}
    if isinstance(node, ExpressionStatement):
        return {"type": "ExpressionStatement", "span": span, "expression": ast_to_obj(node.expression)}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    span = tuple(obj["span"])
    if t == "Program":
        return Program(span, [ast_from_obj(s) for s in obj["statements"]])
    if t == "Block":
        return Block(span, [ast_from_obj(s) for s in obj["statements"]])
    if t == "IntLiteral":
        return IntLiteral(span, int(obj["value"]))
    if t == "StringLiteral":
        return StringLiteral(span, obj["value"])
    if t == "ArrayLiteral":
        return ArrayLiteral(span, [ast_from_obj(e) for e in obj["elements"]])
    if t == "SystemLiteral":
        return SystemLiteral(span, obj["text"])
    if t == "Identifier":
        return Identifier(span, obj["name"])
    if t == "UnaryExpression":
        return UnaryExpression(span, obj["op"], ast_from_obj(obj["operand"]))
    if t == "BinaryExpression":
        return BinaryExpression(span, obj["op"], ast_from_obj(obj["left"]), ast_from_obj(obj["right"]))
    if t == "IndexExpression":
        return IndexExpression(span, ast_from_obj(obj["target"]), ast_from_obj(obj["index"]))
    if t == "CallExpression":
        return CallExpression(span, ast_from_obj(obj["function"]), [ast_from_obj(a) for a in obj["arguments"]])
    if t == "FunctionLiteral":
        return FunctionLiteral(span, list(obj["params"]), ast_from_obj(obj["body"]))
    if t == "SystemCommandExpression":
        return SystemCommandExpression(span, obj["command"])
    if t == "AssignStatement":
        return AssignStatement(span, ast_from_obj(obj["target"]), ast_from_obj(obj["value"]))
    if t == "IfStatement":
        return IfStatement(
            span,
            ast_from_obj(obj["condition"]),
            ast_from_obj(obj["then_block"]),
            ast_from_obj(obj.get("else_block")),
        )
    if t == "ForStatement":
        return ForStatement(
            span,
            ast_from_obj(obj["variable"]),
            ast_from_obj(obj["start_value"]),
            ast_from_obj(obj["end_value"]),
            ast_from_obj(obj["step"]),
            bool(obj["ascending"]),
            ast_from_obj(obj["body"]),
        )
    if t == "WhileStatement":
        return WhileStatement(
            span, ast_from_obj(obj["condition"]), ast_from_obj(obj["body"]), bool(obj.get("until", False))
        )
    if t == "FunctionStatement":
        return FunctionStatement(span, obj["name"], ast_from_obj(obj["function"]))
    if t == "ReturnStatement":
        return ReturnStatement(span, ast_from_obj(obj["value"]))
    if t == "ExpressionStatement":
        return ExpressionStatement(span, ast_from_obj(obj["expression"]))

    raise ValueError(f"Unknown AST node type: {t}")
