"""JSON serialization/deserialization for the Exo AST.

This module converts between Exo AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Every node keeps its
source position so an AST loaded back from JSON reports errors at the
same place as the original source.
"""

from __future__ import annotations

from typing import Any, Dict

from .ast import (
    Binary,
    Unary,
    Call,
    Identifier,
    Assign,
    Literal,
    Let,
    Return,
    Block,
    If,
    Function,
    For,
    Program,
)
from .values import NIL, NilVal


def value_to_obj(value: Any) -> Any:
    if isinstance(value, NilVal):
        return {"__type__": "Nil"}
    return value


def value_from_obj(obj: Any) -> Any:
    if isinstance(obj, dict):
        if obj.get("__type__") == "Nil":
            return NIL
        raise ValueError(f"Invalid literal value: {obj!r}")
    if obj is None or not isinstance(obj, (int, float, str, bool)):
        raise ValueError(f"Invalid literal value: {obj!r}")
    return obj


def _node(kind: str, node: Any, **fields: Any) -> Dict[str, Any]:
    obj = {"type": kind}
    obj.update(fields)
    obj["line"] = node.line
    obj["column"] = node.column
    return obj


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None
    if isinstance(node, Program):
        return {"type": "Program", "body": [ast_to_obj(n) for n in node.body]}
    if isinstance(node, Binary):
        return _node("Binary", node, operator=node.operator,
                     left=ast_to_obj(node.left), right=ast_to_obj(node.right))
    if isinstance(node, Unary):
        return _node("Unary", node, operator=node.operator, operand=ast_to_obj(node.operand))
    if isinstance(node, Call):
        return _node("Call", node, function=ast_to_obj(node.function),
                     arguments=[ast_to_obj(a) for a in node.arguments])
    if isinstance(node, Identifier):
        return _node("Identifier", node, name=node.name)
    if isinstance(node, Assign):
        return _node("Assign", node, name=node.name, value=ast_to_obj(node.value))
    if isinstance(node, Literal):
        return _node("Literal", node, value=value_to_obj(node.value))
    if isinstance(node, Let):
        return _node("Let", node, name=node.name, value=ast_to_obj(node.value))
    if isinstance(node, Return):
        return _node("Return", node, value=ast_to_obj(node.value))
    if isinstance(node, Block):
        return _node("Block", node, expressions=[ast_to_obj(e) for e in node.expressions])
    if isinstance(node, If):
        return _node("If", node,
                     condition=ast_to_obj(node.condition),
                     consequence=ast_to_obj(node.consequence),
                     alternative=ast_to_obj(node.alternative))
    if isinstance(node, Function):
        return _node("Function", node, name=node.name, parameters=list(node.parameters),
                     body=ast_to_obj(node.body))
    if isinstance(node, For):
        return _node("For", node, variable=node.variable,
                     iterable=ast_to_obj(node.iterable), body=ast_to_obj(node.body))

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Program":
        return Program(body=[ast_from_obj(n) for n in obj["body"]])
    pos = {"line": int(obj.get("line", 0)), "column": int(obj.get("column", 0))}
    if t == "Binary":
        return Binary(ast_from_obj(obj["left"]), obj["operator"], ast_from_obj(obj["right"]), **pos)
    if t == "Unary":
        return Unary(obj["operator"], ast_from_obj(obj["operand"]), **pos)
    if t == "Call":
        return Call(ast_from_obj(obj["function"]), [ast_from_obj(a) for a in obj["arguments"]], **pos)
    if t == "Identifier":
        return Identifier(obj["name"], **pos)
    if t == "Assign":
        return Assign(obj["name"], ast_from_obj(obj["value"]), **pos)
    if t == "Literal":
        return Literal(value_from_obj(obj["value"]), **pos)
    if t == "Let":
        return Let(obj["name"], ast_from_obj(obj["value"]), **pos)
    if t == "Return":
        return Return(ast_from_obj(obj["value"]), **pos)
    if t == "Block":
        return Block([ast_from_obj(e) for e in obj["expressions"]], **pos)
    if t == "If":
        return If(
            ast_from_obj(obj["condition"]),
            ast_from_obj(obj["consequence"]),
            ast_from_obj(obj.get("alternative")),
            **pos,
        )
    if t == "Function":
        return Function(obj["name"], list(obj["parameters"]), ast_from_obj(obj["body"]), **pos)
    if t == "For":
        return For(obj["variable"], ast_from_obj(obj["iterable"]), ast_from_obj(obj["body"]), **pos)

    raise ValueError(f"Unknown AST node type: {t}")
