"""Abstract Syntax Tree (AST) definitions for the Exo language.

Every construct in Exo is an expression, so a single closed set of node
types covers bindings, conditionals, function definitions, blocks, loops
and returns alike. Each node records the line and column of the token
that introduced it so runtime errors can point back at the source.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Union


@dataclass
class Binary:
    left: 'Expression'
    operator: str
    right: 'Expression'
    line: int = 0
    column: int = 0


@dataclass
class Unary:
    operator: str
    operand: 'Expression'
    line: int = 0
    column: int = 0


@dataclass
class Call:
    function: 'Expression'
    arguments: List['Expression']
    line: int = 0
    column: int = 0


@dataclass
class Identifier:
    name: str
    line: int = 0
    column: int = 0


@dataclass
class Assign:
    name: str
    value: 'Expression'
    line: int = 0
    column: int = 0


@dataclass
class Literal:
    value: Any  # int, float, str, bool or NIL
    line: int = 0
    column: int = 0


@dataclass
class Let:
    name: str
    value: 'Expression'
    line: int = 0
    column: int = 0


@dataclass
class Return:
    value: 'Expression'
    line: int = 0
    column: int = 0


@dataclass
class Block:
    expressions: List['Expression']
    line: int = 0
    column: int = 0


@dataclass
class If:
    condition: 'Expression'
    consequence: 'Expression'
    alternative: Optional['Expression']
    line: int = 0
    column: int = 0


@dataclass
class Function:
    name: str
    parameters: List[str]
    body: 'Expression'
    line: int = 0
    column: int = 0


@dataclass
class For:
    variable: str
    iterable: 'Expression'
    body: 'Expression'
    line: int = 0
    column: int = 0


Expression = Union[
    Binary, Unary, Call, Identifier, Assign, Literal,
    Let, Return, Block, If, Function, For,
]


@dataclass
class Program:
    body: List[Expression]


def ends_with_block(node: Expression) -> bool:
    """True when the outermost form of ``node`` is closed by a ``{ ... }``."""
    if isinstance(node, Block):
        return True
    if isinstance(node, If):
        branch = node.alternative if node.alternative is not None else node.consequence
        return ends_with_block(branch)
    if isinstance(node, Function):
        return ends_with_block(node.body)
    if isinstance(node, For):
        return ends_with_block(node.body)
    return False
