"""Runtime values for Exo.

Literal values map onto Python objects: Int is ``int``, Float is
``float``, String is ``str`` and Boolean is ``bool``. Nil is the ``NIL``
singleton. Callables are ``NativeFunction`` (host implemented) and
``UserFunction`` (a closure over the defining environment). A
``ReturnSignal`` wraps the value of a ``return`` while it unwinds towards
the nearest call boundary; it is never handed to user code.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, List, TYPE_CHECKING

if TYPE_CHECKING:
    from .ast import Expression
    from .environment import Environment


INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1


class NilVal:
    """Marker object for the Exo ``nil`` value."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'nil'


NIL = NilVal()


@dataclass(eq=False)
class NativeFunction:
    name: str
    arity: int
    fn: Callable[[List[Any]], Any]

    def __repr__(self) -> str:
        return f"<native fn {self.name}>"


@dataclass(eq=False)
class UserFunction:
    """A user-defined function together with its captured scope.

    ``closure`` is the environment active where the function was defined,
    held by reference so later bindings and mutations stay visible.
    """
    name: str
    params: List[str]
    body: 'Expression'
    closure: 'Environment'

    @property
    def arity(self) -> int:
        return len(self.params)

    def __repr__(self) -> str:
        return f"<fn {self.name}>"


@dataclass
class ReturnSignal:
    value: Any


def in_int_range(value: int) -> bool:
    return INT_MIN <= value <= INT_MAX


def type_name(value: Any) -> str:
    """Return the Exo type name of a runtime value."""
    # bool is a subclass of int, so it must be checked first
    if isinstance(value, bool):
        return 'Boolean'
    if isinstance(value, int):
        return 'Int'
    if isinstance(value, float):
        return 'Float'
    if isinstance(value, str):
        return 'String'
    if isinstance(value, NilVal):
        return 'Nil'
    if isinstance(value, NativeFunction):
        return 'NativeFunction'
    if isinstance(value, UserFunction):
        return 'Function'
    return type(value).__name__


def is_callable(value: Any) -> bool:
    return isinstance(value, (NativeFunction, UserFunction))


def float_display(value: float) -> str:
    """Shortest round-tripping digits in plain positional notation.

    Integral floats drop the fractional part, so ``2.0`` displays as ``2``
    and ``1e20`` as ``100000000000000000000``.
    """
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'inf' if value > 0 else '-inf'
    text = format(Decimal(repr(value)), 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text


def to_display(value: Any) -> str:
    """Convert an Exo value to the text ``print`` writes."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return float_display(value)
    if isinstance(value, str):
        return value
    if isinstance(value, ReturnSignal):
        return to_display(value.value)
    return repr(value)
