"""Tree-walking interpreter for the Exo language.

:class:`Interpreter` evaluates AST nodes directly against a chain of
:class:`~exo.environment.Environment` scopes. Every node evaluates to a
runtime value. A ``return`` evaluates to a :class:`~exo.values.ReturnSignal`
which blocks and loops hand back unchanged, and which only a function
call (or the top level of a program) unwraps.
"""

from __future__ import annotations

import sys
from typing import Any, List, Optional, Union

from .ast import (
    Binary, Unary, Call, Identifier, Assign, Literal, Let, Return,
    Block, If, Function, For, Program, Expression,
)
from .environment import Environment
from .errors import ExoRuntimeError
from .parser import parse_program
from .std import populate_standard_environment
from .values import (
    NIL, NilVal, NativeFunction, UserFunction, ReturnSignal,
    in_int_range, is_callable, to_display, type_name,
)


DEFAULT_MAX_CALL_DEPTH = 100
# host frames used by one Exo call, with headroom for nested blocks and operators
FRAMES_PER_CALL = 20


def new_global_environment() -> Environment:
    """Create a global scope pre-populated with the native functions."""
    return populate_standard_environment(Environment())


class Interpreter:
    """Core interpreter that evaluates Exo ASTs."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt',
                 max_call_depth: int = DEFAULT_MAX_CALL_DEPTH):
        self.global_env = new_global_environment()
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None
        self.max_call_depth = max_call_depth
        self.call_depth = 0
        # the host stack must outlast the configured call depth
        needed = max_call_depth * FRAMES_PER_CALL + 200
        if sys.getrecursionlimit() < needed:
            sys.setrecursionlimit(needed)

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def run(self, program: Union[Program, List[Expression]], env: Optional[Environment] = None) -> Any:
        if env is None:
            env = self.global_env
        body = program.body if isinstance(program, Program) else program
        self.debug(f"run program with {len(body)} top-level expressions")
        result = self.evaluate_program(body, env)
        self.debug(f"program result: {to_display(result)}")
        return result

    def evaluate_program(self, expressions: List[Expression], env: Environment) -> Any:
        result: Any = NIL
        for expr in expressions:
            try:
                result = self.evaluate(expr, env)
            except RecursionError:
                raise ExoRuntimeError('RecursionLimit', 'maximum recursion depth exceeded',
                                      expr.line, expr.column) from None
            if isinstance(result, ReturnSignal):
                return result.value
        return result

    def evaluate_block(self, expressions: List[Expression], env: Environment) -> Any:
        result: Any = NIL
        for expr in expressions:
            result = self.evaluate(expr, env)
            # a block never absorbs a return, it hands it outward
            if isinstance(result, ReturnSignal):
                return result
        return result

    def evaluate(self, node: Expression, env: Environment) -> Any:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Identifier):
            value = env.lookup(node.name)
            if value is None:
                raise ExoRuntimeError('UndefinedVariable', f"Undefined variable '{node.name}'",
                                      node.line, node.column)
            return value
        if isinstance(node, Binary):
            left = self.evaluate(node.left, env)
            if isinstance(left, ReturnSignal):
                return left
            right = self.evaluate(node.right, env)
            if isinstance(right, ReturnSignal):
                return right
            return self.apply_binary_op(node, left, right)
        if isinstance(node, Unary):
            operand = self.evaluate(node.operand, env)
            if isinstance(operand, ReturnSignal):
                return operand
            return self.apply_unary_op(node, operand)
        if isinstance(node, Call):
            return self.evaluate_call(node, env)
        if isinstance(node, Assign):
            value = self.evaluate(node.value, env)
            if isinstance(value, ReturnSignal):
                return value
            if not env.assign(node.name, value):
                raise ExoRuntimeError('UndefinedVariable', f"Undefined variable '{node.name}'",
                                      node.line, node.column)
            if self.debug_level >= 2:
                self.debug(f"assign {node.name} = {to_display(value)}")
            return value
        if isinstance(node, Let):
            value = self.evaluate(node.value, env)
            if isinstance(value, ReturnSignal):
                return value
            env.define(node.name, value)
            if self.debug_level >= 2:
                self.debug(f"let {node.name}: {type_name(value)} = {to_display(value)}")
            return value
        if isinstance(node, Return):
            value = self.evaluate(node.value, env)
            if isinstance(value, ReturnSignal):
                return value
            return ReturnSignal(value)
        if isinstance(node, Block):
            return self.evaluate_block(node.expressions, env.child_scope())
        if isinstance(node, If):
            cond = self.evaluate(node.condition, env)
            if isinstance(cond, ReturnSignal):
                return cond
            if not isinstance(cond, bool):
                raise ExoRuntimeError('NonBooleanCondition',
                                      f"Condition must be a boolean, got {type_name(cond)}",
                                      node.line, node.column)
            if self.debug_level >= 3:
                self.debug(f"if condition -> {to_display(cond)}")
            if cond:
                return self.evaluate(node.consequence, env)
            if node.alternative is not None:
                return self.evaluate(node.alternative, env)
            return NIL
        if isinstance(node, Function):
            func_value = UserFunction(node.name, list(node.parameters), node.body, env)
            env.define(node.name, func_value)
            if self.debug_level >= 2:
                self.debug(f"define function {node.name}({', '.join(node.parameters)})")
            return NIL
        if isinstance(node, For):
            return self.evaluate_for(node, env)
        line = getattr(node, 'line', 0)
        column = getattr(node, 'column', 0)
        raise ExoRuntimeError('InternalError', f"cannot evaluate node of type {type(node).__name__}",
                              line, column)

    def evaluate_for(self, node: For, env: Environment) -> Any:
        iterable = self.evaluate(node.iterable, env)
        if isinstance(iterable, ReturnSignal):
            return iterable
        if isinstance(iterable, str):
            items = list(iterable)
        elif isinstance(iterable, int) and not isinstance(iterable, bool):
            items = range(max(iterable, 0))
        else:
            raise ExoRuntimeError('NotIterable', f"Cannot iterate over {type_name(iterable)}",
                                  node.line, node.column)
        for item in items:
            loop_env = env.child_scope()
            loop_env.define(node.variable, item)
            if self.debug_level >= 3:
                self.debug(f"for {node.variable} = {to_display(item)}")
            res = self.evaluate(node.body, loop_env)
            if isinstance(res, ReturnSignal):
                return res
        return NIL

    def evaluate_call(self, node: Call, env: Environment) -> Any:
        func = self.evaluate(node.function, env)
        if isinstance(func, ReturnSignal):
            return func
        if not is_callable(func):
            raise ExoRuntimeError('NotCallable', f"Can only call functions, not {type_name(func)}",
                                  node.line, node.column)
        args: List[Any] = []
        for arg in node.arguments:
            value = self.evaluate(arg, env)
            if isinstance(value, ReturnSignal):
                return value
            args.append(value)
        if len(args) != func.arity:
            raise ExoRuntimeError('ArityMismatch',
                                  f"{func.name} expects {func.arity} arguments but got {len(args)}",
                                  node.line, node.column)
        return self.call_function(func, args, node)

    def call_function(self, func: Any, args: List[Any], node: Call) -> Any:
        if isinstance(func, NativeFunction):
            if self.debug_level >= 2:
                self.debug(f"call native {func.name}")
            return func.fn(args)
        if self.call_depth >= self.max_call_depth:
            raise ExoRuntimeError('RecursionLimit',
                                  f"maximum call depth of {self.max_call_depth} exceeded",
                                  node.line, node.column)
        # the new scope hangs off the captured environment, not the caller's
        call_env = func.closure.child_scope()
        for param, arg in zip(func.params, args):
            call_env.define(param, arg)
        if self.debug_level >= 2:
            self.debug(f"call {func.name}({', '.join(to_display(a) for a in args)})")
        self.call_depth += 1
        try:
            res = self.evaluate(func.body, call_env)
        finally:
            self.call_depth -= 1
        if isinstance(res, ReturnSignal):
            return res.value
        return res

    def apply_unary_op(self, node: Unary, operand: Any) -> Any:
        if node.operator == '-':
            if isinstance(operand, int) and not isinstance(operand, bool):
                return self.check_int(-operand, node)
            if isinstance(operand, float):
                return -operand
        if node.operator == '!' and isinstance(operand, bool):
            return not operand
        raise ExoRuntimeError('UndefinedOperatorForType',
                              f"Operator {node.operator} is not defined for {type_name(operand)}",
                              node.line, node.column)

    def apply_binary_op(self, node: Binary, a: Any, b: Any) -> Any:
        op = node.operator
        left_type = type_name(a)
        right_type = type_name(b)
        if left_type != right_type:
            raise ExoRuntimeError('TypeMismatch',
                                  f"Operands must be of the same type, got {left_type} {op} {right_type}",
                                  node.line, node.column)
        if op in ('==', '!='):
            eq = self.equal_values(a, b)
            return eq if op == '==' else not eq
        if left_type == 'Int':
            return self.apply_int_op(node, a, b)
        if left_type == 'Float':
            return self.apply_float_op(node, a, b)
        if left_type == 'String' and op == '+':
            return a + b
        raise ExoRuntimeError('UndefinedOperatorForType',
                              f"Operator {op} is not defined for {left_type}",
                              node.line, node.column)

    def apply_int_op(self, node: Binary, a: int, b: int) -> Any:
        op = node.operator
        if op == '+':
            return self.check_int(a + b, node)
        if op == '-':
            return self.check_int(a - b, node)
        if op == '*':
            return self.check_int(a * b, node)
        if op == '/':
            if b == 0:
                raise ExoRuntimeError('DivisionByZero', 'division by zero', node.line, node.column)
            # integer division truncating toward zero
            q = abs(a) // abs(b)
            return self.check_int(q if (a < 0) == (b < 0) else -q, node)
        if op == '^':
            if b < 0:
                raise ExoRuntimeError('UndefinedOperatorForType',
                                      'Operator ^ is not defined for Int with a negative exponent',
                                      node.line, node.column)
            if a not in (-1, 0, 1) and b >= 64:
                raise ExoRuntimeError('Overflow', 'integer overflow', node.line, node.column)
            return self.check_int(a ** b, node)
        if op == '<':
            return a < b
        if op == '>':
            return a > b
        if op == '<=':
            return a <= b
        if op == '>=':
            return a >= b
        raise ExoRuntimeError('UndefinedOperatorForType', f"Operator {op} is not defined for Int",
                              node.line, node.column)

    def apply_float_op(self, node: Binary, a: float, b: float) -> Any:
        op = node.operator
        if op == '+':
            return a + b
        if op == '-':
            return a - b
        if op == '*':
            return a * b
        if op == '/':
            if b == 0.0:
                raise ExoRuntimeError('DivisionByZero', 'division by zero', node.line, node.column)
            return a / b
        if op == '^':
            try:
                result = a ** b
            except ZeroDivisionError:
                raise ExoRuntimeError('DivisionByZero', 'division by zero', node.line, node.column) from None
            except OverflowError:
                raise ExoRuntimeError('Overflow', 'float overflow', node.line, node.column) from None
            if isinstance(result, complex):
                raise ExoRuntimeError('UndefinedOperatorForType',
                                      'Operator ^ is not defined for a negative base with a fractional exponent',
                                      node.line, node.column)
            return result
        if op == '<':
            return a < b
        if op == '>':
            return a > b
        if op == '<=':
            return a <= b
        if op == '>=':
            return a >= b
        raise ExoRuntimeError('UndefinedOperatorForType', f"Operator {op} is not defined for Float",
                              node.line, node.column)

    def check_int(self, value: int, node: Expression) -> int:
        if not in_int_range(value):
            raise ExoRuntimeError('Overflow', 'integer overflow', node.line, node.column)
        return value

    def equal_values(self, a: Any, b: Any) -> bool:
        if isinstance(a, NilVal):
            return True
        if is_callable(a):
            return a is b
        return a == b


def run_program(source: str, debug_level: int = 0) -> Any:
    """Convenience function to parse and run an Exo program from source string."""
    ast_program = parse_program(source)
    interpreter = Interpreter(debug_level=debug_level)
    try:
        return interpreter.run(ast_program)
    finally:
        interpreter.close()
