import pytest

from exo.errors import ExoRuntimeError
from exo.interpreter import parse_program, Interpreter, run_program
from exo.values import NIL, UserFunction


def evaluate(source, interp=None):
    interp = interp or Interpreter()
    return interp.run(parse_program(source))


def runtime_error(source):
    with pytest.raises(ExoRuntimeError) as excinfo:
        evaluate(source)
    return excinfo.value


def test_integer_division_truncates():
    result = evaluate('7 / 2')
    assert result == 3 and isinstance(result, int)
    assert evaluate('-7 / 2') == -3
    assert evaluate('7 / -2') == -3


def test_float_division():
    assert evaluate('7.0 / 2.0') == 3.5


def test_arithmetic_and_precedence():
    assert evaluate('1 + 2 * 3 - 4') == 3
    assert evaluate('(1 + 2) * 3') == 9
    assert evaluate('2 ^ 10') == 1024
    assert evaluate('2.0 ^ 0.5') == pytest.approx(1.4142135623730951)
    assert evaluate('-5 + 2') == -3
    assert evaluate('!true') is False


@pytest.mark.parametrize('source', ['1 + 1.0', '1.0 * 2', '"a" + 1', 'true == 1', 'nil + 1'])
def test_mismatched_operands(source):
    assert runtime_error(source).kind == 'TypeMismatch'


@pytest.mark.parametrize('source', ['"a" - "b"', 'true < false', 'nil + nil', '-"a"', '!1', '2 ^ -1'])
def test_undefined_operator_for_type(source):
    assert runtime_error(source).kind == 'UndefinedOperatorForType'


def test_division_by_zero():
    assert runtime_error('1 / 0').kind == 'DivisionByZero'
    assert runtime_error('1.0 / 0.0').kind == 'DivisionByZero'


def test_integer_overflow():
    assert runtime_error('9223372036854775807 + 1').kind == 'Overflow'
    assert runtime_error('3 ^ 64').kind == 'Overflow'


def test_comparisons_and_equality():
    assert evaluate('1 < 2') is True
    assert evaluate('2 <= 1') is False
    assert evaluate('1.5 > 0.5') is True
    assert evaluate('"a" == "a"') is True
    assert evaluate('true != false') is True
    assert evaluate('nil == nil') is True
    assert evaluate('"ab" + "cd"') == 'abcd'


def test_let_and_assign():
    assert evaluate('let x = 1; x = 2; x') == 2
    assert evaluate('let y = let x = 3; y') == 3


def test_assign_returns_value():
    assert evaluate('let a = 0; let b = 0; a = b = 7; a + b') == 14


def test_assign_to_undefined_name():
    err = runtime_error('nope = 1')
    assert err.kind == 'UndefinedVariable'


def test_block_scoping():
    interp = Interpreter()
    assert evaluate('let x = 1; { let x = 2; x }', interp) == 2
    assert evaluate('x', interp) == 1


def test_block_assignment_mutates_enclosing_binding():
    assert evaluate('let x = 1; { x = 5; }; x') == 5


def test_block_values():
    assert evaluate('{ 1; 2 }') == 2
    assert evaluate('{ 1; 2; }') is NIL
    assert evaluate('{}') is NIL


def test_if_expression():
    assert evaluate('let z = if 1 < 2 { "yes" } else { "no" }; z') == 'yes'
    assert evaluate('if false { 1 }') is NIL
    assert evaluate('if false { 1 } else if true { 2 } else { 3 }') == 2


def test_condition_must_be_boolean():
    err = runtime_error('if 1 { 2 }')
    assert err.kind == 'NonBooleanCondition'


def test_function_definition_yields_nil():
    interp = Interpreter()
    assert evaluate('fn f() { 1 }', interp) is NIL
    assert isinstance(interp.global_env.lookup('f'), UserFunction)


def test_parameters_bind_by_position():
    assert evaluate('fn sub(a, b) { a - b } sub(10, 3)') == 7


def test_arity_mismatch_binds_nothing():
    interp = Interpreter()
    evaluate('let a = 99; fn pair(a, b) { a }', interp)
    with pytest.raises(ExoRuntimeError) as excinfo:
        evaluate('pair(1)', interp)
    assert excinfo.value.kind == 'ArityMismatch'
    assert evaluate('a', interp) == 99


def test_native_arity_mismatch():
    assert runtime_error('print(1, 2)').kind == 'ArityMismatch'


def test_not_callable():
    err = runtime_error('let x = 1; x()')
    assert err.kind == 'NotCallable'
    assert (err.line, err.column) == (1, 12)


def test_undefined_variable_is_located():
    err = runtime_error('let x = 1;\nfoo')
    assert err.kind == 'UndefinedVariable'
    assert (err.line, err.column) == (2, 1)
    assert str(err) == "Runtime error at line 2 column 1: Undefined variable 'foo'"


def test_return_unwinds_nested_blocks_to_call():
    assert evaluate('fn f() { { { return 1; } }; 2 } f()') == 1
    assert evaluate('fn f() { return 1; } let x = f() + 1; x') == 2


def test_top_level_return_ends_program():
    interp = Interpreter()
    assert evaluate('let y = 0; return 5; y = 1', interp) == 5
    assert evaluate('y', interp) == 0


def test_return_is_never_an_argument(capsys):
    assert evaluate('fn f() { print(return 3) } f()') == 3
    assert capsys.readouterr().out == ''


def test_for_over_int_and_string():
    assert evaluate('let total = 0; for i in 5 { total = total + i; }; total') == 10
    assert evaluate('let s = ""; for c in "abc" { s = c + s; }; s') == 'cba'
    assert evaluate('for i in 3 { i }') is NIL


def test_for_loop_variable_is_scoped():
    assert runtime_error('for i in 2 { i } i').kind == 'UndefinedVariable'


def test_return_escapes_loop():
    assert evaluate('fn first(s) { for c in s { return c; } "" } first("xyz")') == 'x'


def test_not_iterable():
    assert runtime_error('for x in true { x }').kind == 'NotIterable'


def test_print_display_forms(capsys):
    evaluate('print("hi"); print(3.5); print(42); print(true); print(nil); fn f() { 1 } print(f); print(print)')
    assert capsys.readouterr().out.split('\n')[:-1] == [
        'hi', '3.5', '42', 'true', 'nil', '<fn f>', '<native fn print>',
    ]


def test_runaway_recursion_is_reported():
    err = runtime_error('fn spin() { spin() } spin()')
    assert err.kind == 'RecursionLimit'


def test_call_depth_is_configurable():
    interp = Interpreter(max_call_depth=5)
    source = 'fn down(n) { if n == 0 { 0 } else { down(n - 1) } }'
    evaluate(source, interp)
    assert evaluate('down(4)', interp) == 0
    with pytest.raises(ExoRuntimeError) as excinfo:
        evaluate('down(5)', interp)
    assert excinfo.value.kind == 'RecursionLimit'


def test_malformed_ast_is_reported():
    with pytest.raises(ExoRuntimeError) as excinfo:
        Interpreter().run([object()])
    assert excinfo.value.kind == 'InternalError'


def test_evaluation_is_deterministic():
    source = 'fn sq(n) { n * n } let acc = 0; for i in 6 { acc = acc + sq(i); }; acc'
    assert evaluate(source) == evaluate(source) == 55


def test_debug_trace(tmp_path):
    debug_file = tmp_path / 'debug.txt'
    interp = Interpreter(debug_level=3, debug_file=str(debug_file))
    evaluate('fn id(a) { a } if id(true) { 1 }', interp)
    interp.close()
    trace = debug_file.read_text(encoding='utf-8')
    assert 'define function id(a)' in trace
    assert 'call id(true)' in trace
    assert 'if condition -> true' in trace


def test_deep_recursion_within_configured_depth():
    interp = Interpreter(max_call_depth=1000)
    evaluate('fn sum(n) { if n == 0 { 0 } else { n + sum(n - 1) } }', interp)
    assert evaluate('sum(500)', interp) == 125250
    with pytest.raises(ExoRuntimeError) as excinfo:
        evaluate('sum(1000)', interp)
    assert excinfo.value.kind == 'RecursionLimit'
    assert 'maximum call depth of 1000 exceeded' in excinfo.value.message


def test_float_display_is_positional(capsys):
    evaluate('print(2.0); print(10.0 ^ 20.0); print(0.1); print(-1.5); print(0.0 - 0.0000001)')
    assert capsys.readouterr().out.split('\n')[:-1] == [
        '2', '100000000000000000000', '0.1', '-1.5', '-0.0000001',
    ]


def test_smallest_int_via_subtraction():
    assert evaluate('-9223372036854775807 - 1') == -9223372036854775808
    assert runtime_error('-9223372036854775807 - 2').kind == 'Overflow'


def test_run_program_parses_and_evaluates(capsys):
    assert run_program('let x = 4; print(x * x); x + 1') == 5
    assert capsys.readouterr().out == '16\n'
