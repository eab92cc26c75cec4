import json

from exo.ast_json import ast_to_obj, ast_from_obj
from exo.interpreter import parse_program, Interpreter


SOURCE = '''
fn describe(n) {
    if n < 0 { return "negative"; }
    let label = if n == 0 { nil } else { -n ^ 2 };
    for i in 2 { label = label; }
    label
}
describe(3)
'''


def test_ast_survives_json():
    program = parse_program(SOURCE)
    restored = ast_from_obj(json.loads(json.dumps(ast_to_obj(program))))
    assert restored == program


def test_loaded_ast_evaluates_like_source():
    obj = json.loads(json.dumps(ast_to_obj(parse_program(SOURCE))))
    assert Interpreter().run(ast_from_obj(obj)) == 9
    assert Interpreter().run(parse_program(SOURCE)) == 9
