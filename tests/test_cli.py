import builtins
import json

import pytest

from exo.__main__ import main


def write_program(tmp_path, source, name='main.exo'):
    path = tmp_path / name
    path.write_text(source, encoding='utf-8')
    return path


def scripted_input(lines):
    remaining = iter(lines)

    def fake_input(prompt=''):
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError
    return fake_input


def test_run_file(tmp_path, capsys):
    path = write_program(tmp_path, 'let x = 40;\nprint(x + 2);\n')
    main([str(path)])
    assert capsys.readouterr().out.strip() == '42'


def test_parse_error_exits_nonzero(tmp_path, capsys):
    path = write_program(tmp_path, 'let = 1;')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith('Parse error at line 1 column 5:')


def test_runtime_error_stops_at_first_error(tmp_path, capsys):
    path = write_program(tmp_path, 'print(1);\nprint(y);\nprint(3);\n')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert captured.out.strip() == '1'
    assert captured.err.strip() == "Runtime error at line 2 column 7: Undefined variable 'y'"


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit):
        main([str(tmp_path / 'absent.exo')])
    assert 'not found' in capsys.readouterr().err


def test_max_depth_option(tmp_path, capsys):
    path = write_program(tmp_path, 'fn down(n) { if n == 0 { 0 } else { down(n - 1) } }\ndown(10);\n')
    with pytest.raises(SystemExit):
        main(['--max-depth', '3', str(path)])
    assert 'maximum call depth of 3 exceeded' in capsys.readouterr().err


def test_emit_and_execute_ast(tmp_path, capsys):
    path = write_program(tmp_path, 'fn twice(s) { s + s } print(twice("ab"));')
    main(['--emit-ast', str(path)])
    out_path = capsys.readouterr().out.strip()
    assert out_path.endswith('main.exo.ast.json')
    with open(out_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    assert data['type'] == 'Program'
    assert data['body'][0]['type'] == 'Function'
    main(['--ast', out_path])
    assert capsys.readouterr().out.strip() == 'abab'


def test_invalid_ast_file(tmp_path, capsys):
    path = tmp_path / 'bad.ast.json'
    path.write_text(json.dumps({'type': 'Program', 'body': [{'type': 'Mystery'}]}), encoding='utf-8')
    with pytest.raises(SystemExit):
        main(['--ast', str(path)])
    assert 'invalid AST file' in capsys.readouterr().err


def test_interactive_session_survives_errors(monkeypatch, capsys):
    monkeypatch.setattr(builtins, 'input', scripted_input([
        'let x = 2;',
        'x * 21',
        '',
        'y',
        'let = 3',
        'fn inc() { x = x + 1 }',
        'inc(); x',
    ]))
    main([])
    captured = capsys.readouterr()
    assert captured.out.split() == ['2', '42', '3']
    err_lines = captured.err.strip().split('\n')
    assert err_lines[0] == "Runtime error at line 1 column 1: Undefined variable 'y'"
    assert err_lines[1].startswith('Parse error at line 1 column 5:')
