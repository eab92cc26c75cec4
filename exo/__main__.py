"""CLI entry point for the Exo interpreter.

Usage:
    python -m exo [-v|-vv|-vvv] [--max-depth N] [program_file]
    python -m exo [-v...] --emit-ast <program_file>
    python -m exo [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --max-depth   Maximum nesting of function calls before evaluation fails
  --emit-ast    Parse the given .exo file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Without a program file an interactive session is started: each line is
evaluated against the same global environment, results are echoed and
errors are reported without ending the session.

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path
from .ast_json import ast_to_obj, ast_from_obj
from .errors import ExoError
from .interpreter import Interpreter, DEFAULT_MAX_CALL_DEPTH
from .parser import parse_program
from .values import NIL, to_display


def read_source(path_arg: str) -> str:
    program_file = Path(path_arg)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    with open(program_file, 'r', encoding='utf-8') as f:
        return f.read()


def execute(interpreter: Interpreter, program) -> None:
    try:
        interpreter.run(program)
    except ExoError as e:
        print(e, file=sys.stderr)
        sys.exit(1)
    finally:
        interpreter.close()


def repl(interpreter: Interpreter) -> None:
    """Read lines until end of input, evaluating each one."""
    while True:
        try:
            line = input('> ')
        except EOFError:
            print()
            return
        if not line.strip():
            continue
        try:
            result = interpreter.run(parse_program(line))
        except ExoError as e:
            print(e, file=sys.stderr)
            continue
        if result is not NIL:
            print(to_display(result))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Exo language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--max-depth', type=int, default=DEFAULT_MAX_CALL_DEPTH,
                        help='maximum function call depth (default: %(default)s)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='EXO_FILE', help='emit AST JSON for the given .exo file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Exo program file (.exo) to execute')
    args = parser.parse_args(argv)

    # Emit AST mode
    if args.emit_ast:
        source = read_source(args.emit_ast)
        program_file = Path(args.emit_ast)
        try:
            ast_program = parse_program(source)
        except ExoError as e:
            print(e, file=sys.stderr)
            sys.exit(1)
        obj = ast_to_obj(ast_program)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        try:
            with open(ast_path, 'r', encoding='utf-8') as f:
                ast_program = ast_from_obj(json.load(f))
        except (ValueError, TypeError, KeyError) as e:
            print(f"Error: invalid AST file {ast_path}: {e}", file=sys.stderr)
            sys.exit(1)
        interpreter = Interpreter(debug_level=args.v, max_call_depth=args.max_depth)
        execute(interpreter, ast_program)
        return

    # Interactive session
    if not args.program:
        interpreter = Interpreter(debug_level=args.v, max_call_depth=args.max_depth)
        try:
            repl(interpreter)
        finally:
            interpreter.close()
        return

    # Default: execute source file
    source = read_source(args.program)
    try:
        ast_program = parse_program(source)
    except ExoError as e:
        print(e, file=sys.stderr)
        sys.exit(1)
    interpreter = Interpreter(debug_level=args.v, max_call_depth=args.max_depth)
    execute(interpreter, ast_program)


if __name__ == '__main__':
    main()
