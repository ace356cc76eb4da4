"""CLI entry point for the DNCL interpreter.

Usage:
    python -m dncl [-v|-vv|-vvv] [--origin {0,1}] [--separator SEP] <program_file>
    python -m dncl --emit-ast <program_file>
    python -m dncl [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --origin      Index of the first array element (default 1)
  --separator   Text placed between the arguments of 表示する (default ' ')
  --emit-ast    Parse the given .dncl file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. Output of 表示する goes to stdout and
【外部からの入力】 reads a line from stdin. Errors are reported on stderr
with the offending source line marked.
"""

import argparse
import json
import sys
from pathlib import Path

from .ast_json import ast_to_obj, ast_from_obj
from .diagnostics import explain
from .errors import DnclSyntaxError
from .evaluator import RECURSION_LIMIT, Evaluator
from .objects import ErrorVal
from .parser import parse_program
from .std.io import BasicIO, make_builtin_handler, make_system_command_handler


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog='dncl', description="DNCL pseudocode interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--origin', type=int, choices=(0, 1), default=1, help='index of the first array element')
    parser.add_argument('--separator', default=' ', help='separator between values printed by 表示する')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='DNCL_FILE', help='emit AST JSON for the given .dncl file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='DNCL program file to execute')
    args = parser.parse_args(argv)

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        source = read_source(program_file)
        try:
            ast_program = parse_program(source)
        except DnclSyntaxError as e:
            print(explain(source, e), file=sys.stderr)
            sys.exit(1)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(ast_to_obj(ast_program), out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    if args.ast:
        source = None
        ast_program = ast_from_obj(json.loads(read_source(Path(args.ast))))
    else:
        if not args.program:
            parser.error('missing program file; or use --emit-ast/--ast')
        source = read_source(Path(args.program))
        try:
            ast_program = parse_program(source)
        except DnclSyntaxError as e:
            print(explain(source, e), file=sys.stderr)
            sys.exit(1)

    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))
    basic_io = BasicIO(stdout=sys.stdout)
    debug_fp = open('debug.txt', 'w', encoding='utf-8') if args.v > 0 else None
    evaluator = Evaluator(
        make_builtin_handler(basic_io, args.separator),
        make_system_command_handler(basic_io),
        args.origin,
        debug_level=args.v,
        debug_fp=debug_fp,
    )
    try:
        result = evaluator.eval_program(ast_program)
    finally:
        if debug_fp:
            debug_fp.close()
    if isinstance(result, ErrorVal):
        if source is not None:
            print(explain(source, result), file=sys.stderr)
        else:
            print(f"Runtime error: {result.message}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
