import json

import pytest

from dncl.__main__ import main


def write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding='utf-8')
    return path


def test_run_program(tmp_path, capsys):
    path = write(tmp_path, 'hello.dncl', '表示する("こんにちは", 1 + 1)\n')
    main([str(path)])
    assert capsys.readouterr().out == 'こんにちは 2\n'


def test_origin_and_separator(tmp_path, capsys):
    path = write(tmp_path, 'arr.dncl', 'A = [5, 6]\n表示する(A[0], A[1])\n')
    main(['--origin', '0', '--separator', '/', str(path)])
    assert capsys.readouterr().out == '5/6\n'


def test_runtime_error_exits_with_status_1(tmp_path, capsys):
    path = write(tmp_path, 'bad.dncl', '表示する(1)\n表示する(y)\n')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == '1\n'
    assert captured.err.startswith('line: 1, column: 5\nundefined name y\n')


def test_syntax_error_exits_with_status_1(tmp_path, capsys):
    path = write(tmp_path, 'bad.dncl', 'x = "abc\n')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 1
    assert 'unterminated string literal' in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / 'nope.dncl')])
    assert excinfo.value.code == 1
    assert 'not found' in capsys.readouterr().err


def test_emit_and_run_ast(tmp_path, capsys):
    path = write(tmp_path, 'sum.dncl', 'x = 2\nx を 3 増やす\n表示する(x)\n')
    main(['--emit-ast', str(path)])
    out_path = tmp_path / 'sum.dncl.ast.json'
    assert capsys.readouterr().out.strip() == str(out_path)
    obj = json.loads(out_path.read_text(encoding='utf-8'))
    assert obj['type'] == 'Program'
    assert len(obj['statements']) == 3

    main(['--ast', str(out_path)])
    assert capsys.readouterr().out == '5\n'


def test_ast_runtime_error(tmp_path, capsys):
    path = write(tmp_path, 'bad.dncl', 'y\n')
    main(['--emit-ast', str(path)])
    capsys.readouterr()
    with pytest.raises(SystemExit):
        main(['--ast', str(tmp_path / 'bad.dncl.ast.json')])
    assert capsys.readouterr().err.strip() == 'Runtime error: undefined name y'


def test_verbose_writes_debug_file(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    path = write(tmp_path, 'v.dncl', 'x = 1\n')
    main(['-vv', str(path)])
    trace = (tmp_path / 'debug.txt').read_text(encoding='utf-8')
    assert 'assign x = 1' in trace
    assert capsys.readouterr().out == ''
