import io
import sys

import pytest

from phpfmt import config
from phpfmt.cli import main

UNFORMATTED = "<?php\nif ($a) b();\n"
FORMATTED = "<?php\nif ($a) {\n\tb();\n}\n"


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    monkeypatch.delenv("PHPFMT", raising=False)
    monkeypatch.setattr(config, "DEBUG", False)
    monkeypatch.chdir(tmp_path)
    config._config_cache.clear()
    yield
    config._config_cache.clear()


def test_prints_formatted_file(tmp_path, capsys):
    path = tmp_path / "a.php"
    path.write_text(UNFORMATTED)
    assert main([str(path)]) == 0
    assert capsys.readouterr().out == FORMATTED
    assert path.read_text() == UNFORMATTED


def test_write_in_place(tmp_path, capsys):
    path = tmp_path / "a.php"
    path.write_text(UNFORMATTED)
    assert main(["-w", str(path)]) == 0
    assert path.read_text() == FORMATTED
    assert capsys.readouterr().out == ""


def test_check(tmp_path, capsys):
    path = tmp_path / "a.php"
    path.write_text(UNFORMATTED)
    assert main(["--check", str(path)]) == 1
    assert capsys.readouterr().out == f"Would reformat: {path}\n"
    assert path.read_text() == UNFORMATTED

    path.write_text(FORMATTED)
    assert main(["--check", str(path)]) == 0


def test_directory_walk(tmp_path, capsys):
    src = tmp_path / "src"
    (src / "sub").mkdir(parents=True)
    (src / "b.php").write_text(UNFORMATTED)
    (src / "sub" / "a.phpt").write_text(UNFORMATTED)
    (src / "notes.txt").write_text(UNFORMATTED)
    (src / "ok.php").write_text(FORMATTED)
    assert main(["--check", str(src)]) == 1
    lines = capsys.readouterr().out.splitlines()
    assert lines == [f"Would reformat: {src / 'b.php'}", f"Would reformat: {src / 'sub' / 'a.phpt'}"]


def test_missing_path(tmp_path, capsys):
    assert main([str(tmp_path / "nope.php")]) == 2
    assert "Path not found:" in capsys.readouterr().err


def test_stdin(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("if ($a) b();"))
    assert main([]) == 0
    assert capsys.readouterr().out == "if ($a) {\n\tb();\n}\n"


def test_stdin_check(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("if ($a) b();"))
    assert main(["--check", "-"]) == 1
    assert capsys.readouterr().out == "Would reformat: <stdin>\n"


def test_write_with_stdin_is_a_usage_error():
    with pytest.raises(SystemExit) as e:
        main(["-w"])
    assert e.value.code == 2


def test_no_tabs(tmp_path, capsys):
    path = tmp_path / "a.php"
    path.write_text("<?php\nif ($a) {\n    b();\n}\n")
    assert main(["--no-tabs", str(path)]) == 0
    assert capsys.readouterr().out == "<?php\nif ($a) {\n    b();\n}\n"
    assert main(["--tab-width", "2", str(path)]) == 0
    assert capsys.readouterr().out == "<?php\nif ($a) {\n\t\tb();\n}\n"


def test_config_file_is_used(tmp_path, capsys):
    (tmp_path / ".phpfmt.yml").write_text("convert_tabs: false\n")
    path = tmp_path / "a.php"
    path.write_text("<?php\nif ($a) {\n    b();\n}\n")
    assert main([str(path)]) == 0
    assert capsys.readouterr().out == "<?php\nif ($a) {\n    b();\n}\n"


def test_bad_config_file(tmp_path, capsys):
    (tmp_path / ".phpfmt.yml").write_text("tab_width: zero\n")
    path = tmp_path / "a.php"
    path.write_text(FORMATTED)
    assert main([str(path)]) == 1
    assert capsys.readouterr().err.startswith("phpfmt: ")


def test_unreadable_file(tmp_path, capsys):
    path = tmp_path / "bad.php"
    path.write_bytes(b"<?php\n$a = '\xff';\n")
    assert main([str(path)]) == 1
    assert "phpfmt: " in capsys.readouterr().err


def test_debug_output(tmp_path, capsys):
    path = tmp_path / "a.php"
    path.write_text(UNFORMATTED)
    assert main(["--debug", str(path)]) == 0
    assert "DEBUG: " in capsys.readouterr().err


def test_version(capsys):
    with pytest.raises(SystemExit) as e:
        main(["--version"])
    assert e.value.code == 0
    assert "phpfmt" in capsys.readouterr().out


def test_no_align_keeps_doc_comment_tags(tmp_path, capsys):
    src = "<?php\n/**\n * @param int $a\n * @return bool\n */\n$f = 1;\n"
    path = tmp_path / "a.php"
    path.write_text(src)
    assert main(["--no-align", str(path)]) == 0
    assert capsys.readouterr().out == src
