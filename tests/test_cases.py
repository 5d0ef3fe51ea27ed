from pathlib import Path

import pytest

from phpfmt.cases import FormatCaseRunner, main

CASES_DIR = Path(__file__).parent / "cases"


@pytest.mark.parametrize("spec_file", sorted(CASES_DIR.glob("*.yaml")), ids=lambda p: p.stem)
def test_case_files(spec_file):
    runner = FormatCaseRunner()
    assert runner.run_spec(spec_file)
    assert runner.test_count > 0
    assert runner.failed_tests == []


def write_spec(tmp_path, text):
    path = tmp_path / "cases.yaml"
    path.write_text(text)
    return path


def test_mismatch_fails_suite(tmp_path, capsys):
    path = write_spec(tmp_path, (
        "metadata:\n  description: broken\n"
        "test_cases:\n"
        "  - name: wrong\n    input: \"$a = true;\"\n    expect: \"$a = true;\\n\"\n"
    ))
    runner = FormatCaseRunner()
    assert not runner.run_spec(path)
    assert runner.failed_critical == 1
    out = capsys.readouterr().out
    assert "❌ wrong" in out
    assert "Output mismatch" in out


def test_noncritical_failure_passes_suite(tmp_path):
    path = write_spec(tmp_path, (
        "test_cases:\n"
        "  - name: wrong\n    input: \"$a = true;\"\n    expect: \"x\"\n    noncritical: true\n"
    ))
    runner = FormatCaseRunner()
    assert runner.run_spec(path)
    assert runner.failed_noncritical == 1


def test_suite_and_case_options(tmp_path):
    path = write_spec(tmp_path, (
        "metadata:\n  options: {tab_width: 2}\n"
        "test_cases:\n"
        "  - name: suite width\n    input: \"{\\n    a();\\n}\"\n    expect: \"{\\n\\t\\ta();\\n}\\n\"\n"
        "  - name: no tabs\n    input: \"{\\n    a();\\n}\"\n    expect: \"{\\n    a();\\n}\\n\"\n"
        "    options: {convert_tabs: false}\n"
    ))
    runner = FormatCaseRunner()
    assert runner.run_spec(path)
    assert runner.test_passed == 2


def test_bad_case_options(tmp_path):
    path = write_spec(tmp_path, (
        "test_cases:\n"
        "  - name: bad\n    input: \"a\"\n    expect: \"a\\n\"\n    options: {tab_width: 0}\n"
    ))
    runner = FormatCaseRunner()
    assert not runner.run_spec(path)


def test_main(tmp_path, capsys):
    assert main([]) == 1
    path = write_spec(tmp_path, (
        "test_cases:\n"
        "  - name: bools\n    input: \"$a = true;\"\n    expect: \"$a = TRUE;\\n\"\n"
    ))
    assert main([str(path)]) == 0
    assert main([str(tmp_path / "missing.yaml")]) == 1
    assert "🎉" in capsys.readouterr().out
