import re

import pytest

from phpfmt import Options, config, format_source

SAMPLE = """<?php
namespace App;

use B;
use A as C;

class X {
    const A = 1;
    const BB = 22;

    /**
     * Run.
     * @param int $a
     */
    public function run($a) {
        if ($a) return true;
        else if ($a > 1) {
            $b = (int)$a;
        }
        try {
            foo();
        }
        catch (E $e) {
            //log
        }
    }
}"""


def test_sample_is_formatted():
    out = format_source(SAMPLE)
    assert "use A as C;\nuse B;\n\nclass X\n{\n" in out
    assert "\tconst A  = 1;\n\tconst BB = 22;\n" in out
    assert "\t/**\n\t * Run.\n\t * @param int $a\n\t */\n\tpublic function run($a)\n\t{\n" in out
    assert "\t\tif ($a) {\n\t\t\treturn TRUE;\n\t\t} elseif ($a > 1) {\n" in out
    assert "$b = (int) $a;" in out
    assert "\t\t} catch (E $e) {\n\t\t\t// log\n\t\t}\n" in out


def test_idempotent():
    once = format_source(SAMPLE)
    assert format_source(once) == once


def test_single_trailing_newline_and_no_trailing_blanks():
    out = format_source(SAMPLE + "\n\n\n   ")
    assert out.endswith("}\n")
    assert not out.endswith("\n\n")
    assert not re.search(r'[ \t]+$', out, flags=re.MULTILINE)
    assert "\n\n\n" not in out


def test_options_switch_passes_off():
    opts = Options(order_uses=False, align_columns=False, convert_tabs=False)
    out = format_source(SAMPLE, opts)
    assert "use B;\nuse A as C;\n" in out
    assert "    const A = 1;\n    const BB = 22;\n" in out


def test_alignment_off_keeps_doc_comment_tags():
    src = "<?php\n/**\n * @param int $a\n * @return bool\n */\n$f = 1;\n"
    assert format_source(src, Options(align_columns=False)) == src
    assert " * @param  int  $a\n" in format_source(src)


def test_default_options():
    assert format_source("if (x) y();") == format_source("if (x) y();", Options())


@pytest.mark.parametrize("src", ["", "\n", "<?php", "?>", "}}}", "if (", "/** */"])
def test_odd_inputs_do_not_raise(src):
    assert format_source(src).endswith("\n")


def test_debug_lines(monkeypatch, capsys):
    monkeypatch.setattr(config, "DEBUG", True)
    format_source("use B;\nuse A;\n")
    err = capsys.readouterr().err
    assert "DEBUG: normalize: unchanged" in err
    assert "DEBUG: use statements: changed" in err
