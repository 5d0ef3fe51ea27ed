from phpfmt.docfmt import reflow_doc_comment


def test_one_line_comment_stays_on_one_line():
    assert reflow_doc_comment("/**   @var int $x   */", "") == "/** @var int $x */"


def test_multi_line_comment_is_reindented():
    src = "/**\n      * Sum.\n      */"
    assert reflow_doc_comment(src, "\t") == "/**\n\t * Sum.\n\t */"


def test_tags_are_aligned():
    src = ("/**\n * Sum.\n * @param int $a first\n * @param string $bb\n"
           " * @return int\n */")
    expected = ("/**\n * Sum.\n * @param  int    $a  first\n * @param  string $bb\n"
                " * @return int\n */")
    assert reflow_doc_comment(src, "") == expected


def test_prose_between_tags_splits_tables():
    src = "/**\n * @param int $a\n * text\n * @param string $bb\n */"
    expected = "/**\n * @param int $a\n * text\n * @param string $bb\n */"
    assert reflow_doc_comment(src, "") == expected


def test_empty_lines_are_kept():
    src = "/**\n * Foo.\n *\n * @return int\n */"
    assert reflow_doc_comment(src, "") == "/**\n * Foo.\n * \n * @return int\n */"


def test_lines_without_star():
    src = "/**\n\tFoo.\n\tBar.\n*/"
    assert reflow_doc_comment(src, "") == "/**\n * Foo.\n * Bar.\n */"


def test_one_line_comment_with_two_lines_is_expanded():
    src = "/** Foo.\n * @return int */"
    assert reflow_doc_comment(src, "") == "/**\n * Foo.\n * @return int\n */"


def test_tags_are_kept_as_written_without_alignment():
    src = "/**\n * Sum.\n * @param int $a first\n * @param string  $bb\n */"
    assert reflow_doc_comment(src, "", align=False) == src
