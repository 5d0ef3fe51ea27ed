"""Final text passes: indentation to tabs, trailing whitespace, last newline."""
from __future__ import annotations

import re
from typing import List

from .config import DEFAULT_TAB_WIDTH
from .tokens import Kind, is_line_comment, tokenize

INDENT_RE = re.compile(r'\n([ \t]+)')
# indentation in front of a doc comment's ' * ' / ' */' line marker
DOC_INDENT_RE = re.compile(r'(\n[ \t]+)\*')


def _tabify(whitespace: str, tab_width: int) -> str:
    def repl(m):
        run = m.group(1)
        spaces = run.count(' ')
        tabs = run.count('\t') + spaces // tab_width
        return '\n' + '\t' * tabs + ' ' * (spaces % tab_width)
    return INDENT_RE.sub(repl, whitespace)


def spaces_to_tabs(content: str, tab_width: int = DEFAULT_TAB_WIDTH) -> str:
    """Rewrite line indentation with tabs, tab_width spaces per tab.

    A line comment owns its newline, so the newline is moved onto the
    following whitespace to let that line's indentation be converted too.
    Doc comments carry their own ` * ` line prefixes and are converted in
    place.
    """
    values: List[str] = []
    eol = ''  # newline taken off the last line comment
    for tok in tokenize(content):
        value = tok.text
        if is_line_comment(tok):
            stripped = value.rstrip('\r\n')
            values.append(eol)
            eol = value[len(stripped):]
            value = stripped
        elif tok.kind is Kind.WHITESPACE:
            value = _tabify(eol + value, tab_width)
            eol = ''
        elif tok.kind is Kind.DOC_COMMENT:
            values.append(eol)
            eol = ''
            value = DOC_INDENT_RE.sub(lambda m: _tabify(m.group(1), tab_width) + '*', value)
        else:
            values.append(eol)
            eol = ''
        values.append(value)
    values.append(eol)
    return ''.join(values)


def strip_trailing_whitespace(content: str) -> str:
    return re.sub(r'[ \t]+$', '', content, flags=re.MULTILINE)


def ensure_trailing_eol(content: str) -> str:
    return content.rstrip(' \t\n\r\0\x0b') + '\n'
