"""
Column alignment for annotation tables and constant groups.

align_table() lines up the leading "structural" cells of each row; the
constant pass gathers consecutive `const` declarations into rows and
re-renders them with their `=` signs in one column.
"""
from __future__ import annotations

import sys
from typing import Dict, List, Optional

from . import config
from .output import Output
from .tokens import Kind, Token, get_indent, is_line_comment, tokenize

# How many cells after the tag are aligned; the rest of the row is free text.
ANNOTATION_PARAMS = {
    '@property': 2,
    '@property-read': 2,
    '@property-write': 2,
    '@var': 1,
    '@param': 2,
    '@return': 1,
    '@throws': 1,
}

MODIFIER_KINDS = (Kind.PUBLIC, Kind.PROTECTED, Kind.PRIVATE, Kind.FINAL)


def _structural(row: List[str]) -> int:
    if not row:
        return 0
    return 1 + ANNOTATION_PARAMS.get(row[0], 0)


def align_table(table: List[List[str]]) -> List[str]:
    widths: Dict[int, int] = {}
    for row in table:
        for i, col in enumerate(row[:_structural(row)]):
            widths[i] = max(widths.get(i, 0), len(col))

    lines: List[str] = []
    for row in table:
        ceil = _structural(row)
        line = ''
        for i, col in enumerate(row):
            if i >= ceil:
                line += col + ' '
            else:
                line += col.ljust(widths[i] + 1)
        lines.append(line.strip())
    return lines


class ConstantGroup:
    """One run of consecutive const declarations."""

    def __init__(self, indent: str, head: str):
        self.indent = indent
        self.rows: List[List[str]] = []
        self.row: List[str] = []
        self.cell = head
        self.complete = False     # current declaration reached its ';'
        self.line_ended = False   # a newline followed the ';'
        self.eol_pending = False  # a line comment swallowed the newline
        self.gap = ''             # last whitespace after the ';'
        self.pending: List[Token] = []  # modifiers that may head the next row

    def start_row(self, head: str) -> None:
        self.finish_row()
        self.cell = head
        self.complete = False
        self.line_ended = False
        self.eol_pending = False
        self.gap = ''
        self.pending = []

    def finish_row(self) -> None:
        if self.row or self.cell.strip():
            self.row.append(self.cell.strip())
            self.rows.append(self.row)
        self.row = []
        self.cell = ''

    def render(self) -> str:
        self.finish_row()
        return ('\n' + self.indent).join(align_table(self.rows))


class ConstantAligner:
    """Token pass that re-renders const groups as aligned blocks."""

    def __init__(self):
        self.output = Output()
        self.group: Optional[ConstantGroup] = None

    def run(self, content: str) -> str:
        for tok in tokenize(content):
            if self.group is None:
                self.feed_plain(tok)
            else:
                self.feed_group(tok)
        if self.group is not None:
            group = self.group
            self.group = None
            self.output.push(Kind.OTHER, group.render())
            if group.gap:
                self.output.push(Kind.WHITESPACE, group.gap)
            for p in group.pending:
                self.output.push(p.kind, p.text)
        return str(self.output)

    def feed_plain(self, tok: Token) -> None:
        previous = self.output.last_significant()
        if tok.kind is Kind.CONST and (previous is None or previous.kind is not Kind.USE):
            head = self.take_modifiers()
            indent = get_indent(self.output.text() or '')
            self.group = ConstantGroup(indent, (head + ' ' + tok.text).strip())
        else:
            self.output.push(tok.kind, tok.text)

    def take_modifiers(self) -> str:
        """Pull the modifiers written before `const` back off the output."""
        head: List[str] = []
        while True:
            tok = self.output.peek()
            if tok is None:
                break
            if tok.kind in MODIFIER_KINDS:
                head.insert(0, tok.text)
                self.output.delete()
            elif tok.kind is Kind.WHITESPACE and '\n' not in tok.text \
                    and self.output.kind(1) in MODIFIER_KINDS:
                self.output.delete()
            else:
                break
        return ' '.join(head)

    def feed_group(self, tok: Token) -> None:
        g = self.group
        kind, value = tok
        if not g.complete:
            if kind is Kind.SYMBOL and value == '=' and not g.row:
                g.row.append(g.cell.strip())
                g.cell = ''
            g.cell += value
            if kind is Kind.SYMBOL and value == ';':
                g.complete = True
            return

        if kind is Kind.CONST:
            head = ' '.join(p.text for p in g.pending if p.kind is not Kind.WHITESPACE)
            g.start_row((head + ' ' + value).strip())
        elif kind in MODIFIER_KINDS or (g.pending and kind is Kind.WHITESPACE and '\n' not in value):
            g.pending.append(tok)
        elif g.pending:
            self.close(tok)
        elif kind is Kind.WHITESPACE:
            newlines = value.count('\n') + (1 if g.eol_pending else 0)
            g.gap = ('\n' if g.eol_pending else '') + value
            g.eol_pending = False
            if newlines >= 2:
                self.close(None)
            elif newlines:
                g.line_ended = True
        elif kind is Kind.COMMENT and not g.line_ended:
            g.cell += ' ' + value.rstrip()
            if is_line_comment(tok) and value.endswith('\n'):
                g.line_ended = g.eol_pending = True
                g.gap = '\n'
        else:
            self.close(tok)

    def close(self, tok: Optional[Token]) -> None:
        """Emit the aligned group, one blank line, then tok (if any)."""
        g = self.group
        self.group = None
        self.output.push(Kind.OTHER, g.render())
        self.output.push(Kind.WHITESPACE, '\n\n' + get_indent(g.gap))
        if config.DEBUG:
            print(f"DEBUG: aligned {len(g.rows)} const declaration(s)", file=sys.stderr)
        for p in g.pending:
            self.output.push(p.kind, p.text)
        if tok is not None:
            self.feed_plain(tok)


def align_constants(content: str) -> str:
    return ConstantAligner().run(content)
