r"""
Sorting of `use` import blocks.

Entries are collected in an encoded form where the namespace separator is
':' and an alias is introduced by '@'. Both sort below letters, so a plain
string sort puts `Foo\Bar` before `Foo\Bar as Baz` before `FooBar`.
"""
from __future__ import annotations

import sys
from typing import Dict, List, Optional

from . import config
from .output import Output
from .tokens import Kind, Token, is_line_comment, tokenize

SEPARATOR = ':'
ALIAS = '@'


def encode(text: str) -> str:
    return text.replace('\\', SEPARATOR)


def decode(entry: str) -> str:
    return entry.replace(ALIAS, ' as ').replace(SEPARATOR, '\\')


class UseBlock:
    def __init__(self, indent: str, first: str):
        self.indent = indent
        self.raw: List[str] = [first]
        self.entries: List[str] = []
        self.comments: Dict[int, str] = {}
        self.current = ''
        self.space = False        # whitespace seen inside the current entry
        self.verbatim = False     # group syntax or something we cannot sort
        self.complete = False     # last entry ended with ';'
        self.line_ended = False
        self.eol_pending = False  # a line comment swallowed the newline
        self.gap = ''

    def add_comment(self, text: str) -> None:
        i = len(self.entries) - 1 if self.entries else 0
        self.comments[i] = text.rstrip()

    def end_entry(self) -> None:
        self.entries.append(self.current.strip())
        self.current = ''
        self.space = False

    def add_word(self, text: str) -> None:
        if self.space and self.current and not self.current.endswith(ALIAS):
            self.current += ' '
        self.current += encode(text)
        self.space = False

    def sortable(self) -> bool:
        return bool(self.entries) and self.complete and not self.verbatim

    def render(self) -> str:
        if not self.sortable():
            return ''.join(self.raw)
        comments = [self.comments.get(i) for i in range(len(self.entries))]
        rows = sorted(zip(self.entries, comments), key=lambda row: (row[0], row[1] or ''))
        lines = []
        for entry, comment in rows:
            line = f"use {decode(entry)};"
            if comment:
                line += ' ' + comment
            lines.append(line)
        return ('\n' + self.indent).join(lines) + self.gap


class UseSorter:
    def __init__(self):
        self.output = Output()
        self.enabled = True
        self.block: Optional[UseBlock] = None

    def run(self, content: str) -> str:
        for tok in tokenize(content):
            if self.block is None:
                self.feed_plain(tok)
            else:
                self.feed_block(tok)
        if self.block is not None:
            self.flush()
        return str(self.output)

    def feed_plain(self, tok: Token) -> None:
        if tok.kind is Kind.USE and self.enabled:
            self.block = UseBlock(self.output.line_indent(), tok.text)
            return
        if tok.kind is Kind.FUNCTION:
            self.enabled = False
        elif tok.kind is Kind.SYMBOL and tok.text == '{':
            self.enabled = True
        self.output.push(tok.kind, tok.text)

    def flush(self) -> None:
        block = self.block
        self.block = None
        if config.DEBUG:
            state = 'sorted' if block.sortable() else 'kept'
            print(f"DEBUG: use block with {len(block.entries)} entries {state}", file=sys.stderr)
        self.output.push(Kind.OTHER, block.render())

    def feed_block(self, tok: Token) -> None:
        b = self.block
        kind, value = tok
        if not b.complete:
            b.raw.append(value)
            if kind is Kind.SYMBOL and value in (',', ';'):
                b.end_entry()
                if value == ';':
                    b.complete = True
            elif kind is Kind.COMMENT:
                b.add_comment(value)
            elif kind is Kind.WHITESPACE:
                b.space = True
            elif kind is Kind.AS:
                b.current += ALIAS
                b.space = False
            elif kind is Kind.USE:
                pass
            else:
                if (kind is Kind.SYMBOL and value in '{}()') or kind is Kind.OTHER:
                    b.verbatim = True
                b.add_word(value)
            return

        if kind is Kind.USE:
            b.raw.append(value)
            b.complete = False
            b.line_ended = b.eol_pending = False
            b.gap = ''
        elif kind is Kind.WHITESPACE:
            b.raw.append(value)
            newlines = value.count('\n') + (1 if b.eol_pending else 0)
            b.gap = ('\n' if b.eol_pending else '') + value
            b.eol_pending = False
            if newlines >= 2:
                self.flush()
            elif newlines:
                b.line_ended = True
        elif kind is Kind.COMMENT and not b.line_ended:
            b.raw.append(value)
            b.add_comment(value)
            if is_line_comment(tok) and value.endswith('\n'):
                b.line_ended = b.eol_pending = True
                b.gap = '\n'
        else:
            self.flush()
            self.feed_plain(tok)


def order_use_statements(content: str) -> str:
    return UseSorter().run(content)
