"""Output buffer with lookback, shared by the token passes."""
from __future__ import annotations

import re
from typing import List, Optional

from .tokens import Kind, Token, render


class Output:
    """Append log of emitted tokens.

    Offsets count back from the end: peek(0) is the last token pushed,
    peek(1) the one before it. Out-of-range offsets read as None and are
    ignored by replace/delete.
    """

    def __init__(self):
        self.tokens: List[Token] = []

    def __len__(self) -> int:
        return len(self.tokens)

    def push(self, kind: Kind, text: str) -> None:
        self.tokens.append(Token(kind, text))

    def _index(self, offset: int) -> Optional[int]:
        i = len(self.tokens) - offset - 1
        if i < 0:
            return None
        return i

    def peek(self, offset: int = 0) -> Optional[Token]:
        i = self._index(offset)
        return None if i is None else self.tokens[i]

    def kind(self, offset: int = 0) -> Optional[Kind]:
        tok = self.peek(offset)
        return None if tok is None else tok.kind

    def text(self, offset: int = 0) -> Optional[str]:
        tok = self.peek(offset)
        return None if tok is None else tok.text

    def replace(self, text: str, offset: int = 0) -> None:
        i = self._index(offset)
        if i is None:
            return
        self.tokens[i] = Token(self.tokens[i].kind, text)

    def delete(self, offset: int = 0) -> Optional[Token]:
        i = self._index(offset)
        if i is None:
            return None
        return self.tokens.pop(i)

    def last_significant(self) -> Optional[Token]:
        for tok in reversed(self.tokens):
            if tok.kind is not Kind.WHITESPACE:
                return tok
        return None

    def last_newline_whitespace(self) -> Optional[str]:
        for tok in reversed(self.tokens):
            if tok.kind is Kind.WHITESPACE and '\n' in tok.text:
                return tok.text
        return None

    def line_indent(self) -> str:
        """Indentation of the line the next pushed token would land on."""
        tail = []
        for tok in reversed(self.tokens):
            if '\n' in tok.text:
                tail.append(tok.text[tok.text.rindex('\n') + 1:])
                break
            tail.append(tok.text)
        line = ''.join(reversed(tail))
        return re.match(r'[\t ]*', line).group(0)

    def __str__(self) -> str:
        return render(self.tokens)
