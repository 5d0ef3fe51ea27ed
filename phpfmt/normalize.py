"""
Brace and keyword normalizer.

One left-to-right pass over the token stream. Most tokens are pushed as
they come; the interesting ones look back at what was already pushed and
rewrite it: the whitespace before a `{` or an `else`, the `else` itself when
it turns out to be followed by `if`, the indentation after a line comment.

House style enforced here:
- `if (...) {`, `} elseif (...) {`, `} else {`, `} catch (...) {`,
  `do {` ... `} while (...);` with exactly one space around the keywords
- braceless single statements get braces
- `{` of classes, interfaces, traits and methods on its own line
- TRUE, FALSE, NULL in upper case
- `// comment` with a space after the slashes, `(int) $x` casts
- at most one blank line in a row
- doc comments reflowed with aligned @tags
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .docfmt import reflow_doc_comment
from .output import Output
from .tokens import (CONTROL_KINDS, VISIBILITY_KINDS, Kind, Token, is_line_comment,
                     tokenize)

BOOL_NULL = ('true', 'false', 'null')

# Keywords that continue the statement closed by the preceding '}'.
CONTINUATION_KINDS = (Kind.CATCH, Kind.FINALLY, Kind.ELSEIF, Kind.ELSE)
DECLARATION_KINDS = (Kind.CLASS, Kind.INTERFACE, Kind.TRAIT)
COMMENT_KINDS = (Kind.COMMENT, Kind.DOC_COMMENT)

# Heads whose `:` opens an alternative-syntax block, and the words closing one.
ALT_SYNTAX_HEADS = (Kind.IF, Kind.WHILE, Kind.FOR, Kind.FOREACH, Kind.SWITCH)
ALT_SYNTAX_ENDS = ('endif', 'endwhile', 'endfor', 'endforeach', 'endswitch')


def remove_empty_lines(whitespace: str) -> str:
    """Collapse three or more newlines to two."""
    return re.sub(r'\n.*\n.*\n', '\n\n', whitespace, flags=re.DOTALL)


@dataclass
class NormalizerState:
    """Flags carried from token to token.

    paren_depth is None outside a condition; while scanning one,
    paren_open tells whether its '(' was seen yet. When the depth drops
    back to 0 the next token arms expect_brace.

    synthetic_closes holds (brace depth, indent) per synthesized '{' that
    is still open. close_pending is set when the body statement of the
    innermost one has ended and the next significant token decides
    whether it closes now (anything but else/elseif/catch/finally or the
    while of a do).
    """
    write_space: bool = False
    paren_depth: Optional[int] = None
    paren_open: bool = False
    expect_brace: bool = False
    merge_else_if: bool = False
    comment_held: bool = False
    carried: List[Token] = field(default_factory=list)
    brace_on_next_line: bool = False
    searching_function: bool = False
    indent: str = ''
    head: Optional[Kind] = None
    brace_depth: int = 0
    synthetic_closes: List[Tuple[int, str]] = field(default_factory=list)
    close_pending: bool = False
    construct_braces: List[int] = field(default_factory=list)
    alt_blocks: List[int] = field(default_factory=list)
    do_levels: List[int] = field(default_factory=list)


class Normalizer:
    def __init__(self, align_tags: bool = True):
        self.output = Output()
        self.state = NormalizerState()
        self.align_tags = align_tags

    # ----------------------
    # Output helpers
    # ----------------------
    def push(self, kind: Kind, text: str) -> None:
        if kind is Kind.SYMBOL:
            if text == '{':
                self.state.brace_depth += 1
            elif text == '}':
                self.state.brace_depth -= 1
        self.output.push(kind, text)

    def sanitize_previous_whitespace(self, value: str = ' ') -> None:
        if self.output.kind() is Kind.WHITESPACE:
            self.output.replace(value)
        else:
            self.push(Kind.WHITESPACE, value)

    def take_trailing(self) -> List[Token]:
        """Remove the whitespace and comments at the end of the output."""
        tail: List[Token] = []
        while self.output.kind() in (Kind.WHITESPACE,) + COMMENT_KINDS:
            tail.insert(0, self.output.delete())
        return tail

    def push_moved_comments(self, held: List[Token]) -> None:
        """Push comments taken from before a '{' right after it."""
        while held and held[0].kind is Kind.WHITESPACE:
            held = held[1:]
        while held and held[-1].kind is Kind.WHITESPACE:
            held = held[:-1]
        if not held:
            return
        self.push(Kind.WHITESPACE, ' ')
        for tok in held[:-1]:
            self.output.push(tok.kind, tok.text)
        last = held[-1]
        self.output.push(last.kind, last.text.rstrip() if is_line_comment(last) else last.text)

    def open_brace_block(self, held: List[Token]) -> None:
        self.push(Kind.SYMBOL, '{')
        self.push_moved_comments(held)
        self.push(Kind.WHITESPACE, '\n' + self.state.indent + '\t')

    def close_block(self, indent: str) -> None:
        """Newline back at the construct indent, then '}'."""
        self.push(Kind.WHITESPACE, '\n' + indent)
        self.push(Kind.SYMBOL, '}')
        self.state.close_pending = self.synthetic_block_ends()

    def synthetic_block_ends(self) -> bool:
        """True when the innermost synthesized '{' is the open block at this depth."""
        s = self.state
        if not s.synthetic_closes or s.synthetic_closes[-1][0] != s.brace_depth:
            return False
        return not (s.alt_blocks and s.alt_blocks[-1] == len(s.synthetic_closes))

    def close_synthetic_block(self) -> None:
        _, indent = self.state.synthetic_closes.pop()
        self.close_block(indent)

    def close_pending_blocks(self) -> None:
        """Close every synthesized block ending here, ahead of the trailing whitespace."""
        tail = self.take_trailing()
        while self.synthetic_block_ends():
            self.close_synthetic_block()
        self.state.close_pending = False
        for tok in tail:
            self.output.push(tok.kind, tok.text)

    def continues_statement(self, kind: Kind) -> bool:
        s = self.state
        if kind in CONTINUATION_KINDS:
            return True
        return kind is Kind.WHILE and bool(s.do_levels) and s.do_levels[-1] == s.brace_depth

    # ----------------------
    # Token policy
    # ----------------------
    def feed(self, tok: Token) -> None:
        s = self.state
        kind, value = tok

        if s.close_pending and kind is not Kind.WHITESPACE and kind not in COMMENT_KINDS:
            s.close_pending = False
            if not self.continues_statement(kind):
                self.close_pending_blocks()
        if s.write_space:
            s.write_space = False
            if kind is Kind.WHITESPACE:
                value = ' '
            else:
                self.push(Kind.WHITESPACE, ' ')
        if s.paren_depth == 0 and s.paren_open:
            s.paren_depth = None
            s.paren_open = False
            s.expect_brace = True

        if kind is Kind.WHITESPACE:
            value = self.on_whitespace(value)
            if self.output.kind() is Kind.WHITESPACE:
                # line break laid down after comments moved behind a '{'
                if '\n' in value:
                    self.output.replace(value)
                return
            self.push(kind, value)
            return
        if s.expect_brace:
            if kind in COMMENT_KINDS:
                s.comment_held = True
            elif self.on_expected_brace(kind, value):
                return

        if is_line_comment(Token(kind, value)):
            value = re.sub(r'^//(\w)', r'// \1', value)
        elif kind is Kind.CAST:
            value = re.sub(r'\s+', '', value)
            s.write_space = True
        elif kind is Kind.SYMBOL and value == ';':
            self.on_semicolon(kind, value)
            return
        elif kind is Kind.IDENT and value.lower() in BOOL_NULL:
            value = value.upper()
        elif kind in CONTROL_KINDS:
            self.on_control_keyword(kind)
        elif s.paren_depth is not None:
            self.on_condition(value)
        elif kind in VISIBILITY_KINDS:
            s.indent = self.output.line_indent()
            s.searching_function = True
        elif kind in DECLARATION_KINDS or (kind is Kind.FUNCTION and s.searching_function):
            s.indent = self.output.line_indent()
            s.brace_on_next_line = True
            s.searching_function = False
        elif kind is Kind.DOC_COMMENT:
            value = reflow_doc_comment(value, self.output.line_indent(), self.align_tags)
        elif kind is Kind.SYMBOL and value == '{':
            if s.brace_on_next_line:
                s.brace_on_next_line = False
                self.sanitize_previous_whitespace('\n' + s.indent)
            elif self.output.kind() is Kind.WHITESPACE:
                self.output.replace(' ')
        elif kind is Kind.SYMBOL and value == '}':
            self.on_closing_brace()
            return
        elif kind is Kind.KEYWORD and value.lower() in ALT_SYNTAX_ENDS and s.alt_blocks:
            s.alt_blocks.pop()

        self.push(kind, value)

    def finish(self) -> None:
        """Close synthesized blocks left open at the end of input."""
        for tok in self.state.carried:
            self.output.push(tok.kind, tok.text)
        self.state.carried = []
        if self.synthetic_block_ends():
            self.close_pending_blocks()

    def on_whitespace(self, value: str) -> str:
        s = self.state
        if is_line_comment(self.output.peek()):
            comment = self.output.text()
            trimmed = comment.rstrip()
            if trimmed != comment:
                self.output.replace(trimmed)
                value = '\n' + value
        value = remove_empty_lines(value)

        # A parameter list spread over several lines keeps its '{' on the ')' line.
        if '\n' in value and self.output.text() == ',':
            s.brace_on_next_line = False
        return value

    def on_expected_brace(self, kind: Kind, value: str) -> bool:
        """Handle the first significant token after a construct head.

        Comments seen since the head were pushed as they came; they move
        behind the '{'. Returns True when the token was pushed here, False
        when a '{' was synthesized and the token still goes through the
        rest of the policy.
        """
        s = self.state
        s.expect_brace = False
        merge = s.merge_else_if
        s.merge_else_if = False
        held, s.carried = s.carried, []
        if s.comment_held:
            s.comment_held = False
            held = held + self.take_trailing()

        if merge and kind is Kind.IF:
            # drop "else" and the space after it; comments wait for the elseif's '{'
            if self.output.kind() is Kind.WHITESPACE:
                self.output.delete()
            self.output.delete()
            s.carried = held
            s.paren_depth = 0
            s.paren_open = False
            s.write_space = True
            self.push(Kind.ELSEIF, 'elseif')
            return True

        if value == ':':
            if not held and self.output.text() == ' ':
                self.output.delete()
            for tok in held:
                self.output.push(tok.kind, tok.text)
            if s.head in ALT_SYNTAX_HEADS:
                s.alt_blocks.append(len(s.synthetic_closes))
            self.push(kind, value)
            return True

        self.sanitize_previous_whitespace()
        if value == '{':
            self.push(kind, value)
            s.construct_braces.append(s.brace_depth)
            if held:
                self.push_moved_comments(held)
                self.push(Kind.WHITESPACE, '\n' + s.indent + '\t')
            return True
        self.open_brace_block(held)
        if value == ';':
            self.close_block(s.indent)
            return True
        s.synthetic_closes.append((s.brace_depth, s.indent))
        return False

    def on_semicolon(self, kind: Kind, value: str) -> None:
        s = self.state
        s.searching_function = False
        s.brace_on_next_line = False
        self.push(kind, value)
        # a for (;;) header is not a statement end
        if s.paren_depth is None and self.synthetic_block_ends():
            self.close_synthetic_block()

    def on_closing_brace(self) -> None:
        s = self.state
        construct = bool(s.construct_braces) and s.construct_braces[-1] == s.brace_depth
        if construct:
            s.construct_braces.pop()
        self.push(Kind.SYMBOL, '}')
        if construct:
            s.close_pending = self.synthetic_block_ends()

    def on_control_keyword(self, kind: Kind) -> None:
        s = self.state
        s.indent = self.output.line_indent()
        s.head = kind
        s.write_space = True

        closes_do = kind is Kind.WHILE and s.do_levels and s.do_levels[-1] == s.brace_depth
        if kind is Kind.DO:
            s.do_levels.append(s.brace_depth)
            s.expect_brace = True
        elif kind in (Kind.TRY, Kind.FINALLY, Kind.ELSE):
            s.expect_brace = True
            s.merge_else_if = kind is Kind.ELSE
        elif closes_do:
            s.do_levels.pop()
        else:
            s.paren_depth = 0
            s.paren_open = False

        # join "}" and the keyword, unless a comment sits between them
        previous = self.output.last_significant()
        if (kind in CONTINUATION_KINDS or closes_do) \
                and previous is not None and previous.text == '}':
            self.sanitize_previous_whitespace()

    def on_condition(self, value: str) -> None:
        s = self.state
        if value == '(':
            if not s.paren_open:
                s.paren_open = True
                s.paren_depth = 0
            s.paren_depth += 1
        elif value == ')' and s.paren_open:
            s.paren_depth -= 1


def normalize(content: str, align_tags: bool = True) -> str:
    normalizer = Normalizer(align_tags)
    for tok in tokenize(content):
        normalizer.feed(tok)
    normalizer.finish()
    return str(normalizer.output)
