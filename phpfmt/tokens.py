"""
Token source for the formatter passes.

Wraps Pygments' PhpLexer and reshapes its output into a flat list of
(kind, text) tokens that looks like PHP's own token stream:
- punctuation runs such as '();' are split into one token per character
- operator runs are split into single PHP operators ('=-' gives '=', '-')
- adjacent whitespace is merged into one token
- '( int )' style casts become one CAST token
- a line comment keeps its terminating newline

Concatenating the text of all tokens always gives back the input.
"""
from __future__ import annotations

import re
from collections import namedtuple
from enum import Enum, auto
from typing import Iterable, Iterator, List, Tuple

from pygments.lexers.php import PhpLexer
from pygments.token import Comment, Keyword, Name, Operator, Punctuation, String, Text


class Kind(Enum):
    WHITESPACE = auto()
    COMMENT = auto()      # //, # and /* */ comments
    DOC_COMMENT = auto()  # /** */
    IF = auto()
    ELSEIF = auto()
    ELSE = auto()
    SWITCH = auto()
    DO = auto()
    WHILE = auto()
    FOR = auto()
    FOREACH = auto()
    TRY = auto()
    CATCH = auto()
    FINALLY = auto()
    CLASS = auto()
    INTERFACE = auto()
    TRAIT = auto()
    FUNCTION = auto()
    PUBLIC = auto()
    PROTECTED = auto()
    PRIVATE = auto()
    FINAL = auto()
    CONST = auto()
    USE = auto()
    AS = auto()
    CAST = auto()
    SYMBOL = auto()       # punctuation and operators
    IDENT = auto()        # bare names, including true/false/null
    KEYWORD = auto()      # any other reserved word
    OTHER = auto()        # variables, literals, member names, tags, inline html


Token = namedtuple('Token', ['kind', 'text'])

KEYWORDS = {
    'if': Kind.IF,
    'elseif': Kind.ELSEIF,
    'else': Kind.ELSE,
    'switch': Kind.SWITCH,
    'do': Kind.DO,
    'while': Kind.WHILE,
    'for': Kind.FOR,
    'foreach': Kind.FOREACH,
    'try': Kind.TRY,
    'catch': Kind.CATCH,
    'finally': Kind.FINALLY,
    'class': Kind.CLASS,
    'interface': Kind.INTERFACE,
    'trait': Kind.TRAIT,
    'function': Kind.FUNCTION,
    'public': Kind.PUBLIC,
    'protected': Kind.PROTECTED,
    'private': Kind.PRIVATE,
    'final': Kind.FINAL,
    'const': Kind.CONST,
    'use': Kind.USE,
    'as': Kind.AS,
}

CONTROL_KINDS = frozenset([
    Kind.IF, Kind.ELSEIF, Kind.ELSE, Kind.SWITCH, Kind.DO, Kind.WHILE,
    Kind.FOR, Kind.FOREACH, Kind.TRY, Kind.CATCH, Kind.FINALLY,
])
VISIBILITY_KINDS = frozenset([Kind.PUBLIC, Kind.PROTECTED, Kind.PRIVATE])

CAST_TYPES = frozenset([
    'array', 'bool', 'boolean', 'double', 'float', 'real', 'int', 'integer',
    'object', 'string', 'unset', 'binary',
])

PUNCTUATION_CHARS = set('[]{}();,')

# Longest first; anything not listed falls back to a single character.
OPERATORS = sorted([
    '<=>', '**=', '...', '<<=', '>>=', '===', '!==', '??=', '?->',
    '++', '--', '->', '=>', '::', '==', '!=', '<>', '<=', '>=', '&&', '||',
    '??', '+=', '-=', '*=', '/=', '.=', '%=', '&=', '|=', '^=', '<<', '>>',
    '**',
], key=len, reverse=True)


def is_line_comment(tok: Token) -> bool:
    """True for '//' and '#' comments (not for '/* */' block comments)."""
    return tok is not None and tok.kind is Kind.COMMENT and not tok.text.startswith('/*')


def get_indent(whitespace: str) -> str:
    """Trailing run of tabs/spaces of a whitespace text."""
    return re.search(r'[\t ]*\Z', whitespace or '').group(0)


def split_operators(text: str) -> List[str]:
    parts: List[str] = []
    i = 0
    while i < len(text):
        for op in OPERATORS:
            if text.startswith(op, i):
                parts.append(op)
                i += len(op)
                break
        else:
            parts.append(text[i])
            i += 1
    return parts


def _raw_tokens(source: str) -> Iterator[Tuple[object, str]]:
    startinline = '<?' not in source
    lexer = PhpLexer(startinline=startinline)
    for _, ttype, value in lexer.get_tokens_unprocessed(source):
        if not value:
            continue
        if ttype in Punctuation and all(c in PUNCTUATION_CHARS for c in value):
            for c in value:
                yield ttype, c
        elif ttype in Operator:
            for op in split_operators(value):
                yield ttype, op
        else:
            yield ttype, value


def classify(ttype, value: str) -> Kind:
    if ttype in Text and value.isspace():
        return Kind.WHITESPACE
    if ttype in String.Doc:
        return Kind.DOC_COMMENT
    if ttype in Comment.Single or ttype in Comment.Multiline:
        return Kind.COMMENT
    if ttype in Punctuation or ttype in Operator:
        return Kind.SYMBOL
    if ttype in Keyword:
        lowered = value.lower()
        if lowered in KEYWORDS:
            return KEYWORDS[lowered]
        if lowered in ('true', 'false', 'null'):
            return Kind.IDENT
        return Kind.KEYWORD
    if ttype in Name and ttype not in Name.Variable and ttype not in Name.Attribute:
        return Kind.IDENT
    return Kind.OTHER


def _cast_at(tokens: List[Token], i: int) -> int:
    """Length of a '(' [ws] type [ws] ')' cast starting at i, or 0."""
    j = i + 1
    if j < len(tokens) and tokens[j].kind is Kind.WHITESPACE and '\n' not in tokens[j].text:
        j += 1
    if j >= len(tokens) or tokens[j].kind not in (Kind.IDENT, Kind.KEYWORD) \
            or tokens[j].text.lower() not in CAST_TYPES:
        return 0
    j += 1
    if j < len(tokens) and tokens[j].kind is Kind.WHITESPACE and '\n' not in tokens[j].text:
        j += 1
    if j < len(tokens) and tokens[j] == Token(Kind.SYMBOL, ')'):
        return j + 1 - i
    return 0


def _merge_casts(tokens: List[Token]) -> List[Token]:
    merged: List[Token] = []
    i = 0
    while i < len(tokens):
        size = _cast_at(tokens, i) if tokens[i] == Token(Kind.SYMBOL, '(') else 0
        if size:
            merged.append(Token(Kind.CAST, render(tokens[i:i + size])))
            i += size
        else:
            merged.append(tokens[i])
            i += 1
    return merged


def tokenize(source: str) -> List[Token]:
    """Split PHP source into classified tokens."""
    if not source:
        return []
    # The lexer only recognises a line comment up to its newline.
    appended = not source.endswith('\n')
    text = source + '\n' if appended else source

    tokens: List[Token] = []
    for ttype, value in _raw_tokens(text):
        kind = classify(ttype, value)
        if kind is Kind.WHITESPACE and tokens and tokens[-1].kind is Kind.WHITESPACE:
            tokens[-1] = Token(Kind.WHITESPACE, tokens[-1].text + value)
        else:
            tokens.append(Token(kind, value))

    if appended and tokens:
        last = tokens.pop()
        if len(last.text) > 1:
            tokens.append(Token(last.kind, last.text[:-1]))
    return _merge_casts(tokens)


def render(tokens: Iterable[Token]) -> str:
    return ''.join(tok.text for tok in tokens)
