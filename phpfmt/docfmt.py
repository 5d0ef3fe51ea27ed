"""Reflow of /** doc comments */ with aligned annotation tags."""
from __future__ import annotations

import re
from typing import List

from .align import align_table

TAG_RE = re.compile(r'^\s*@[a-z-]+', re.IGNORECASE)
MARKER_RE = re.compile(r'^\s*\* ?(.*)')


def reflow_doc_comment(value: str, indent: str, align: bool = True) -> str:
    """Re-render a doc comment at the given indentation.

    A comment written on one line stays on one line when it still holds a
    single line of text. Runs of @tag lines are aligned as a table unless
    align is False, in which case they are kept as written.
    """
    one_line = not re.match(r'/\*\*\s*\n', value)
    body = value.strip('/*\r\n\t ')
    lines = body.strip().split('\n')

    output_lines: List[str] = []
    table: List[List[str]] = []
    for raw in lines + [None]:
        if raw is None:
            line = None
        else:
            line = raw.rstrip('\t\r ')
            m = MARKER_RE.match(line)
            line = m.group(1) if m else line.lstrip()

        if align and line is not None and TAG_RE.match(line):
            table.append(line.split())
            continue
        if table:
            output_lines.extend(align_table(table))
            table = []
        if line is not None:
            output_lines.append(line)

    if one_line and len(output_lines) == 1:
        return f"/** {output_lines[0]} */"
    body = '\n'.join(f"{indent} * {line}" for line in output_lines)
    return f"/**\n{body}\n{indent} */"
