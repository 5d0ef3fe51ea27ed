"""
Formatter entry point.

format_source() chains the passes; each one takes and returns plain text
and re-tokenizes what it gets, so any of them can be switched off.
"""
from __future__ import annotations

import sys
from typing import Optional

from . import config
from .align import align_constants
from .config import Options
from .normalize import normalize
from .uses import order_use_statements
from .whitespace import ensure_trailing_eol, spaces_to_tabs, strip_trailing_whitespace


def _debug(stage: str, before: str, after: str) -> None:
    if config.DEBUG:
        state = "changed" if before != after else "unchanged"
        print(f"DEBUG: {stage}: {state}", file=sys.stderr)


def format_source(source: str, options: Optional[Options] = None) -> str:
    """Format PHP source text according to options (defaults if None)."""
    if options is None:
        options = Options()

    text = normalize(source, options.align_columns)
    _debug("normalize", source, text)

    if options.order_uses:
        before, text = text, order_use_statements(text)
        _debug("use statements", before, text)
    if options.align_columns:
        before, text = text, align_constants(text)
        _debug("constants", before, text)
    if options.convert_tabs:
        before, text = text, spaces_to_tabs(text, options.tab_width)
        _debug("tabs", before, text)

    text = strip_trailing_whitespace(text)
    return ensure_trailing_eol(text)
