"""
Diagnostic rendering for expansion errors

Formats an ExpansionError as a message plus a numbered source excerpt around
the failing line, optionally syntax-highlighted for terminals.

Example output:
    shaders/main.wgsl:3: lookup error: undefined constant 'MISSING'
         2 | fn main() {
      >  3 | //:const MISSING
         4 | }
"""

from typing import List, Optional

from pygments import highlight
from pygments.formatters import TerminalFormatter

from .lexer import ShaderprepLexer
from .scanner import lines_split
from ..models.context import SourceTable
from ..models.errors import CircularIncludeError, ExpansionError


def excerpt_lines(source: str, line: int, context: int, color: bool) -> List[str]:
    """
    Build numbered excerpt lines around a 1-based line number

    Args:
        source: Full file text
        line: Line to mark
        context: Lines of context on each side
        color: Highlight with Pygments terminal colors

    Returns:
        Rendered lines without trailing newlines
    """
    lines = [text.rstrip("\r\n") for text in lines_split(source)]
    if not lines:
        return []

    first = max(1, line - context)
    last = min(len(lines), line + context)
    window = lines[first - 1:last]

    if color:
        rendered = highlight(
            "\n".join(window) + "\n", ShaderprepLexer(stripnl=False), TerminalFormatter()
        )
        window = rendered.split("\n")[:len(window)]

    width = len(str(last))
    result = []
    for number, text in enumerate(window, start=first):
        marker = ">" if number == line else " "
        result.append(f"  {marker} {number:>{width}} | {text}")
    return result


def error_render(
    error: ExpansionError,
    sources: Optional[SourceTable] = None,
    context: int = 2,
    color: bool = False,
) -> str:
    """
    Render an expansion error for display

    Args:
        error: The failure to describe
        sources: Source table to pull the excerpt from (no excerpt if None)
        context: Lines of context around the failing line
        color: Use ANSI colors in the excerpt

    Returns:
        Multi-line diagnostic text
    """
    parts = [str(error)]

    if isinstance(error, CircularIncludeError):
        parts.append("  include chain:")
        parts.extend(f"    {depth}. {path}" for depth, path in enumerate(error.chain, start=1))

    if sources is not None and error.path is not None and error.line is not None:
        source = sources.lookup(error.path)
        if source is not None:
            parts.extend(excerpt_lines(source, error.line, context, color))

    return "\n".join(parts)
