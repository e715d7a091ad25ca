"""
Directive scanner for //: markup

Turns one file's raw text into an ordered list of Directive values.

Every line becomes exactly one directive:
- Lines whose stripped text starts with the directive marker are classified
  by the keyword that follows (if, else, end, const, include)
- All other lines, including ordinary comments, become Text

The scanner never interprets directive semantics. An if condition is kept
as raw text so that malformed directive lines (scan errors) stay distinct
from malformed conditions (evaluation errors).

Example:
    >>> scanner = DirectiveScanner("//:if DEBUG\\nfoo();\\n//:end\\n")
    >>> [type(d).__name__ for d in scanner.scan()]
    ['If', 'Text', 'End']
"""

import re
from typing import List, NoReturn, Optional, Tuple

from ..models.directives import (
    ARGUMENT_KEYWORDS,
    Const,
    Directive,
    DirectiveKeyword,
    Else,
    End,
    If,
    Include,
    Text,
    keyword_is,
)
from ..models.errors import DirectiveScanError


IDENTIFIER = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')


def lines_split(source: str) -> List[str]:
    """
    Split source into lines, keeping each newline terminator.

    Only "\\n" ends a line; a "\\r" before it stays part of the line ending.

    Example:
        >>> lines_split("a\\r\\nb")
        ['a\\r\\n', 'b']
    """
    lines = [line + "\n" for line in source.split("\n")]
    lines[-1] = lines[-1][:-1]
    if not lines[-1]:
        lines.pop()
    return lines


def lineEnding_split(line: str) -> Tuple[str, str]:
    """
    Separate a line from its terminator.

    Example:
        >>> lineEnding_split("foo\\r\\n")
        ('foo', '\\r\\n')
    """
    body = line.rstrip("\r\n")
    return body, line[len(body):]


class DirectiveScanner:
    """
    Line classifier for a single source file

    Handles:
    - Indented directive lines
    - Arguments running to end of line (trimmed)
    - CRLF and missing final newline (line endings are preserved)
    - Error reporting with path and line number
    """

    def __init__(self, source: str, path: Optional[str] = None, marker: Optional[str] = None):
        """
        Initialize scanner with source text

        Args:
            source: Raw file contents
            path: Logical path of the file (for error messages)
            marker: Directive sentinel; defaults to appsettings.directive_marker
        """
        if marker is None:
            from ..config import appsettings
            marker = appsettings.directive_marker

        self.source = source
        self.path = path
        self.marker = marker
        self.line_number = 0

    def scan(self) -> List[Directive]:
        """
        Classify every line of the source.

        Returns:
            Directives in source order; concatenating the text of all lines
            reproduces the source exactly.

        Raises:
            DirectiveScanError: Unknown keyword or malformed directive line
        """
        directives: List[Directive] = []

        for line_number, line in enumerate(lines_split(self.source), start=1):
            self.line_number = line_number
            directives.append(self.line_classify(line))

        return directives

    def line_classify(self, line: str) -> Directive:
        """
        Classify a single line

        Args:
            line: Line text including its line ending

        Returns:
            Text for ordinary lines, or the matching directive variant
        """
        body, eol = lineEnding_split(line)
        stripped = body.strip()

        if not stripped.startswith(self.marker):
            return Text(line=line, line_no=self.line_number)

        keyword, argument = self.directive_split(stripped[len(self.marker):])
        self.directive_validate(keyword, argument)

        if keyword == DirectiveKeyword.IF.value:
            return If(condition=argument, line_no=self.line_number, eol=eol)
        if keyword == DirectiveKeyword.ELSE.value:
            return Else(line_no=self.line_number, eol=eol)
        if keyword == DirectiveKeyword.END.value:
            return End(line_no=self.line_number, eol=eol)
        if keyword == DirectiveKeyword.CONST.value:
            return Const(name=argument, line_no=self.line_number, eol=eol)
        return Include(path=argument, line_no=self.line_number, eol=eol)

    def directive_split(self, rest: str) -> Tuple[str, str]:
        """
        Split the text after the marker into keyword and trimmed argument

        Example:
            "if  quality >= 4.0 " -> ("if", "quality >= 4.0")
        """
        parts = rest.split(maxsplit=1)
        if not parts or rest[0].isspace():
            return "", rest.strip()
        keyword = parts[0]
        return keyword, rest[len(keyword):].strip()

    def directive_validate(self, keyword: str, argument: str) -> None:
        """
        Check keyword and argument shape

        Raises:
            DirectiveScanError: On any malformed directive line
        """
        if not keyword:
            self.error(f"missing directive keyword after '{self.marker}'")

        if not keyword_is(keyword):
            self.error(f"unknown directive '{keyword}'")

        if keyword in ARGUMENT_KEYWORDS:
            if not argument:
                self.error(f"directive '{keyword}' requires an argument")
        elif argument:
            self.error(f"directive '{keyword}' takes no argument, got '{argument}'")

        if keyword == DirectiveKeyword.CONST.value and not IDENTIFIER.fullmatch(argument):
            self.error(f"invalid constant name '{argument}'")

    def error(self, message: str) -> NoReturn:
        """
        Report scan error at the current line

        Raises:
            DirectiveScanError: Always
        """
        raise DirectiveScanError(message, self.path, self.line_number)
