"""
Directive stream models

Defines the closed set of line forms produced by the directive scanner and
consumed by the expansion engine. Each form is a frozen dataclass; the engine
dispatches on the concrete type.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Union


class DirectiveKeyword(Enum):
    """
    Keywords accepted after the directive marker

    Used by the scanner for classification and by the lexer for highlighting.
    """
    IF = "if"
    ELSE = "else"
    END = "end"
    CONST = "const"
    INCLUDE = "include"


# Keywords that open, switch or close a conditional block
BLOCK_KEYWORDS: FrozenSet[str] = frozenset({
    DirectiveKeyword.IF.value,
    DirectiveKeyword.ELSE.value,
    DirectiveKeyword.END.value,
})

# Keywords that must carry an argument
ARGUMENT_KEYWORDS: FrozenSet[str] = frozenset({
    DirectiveKeyword.IF.value,
    DirectiveKeyword.CONST.value,
    DirectiveKeyword.INCLUDE.value,
})


def keyword_is(name: str) -> bool:
    """Check if a name is a recognised directive keyword"""
    return name in {keyword.value for keyword in DirectiveKeyword}


@dataclass(frozen=True)
class Text:
    """
    A plain source line passed through verbatim

    Attributes:
        line: Full line text including its line ending (if any)
        line_no: 1-based line number in the source file
    """
    line: str
    line_no: int


@dataclass(frozen=True)
class If:
    """
    Opens a conditional block

    Attributes:
        condition: Raw condition text, parsed later by the expression module
        line_no: Line of the directive, used for unterminated-block errors
        eol: Line ending of the directive line ("" on a final line)
    """
    condition: str
    line_no: int
    eol: str = "\n"


@dataclass(frozen=True)
class Else:
    line_no: int
    eol: str = "\n"


@dataclass(frozen=True)
class End:
    line_no: int
    eol: str = "\n"


@dataclass(frozen=True)
class Const:
    """
    Requests a constant declaration for a registry entry

    Example:
        "//:const SAMPLE_SIZE" -> Const(name="SAMPLE_SIZE", line_no=1)
    """
    name: str
    line_no: int
    eol: str = "\n"


@dataclass(frozen=True)
class Include:
    """
    Requests inline expansion of another workspace file

    Attributes:
        path: Logical workspace path as written after the keyword
    """
    path: str
    line_no: int
    eol: str = "\n"


Directive = Union[Text, If, Else, End, Const, Include]
