"""
Expansion error hierarchy

Every failure during a preprocessing request is raised as an ExpansionError
subclass carrying the error kind, the logical file path and the 1-based line
number where it originated. Errors abort the whole request.
"""

from enum import Enum
from typing import List, Optional, TypeVar


class ErrorKind(Enum):
    """Broad classes of expansion failure"""
    SCAN = "scan"                # malformed directive line
    STRUCTURAL = "structural"    # unbalanced if/else/end
    LOOKUP = "lookup"            # missing constant or file
    EVALUATION = "evaluation"    # bad condition syntax or types
    GRAPH = "graph"              # circular include


E = TypeVar("E", bound="ExpansionError")


class ExpansionError(Exception):
    """
    Base class for all preprocessing failures

    Attributes:
        kind: ErrorKind classification
        reason: Message without location prefix
        path: Logical path of the file being expanded (None if unknown)
        line: 1-based line number in that file (None if not line-specific)
    """

    kind: ErrorKind = ErrorKind.STRUCTURAL

    def __init__(
        self, reason: str, path: Optional[str] = None, line: Optional[int] = None
    ) -> None:
        self.reason = reason
        self.path = path
        self.line = line
        super().__init__(reason)

    def location_get(self) -> str:
        """Format 'path:line' (or whichever part is known)"""
        if self.path is None:
            return f"line {self.line}" if self.line is not None else ""
        if self.line is None:
            return self.path
        return f"{self.path}:{self.line}"

    def location_attach(self: E, path: str, line: Optional[int]) -> E:
        """
        Fill in location fields that are still unset.

        The expression evaluator knows nothing about files, so the engine
        calls this on the way out. Already-set fields are kept.

        Returns:
            self, so the call can be used in a raise statement
        """
        if self.path is None:
            self.path = path
        if self.line is None:
            self.line = line
        return self

    def __str__(self) -> str:
        location = self.location_get()
        if location:
            return f"{location}: {self.kind.value} error: {self.reason}"
        return f"{self.kind.value} error: {self.reason}"


class DirectiveScanError(ExpansionError):
    """Unknown keyword or malformed directive line"""
    kind = ErrorKind.SCAN


class StructuralError(ExpansionError):
    """Unmatched end, duplicate else or unterminated conditional block"""
    kind = ErrorKind.STRUCTURAL


class UndefinedConstantError(ExpansionError):
    """A constant referenced by a condition or a const directive is not in the registry"""
    kind = ErrorKind.LOOKUP

    def __init__(
        self, name: str, path: Optional[str] = None, line: Optional[int] = None
    ) -> None:
        self.name = name
        super().__init__(f"undefined constant '{name}'", path, line)


class ShaderNotFoundError(ExpansionError):
    """Entry or included file is missing from the source table"""
    kind = ErrorKind.LOOKUP

    def __init__(
        self,
        requested: str,
        path: Optional[str] = None,
        line: Optional[int] = None,
    ) -> None:
        self.requested = requested
        if path is None:
            reason = f"shader '{requested}' not found"
        else:
            reason = f"shader '{requested}' included from '{path}' not found"
        super().__init__(reason, path, line)


class InvalidPathError(ExpansionError):
    """Logical path is empty or contains '..' segments"""
    kind = ErrorKind.LOOKUP


class ExpressionSyntaxError(ExpansionError):
    """Condition text cannot be parsed"""
    kind = ErrorKind.EVALUATION


class TypeMismatchError(ExpansionError):
    """Operand types are incompatible (e.g. numeric compared with boolean)"""
    kind = ErrorKind.EVALUATION


class EvaluationError(ExpansionError):
    """Other evaluation failures (division by zero, undeclarable constant value)"""
    kind = ErrorKind.EVALUATION


class CircularIncludeError(ExpansionError):
    """
    A file includes itself, directly or transitively

    Attributes:
        chain: Logical paths from the outermost file to the repeated one,
               e.g. ["main.wgsl", "a.wgsl", "main.wgsl"]
    """
    kind = ErrorKind.GRAPH

    def __init__(
        self, chain: List[str], path: Optional[str] = None, line: Optional[int] = None
    ) -> None:
        self.chain = list(chain)
        super().__init__(f"circular include: {' -> '.join(self.chain)}", path, line)


class IncludeDepthError(ExpansionError):
    """
    Include nesting is deeper than the configured limit

    Attributes:
        chain: Logical paths from the entry file to the include that
               crossed the limit
        limit: Maximum number of nested files
    """
    kind = ErrorKind.GRAPH

    def __init__(
        self,
        chain: List[str],
        limit: int,
        path: Optional[str] = None,
        line: Optional[int] = None,
    ) -> None:
        self.chain = list(chain)
        self.limit = limit
        super().__init__(
            f"include depth limit of {limit} exceeded at '{self.chain[-1]}' "
            f"(entry '{self.chain[0]}')",
            path,
            line,
        )
