"""
Per-request expansion state

ExpansionContext is created at the start of one expand() call and dropped
when it returns. BlockFrame records one open conditional block.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Set

from .values import GlobalValue


class SourceTable(Protocol):
    """Logical path -> raw source text"""

    def lookup(self, path: str) -> Optional[str]:
        ...


class ConstantTable(Protocol):
    """Constant name -> typed value, read-only during an expansion"""

    def lookup(self, name: str) -> Optional[GlobalValue]:
        ...


@dataclass
class BlockFrame:
    """
    One open if/else/end block on the engine's block stack

    Attributes:
        line_no: Line of the opening if directive
        outer_active: Whether the enclosing context was active when the
                      block opened (an inactive outer block dominates)
        condition: Evaluated condition; False when never evaluated
        in_else: True once the else directive has been seen
    """
    line_no: int
    outer_active: bool
    condition: bool = False
    in_else: bool = False

    def active_is(self) -> bool:
        if not self.outer_active:
            return False
        return self.condition != self.in_else


@dataclass
class ExpansionContext:
    """
    State for one top-level expansion request

    Attributes:
        sources: Source table collaborator (borrowed)
        constants: Registry snapshot (borrowed, never mutated)
        include_stack: Logical paths currently being expanded, outermost first
        in_progress: Same paths as a set for O(1) cycle checks
    """
    sources: SourceTable
    constants: ConstantTable
    include_stack: List[str] = field(default_factory=list)
    in_progress: Set[str] = field(default_factory=set)

    def file_enter(self, path: str) -> None:
        self.include_stack.append(path)
        self.in_progress.add(path)

    def file_leave(self, path: str) -> None:
        self.include_stack.pop()
        self.in_progress.discard(path)

    def chain_get(self, repeated: str) -> List[str]:
        """
        Build the include chain that closes a cycle.

        Runs from the entry file down to the repeated path, e.g.
        main -> a -> b -> a.
        """
        return self.include_stack + [repeated]
