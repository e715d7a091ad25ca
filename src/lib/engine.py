"""
Expansion engine for //: directives

Transforms a workspace shader into its fully preprocessed text: resolves
conditional blocks, substitutes constant declarations and splices included
files in place.

Each request runs against one ExpansionContext holding the source table,
a snapshot of the registry and the stack of files being expanded. Any
failure raises an ExpansionError and no partial output is returned.
"""

from typing import List, Optional

from .expression import ExpressionEvaluator, ExpressionParser
from .log import LOG
from .scanner import DirectiveScanner
from ..models.context import BlockFrame, ConstantTable, ExpansionContext, SourceTable
from ..models.directives import Const, Directive, Else, End, If, Include, Text
from ..models.errors import (
    CircularIncludeError,
    EvaluationError,
    ExpansionError,
    IncludeDepthError,
    InvalidPathError,
    ShaderNotFoundError,
    StructuralError,
    TypeMismatchError,
    UndefinedConstantError,
)
from ..models.values import Boolean


def logicalPath_normalize(path: str) -> str:
    """
    Normalize a logical path

    Backslashes become slashes, empty and '.' segments are dropped.

    Example:
        >>> logicalPath_normalize("./shared//math.wgsl")
        'shared/math.wgsl'

    Raises:
        InvalidPathError: Empty path or any '..' segment
    """
    segments = [s for s in path.replace("\\", "/").split("/") if s not in ("", ".")]

    if not segments:
        raise InvalidPathError(f"invalid shader path '{path}'")
    if ".." in segments:
        raise InvalidPathError(f"invalid shader path '{path}': '..' segments are not allowed")

    return "/".join(segments)


class ExpansionEngine:
    """
    Expands shaders from a source table against a constant registry

    Responsibilities:
    - Resolve and load files, detecting include cycles
    - Track nested conditional blocks
    - Emit constant declarations
    - Splice included output inline

    Example:
        >>> engine = ExpansionEngine(workspace, registry)
        >>> engine.expand("main.wgsl")
        'const SAMPLE_SIZE = 64;\\n...'
    """

    def __init__(
        self,
        sources: SourceTable,
        registry: ConstantTable,
        max_depth: Optional[int] = None,
    ) -> None:
        """
        Initialize engine

        Args:
            sources: Anything with lookup(path) -> Optional[str]
            registry: Anything with lookup(name) -> Optional[GlobalValue];
                      a GlobalRegistry is snapshotted per request
            max_depth: Nested file limit; defaults to appsettings.max_include_depth
        """
        if max_depth is None:
            from ..config import appsettings
            max_depth = appsettings.max_include_depth

        self.sources = sources
        self.registry = registry
        self.max_depth = max_depth

    def constants_snapshot(self) -> ConstantTable:
        snapshot = getattr(self.registry, "snapshot", None)
        if callable(snapshot):
            return snapshot()
        return self.registry

    def expand(self, entry_path: str) -> str:
        """
        Expand one shader

        Args:
            entry_path: Logical path of the shader in the source table

        Returns:
            Preprocessed shader text

        Raises:
            ExpansionError: Scan, structural, lookup, evaluation or graph failure
        """
        context = ExpansionContext(sources=self.sources, constants=self.constants_snapshot())
        LOG(f"Expanding {entry_path}", level=2)
        output = self.file_expand(context, entry_path, requester=None, line=None)
        LOG(f"Expanded {entry_path}: {len(output)} chars", level=2)
        return output

    def file_expand(
        self,
        context: ExpansionContext,
        requested: str,
        requester: Optional[str],
        line: Optional[int],
    ) -> str:
        """
        Expand a single file (recursive through includes)

        Args:
            context: Current request state
            requested: Logical path as written by the caller or include directive
            requester: Path of the including file (None for the entry shader)
            line: Line of the include directive in the requester

        Returns:
            Expanded text of the requested file
        """
        try:
            path = logicalPath_normalize(requested)
        except InvalidPathError as e:
            e.location_attach(requester, line)
            raise

        source = context.sources.lookup(path)
        if source is None:
            raise ShaderNotFoundError(path, requester, line)

        if path in context.in_progress:
            raise CircularIncludeError(context.chain_get(path), requester, line)

        if len(context.include_stack) >= self.max_depth:
            raise IncludeDepthError(context.chain_get(path), self.max_depth, requester, line)

        context.file_enter(path)
        try:
            directives = DirectiveScanner(source, path=path).scan()
            LOG(f"{path}: {len(directives)} lines scanned", level=3)
            return self.directives_walk(context, path, directives)
        finally:
            context.file_leave(path)

    def directives_walk(
        self, context: ExpansionContext, path: str, directives: List[Directive]
    ) -> str:
        """
        Walk one file's directive stream and assemble its output

        A line is emitted only while the innermost open block is active; a
        block opened inside an inactive block is inactive regardless of its
        own condition.

        Raises:
            StructuralError: Stray else/end or unterminated block
        """
        frames: List[BlockFrame] = []
        parts: List[str] = []

        for directive in directives:
            active = frames[-1].active_is() if frames else True

            if isinstance(directive, Text):
                if active:
                    parts.append(directive.line)

            elif isinstance(directive, If):
                frames.append(self.block_open(context, path, directive, active))

            elif isinstance(directive, Else):
                if not frames:
                    raise StructuralError("'else' without matching 'if'", path, directive.line_no)
                frame = frames[-1]
                if frame.in_else:
                    raise StructuralError(
                        f"duplicate 'else' for 'if' at line {frame.line_no}",
                        path,
                        directive.line_no,
                    )
                frame.in_else = True

            elif isinstance(directive, End):
                if not frames:
                    raise StructuralError("'end' without matching 'if'", path, directive.line_no)
                frames.pop()

            elif isinstance(directive, Const):
                if active:
                    parts.append(self.constant_declare(context, path, directive))

            elif isinstance(directive, Include):
                if active:
                    parts.append(self.include_splice(context, path, directive))
                else:
                    LOG(f"{path}:{directive.line_no}: skipped include {directive.path}", level=3)

        if frames:
            raise StructuralError("unterminated conditional block", path, frames[-1].line_no)

        return "".join(parts)

    def block_open(
        self, context: ExpansionContext, path: str, directive: If, active: bool
    ) -> BlockFrame:
        """
        Open a conditional block

        The condition is always parsed so syntax errors surface in dead
        branches too, but only evaluated when the enclosing context is
        active.
        """
        try:
            expression = ExpressionParser(directive.condition).parse()
            condition = False
            if active:
                condition = ExpressionEvaluator(context.constants).truth_evaluate(expression)
        except ExpansionError as e:
            e.location_attach(path, directive.line_no)
            raise

        LOG(
            f"{path}:{directive.line_no}: if {directive.condition} -> "
            f"{condition if active else 'skipped'}",
            level=3,
        )
        return BlockFrame(line_no=directive.line_no, outer_active=active, condition=condition)

    def constant_declare(self, context: ExpansionContext, path: str, directive: Const) -> str:
        """
        Render a const directive as a declaration line

        Example:
            {SAMPLE_SIZE: Integer(64)} -> "const SAMPLE_SIZE = 64;"

        Raises:
            UndefinedConstantError: Name not in registry
            TypeMismatchError: Boolean constant
            EvaluationError: Non-finite float
        """
        value = context.constants.lookup(directive.name)
        if value is None:
            raise UndefinedConstantError(directive.name, path, directive.line_no)

        if isinstance(value, Boolean):
            raise TypeMismatchError(
                f"constant '{directive.name}' is boolean; only integer and float "
                f"constants can be declared",
                path,
                directive.line_no,
            )

        try:
            literal = value.literal_render()
        except ValueError as e:
            raise EvaluationError(f"constant '{directive.name}': {e}", path, directive.line_no)

        return f"const {directive.name} = {literal};{directive.eol}"

    def include_splice(self, context: ExpansionContext, path: str, directive: Include) -> str:
        """
        Expand an included file for inline splicing

        The include line's own line ending follows the spliced text unless
        that text already ends with a newline.
        """
        LOG(f"{path}:{directive.line_no}: include {directive.path}", level=2)
        text = self.file_expand(context, directive.path, path, directive.line_no)
        if text and directive.eol and not text.endswith("\n"):
            text += directive.eol
        return text
