"""
Models package for shaderprep

Contains data structures and type definitions for the preprocessing pipeline.
"""

from .state import ProgramState, pipeline
from .values import Integer, Float, Boolean, GlobalValue, value_coerce
from .directives import Text, If, Else, End, Const, Include, Directive, DirectiveKeyword
from .context import ExpansionContext, BlockFrame, SourceTable, ConstantTable
from .errors import (
    ErrorKind,
    ExpansionError,
    DirectiveScanError,
    StructuralError,
    UndefinedConstantError,
    ShaderNotFoundError,
    InvalidPathError,
    ExpressionSyntaxError,
    TypeMismatchError,
    EvaluationError,
    CircularIncludeError,
    IncludeDepthError,
)

__all__ = [
    "ProgramState",
    "pipeline",
    "Integer",
    "Float",
    "Boolean",
    "GlobalValue",
    "value_coerce",
    "Text",
    "If",
    "Else",
    "End",
    "Const",
    "Include",
    "Directive",
    "DirectiveKeyword",
    "ExpansionContext",
    "BlockFrame",
    "SourceTable",
    "ConstantTable",
    "ErrorKind",
    "ExpansionError",
    "DirectiveScanError",
    "StructuralError",
    "UndefinedConstantError",
    "ShaderNotFoundError",
    "InvalidPathError",
    "ExpressionSyntaxError",
    "TypeMismatchError",
    "EvaluationError",
    "CircularIncludeError",
    "IncludeDepthError",
]
