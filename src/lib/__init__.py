"""
shaderprep - Source-level preprocessor for WGSL shaders

Conditional blocks, typed constants and file inclusion via //: directives.
"""

__version__ = "1.0.0"

from .scanner import DirectiveScanner
from .expression import ExpressionParser, ExpressionEvaluator, condition_evaluate
from .engine import ExpansionEngine
from .registry import GlobalRegistry, RegistryError
from .workspace import Workspace, WorkspaceError
from .log import LOG, state_connectToLogger

__all__ = [
    "DirectiveScanner",
    "ExpressionParser",
    "ExpressionEvaluator",
    "condition_evaluate",
    "ExpansionEngine",
    "GlobalRegistry",
    "RegistryError",
    "Workspace",
    "WorkspaceError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
