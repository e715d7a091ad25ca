"""
shaderprep - Source-level preprocessor for WGSL shaders

Expands //:if blocks, substitutes //:const declarations and resolves
//:include directives before shader text reaches the WGSL compiler.
"""

__version__ = "1.0.0"

from .lib import ExpansionEngine, GlobalRegistry, Workspace, LOG, state_connectToLogger
from .models import ExpansionError, ErrorKind, Integer, Float, Boolean

__all__ = [
    "ExpansionEngine",
    "GlobalRegistry",
    "Workspace",
    "ExpansionError",
    "ErrorKind",
    "Integer",
    "Float",
    "Boolean",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
