"""
Shader workspace (source table)

Holds every shader source keyed by logical path: workspace-relative,
slash-separated, no '..' segments. A workspace is fully populated before
any expansion and is read-only afterwards.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Union

from .engine import ExpansionEngine, logicalPath_normalize
from .log import LOG
from .registry import GlobalRegistry
from .scanner import DirectiveScanner
from ..models.errors import ExpansionError


class WorkspaceError(Exception):
    """Raised when shader sources cannot be loaded into a workspace"""
    pass


class Workspace:
    """
    In-memory table of shader sources plus the registry they expand against

    Example:
        >>> ws = Workspace.from_memory({"main.wgsl": "//:include math.wgsl",
        ...                             "math.wgsl": "const PI = 3.14;"})
        >>> ws.get_shader("main.wgsl")
        'const PI = 3.14;'
    """

    def __init__(
        self,
        sources: Optional[Mapping[str, str]] = None,
        registry: Optional[GlobalRegistry] = None,
        root: Optional[Path] = None,
    ) -> None:
        self.root = root
        self.registry = registry if registry is not None else GlobalRegistry()
        self.sources: Dict[str, str] = {}
        for path, source in (sources or {}).items():
            self.sources[logicalPath_normalize(path)] = source

    @classmethod
    def from_memory(
        cls, sources: Mapping[str, str], registry: Optional[GlobalRegistry] = None
    ) -> "Workspace":
        return cls(sources=sources, registry=registry)

    @classmethod
    def from_directory(
        cls,
        root: Union[str, Path],
        extensions: Optional[Iterable[str]] = None,
        registry: Optional[GlobalRegistry] = None,
    ) -> "Workspace":
        """
        Load every shader file below root

        Args:
            root: Workspace root directory
            extensions: File suffixes to load; defaults to appsettings.shader_extensions
            registry: Registry to attach (a fresh one if omitted)

        Returns:
            Workspace keyed by slash-separated paths relative to root

        Raises:
            FileNotFoundError: If root is not a directory
            WorkspaceError: If a shader file is not valid UTF-8
        """
        root = Path(root)
        if not root.is_dir():
            raise FileNotFoundError(f"Workspace root not found: {root}")

        if extensions is None:
            from ..config import appsettings
            extensions = appsettings.shader_extensions
        suffixes = {ext.lower() for ext in extensions}

        sources: Dict[str, str] = {}
        for file in sorted(root.rglob("*")):
            if file.is_file() and file.suffix.lower() in suffixes:
                logical = file.relative_to(root).as_posix()
                try:
                    sources[logical] = file.read_text(encoding="utf-8")
                except UnicodeDecodeError as e:
                    raise WorkspaceError(
                        f"{logical}: not valid UTF-8 ({e.reason} at byte {e.start})"
                    ) from e
                LOG(f"Loaded {logical} ({len(sources[logical])} chars)", level=3)

        LOG(f"Workspace {root}: {len(sources)} shader(s)", level=2)
        return cls(sources=sources, registry=registry, root=root)

    def lookup(self, path: str) -> Optional[str]:
        """Source text for an already-normalized logical path, or None"""
        return self.sources.get(path)

    @property
    def paths(self) -> List[str]:
        return sorted(self.sources)

    def set_global_int(self, name: str, value: int) -> None:
        self.registry.set_global_int(name, value)

    def set_global_float(self, name: str, value: float) -> None:
        self.registry.set_global_float(name, value)

    def set_global_bool(self, name: str, value: bool) -> None:
        self.registry.set_global_bool(name, value)

    def sources_validate(self) -> Dict[str, ExpansionError]:
        """
        Scan every file for directive syntax errors without expanding

        Returns:
            Mapping of logical path to its first scan error (empty when clean)
        """
        errors: Dict[str, ExpansionError] = {}
        for path in self.paths:
            try:
                DirectiveScanner(self.sources[path], path=path).scan()
            except ExpansionError as e:
                errors[path] = e
        return errors

    def get_shader(self, path: str) -> str:
        """
        Fully expand one shader against the current registry

        Raises:
            ExpansionError: Any preprocessing failure
        """
        return ExpansionEngine(self, self.registry).expand(path)
