"""
Global constant registry

Maps constant names to typed values (Integer, Float, Boolean). Consulted by
if conditions and const directives.

The registry holds two layers:
- global variables, set through the typed setters or loaded from YAML
- local overrides, which shadow globals of the same name

Mutation and snapshotting share a lock. The engine expands against a
snapshot, so a setter called from another thread never changes values
mid-request.
"""

import re
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Union

import yaml

from ..models.values import Boolean, Float, GlobalValue, Integer, int64_wrap, value_coerce


class RegistryError(Exception):
    """Raised when constants cannot be loaded or parsed"""
    pass


# YAML 1.1 only resolves floats with a dot, so 1e5 loads as a string
EXPONENT_FLOAT = re.compile(r"[-+]?[0-9][0-9_]*(\.[0-9_]*)?[eE][-+]?[0-9]+")


def scalar_read(raw: Any) -> GlobalValue:
    """
    Coerce a value loaded by yaml.safe_load into a GlobalValue

    Example:
        >>> scalar_read("1e5")
        Float(value=100000.0)

    Raises:
        TypeError: Not an int, float or bool (or exponent-form float string)
        ValueError: Integer outside 64-bit range
    """
    if isinstance(raw, str) and EXPONENT_FLOAT.fullmatch(raw.strip()):
        raw = float(raw.replace("_", ""))
    return value_coerce(raw)


def bitConstants_make() -> Dict[str, GlobalValue]:
    """
    Build the default BIT_0 .. BIT_63 constants

    Each is 1 << n as a signed 64-bit integer, so BIT_63 is negative.
    """
    return {f"BIT_{i}": Integer(int64_wrap(1 << i)) for i in range(64)}


class RegistrySnapshot:
    """
    Immutable view of a registry at one point in time

    Satisfies the ConstantTable protocol used by the engine.
    """

    def __init__(self, values: Mapping[str, GlobalValue]):
        self._values = MappingProxyType(dict(values))

    def lookup(self, name: str) -> Optional[GlobalValue]:
        return self._values.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)


class GlobalRegistry:
    """
    Mutable constant registry with typed setters

    Example:
        >>> registry = GlobalRegistry(bit_constants=False)
        >>> registry.set_global_int("SAMPLE_SIZE", 64)
        >>> registry.lookup("SAMPLE_SIZE")
        Integer(value=64)
    """

    def __init__(
        self,
        values: Optional[Mapping[str, Any]] = None,
        bit_constants: Optional[bool] = None,
    ) -> None:
        """
        Initialize registry

        Args:
            values: Initial constants as plain Python scalars or GlobalValues
            bit_constants: Seed BIT_n constants; defaults to appsettings.bit_constants
        """
        if bit_constants is None:
            from ..config import appsettings
            bit_constants = appsettings.bit_constants

        self._lock = threading.RLock()
        self.global_variables: Dict[str, GlobalValue] = (
            bitConstants_make() if bit_constants else {}
        )
        self.local_overrides: Dict[str, GlobalValue] = {}

        for name, raw in (values or {}).items():
            self.set_global(name, raw)

    def set_global(self, name: str, raw: Any) -> None:
        """Set a global from a plain Python scalar (bool, int or float)"""
        value = value_coerce(raw)
        with self._lock:
            self.global_variables[name] = value

    def set_global_int(self, name: str, value: int) -> None:
        self.set_global(name, Integer(value))

    def set_global_float(self, name: str, value: float) -> None:
        self.set_global(name, Float(value))

    def set_global_bool(self, name: str, value: bool) -> None:
        self.set_global(name, Boolean(value))

    def override_set(self, name: str, raw: Any) -> None:
        """Shadow a global with a local override"""
        value = value_coerce(raw)
        with self._lock:
            self.local_overrides[name] = value

    def overrides_clear(self) -> None:
        with self._lock:
            self.local_overrides.clear()

    def remove(self, name: str) -> None:
        """Remove a constant from both layers (no error if absent)"""
        with self._lock:
            self.global_variables.pop(name, None)
            self.local_overrides.pop(name, None)

    def lookup(self, name: str) -> Optional[GlobalValue]:
        """Resolve a name, local overrides first"""
        with self._lock:
            if name in self.local_overrides:
                return self.local_overrides[name]
            return self.global_variables.get(name)

    def snapshot(self) -> RegistrySnapshot:
        """Freeze the current merged view for one expansion request"""
        with self._lock:
            return RegistrySnapshot({**self.global_variables, **self.local_overrides})

    def definition_apply(self, definition: str) -> None:
        """
        Apply a NAME=VALUE definition string (command line -D form)

        VALUE is read as a YAML scalar, so 64, 0x40, 5.0, 1e5 and true all work.
        A bare NAME sets the boolean true.

        Raises:
            RegistryError: Empty name or a value that is not int/float/bool
        """
        name, sep, text = definition.partition("=")
        name = name.strip()
        if not name:
            raise RegistryError(f"Invalid definition '{definition}': missing name")

        if not sep:
            self.set_global(name, True)
            return

        try:
            raw = yaml.safe_load(text.strip())
        except yaml.YAMLError as e:
            raise RegistryError(f"Invalid value in definition '{definition}': {e}")

        try:
            self.set_global(name, scalar_read(raw))
        except (TypeError, ValueError) as e:
            raise RegistryError(f"Invalid value in definition '{definition}': {e}")

    def registry_loadYaml(self, path: Union[str, Path]) -> int:
        """
        Load globals from a flat YAML mapping file

        Example file:
            SAMPLE_SIZE: 64
            quality: 5.0
            USE_SHADOWS: true

        Returns:
            Number of constants loaded

        Raises:
            RegistryError: Unreadable file, invalid YAML, non-mapping document
                           or unsupported value types; the registry is left
                           unchanged
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                document: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise RegistryError(f"Failed to parse {path}: {e}")
        except OSError as e:
            raise RegistryError(f"Failed to load {path}: {e}")

        if document is None:
            return 0
        if not isinstance(document, dict):
            raise RegistryError(f"{path}: expected a mapping of constant names to values")

        values: Dict[str, GlobalValue] = {}
        for name, raw in document.items():
            try:
                values[str(name)] = scalar_read(raw)
            except (TypeError, ValueError) as e:
                raise RegistryError(f"{path}: constant '{name}': {e}")

        # all or nothing
        with self._lock:
            self.global_variables.update(values)

        return len(values)
