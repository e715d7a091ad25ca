"""
Workspace tests

Tests building source tables from memory and from a directory tree, syntax
validation of every source and the registry setters.
"""

import pytest

from shaderprep.lib.registry import GlobalRegistry
from shaderprep.lib.workspace import Workspace, WorkspaceError
from shaderprep.models.errors import DirectiveScanError, InvalidPathError
from shaderprep.models.values import Boolean, Float, Integer


@pytest.fixture
def shader_tree(tmp_path):
    """Small shader directory with a nested include"""
    (tmp_path / "shared").mkdir()
    (tmp_path / "main.wgsl").write_text("//:include shared/math.wgsl\n//:const SAMPLES\n")
    (tmp_path / "shared" / "math.wgsl").write_text("const PI = 3.14;\n")
    (tmp_path / "README.md").write_text("not a shader\n")
    return tmp_path


class TestFromMemory:
    """In-memory source tables"""

    def test_keys_normalized(self):
        workspace = Workspace.from_memory({"./a//b.wgsl": "x"})
        assert workspace.paths == ["a/b.wgsl"]
        assert workspace.lookup("a/b.wgsl") == "x"

    def test_invalid_key(self):
        with pytest.raises(InvalidPathError):
            Workspace.from_memory({"../escape.wgsl": ""})

    def test_paths_sorted(self):
        workspace = Workspace.from_memory({"b.wgsl": "", "a.wgsl": "", "c/a.wgsl": ""})
        assert workspace.paths == ["a.wgsl", "b.wgsl", "c/a.wgsl"]

    def test_lookup_missing(self):
        assert Workspace.from_memory({}).lookup("nope.wgsl") is None


class TestFromDirectory:
    """Loading a directory tree"""

    def test_recursive_load(self, shader_tree):
        workspace = Workspace.from_directory(shader_tree)

        assert workspace.paths == ["main.wgsl", "shared/math.wgsl"]
        assert workspace.root == shader_tree
        assert workspace.lookup("shared/math.wgsl") == "const PI = 3.14;\n"

    def test_extensions(self, shader_tree):
        (shader_tree / "extra.WGSLI").write_text("// fragment\n")
        workspace = Workspace.from_directory(shader_tree, extensions=[".wgsli"])
        assert workspace.paths == ["extra.WGSLI"]

    def test_missing_root(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Workspace.from_directory(tmp_path / "nope")

    def test_not_utf8(self, shader_tree):
        (shader_tree / "shared" / "bad.wgsl").write_bytes(b"const X = 1;\n\xff\xfe")
        with pytest.raises(WorkspaceError, match="shared/bad.wgsl: not valid UTF-8"):
            Workspace.from_directory(shader_tree)

    def test_expand_from_directory(self, shader_tree):
        registry = GlobalRegistry({"SAMPLES": 64}, bit_constants=False)
        workspace = Workspace.from_directory(shader_tree, registry=registry)
        assert workspace.get_shader("main.wgsl") == "const PI = 3.14;\nconst SAMPLES = 64;\n"


class TestRegistrySetters:
    """Setters forward to the attached registry"""

    def test_setters(self):
        workspace = Workspace.from_memory(
            {"main.wgsl": "//:if USE_HQ\n//:const SAMPLES\n//:const quality\n//:end\n"},
            GlobalRegistry(bit_constants=False),
        )
        workspace.set_global_int("SAMPLES", 16)
        workspace.set_global_float("quality", 0.5)
        workspace.set_global_bool("USE_HQ", True)

        assert workspace.registry.lookup("USE_HQ") == Boolean(True)
        assert workspace.get_shader("main.wgsl") == "const SAMPLES = 16;\nconst quality = 0.5;\n"

    def test_later_requests_see_new_values(self):
        workspace = Workspace.from_memory(
            {"main.wgsl": "//:const N\n"}, GlobalRegistry(bit_constants=False)
        )
        workspace.set_global_int("N", 1)
        assert workspace.get_shader("main.wgsl") == "const N = 1;\n"
        workspace.set_global_float("N", 1.0)
        assert workspace.get_shader("main.wgsl") == "const N = 1.0;\n"

    def test_default_registry(self):
        workspace = Workspace.from_memory({})
        assert workspace.registry.lookup("BIT_1") == Integer(2)
        workspace.set_global_float("f", 2)
        assert workspace.registry.lookup("f") == Float(2.0)


class TestValidation:
    """sources_validate scans without expanding"""

    def test_clean(self):
        workspace = Workspace.from_memory({
            "main.wgsl": "//:include missing.wgsl\n//:const UNDEFINED\n",
        })
        assert workspace.sources_validate() == {}

    def test_reports_each_file(self):
        workspace = Workspace.from_memory({
            "a.wgsl": "//:bogus\n",
            "b.wgsl": "ok\n",
            "c.wgsl": "x\n//:else 1\n",
        })
        errors = workspace.sources_validate()

        assert sorted(errors) == ["a.wgsl", "c.wgsl"]
        assert isinstance(errors["a.wgsl"], DirectiveScanError)
        assert errors["c.wgsl"].line == 2
        assert errors["c.wgsl"].path == "c.wgsl"
