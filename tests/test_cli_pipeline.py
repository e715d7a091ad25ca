"""
Command line pipeline tests

Runs the pipeline stages directly against temporary shader directories:
environment checks, workspace loading, registry building, expansion to
outputdir and check-only mode.
"""

from argparse import Namespace

import pytest

from shaderprep.__main__ import (
    env_check,
    registry_build,
    results_report,
    shaders_expand,
    workspace_load,
)
from shaderprep.models import ProgramState, pipeline
from shaderprep.models.values import Float, Integer


STAGES = (env_check, workspace_load, registry_build, shaders_expand, results_report)


@pytest.fixture
def dirs(tmp_path):
    inputdir = tmp_path / "in"
    outputdir = tmp_path / "out"
    (inputdir / "shared").mkdir(parents=True)
    (inputdir / "main.wgsl").write_text(
        "//:include shared/math.wgsl\n//:if quality >= 4.0\n//:const SAMPLES\n//:end\n"
    )
    (inputdir / "shared" / "math.wgsl").write_text("const PI = 3.14;\n")
    return inputdir, outputdir


def state_make(inputdir, outputdir, **options):
    return ProgramState(inputdir=inputdir, outputdir=outputdir, verbosity=0, **options)


class TestStateCreation:
    """ProgramState from parsed options"""

    def test_none_options_dropped(self, tmp_path):
        options = Namespace(entry=None, define=None, globalsFile=None, checkOnly=False,
                            verbosity=2, unrelated="x")
        state = ProgramState.state_createFromNamespace(options, tmp_path, tmp_path / "out")

        assert state.define == []
        assert state.entry is None
        assert state.verbosity == 2
        assert state.inputdir == tmp_path

    def test_copy_is_shallow(self, tmp_path):
        state = state_make(tmp_path, tmp_path, define=["N=1"])
        clone = state.copy()
        assert clone == state
        assert clone is not state


class TestEnvCheck:
    """Environment validation stage"""

    def test_missing_inputdir(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as info:
            env_check(state_make(tmp_path / "nope", tmp_path / "out"))

        assert info.value.code == 1
        assert "Input directory not found" in capsys.readouterr().err

    def test_missing_globals_file(self, dirs):
        inputdir, outputdir = dirs
        with pytest.raises(SystemExit):
            env_check(state_make(inputdir, outputdir, globalsFile="missing.yaml"))

    def test_creates_outputdir(self, dirs):
        inputdir, outputdir = dirs
        state = env_check(state_make(inputdir, outputdir))
        assert state.envOK is True
        assert outputdir.is_dir()

    def test_check_only_writes_nothing(self, dirs):
        inputdir, outputdir = dirs
        env_check(state_make(inputdir, outputdir, checkOnly=True))
        assert not outputdir.exists()

    def test_undecodable_shader(self, dirs, capsys):
        """A shader that is not UTF-8 is reported, not raised"""
        inputdir, outputdir = dirs
        (inputdir / "bad.wgsl").write_bytes(b"\xff\xfe")

        with pytest.raises(SystemExit) as info:
            workspace_load(env_check(state_make(inputdir, outputdir)))

        assert info.value.code == 1
        assert "bad.wgsl: not valid UTF-8" in capsys.readouterr().err


class TestRegistryBuild:
    """Globals file and -D definitions"""

    def test_definitions_win_over_file(self, dirs):
        inputdir, outputdir = dirs
        (inputdir / "globals.yaml").write_text("SAMPLES: 16\nquality: 2.0\n")
        state = state_make(
            inputdir, outputdir, globalsFile="globals.yaml", define=["SAMPLES=64"]
        )

        state = registry_build(workspace_load(state))

        assert state.registry.lookup("SAMPLES") == Integer(64)
        assert state.registry.lookup("quality") == Float(2.0)
        assert state.workspace.registry is state.registry

    def test_bad_definition(self, dirs, capsys):
        inputdir, outputdir = dirs
        state = workspace_load(state_make(inputdir, outputdir, define=["N=oops"]))

        with pytest.raises(SystemExit):
            registry_build(state)
        assert "N=oops" in capsys.readouterr().err


class TestExpansion:
    """Full pipeline runs"""

    def test_expand_all(self, dirs):
        inputdir, outputdir = dirs
        state = state_make(inputdir, outputdir, define=["quality=5.0", "SAMPLES=64"])

        final = pipeline(state, *STAGES)

        assert (outputdir / "main.wgsl").read_text() == "const PI = 3.14;\nconst SAMPLES = 64;\n"
        assert (outputdir / "shared" / "math.wgsl").read_text() == "const PI = 3.14;\n"
        assert len(final.expandResult["outputs"]) == 2

    def test_single_entry(self, dirs):
        inputdir, outputdir = dirs
        state = state_make(inputdir, outputdir, entry=["./main.wgsl"], define=["quality=1.0"])

        pipeline(state, *STAGES)

        assert (outputdir / "main.wgsl").read_text() == "const PI = 3.14;\n"
        assert not (outputdir / "shared").exists()

    def test_expansion_error_exits(self, dirs, capsys):
        inputdir, outputdir = dirs
        state = state_make(inputdir, outputdir, entry=["main.wgsl"], define=["quality=5.0"])

        with pytest.raises(SystemExit) as info:
            pipeline(state, *STAGES)

        err = capsys.readouterr().err
        assert info.value.code == 1
        assert "main.wgsl:3: lookup error: undefined constant 'SAMPLES'" in err
        assert "  > 3 | //:const SAMPLES" in err
        assert not (outputdir / "main.wgsl").exists()

    def test_invalid_entry(self, dirs, capsys):
        inputdir, outputdir = dirs
        state = state_make(inputdir, outputdir, entry=["../main.wgsl"])

        with pytest.raises(SystemExit):
            pipeline(state, *STAGES)
        assert "'..'" in capsys.readouterr().err

    def test_empty_workspace(self, tmp_path, capsys):
        (tmp_path / "in").mkdir()
        state = state_make(tmp_path / "in", tmp_path / "out")

        with pytest.raises(SystemExit):
            pipeline(state, *STAGES)
        assert "No shader sources" in capsys.readouterr().err


class TestCheckOnly:
    """--checkOnly scans every source"""

    def test_clean(self, dirs):
        inputdir, outputdir = dirs
        final = pipeline(state_make(inputdir, outputdir, checkOnly=True), *STAGES)

        assert final.expandResult["checked"] == 2
        assert not outputdir.exists()

    def test_scan_error(self, dirs, capsys):
        inputdir, outputdir = dirs
        (inputdir / "bad.wgsl").write_text("//:elif X\n")

        with pytest.raises(SystemExit):
            pipeline(state_make(inputdir, outputdir, checkOnly=True), *STAGES)
        assert "bad.wgsl:1: scan error: unknown directive 'elif'" in capsys.readouterr().err
