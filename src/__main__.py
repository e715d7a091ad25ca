#!/usr/bin/env python3
"""
shaderprep - Source-level preprocessor for WGSL shaders

Expands //: directives in a directory of WGSL sources and writes the
preprocessed shaders to an output directory, ready for the graphics API's
shader compiler.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Directives:
    //:if <expr>        begin a conditional block
    //:else             switch to the alternative branch
    //:end              close the nearest block
    //:const <name>     emit 'const <name> = <value>;' from the registry
    //:include <path>   inline another workspace file, fully expanded

Usage:
    shaderprep inputdir/ outputdir/ [--entry main.wgsl] [-D NAME=VALUE]

Examples:
    # Expand every shader in the workspace
    shaderprep shaders/ build/

    # Expand one entry shader with constants
    shaderprep shaders/ build/ --entry main.wgsl -D SAMPLE_SIZE=64 -D quality=5.0

    # Constants from a YAML file, directive syntax check only
    shaderprep shaders/ build/ --globalsFile globals.yaml --checkOnly
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .config import appsettings
from .lib import (
    GlobalRegistry,
    RegistryError,
    Workspace,
    WorkspaceError,
    __version__,
    LOG,
    state_connectToLogger,
)
from .lib.engine import logicalPath_normalize
from .lib.report import error_render
from .models import ExpansionError, ProgramState, pipeline


DISPLAY_TITLE = r"""
      _               _
  ___| |__   __ _  __| | ___ _ __ _ __  _ __ ___ _ __
 / __| '_ \ / _` |/ _` |/ _ \ '__| '_ \| '__/ _ \ '_ \
 \__ \ | | | (_| | (_| |  __/ |  | |_) | | |  __/ |_) |
 |___/_| |_|\__,_|\__,_|\___|_|  | .__/|_|  \___| .__/
                                 |_|            |_|
  WGSL directive preprocessor
"""

# Define CLI arguments
parser = ArgumentParser(
    description="shaderprep - WGSL preprocessor with conditionals, constants and includes",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--entry",
    action="append",
    default=None,
    type=str,
    help="Shader to expand (logical path relative to inputdir); repeatable. "
    "Defaults to every shader in the workspace",
)

parser.add_argument(
    "-D",
    "--define",
    action="append",
    default=None,
    type=str,
    help="Set a constant as NAME=VALUE (int, float or bool); repeatable",
)

parser.add_argument(
    "--globalsFile",
    default=None,
    type=str,
    help="YAML file of constants (relative to inputdir)",
)

parser.add_argument(
    "--checkOnly",
    action="store_true",
    default=False,
    help="Only check directive syntax of every source; write nothing",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate the environment.

    Verifies that the workspace root and the optional globals file exist,
    then creates the output directory (unless only checking).

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with envOK set

    Exits:
        1 if the input directory or globals file is missing
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if state.inputdir is None or not state.inputdir.is_dir():
        print(f"Error: Input directory not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    if state.globalsFile:
        globals_path = state.inputdir / state.globalsFile
        if not globals_path.is_file():
            print(f"Error: Globals file not found: {globals_path}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)
        LOG(f"Globals file: {globals_path}", level=2)

    if not state.checkOnly:
        state.outputdir.mkdir(parents=True, exist_ok=True)
        LOG(f"Output directory: {state.outputdir}", level=2)

    state.envOK = True
    return state


def workspace_load(inputstate: ProgramState) -> ProgramState:
    """
    Load every shader below inputdir into a Workspace.

    Returns:
        ProgramState with added field:
            - workspace: Workspace keyed by logical path

    Exits:
        1 if the workspace is empty or a file cannot be read
    """

    state = inputstate.copy()

    LOG("Loading workspace...", level=1)
    try:
        state.workspace = Workspace.from_directory(state.inputdir)
    except (OSError, WorkspaceError) as e:
        print(f"Error reading workspace: {e}", file=sys.stderr)
        sys.exit(1)

    if not state.workspace.paths:
        print(f"Error: No shader sources found in {state.inputdir}", file=sys.stderr)
        sys.exit(1)

    LOG(f"Loaded {len(state.workspace.paths)} shader(s)", level=2)
    return state


def registry_build(inputstate: ProgramState) -> ProgramState:
    """
    Populate the global registry from the globals file and -D definitions.

    Definitions on the command line win over the globals file.

    Returns:
        ProgramState with added field:
            - registry: GlobalRegistry attached to the workspace

    Exits:
        1 on an unreadable globals file or malformed definition
    """

    state = inputstate.copy()

    registry = GlobalRegistry()
    try:
        if state.globalsFile:
            count = registry.registry_loadYaml(state.inputdir / state.globalsFile)
            LOG(f"Loaded {count} constant(s) from {state.globalsFile}", level=2)
        for definition in state.define:
            registry.definition_apply(definition)
            LOG(f"Defined {definition}", level=3)
    except RegistryError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    state.registry = registry
    state.workspace.registry = registry
    return state


def shaders_expand(inputstate: ProgramState) -> ProgramState:
    """
    Expand the requested shaders and write them to outputdir.

    In check mode every source is only scanned for directive errors.

    Returns:
        ProgramState with added field:
            - expandResult: Dict containing:
                - status: bool
                - outputs: List[str] of written files
                - checked: int (sources scanned in check mode)

    Exits:
        1 on the first expansion error (no output is written for it)
    """

    state = inputstate.copy()
    workspace: Workspace = state.workspace
    color = sys.stderr.isatty()

    if state.checkOnly:
        LOG("Checking directive syntax...", level=1)
        errors = workspace.sources_validate()
        for error in errors.values():
            print(error_render(error, workspace, color=color), file=sys.stderr)
        if errors:
            sys.exit(1)
        state.expandResult = {"status": True, "outputs": [], "checked": len(workspace.paths)}
        return state

    try:
        entries = [logicalPath_normalize(entry) for entry in state.entry or workspace.paths]
    except ExpansionError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    outputs = []
    for entry in entries:
        LOG(f"Expanding {entry}...", level=1)
        try:
            text = workspace.get_shader(entry)
        except ExpansionError as e:
            print(error_render(e, workspace, color=color), file=sys.stderr)
            sys.exit(1)

        output_file = state.outputdir / entry
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(text, encoding="utf-8")
        LOG(f"Wrote {output_file}", level=2)
        outputs.append(str(output_file))

    state.expandResult = {"status": True, "outputs": outputs, "checked": 0}
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display a summary of the run.

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if expandResult is None
    """
    state: ProgramState = inputstate.copy()
    if not state.expandResult:
        print("Error: Preprocessing failed", file=sys.stderr)
        sys.exit(1)

    if state.checkOnly:
        LOG(f"✓ {state.expandResult['checked']} source(s) checked, no directive errors", level=1)
        return state

    LOG(f"✓ Expanded {len(state.expandResult['outputs'])} shader(s)", level=1)
    for output in state.expandResult["outputs"]:
        LOG(f"  {output}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="shaderprep - WGSL directive preprocessor",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - preprocess WGSL shaders from inputdir into outputdir.

    Orchestrates the pipeline:
        1. env_check: Validate paths
        2. workspace_load: Read shader sources
        3. registry_build: Collect constants
        4. shaders_expand: Expand and write shaders
        5. results_report: Summarize

    Args:
        options: CLI arguments from argparse
        inputdir: Workspace root with shader sources
        outputdir: Directory for expanded shaders

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )
    if appsettings.debug_mode:
        state.verbosity = max(state.verbosity, 3)

    state_connectToLogger(state)

    pipeline(state, env_check, workspace_load, registry_build, shaders_expand, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
