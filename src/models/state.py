"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, List, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the preprocessing pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as processing progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, entry, define, globalsFile, checkOnly
        - env_check: envOK
        - workspace_load: workspace
        - registry_build: registry
        - shaders_expand: expandResult
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Workspace root containing shader sources
        outputdir: Directory where expanded shaders are written
        verbosity: Logging verbosity level (1-3)
        entry: Logical paths to expand (None means every shader)
        define: Raw NAME=VALUE constant definitions from the command line
        globalsFile: Optional YAML file of constants (relative to inputdir)
        checkOnly: Only scan sources for directive errors, write nothing
        envOK: Environment validation passed
        workspace: Loaded Workspace
        registry: Populated GlobalRegistry
        expandResult: Expansion results (status, outputs, errors)
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    entry: Optional[List[str]] = field(default=None)
    define: List[str] = field(default_factory=list)
    globalsFile: Optional[str] = field(default=None)
    checkOnly: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    workspace: Optional[Any] = field(default=None)  # Workspace at runtime
    registry: Optional[Any] = field(default=None)  # GlobalRegistry at runtime
    expandResult: Optional[Dict] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Merges CLI options with explicitly provided directories to create
        the initial program state for the pipeline.

        Args:
            options: Parsed CLI arguments (entry, define, etc.)
            inputdir: Workspace root directory
            outputdir: Directory for expanded output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Filter options_dict to only include fields that exist in ProgramState
        filtered_options = {
            k: v for k, v in options_dict.items() if k in valid_fields and v is not None
        }

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}

        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Args:
        initial_state: Starting ProgramState
        *stages: Variable number of stage functions to execute in order

    Returns:
        Final ProgramState after all transformations

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            workspace_load,
            registry_build,
            shaders_expand,
            results_report
        )
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
