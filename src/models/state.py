"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, BinaryIO, Optional, Type, TypeVar, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the render pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the render progresses.

    Pipeline stages and their state additions:
        - Initial: input, output, outDirectory, query, highlight, verbosity
        - env_check: inputSourceFile, artifactDir, outputSink, envOK
        - source_read: sourceBytes
        - document_render: renderResult
        - results_report: (no additions, terminal stage)

    Attributes:
        input: Input document path as given on the command line
        output: Output file path, or None for standard output
        outDirectory: Directory for generated artifacts, or None for the
                      input file's directory
        query: Query string handed to executed blocks, or None for the
               configured default
        highlight: Print a highlighted listing instead of rendering
        verbosity: Logging verbosity level (0-3)
        envOK: Environment validation passed
        inputSourceFile: Resolved path to the input document
        artifactDir: Resolved, existing artifact directory
        outputSink: Binary stream the rendered document is written to
        sourceBytes: Raw input document
        renderResult: Statistics from the render pass
    """

    # CLI arguments
    input: Optional[str] = field(default=None)
    output: Optional[str] = field(default=None)
    outDirectory: Optional[str] = field(default=None)
    query: Optional[str] = field(default=None)
    highlight: bool = field(default=False)
    verbosity: int = field(default=0)

    # Pipeline state
    envOK: bool = field(default=False)
    inputSourceFile: Path = field(default=Path("/"))
    artifactDir: Path = field(default=Path("/"))
    outputSink: Optional[BinaryIO] = field(default=None)
    sourceBytes: bytes = field(default=b"")
    renderResult: Optional[Any] = field(default=None)  # RenderResult at runtime

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace.

        Args:
            options: Parsed CLI arguments (input, output, outDirectory, etc.)

        Returns:
            ProgramState instance with all matching CLI options as attributes
        """
        options_dict = vars(options)

        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Filter options_dict to only include fields that exist in ProgramState
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        return cls(**filtered_options)

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
            source_read,
            document_render,
            results_report
        )
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
