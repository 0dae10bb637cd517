"""
Compile/execute subprocess runner

Runs a language's external toolchain for one block. Commands are argv
templates; every argument is formatted on its own and passed to the child
directly, without a shell, so artifact paths and parameter strings are
never re-interpreted.

Exit codes are logged but never acted on: a failed compile usually shows up
as an execute command that cannot be launched, and that block then
contributes no output.

Neither step has a timeout; a child that never exits stalls the run.
"""

import os
import shutil
import subprocess
from pathlib import Path
from typing import BinaryIO, List, Optional, Sequence

from ..models.language import LanguageSpec
from .cache import artifact_of
from .log import LOG, WARN


def command_format(template: Sequence[str], source: Path, artifact: Path, params: str) -> List[str]:
    """
    Substitute paths and parameters into an argv template

    Example:
        >>> command_format(("{artifact}", "{params}"), Path("a.c"), Path("a.c.out"), "x=1")
        ['a.c.out', 'x=1']
    """
    values = {"source": str(source), "artifact": str(artifact), "params": params}
    return [argument.format(**values) for argument in template]


class Toolchain:
    """
    Invokes compile and execute commands for language specs

    Attributes:
        env: Base environment for child processes (defaults to os.environ)
    """

    def __init__(self, env: Optional[dict] = None) -> None:
        self.env = dict(os.environ if env is None else env)

    def compile(self, spec: LanguageSpec, source: Path) -> Optional[int]:
        """
        Run the spec's compile command on a generated source file

        The compiler's stdout is discarded; its stderr goes to ours.

        Args:
            spec: Language of the block
            source: Generated source file

        Returns:
            The compiler's exit status, or None if the language is not
            compiled or the compiler could not be launched
        """
        if spec.compile is None:
            return None

        argv = command_format(spec.compile, source, artifact_of(source, spec), "")
        LOG(f"Compiling: {' '.join(argv)}", level=3)
        try:
            completed = subprocess.run(argv, stdout=subprocess.DEVNULL, env=self.env)
        except OSError as e:
            WARN(f"Could not launch compiler for '{spec.tag}': {e}")
            return None

        LOG(f"Compiler exited with status {completed.returncode}", level=3)
        return completed.returncode

    def execute(self, spec: LanguageSpec, source: Path, params: str, sink: BinaryIO) -> bool:
        """
        Run a block's artifact and stream its stdout into `sink`

        The parameter string is passed both through the {params} template
        placeholder and as QUERY_STRING in the child's environment.

        Args:
            spec: Language of the block
            source: Generated source file
            params: Serialized query string
            sink: Binary stream receiving the child's output

        Returns:
            False if the command could not be launched (nothing is written
            to the sink), True otherwise, whatever the child's exit status
        """
        argv = command_format(spec.execute, source, artifact_of(source, spec), params)
        env = {**self.env, "QUERY_STRING": params}
        LOG(f"Executing: {' '.join(argv)}", level=3)

        try:
            process = subprocess.Popen(argv, stdout=subprocess.PIPE, env=env)
        except OSError as e:
            WARN(f"Could not execute '{spec.tag}' block {source.name}: {e}")
            return False

        with process:
            shutil.copyfileobj(process.stdout, sink)

        LOG(f"Block {source.name} exited with status {process.returncode}", level=3)
        return True
