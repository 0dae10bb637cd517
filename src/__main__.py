#!/usr/bin/env python3
"""
csprender - Compile-and-embed document preprocessor

Renders a document by running the code blocks embedded in it and splicing
each block's standard output in place of the block, in the spirit of
server-side scripting but with any language reachable as an external
toolchain.

Markup:
    <p>Today is <?py>import datetime; print(datetime.date.today())<?></p>
    <pre><?c main>printf("%d\\n", 6 * 7);<?></pre>

    A block is "<?" tag (" " mode)* ">" body "<?>". The "main" mode wraps
    C, C++ and Rust bodies in a program entry point.

Artifacts:
    Each block's generated source is written to the artifact directory as
    <stem><n>.<tag> (compiled languages add .out). An existing artifact is
    reused without recompiling; delete the directory's artifacts after
    editing a block.

Usage:
    csprender -i page.csp
    csprender -i page.csp -o page.html -d bin/ -q "user=alice&page=2"

Examples:
    # Render to standard output, artifacts next to the input
    csprender -i index.csp

    # Verbose output
    csprender -i index.csp -o index.html -vv

    # Highlighted listing, nothing executed
    csprender -i index.csp --highlight
"""

import io
import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, RawDescriptionHelpFormatter
from typing import List, NoReturn, Optional

from .config import appsettings
from .lib import (
    Renderer,
    UnknownLanguageError,
    default_registry,
    policy_get,
    parse_query,
    query_serialize,
    __version__,
    LOG,
    state_connectToLogger,
    fatal,
)
from .lib.lexer import listing_write
from .models import ProgramState, pipeline


# Define CLI arguments
parser = ArgumentParser(
    prog="csprender",
    description="csprender - Compiled scripting preprocessor: run embedded code blocks and splice their output",
    formatter_class=RawDescriptionHelpFormatter,
    epilog="Artifacts are cached by position; delete them after editing a block.",
)

parser.add_argument(
    "-i", "--input", default=None, type=str, help="Input document (.csp file)"
)

parser.add_argument(
    "-o", "--output", default=None, type=str, help="Output file (default: standard output)"
)

parser.add_argument(
    "-d",
    "--out-directory",
    dest="outDirectory",
    default=None,
    type=str,
    help="Directory for generated artifacts (default: the input file's directory)",
)

parser.add_argument(
    "-q",
    "--query",
    default=None,
    type=str,
    help="Query string handed to every executed block (default: CSPRENDER_QUERY)",
)

parser.add_argument(
    "--highlight",
    action="store_true",
    help="Write a syntax-highlighted listing of the document (to -o or stdout) instead of rendering it",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=0,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def fatal_withContext(message: str) -> NoReturn:
    """Abort with a diagnostic, adding the active traceback in debug mode"""
    if appsettings.debug_mode:
        import traceback

        traceback.print_exc()
    fatal(message)


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve all file paths.

    Verifies that the input file exists, opens the output sink and creates
    the artifact directory.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - inputSourceFile: Resolved path to the input document
            - outputSink: Binary stream for the rendered document
            - artifactDir: Absolute, existing artifact directory (not set with --highlight)
            - envOK: True if environment is valid

    Exits:
        1 if the input file is missing or the output file cannot be opened
    """

    state = inputstate.copy()

    LOG("Checking environment...", level=2)

    if not state.input:
        fatal("Missing input file")

    input_file = Path(state.input)
    if not input_file.is_file():
        fatal(f"Failed to open {input_file}")
    state.inputSourceFile = input_file
    LOG(f"Input file: {input_file}", level=2)

    if state.output:
        try:
            state.outputSink = open(state.output, "wb")
        except OSError:
            fatal_withContext(f"Failed to open {state.output}")
    else:
        state.outputSink = sys.stdout.buffer
    LOG(f"Output: {state.output or '<stdout>'}", level=2)

    if state.highlight:
        state.envOK = True
        return state

    # Absolute so compiled artifacts are launched by path, not looked up on PATH
    artifact_dir = Path(state.outDirectory) if state.outDirectory else input_file.parent
    state.artifactDir = artifact_dir.resolve()
    try:
        state.artifactDir.mkdir(parents=True, exist_ok=True)
    except OSError:
        fatal_withContext(f"Failed to create {state.artifactDir}")
    LOG(f"Artifact directory: {state.artifactDir}", level=2)

    state.envOK = True
    return state


def source_read(inputstate: ProgramState) -> ProgramState:
    """
    Read the input document.

    Returns:
        ProgramState with added field:
            - sourceBytes: Raw document contents

    Exits:
        1 if the file cannot be read
    """

    state = inputstate.copy()

    LOG("Reading source file...", level=1)
    try:
        state.sourceBytes = state.inputSourceFile.read_bytes()
    except OSError:
        fatal_withContext(f"Failed to open {state.inputSourceFile}")
    LOG(f"Read {len(state.sourceBytes)} bytes from {state.inputSourceFile.name}", level=2)
    return state


def document_render(inputstate: ProgramState) -> ProgramState:
    """
    Render the document: run every block and splice its output.

    Returns:
        ProgramState with added field:
            - renderResult: RenderResult with block statistics

    Exits:
        1 on a block whose language tag is not registered. Output written
        before that block is kept.
    """

    state = inputstate.copy()

    LOG("Rendering document...", level=1)

    query = state.query if state.query is not None else appsettings.query
    params = parse_query(query)
    LOG(f"Query parameters: {params}", level=2)

    try:
        cache = policy_get(appsettings.cache_policy, state.artifactDir)
    except ValueError as e:
        fatal_withContext(str(e))

    block_open, block_close = appsettings.markers_get()
    renderer = Renderer(
        source=state.sourceBytes,
        stem=state.inputSourceFile.stem,
        registry=default_registry(appsettings),
        cache=cache,
        params=query_serialize(params),
        block_open=block_open,
        block_close=block_close,
    )

    try:
        state.renderResult = renderer.render(state.outputSink)
    except UnknownLanguageError as e:
        state.outputSink.flush()
        fatal_withContext(str(e))
    finally:
        if state.output:
            state.outputSink.close()

    return state


def document_list(inputstate: ProgramState) -> ProgramState:
    """
    Write a highlighted listing of the document to the output sink.

    Terminal stage for --highlight; nothing is compiled or executed.
    """
    state = inputstate.copy()
    LOG("Writing highlighted listing...", level=1)
    stream = io.TextIOWrapper(state.outputSink, encoding="utf-8")
    try:
        listing_write(state.sourceBytes, stream)
        stream.flush()
    finally:
        stream.detach()
        if state.output:
            state.outputSink.close()
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Log render statistics.

    Returns:
        ProgramState unchanged (terminal pipeline stage)
    """
    state: ProgramState = inputstate.copy()
    result = state.renderResult
    if result is None:
        return state

    LOG("Render complete", level=1)
    LOG(f"  Blocks:     {result.blocks}", level=1)
    LOG(f"  Cache hits: {result.cache_hits}", level=1)
    LOG(f"  Compiled:   {result.compiled}", level=1)
    if result.failed:
        LOG(f"  Not launchable (empty output): {result.failed}", level=1)
    return state


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point - render a document.

    Orchestrates the pipeline:
        1. env_check: Validate paths, open output, create artifact directory
        2. source_read: Read the input document
        3. document_render: Run blocks and splice output
           (document_list instead with --highlight)
        4. results_report: Log statistics

    Args:
        argv: Command-line arguments (default: sys.argv[1:])
    """
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        parser.print_help(sys.stderr)
        sys.exit(1)

    options: Namespace = parser.parse_args(argv)
    state: ProgramState = ProgramState.state_createFromNamespace(options)

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    if state.highlight:
        pipeline(state, env_check, source_read, document_list)
    else:
        pipeline(state, env_check, source_read, document_render, results_report)


if __name__ == "__main__":
    main()
