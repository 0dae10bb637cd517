"""
End-to-end render tests

Tests the full pipeline: document → scanner → registry → cache → toolchain
→ spliced output.

"py" blocks run under the current interpreter. "pyc" is a stand-in compiled
language whose compile step copies the source to "<source>.out", so the
cache and compile paths are exercised without a C compiler.
"""

import io
import sys

import pytest

from csprender.lib.cache import ContentCache, PositionCache
from csprender.lib.languages import LanguageRegistry, UnknownLanguageError, builtinLanguages_make
from csprender.lib.renderer import Renderer
from csprender.lib.runner import Toolchain
from csprender.models.language import LanguageSpec, ModeHook


PYC = LanguageSpec(
    tag="pyc",
    compile=(
        sys.executable,
        "-c",
        "import shutil, sys; shutil.copyfile(sys.argv[1], sys.argv[2])",
        "{source}",
        "{artifact}",
    ),
    execute=(sys.executable, "{artifact}", "{params}"),
    output_extension=".out",
    modes={
        "main": ModeHook(opening="def main():\n", closing="\nmain()\n"),
        "loud": ModeHook(opening="print('LOUD', end='')\n"),
    },
)

MISSING = LanguageSpec(tag="missing", execute=("{artifact}",), output_extension=".out")


class CountingToolchain(Toolchain):
    """Toolchain that records every compile it runs"""

    def __init__(self) -> None:
        super().__init__()
        self.compiles = []

    def compile(self, spec, source):
        self.compiles.append(source)
        return super().compile(spec, source)


def registry_make() -> LanguageRegistry:
    registry = LanguageRegistry(builtinLanguages_make(sys.executable))
    registry.register(PYC)
    registry.register(MISSING)
    return registry


def render(document: bytes, outdir, toolchain=None, cache=None, params="", stem="page"):
    """Render `document` and return (output bytes, RenderResult)"""
    renderer = Renderer(
        source=document,
        stem=stem,
        registry=registry_make(),
        cache=cache or PositionCache(outdir),
        toolchain=toolchain,
        params=params,
    )
    sink = io.BytesIO()
    result = renderer.render(sink)
    return sink.getvalue(), result


class TestPassthrough:
    """Documents without blocks are copied unchanged"""

    def test_no_markers(self, tmp_path):
        """Output equals input byte for byte"""
        document = b"<html>\n<p>a < b ? c : d</p>\n\xff\xfe binary tail <"
        output, result = render(document, tmp_path)
        assert output == document
        assert result.blocks == 0

    def test_empty_document(self, tmp_path):
        """Empty input renders to empty output"""
        output, _ = render(b"", tmp_path)
        assert output == b""

    def test_no_artifacts_written(self, tmp_path):
        """Passthrough leaves the artifact directory untouched"""
        render(b"just text", tmp_path)
        assert list(tmp_path.iterdir()) == []


class TestSplicing:
    """Block output replaces the block"""

    def test_single_block_is_exactly_stdout(self, tmp_path):
        """Only the child's stdout appears; no markup or source survives"""
        output, result = render(b"<?py>print('hello', end='')<?>", tmp_path)
        assert output == b"hello"
        assert result.blocks == 1

    def test_block_between_literals(self, tmp_path):
        """Literal text around a block is kept in place"""
        output, _ = render(b"<p><?py>print(6 * 7, end='')<?></p>\n", tmp_path)
        assert output == b"<p>42</p>\n"

    def test_multiple_blocks_in_order(self, tmp_path):
        """Blocks render in document order with separate artifacts"""
        document = b"A<?py>print(1, end='')<?>B<?py>print(2, end='')<?>C"
        output, result = render(document, tmp_path)
        assert output == b"A1B2C"
        assert (tmp_path / "page0.py").exists()
        assert (tmp_path / "page1.py").exists()
        assert result.blocks == 2

    def test_output_not_rescanned(self, tmp_path):
        """Markers printed by a block are emitted literally"""
        document = b"<?py>print('<' + '?zz>x<' + '?>', end='')<?>"
        output, _ = render(document, tmp_path)
        assert output == b"<?zz>x<?>"

    def test_truncated_block_runs(self, tmp_path):
        """A block without a close marker runs up to end of input"""
        output, _ = render(b"head <?py>print('tail', end='')\n", tmp_path)
        assert output == b"head tail"

    def test_params_reach_block(self, tmp_path):
        """The parameter string is handed to every executed block"""
        document = b"<?py>import sys; print(sys.argv[1], end='')<?>"
        output, _ = render(document, tmp_path, params="hello=world&foo=bar")
        assert output == b"hello=world&foo=bar"


class TestModes:
    """Mode hooks wrap block bodies"""

    def test_main_mode_wraps_body(self, tmp_path):
        """'main' puts the body inside main() and calls it"""
        document = b"<?pyc main>    print('wrapped', end='')<?>"
        output, _ = render(document, tmp_path)
        assert output == b"wrapped"
        source = (tmp_path / "page0.pyc").read_bytes()
        assert source == b"def main():\n    print('wrapped', end='')\nmain()\n"

    def test_unknown_mode_adds_nothing(self, tmp_path):
        """Unrecognized modes leave the body as written"""
        document = b"<?pyc bogus>print('plain', end='')<?>"
        output, _ = render(document, tmp_path)
        assert output == b"plain"
        assert (tmp_path / "page0.pyc").read_bytes() == b"print('plain', end='')"


class TestCaching:
    """Artifacts are reused across runs"""

    def test_second_run_identical_without_compiling(self, tmp_path):
        """Re-rendering gives the same output and skips compilation"""
        document = b"x=<?pyc>print(40 + 2, end='')<?>;"

        first_toolchain = CountingToolchain()
        first, first_result = render(document, tmp_path, toolchain=first_toolchain)
        second_toolchain = CountingToolchain()
        second, second_result = render(document, tmp_path, toolchain=second_toolchain)

        assert first == second == b"x=42;"
        assert len(first_toolchain.compiles) == 1
        assert second_toolchain.compiles == []
        assert first_result.compiled == 1
        assert second_result.cache_hits == 1
        assert second_result.compiled == 0

    def test_edited_block_reuses_stale_artifact(self, tmp_path):
        """Position cache keeps executing the old artifact after an edit"""
        render(b"<?pyc>print('old', end='')<?>", tmp_path)
        output, result = render(b"<?pyc>print('new', end='')<?>", tmp_path)
        assert output == b"old"
        assert result.cache_hits == 1

    def test_edited_interpreted_block_is_stale(self, tmp_path):
        """Interpreted sources are not rewritten on a hit either"""
        render(b"<?py>print('old', end='')<?>", tmp_path)
        output, _ = render(b"<?py>print('new', end='')<?>", tmp_path)
        assert output == b"old"
        assert (tmp_path / "page0.py").read_bytes() == b"print('old', end='')"

    def test_content_cache_follows_edits(self, tmp_path):
        """Content cache builds a fresh artifact for an edited body"""
        cache = ContentCache(tmp_path)
        render(b"<?pyc>print('old', end='')<?>", tmp_path, cache=cache)
        toolchain = CountingToolchain()
        output, _ = render(b"<?pyc>print('new', end='')<?>", tmp_path, cache=cache, toolchain=toolchain)
        assert output == b"new"
        assert len(toolchain.compiles) == 1

    def test_content_cache_separates_modes(self, tmp_path):
        """Same body under different modes gets separate artifacts"""
        cache = ContentCache(tmp_path)
        document = b"[<?pyc loud>print('x', end='')<?>][<?pyc>print('x', end='')<?>]"
        toolchain = CountingToolchain()
        output, result = render(document, tmp_path, cache=cache, toolchain=toolchain)
        assert output == b"[LOUDx][x]"
        assert len(toolchain.compiles) == 2
        assert result.cache_hits == 0

    def test_relative_artifact_dir(self, tmp_path, monkeypatch):
        """Compiled artifacts in a relative directory are launched by path"""
        monkeypatch.chdir(tmp_path)
        output, result = render(b"<?pyc>print('here', end='')<?>", ".", cache=PositionCache("."))
        assert output == b"here"
        assert result.failed == 0
        assert (tmp_path / "page0.pyc.out").exists()

    def test_artifact_dir_created(self, tmp_path):
        """Missing artifact directories are created on first write"""
        outdir = tmp_path / "bin" / "nested"
        output, _ = render(b"<?py>print('ok', end='')<?>", outdir)
        assert output == b"ok"
        assert (outdir / "page0.py").exists()


class TestFailures:
    """Failure semantics"""

    def test_unknown_tag_stops_render(self, tmp_path):
        """Unknown tag raises; only output before the block is written"""
        renderer = Renderer(
            source=b"before<?cobol>DISPLAY 'x'.<?>after<?py>print(1)<?>",
            stem="page",
            registry=registry_make(),
            cache=PositionCache(tmp_path),
        )
        sink = io.BytesIO()
        with pytest.raises(UnknownLanguageError):
            renderer.render(sink)
        assert sink.getvalue() == b"before"

    def test_unlaunchable_block_splices_nothing(self, tmp_path):
        """A block whose command cannot start contributes empty output"""
        document = b"[<?missing>anything<?>][<?py>print('next', end='')<?>]"
        output, result = render(document, tmp_path)
        assert output == b"[][next]"
        assert result.failed == 1
        assert result.blocks == 2

    def test_failed_compile_still_executes(self, tmp_path):
        """Compile status is ignored; execution is attempted regardless"""
        broken = LanguageSpec(
            tag="broken",
            compile=(sys.executable, "-c", "raise SystemExit(1)"),
            execute=(sys.executable, "-c", "print('ran anyway', end='')"),
            output_extension=".out",
        )
        registry = LanguageRegistry([broken])
        renderer = Renderer(b"<?broken>x<?>", "page", registry, PositionCache(tmp_path))
        sink = io.BytesIO()
        result = renderer.render(sink)
        assert sink.getvalue() == b"ran anyway"
        assert result.compiled == 1

    def test_failing_program_output_kept(self, tmp_path):
        """Nonzero exit from a block does not discard its output"""
        output, result = render(b"<?py>print('partial', end=''); raise SystemExit(2)<?>!", tmp_path)
        assert output == b"partial!"
        assert result.failed == 0
