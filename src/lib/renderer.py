"""
Renderer for csprender documents

Copies a document to an output stream, replacing every embedded code block
with the standard output of the program it describes.
"""

from pathlib import Path
from typing import BinaryIO, Optional

from ..models.block import Block, RenderResult
from ..models.language import LanguageSpec
from .cache import CachePolicy
from .languages import LanguageRegistry
from .log import LOG
from .runner import Toolchain
from .scanner import DocumentScanner
from .tags import tag_parse


class Renderer:
    """
    Renders one document in a single sequential pass

    Responsibilities:
    - Copy literal text through unchanged
    - Parse each block's tag and resolve its language
    - Write and compile block sources on a cache miss
    - Execute each block and splice its output in place of the block

    Output spliced in from a block is never scanned for further blocks.
    """

    def __init__(
        self,
        source: bytes,
        stem: str,
        registry: LanguageRegistry,
        cache: CachePolicy,
        toolchain: Optional[Toolchain] = None,
        params: str = "",
        block_open: bytes = b"<?",
        block_close: bytes = b"<?>",
    ) -> None:
        """
        Initialize renderer

        Args:
            source: Complete input document
            stem: Input file name without extension, used to name artifacts
            registry: Languages available to blocks
            cache: Policy deciding artifact paths
            toolchain: Runs compile/execute commands (default: Toolchain())
            params: Serialized query string handed to each executed block
            block_open: Marker that opens a block
            block_close: Marker that closes a block
        """
        self.scanner = DocumentScanner(source)
        self.stem = stem
        self.registry = registry
        self.cache = cache
        self.toolchain = toolchain or Toolchain()
        self.params = params
        self.block_open = block_open
        self.block_close = block_close
        self.result = RenderResult()

    def render(self, sink: BinaryIO) -> RenderResult:
        """
        Render the whole document into `sink`

        Raises:
            UnknownLanguageError: on a block whose tag is not registered.
                Everything before that block has already been written.

        Returns:
            RenderResult with block statistics
        """
        LOG("Starting render...", level=2)

        while not self.scanner.at_end():
            literal = self.scanner.literal_read(self.block_open)
            if literal:
                sink.write(literal)
            if self.scanner.marker_match(self.block_open):
                self.block_render(sink)

        sink.flush()
        return self.result

    def block_render(self, sink: BinaryIO) -> None:
        """
        Render the block whose open marker was just consumed

        The tag is resolved before the body is read, so an unknown language
        stops the run without consuming anything further.
        """
        block_tag = tag_parse(self.scanner)
        spec = self.registry.resolve(block_tag.tag)
        body = self.scanner.body_read(self.block_close)

        index = self.result.blocks
        block = Block(
            tag=block_tag.tag,
            modes=block_tag.modes,
            body=body,
            index=index,
            source=self.cache.artifact_path(self.stem, index, spec, body, block_tag.modes),
        )
        self.result.blocks += 1

        if self.cache.hit(block.source, spec):
            LOG(f"Block {index} ({block.tag}): reusing {block.source.name}", level=2)
            self.result.cache_hits += 1
        else:
            LOG(f"Block {index} ({block.tag}): writing {block.source.name}", level=2)
            self.source_write(block, spec)
            if spec.compile is not None:
                self.toolchain.compile(spec, block.source)
                self.result.compiled += 1

        if not self.toolchain.execute(spec, block.source, self.params, sink):
            self.result.failed += 1

    def source_write(self, block: Block, spec: LanguageSpec) -> Path:
        """Write the generated source for a block, creating its directory"""
        block.source.parent.mkdir(parents=True, exist_ok=True)
        block.source.write_bytes(spec.source_generate(block.body, block.modes))
        return block.source
