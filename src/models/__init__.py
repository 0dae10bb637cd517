"""
Models package for csprender

Contains data structures and type definitions for the render pipeline.
"""

from .state import ProgramState, pipeline
from .language import LanguageSpec, ModeHook, NO_MODE
from .block import Block, BlockTag, RenderResult

__all__ = [
    "ProgramState",
    "pipeline",
    "LanguageSpec",
    "ModeHook",
    "NO_MODE",
    "Block",
    "BlockTag",
    "RenderResult",
]
