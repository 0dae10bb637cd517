"""
csprender - Compile-and-embed document preprocessor

Runs code blocks embedded in a document and splices their output in place.
"""

__version__ = "1.0.0"

from .lib import Renderer, LanguageRegistry, UnknownLanguageError, default_registry, LOG, state_connectToLogger

__all__ = [
    "Renderer",
    "LanguageRegistry",
    "UnknownLanguageError",
    "default_registry",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
