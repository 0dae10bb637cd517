"""
csprender - Compile-and-embed document preprocessor

Runs code blocks embedded in a document and splices their output in place.
"""

__version__ = "1.0.0"

from .renderer import Renderer
from .languages import LanguageRegistry, UnknownLanguageError, default_registry
from .cache import CachePolicy, PositionCache, ContentCache, policy_get
from .runner import Toolchain
from .query import parse_query, query_serialize
from .log import LOG, state_connectToLogger, fatal

__all__ = [
    "Renderer",
    "LanguageRegistry",
    "UnknownLanguageError",
    "default_registry",
    "CachePolicy",
    "PositionCache",
    "ContentCache",
    "policy_get",
    "Toolchain",
    "parse_query",
    "query_serialize",
    "LOG",
    "state_connectToLogger",
    "fatal",
    "__version__",
]
