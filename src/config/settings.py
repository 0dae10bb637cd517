"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use CSPRENDER_ prefix (e.g., CSPRENDER_CACHE_POLICY=content).

Settings can also be loaded from a .env file in the working directory.
"""

import sys
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use CSPRENDER_ prefix.

    Examples:
        CSPRENDER_QUERY="user=alice&page=2"
        CSPRENDER_CACHE_POLICY=content
        CSPRENDER_PYTHON_EXECUTABLE=/usr/bin/python3
    """

    model_config = SettingsConfigDict(
        env_prefix="CSPRENDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Markup configuration
    block_open: str = Field(
        default="<?",
        description="Marker that opens an embedded code block",
    )

    block_close: str = Field(
        default="<?>",
        description="Marker that closes an embedded code block",
    )

    # Execution configuration
    query: str = Field(
        default="",
        description="Query string handed to every executed block when --query is not given",
    )

    python_executable: str = Field(
        default_factory=lambda: sys.executable,
        description="Interpreter used to run 'py' blocks",
    )

    # Cache configuration
    cache_policy: Literal["position", "content"] = Field(
        default="position",
        description="Artifact naming: by block position (default) or by hash of the block body",
    )

    # Diagnostics
    debug_mode: bool = Field(
        default=False,
        description="Print tracebacks alongside fatal diagnostics",
    )

    def markers_get(self) -> tuple[bytes, bytes]:
        """
        Return the block markers encoded for byte-level scanning.

        Returns:
            (block_open, block_close) as UTF-8 bytes

        Example:
            >>> AppSettings().markers_get()
            (b'<?', b'<?>')
        """
        return self.block_open.encode("utf-8"), self.block_close.encode("utf-8")


# Singleton instance - import this in your code
appsettings = AppSettings()
