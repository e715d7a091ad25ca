"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use SHADERPREP_ prefix (e.g., SHADERPREP_DIRECTIVE_MARKER=//:).

Settings can also be loaded from a .env file in the project root.
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use SHADERPREP_ prefix.

    Examples:
        SHADERPREP_DIRECTIVE_MARKER=//:
        SHADERPREP_SHADER_EXTENSIONS='[".wgsl", ".wgsli"]'
        SHADERPREP_BIT_CONSTANTS=false
    """

    model_config = SettingsConfigDict(
        env_prefix="SHADERPREP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Scanner configuration
    directive_marker: str = Field(
        default="//:",
        description="Comment-style sentinel that starts a directive line",
    )

    # Workspace configuration
    shader_extensions: List[str] = Field(
        default_factory=lambda: [".wgsl"],
        description="File extensions picked up when scanning a directory into a workspace",
    )

    # Engine configuration
    max_include_depth: int = Field(
        default=200,
        ge=1,
        description="Maximum number of nested files in one expansion request",
    )

    # Registry configuration
    bit_constants: bool = Field(
        default=True,
        description="Seed new registries with BIT_0 .. BIT_63 integer constants",
    )

    debug_mode: bool = Field(
        default=False,
        description="Enable debug output during expansion",
    )


# Singleton instance - import this in your code
appsettings = AppSettings()
