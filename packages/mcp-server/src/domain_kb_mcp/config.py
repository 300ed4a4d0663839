"""Knowledge base server configuration.

All settings use the ``KB_`` environment prefix, e.g. ``KB_FILE_PATH``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FILE_PATH = "datasets/knowledge-base.txt"
DEFAULT_DESCRIPTION = "Domain knowledge base"


class KnowledgeBaseConfig(BaseSettings):
    """Settings for loading and searching the knowledge base file."""

    model_config = SettingsConfigDict(
        env_prefix="KB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    file_path: str = Field(
        default=DEFAULT_FILE_PATH,
        description="Knowledge base text file (absolute, or relative to working_directory)",
    )
    working_directory: Optional[Path] = Field(
        default=None,
        description="Base for a relative file_path (default: current directory)",
    )
    context_characters: int = Field(
        default=100,
        ge=0,
        description="Characters of context on each side of a match",
    )
    max_content_length: int = Field(
        default=3000,
        ge=1,
        description="Upper bound on the matched text returned per match",
    )
    max_results_per_search: int = Field(
        default=5,
        ge=1,
        description="Ceiling applied to every search request",
    )
    description: str = Field(default=DEFAULT_DESCRIPTION)

    def resolved_file_path(self) -> Path:
        """Absolute path of the knowledge base file."""
        path = Path(self.file_path).expanduser()
        if path.is_absolute():
            return path
        base = self.working_directory or Path.cwd()
        return (Path(base) / path).absolute()
