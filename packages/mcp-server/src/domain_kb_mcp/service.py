"""Knowledge base service: load once, then search and describe.

The service is usable in-process or behind the MCP tools in
:mod:`domain_kb_mcp.tools`. None of its methods raise for operational
failures; they log and return an empty or "unavailable" value instead.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from domain_kb_common import get_logger

from domain_kb_mcp.config import KnowledgeBaseConfig
from domain_kb_mcp.engine import SearchEngine
from domain_kb_mcp.models import KnowledgeBaseInfo, SearchMatch

logger = get_logger(__name__)


class KnowledgeBaseService:
    """File-backed knowledge base.

    Example:
        >>> service = KnowledgeBaseService(KnowledgeBaseConfig(file_path="kb.txt"))
        >>> if service.initialize():
        ...     matches = service.search("dashboard", max_results=3)
    """

    def __init__(self, config: Optional[KnowledgeBaseConfig] = None) -> None:
        self.config = config or KnowledgeBaseConfig()
        self.engine = SearchEngine(
            context_characters=self.config.context_characters,
            max_content_length=self.config.max_content_length,
        )
        self._file_path: Optional[Path] = None
        self._size_bytes = 0
        self._last_modified: Optional[datetime] = None
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> bool:
        """Read the knowledge base file into memory.

        Returns:
            True when the content was loaded; False (logged) otherwise.
        """
        if self._initialized:
            logger.debug("kb_already_initialized", file_path=str(self._file_path))
            return True

        try:
            file_path = self.config.resolved_file_path()
        except (OSError, RuntimeError) as e:
            logger.error("kb_path_resolution_failed", file_path=self.config.file_path, error=str(e))
            return False

        logger.info("kb_initializing", file_path=str(file_path))

        if not file_path.is_file():
            logger.error("kb_file_not_found", file_path=str(file_path))
            return False

        try:
            stat = file_path.stat()
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("kb_read_failed", file_path=str(file_path), error=str(e))
            return False

        self.engine.load(content)
        self._file_path = file_path
        self._size_bytes = stat.st_size
        self._last_modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        self._initialized = True

        logger.info(
            "kb_initialized",
            file_path=str(file_path),
            content_length=len(content),
            size_bytes=stat.st_size,
        )
        return True

    def search(self, query: str, max_results: int = 3) -> list[SearchMatch]:
        """Search the loaded content.

        ``max_results`` is capped at ``config.max_results_per_search``.
        """
        if not self._initialized or not query or not query.strip():
            logger.warning("kb_search_skipped", initialized=self._initialized)
            return []

        limit = min(max_results, self.config.max_results_per_search)
        try:
            matches = self.engine.search(query, limit)
        except Exception as e:
            logger.error("kb_search_failed", query=query, error=str(e))
            return []

        logger.info("kb_search_completed", query=query, max_results=limit, result_count=len(matches))
        return matches

    def get_info(self) -> KnowledgeBaseInfo:
        """Describe the current state. Never raises."""
        try:
            return KnowledgeBaseInfo(
                size_bytes=self._size_bytes,
                content_length=len(self.engine.content),
                available=self._initialized,
                last_modified=self._last_modified,
                description=self.config.description,
                file_path=str(self._file_path or self.config.file_path),
            )
        except Exception as e:
            logger.error("kb_info_failed", error=str(e))
            return KnowledgeBaseInfo(available=False, error=str(e))

    def get_raw_content(self) -> str:
        """Full knowledge base text, or "" before initialization."""
        if not self._initialized:
            return ""
        return self.engine.content
