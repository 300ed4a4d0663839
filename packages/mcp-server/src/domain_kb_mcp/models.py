"""Knowledge base data models.

Serialized with camelCase aliases: ``model_dump(by_alias=True, mode="json")``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SearchMatch(BaseModel):
    """One located occurrence of a query in the knowledge base."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    position: int = Field(ge=0, description="Character offset of the match")
    matched_text: str = Field(description="Narrow window around the match, possibly truncated")
    context_text: str = Field(description="Wider window around the match")
    truncated: bool = Field(default=False, description="matched_text was cut to the length bound")


class KnowledgeBaseInfo(BaseModel):
    """Snapshot of the loaded knowledge base."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    size_bytes: int = 0
    content_length: int = 0
    available: bool = False
    last_modified: Optional[datetime] = None
    description: str = ""
    file_path: Optional[str] = None
    error: Optional[str] = None
