"""
Generation history models.
"""

from typing import Optional, List
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field


class GenerationType(str, Enum):
    """Kinds of AI generation recorded in history."""
    SUMMARY = "summary"
    WRITING_SUGGESTION = "writing_suggestion"
    SEO = "seo"
    COMPLETION = "completion"


class GenerationRecord(BaseModel):
    """One audit row for a generation."""
    id: Optional[int] = None
    user_id: Optional[int] = None
    type: str
    prompt: str
    result: str
    tokens_used: int = 0
    model: str
    provider: str
    created_at: Optional[datetime] = None


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class GenerationHistoryPage(BaseModel):
    items: List[GenerationRecord] = Field(default_factory=list)
    pagination: Pagination
