"""
Gateway data models.
"""

from .request import CompletionRequest, Message
from .response import CompletionResult, Usage, payload_preview
from .history import GenerationRecord, GenerationType, GenerationHistoryPage, Pagination

__all__ = [
    "CompletionRequest",
    "Message",
    "CompletionResult",
    "Usage",
    "payload_preview",
    "GenerationRecord",
    "GenerationType",
    "GenerationHistoryPage",
    "Pagination",
]
