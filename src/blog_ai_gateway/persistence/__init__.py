"""
Persistence for AI generation history.
"""

from .recorder import GenerationRecorder

__all__ = ["GenerationRecorder"]
