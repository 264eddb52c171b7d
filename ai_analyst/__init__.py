"""
AI Analyst - conversational data analysis with chart suggestions.

The application entry point is ``ai_analyst.server:create_app``; run it with
``uvicorn --factory ai_analyst.server:create_app``.
"""

from .conversation import (
    ConversationOrchestrator,
    ConversationMode,
    ConversationPhase,
    ConversationState,
    Message,
    MessageRole,
)
from .quota import QuotaGate, QuotaResult

__all__ = [
    'ConversationOrchestrator',
    'ConversationMode',
    'ConversationPhase',
    'ConversationState',
    'Message',
    'MessageRole',
    'QuotaGate',
    'QuotaResult'
]

__version__ = '1.0.0'
