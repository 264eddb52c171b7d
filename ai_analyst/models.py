from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List

from .conversation import ConversationMode


class OpenConversationRequest(BaseModel):
    """Request model for opening a conversation panel."""
    file_id: str
    file_name: Optional[str] = Field(default=None, description="Display name of the analyzed file")
    user_id: Optional[str] = Field(default=None, description="Owner of the file, used for the raw data fetch")
    analysis: Optional[Dict[str, Any]] = Field(default=None, description="Analysis payload with an 'insights' object")
    summary: Optional[Dict[str, Any]] = Field(default=None, description="Per-field summaries")
    records: Optional[List[Dict[str, Any]]] = Field(default=None, description="Records to summarize when no summary is given")


class SendMessageRequest(BaseModel):
    """Request model for one conversational turn."""
    content: str


class ModeRequest(BaseModel):
    """Request model for switching the prompt strategy."""
    mode: ConversationMode


class MessageModel(BaseModel):
    """One transcript entry."""
    id: str
    role: str
    content: str
    chart_suggestions: List[Dict[str, Any]] = Field(default=[], description="Render-ready chart descriptors with roles")
    timestamp: str
    is_quota_error: bool = False
    show_upgrade: bool = False
    raw_json_block: Optional[str] = None
    tables: List[Dict[str, Any]] = Field(default=[], description="Markdown tables found in the content")


class ConversationResponse(BaseModel):
    """Response model for a conversation snapshot."""
    id: str
    mode: ConversationMode
    phase: str
    raw_data_fetched: bool
    suggested_keywords: List[str] = []
    messages: List[MessageModel]


class TurnResponse(BaseModel):
    """Response model for the messages appended by one turn."""
    conversation_id: str
    messages: List[MessageModel]


class ExtractChartsRequest(BaseModel):
    """Request model for stateless chart extraction."""
    text: str


class ExtractChartsResponse(BaseModel):
    """Response model for stateless chart extraction."""
    content: str
    charts: List[Dict[str, Any]]
    tables: List[Dict[str, Any]]
    malformed_candidates: int = 0
    raw_json_block: Optional[str] = None
