"""
Conversation API Endpoints

Open, drive and close analyst conversations. Conversations are held in
process memory for as long as the panel is open and dropped on DELETE.
There is no idle expiry: a client that never sends DELETE leaves its
conversation registered until the process exits.
"""

from typing import Callable, Dict, List, Optional
from fastapi import APIRouter, Depends, Header, HTTPException, status
import logging

from ..analysis import AnalysisContext, summarize_records
from ..config import get_config
from ..conversation import ConversationOrchestrator, Message
from ..exceptions import ConversationNotFoundError
from ..langchain_config import ChatModelClient
from ..models import (
    ConversationResponse,
    MessageModel,
    ModeRequest,
    OpenConversationRequest,
    SendMessageRequest,
    TurnResponse,
)
from ..quota import QuotaGate
from ..raw_data import RawDataClient
from ..utils.error_handling import handle_error, validate_content

logger = logging.getLogger(__name__)

# Create router for conversation endpoints
router = APIRouter(prefix="/conversations", tags=["conversations"])

ConversationFactory = Callable[[OpenConversationRequest, Optional[str]], ConversationOrchestrator]


class ConversationRegistry:
    """In-memory map of open conversations."""

    def __init__(self):
        self._conversations: Dict[str, ConversationOrchestrator] = {}

    def add(self, conversation: ConversationOrchestrator) -> None:
        self._conversations[conversation.id] = conversation

    def get(self, conversation_id: str) -> ConversationOrchestrator:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    def remove(self, conversation_id: str) -> ConversationOrchestrator:
        conversation = self.get(conversation_id)
        del self._conversations[conversation_id]
        return conversation

    def __len__(self) -> int:
        return len(self._conversations)


# Global registry instance
_registry: Optional[ConversationRegistry] = None


def get_registry() -> ConversationRegistry:
    """Get or create the conversation registry."""
    global _registry
    if _registry is None:
        _registry = ConversationRegistry()
    return _registry


def build_conversation(request: OpenConversationRequest, credential: Optional[str]) -> ConversationOrchestrator:
    """Wire a conversation to the configured backend service and model."""
    config = get_config()
    summary = request.summary
    if not summary and request.records:
        summary = summarize_records(request.records)

    analysis = None
    if request.analysis is not None:
        analysis = AnalysisContext.from_payload(request.analysis, summary, request.file_name or "your file")
    elif summary:
        analysis = AnalysisContext(file_name=request.file_name or "your file", summary=summary)

    return ConversationOrchestrator(
        quota_gate=QuotaGate(
            config.API_BASE_URL,
            credential,
            timeout=config.REQUEST_TIMEOUT,
            retry_base_delay=config.QUOTA_RETRY_BASE_DELAY
        ),
        model_client=ChatModelClient(),
        raw_data_client=RawDataClient(config.API_BASE_URL, credential, timeout=config.REQUEST_TIMEOUT),
        analysis=analysis,
        file_name=request.file_name,
        user_id=request.user_id,
        file_id=request.file_id,
        quota_max_retries=config.QUOTA_MAX_RETRIES,
        raw_data_max_rows=config.RAW_DATA_MAX_ROWS,
        raw_data_max_chars=config.RAW_DATA_MAX_CHARS
    )


def get_conversation_factory() -> ConversationFactory:
    return build_conversation


def bearer_token(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    """Forward the caller's bearer token to the usage and raw data services."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _message_model(message: Message) -> MessageModel:
    return MessageModel(**message.to_dict())


def _snapshot(conversation: ConversationOrchestrator) -> ConversationResponse:
    state = conversation.state
    return ConversationResponse(
        id=conversation.id,
        mode=state.mode,
        phase=state.phase.value,
        raw_data_fetched=state.raw_data_fetched,
        suggested_keywords=state.suggested_keywords,
        messages=[_message_model(message) for message in state.messages]
    )


@router.post("", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def open_conversation(
    request: OpenConversationRequest,
    token: Optional[str] = Depends(bearer_token),
    factory: ConversationFactory = Depends(get_conversation_factory),
    registry: ConversationRegistry = Depends(get_registry)
):
    """
    Open a conversation for an analyzed file.

    When an analysis payload is supplied the opening insights are generated
    before the response is returned.
    """
    try:
        conversation = factory(request, token)
        registry.add(conversation)
        logger.info(f"Opened conversation {conversation.id} for file {request.file_id}")
        await conversation.bootstrap_insights()
        return _snapshot(conversation)
    except Exception as e:
        logger.error(f"Failed to open conversation: {type(e).__name__}: {e}")
        raise handle_error(e)


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(conversation_id: str, registry: ConversationRegistry = Depends(get_registry)):
    try:
        return _snapshot(registry.get(conversation_id))
    except Exception as e:
        raise handle_error(e)


@router.put("/{conversation_id}/mode", response_model=ConversationResponse)
async def set_mode(conversation_id: str, request: ModeRequest,
                   registry: ConversationRegistry = Depends(get_registry)):
    """Switch between analysis and raw data insights."""
    try:
        conversation = registry.get(conversation_id)
        await conversation.set_mode(request.mode)
        return _snapshot(conversation)
    except Exception as e:
        raise handle_error(e)


@router.post("/{conversation_id}/messages", response_model=TurnResponse)
async def send_message(conversation_id: str, request: SendMessageRequest,
                       registry: ConversationRegistry = Depends(get_registry)):
    """
    Run one conversational turn.

    Quota blocks and model failures come back as assistant messages with a
    200 status; only unknown conversations and bad input are HTTP errors.
    """
    validate_content(request.content)
    try:
        conversation = registry.get(conversation_id)
        appended: List[Message] = await conversation.send(request.content)
        return TurnResponse(
            conversation_id=conversation.id,
            messages=[_message_model(message) for message in appended]
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Turn failed for conversation {conversation_id}: {type(e).__name__}: {e}")
        raise handle_error(e)


@router.delete("/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_conversation(conversation_id: str, registry: ConversationRegistry = Depends(get_registry)):
    """Close a conversation and discard its transcript."""
    try:
        registry.remove(conversation_id).close()
    except Exception as e:
        raise handle_error(e)
