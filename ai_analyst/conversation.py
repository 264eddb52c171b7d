"""
Conversation Orchestrator

Main coordinator for one open analyst conversation. Manages the flow from a
user question through the quota check, prompt composition and model call to
the parsed assistant message.

The message log is append-only. Concurrent sends are not serialized: callers
must disable input while a turn is in flight, otherwise messages are appended
in completion order.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Dict, List, Optional, Protocol
import asyncio
import json
import logging
import uuid

from .analysis import AnalysisContext
from .charts import (
    ChartSpec,
    ChartSpecValidator,
    InsufficientDimensionality,
    MarkdownTable,
    ResponsePreprocessor,
    TableMarkdownTranspiler,
    infer_roles_for_spec,
)
from .charts.preprocessor import FENCED_BLOCK_RE, clean_candidate_text
from .exceptions import ConversationClosedError
from .quota import QuotaGate, QuotaResult
from .raw_data import RawDataClient
from . import prompts

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class ModelClient(Protocol):
    def generate(self, prompt: str) -> Awaitable[str]: ...


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ConversationMode(str, Enum):
    ANALYSIS = "analysis"
    RAW_DATA = "raw_data"


class ConversationPhase(str, Enum):
    IDLE = "idle"
    BOOTSTRAPPING_INSIGHTS = "bootstrapping_insights"
    READY = "ready"
    CHECKING_QUOTA = "checking_quota"
    COMPOSING_PROMPT = "composing_prompt"
    AWAITING_MODEL_REPLY = "awaiting_model_reply"
    PARSING_REPLY = "parsing_reply"


@dataclass
class Message:
    """One transcript entry."""
    role: MessageRole
    content: str
    chart_suggestions: List[ChartSpec] = field(default_factory=list)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    is_quota_error: bool = False
    show_upgrade: bool = False
    raw_json_block: Optional[str] = None
    raw_text: Optional[str] = None
    tables: List[MarkdownTable] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'role': self.role.value,
            'content': self.content,
            'chart_suggestions': [spec.to_dict() for spec in self.chart_suggestions],
            'timestamp': self.timestamp.isoformat(),
            'is_quota_error': self.is_quota_error,
            'show_upgrade': self.show_upgrade,
            'raw_json_block': self.raw_json_block,
            'tables': [table.to_dict() for table in self.tables]
        }


@dataclass
class ConversationState:
    """Everything one open conversation panel holds. Never persisted."""
    messages: List[Message] = field(default_factory=list)
    mode: ConversationMode = ConversationMode.ANALYSIS
    cached_raw_data: Optional[List[Record]] = None
    raw_data_fetched: bool = False
    phase: ConversationPhase = ConversationPhase.IDLE
    suggested_keywords: List[str] = field(default_factory=list)


def serialize_records(records: List[Record], max_rows: int, max_chars: int) -> str:
    """Compact JSON of the first ``max_rows`` records, cut to ``max_chars`` characters."""
    text = json.dumps(records[:max_rows], separators=(",", ":"), default=str, ensure_ascii=False)
    return text[:max_chars]


def parse_initial_insights(text: str) -> Dict[str, Any]:
    """
    Parse the opening-insights reply.

    Raises:
        ValueError: If the reply holds no usable overview object
    """
    match = FENCED_BLOCK_RE.search(text or "")
    payload = json.loads(clean_candidate_text(match.group(1) if match else (text or "")))
    if not isinstance(payload, dict) or not payload.get("overview"):
        raise ValueError("Initial insights reply has no overview")
    return payload


class ConversationOrchestrator:
    """State machine for one conversation: quota, prompt strategy, parsing, transcript."""

    def __init__(self,
                 quota_gate: QuotaGate,
                 model_client: ModelClient,
                 raw_data_client: Optional[RawDataClient] = None,
                 analysis: Optional[AnalysisContext] = None,
                 file_name: Optional[str] = None,
                 user_id: Optional[str] = None,
                 file_id: Optional[str] = None,
                 quota_max_retries: int = 1,
                 raw_data_max_rows: int = 200,
                 raw_data_max_chars: int = 12000,
                 conversation_id: Optional[str] = None):
        self.id = conversation_id or uuid.uuid4().hex
        self.quota_gate = quota_gate
        self.model_client = model_client
        self.raw_data_client = raw_data_client
        self.analysis = analysis
        self.file_name = file_name or (analysis.file_name if analysis else None) or "your file"
        self.user_id = user_id
        self.file_id = file_id
        self.quota_max_retries = quota_max_retries
        self.raw_data_max_rows = raw_data_max_rows
        self.raw_data_max_chars = raw_data_max_chars

        self.state = ConversationState()
        self.closed = False
        self._bootstrapped = False
        self._raw_fetch_task: Optional[asyncio.Task] = None

        self.preprocessor = ResponsePreprocessor()
        self.validator = ChartSpecValidator()
        self.transpiler = TableMarkdownTranspiler()

    @property
    def messages(self) -> List[Message]:
        return self.state.messages

    @property
    def mode(self) -> ConversationMode:
        return self.state.mode

    def _append(self, message: Message) -> Message:
        self.state.messages.append(message)
        return message

    def _assistant(self, content: str, **kwargs) -> Message:
        return self._append(Message(role=MessageRole.ASSISTANT, content=content, **kwargs))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def bootstrap_insights(self) -> Optional[Message]:
        """
        Generate the opening message from the analysis context.

        Runs at most once and only when analysis is available. Failures fall
        back to a plain greeting. Does not consume quota.
        """
        if self._bootstrapped or self.analysis is None:
            return None
        self._bootstrapped = True
        self.state.phase = ConversationPhase.BOOTSTRAPPING_INSIGHTS

        prompt = prompts.get_initial_insights_prompt(
            self.file_name, self.analysis.category, self.analysis.format_analysis()
        )
        try:
            reply = await self.model_client.generate(prompt)
            parsed = parse_initial_insights(reply)
            keywords = [str(keyword) for keyword in parsed.get("suggestedKeywords") or []]
            visuals = [viz for viz in parsed.get("visualSuggestions") or [] if isinstance(viz, dict)]
            content = prompts.get_greeting(
                self.file_name, parsed["overview"], keywords, visuals, self.analysis.category
            )
            self.state.suggested_keywords = keywords
        except Exception as e:
            logger.warning(f"Initial insights unavailable, using plain greeting: {type(e).__name__}: {e}")
            content = prompts.get_greeting(self.file_name)

        self.state.phase = ConversationPhase.READY
        if self.closed:
            return None
        return self._assistant(content)

    def close(self) -> None:
        """Stop observing this conversation; late results are discarded."""
        self.closed = True
        logger.info(f"Conversation {self.id} closed with {len(self.state.messages)} messages")

    # ------------------------------------------------------------------
    # Raw data
    # ------------------------------------------------------------------

    async def set_mode(self, mode: ConversationMode) -> None:
        """Switch prompt strategy; entering raw data mode starts the one-shot fetch."""
        if self.closed:
            raise ConversationClosedError(self.id)
        mode = ConversationMode(mode)
        self.state.mode = mode
        logger.info(f"Conversation {self.id} switched to {mode.value} mode")
        if mode is ConversationMode.RAW_DATA:
            self._start_raw_fetch()

    def _start_raw_fetch(self) -> Optional[asyncio.Task]:
        if self.state.raw_data_fetched:
            return None
        if self._raw_fetch_task is None:
            self._raw_fetch_task = asyncio.get_running_loop().create_task(self._fetch_raw_data())
            self._raw_fetch_task.add_done_callback(self._log_fetch_outcome)
        return self._raw_fetch_task

    def _log_fetch_outcome(self, task: asyncio.Task) -> None:
        if task.cancelled():
            logger.warning(f"Raw data fetch cancelled for conversation {self.id}")
        elif task.exception() is not None:
            logger.error(f"Raw data fetch raised for conversation {self.id}: {task.exception()}")

    async def _fetch_raw_data(self) -> Optional[List[Record]]:
        records = None
        try:
            if self.raw_data_client is not None:
                records = await self.raw_data_client.fetch(self.user_id, self.file_id)
        finally:
            self.state.cached_raw_data = records
            self.state.raw_data_fetched = True
        return records

    async def ensure_raw_data(self) -> Optional[List[Record]]:
        """Return the cached records, joining the single in-flight fetch if needed."""
        if self.state.raw_data_fetched:
            return self.state.cached_raw_data
        task = self._start_raw_fetch()
        if task is None:
            return self.state.cached_raw_data
        try:
            return await asyncio.shield(task)
        except Exception as e:
            logger.error(f"Raw data fetch failed: {type(e).__name__}: {e}")
            return None

    def _raw_notice(self) -> str:
        already_loaded = any(
            message.role is MessageRole.SYSTEM and message.content.startswith(prompts.RAW_CONTEXT_NOTICE_PREFIX)
            for message in self.state.messages
        )
        if already_loaded:
            return prompts.RAW_CONTEXT_REMINDER
        return prompts.RAW_CONTEXT_NOTICE.format(file_name=self.file_name)

    # ------------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------------

    async def send(self, text: str) -> List[Message]:
        """
        Run one conversational turn.

        Returns:
            The messages appended by this turn, in order
        """
        if self.closed:
            raise ConversationClosedError(self.id)
        question = (text or "").strip()
        if not question:
            return []

        start = len(self.state.messages)
        mode = self.state.mode
        records = None

        if mode is ConversationMode.RAW_DATA:
            records = await self.ensure_raw_data()
            if self.closed:
                return self._discard("raw data")
            if records:
                self._append(Message(role=MessageRole.SYSTEM, content=self._raw_notice()))
        self._append(Message(role=MessageRole.USER, content=question))

        self.state.phase = ConversationPhase.CHECKING_QUOTA
        quota = await self.quota_gate.attempt_consume(self.quota_max_retries)
        if self.closed:
            return self._discard("quota result")
        if not quota.success:
            self._block(quota)
            return self.state.messages[start:]

        if mode is ConversationMode.RAW_DATA and not records:
            self.state.phase = ConversationPhase.READY
            self._assistant(prompts.RAW_DATA_UNAVAILABLE_MESSAGE)
            return self.state.messages[start:]

        try:
            self.state.phase = ConversationPhase.COMPOSING_PROMPT
            prompt = self._compose_prompt(mode, question, records)
            self.state.phase = ConversationPhase.AWAITING_MODEL_REPLY
            reply = await self.model_client.generate(prompt)
        except Exception as e:
            logger.error(f"Model call failed in {mode.value} mode: {type(e).__name__}: {e}")
            if self.closed:
                return self._discard("model failure")
            self.state.phase = ConversationPhase.READY
            failure = (prompts.RAW_DATA_FAILURE_MESSAGE if mode is ConversationMode.RAW_DATA
                       else prompts.ANALYSIS_FAILURE_MESSAGE)
            self._assistant(failure)
            return self.state.messages[start:]

        if self.closed:
            return self._discard("model reply")

        self.state.phase = ConversationPhase.PARSING_REPLY
        self._append(self._build_reply_message(reply))
        self.state.phase = ConversationPhase.READY
        return self.state.messages[start:]

    def _discard(self, what: str) -> List[Message]:
        logger.info(f"Discarding {what} for closed conversation {self.id}")
        self.state.phase = ConversationPhase.READY
        return []

    def _block(self, quota: QuotaResult) -> None:
        if quota.is_limit_reached:
            content = quota.message or prompts.QUOTA_LIMIT_MESSAGE
        else:
            # transport detail stays in the log
            content = prompts.QUOTA_UNAVAILABLE_MESSAGE
        logger.info(f"Turn blocked by quota gate (limit reached: {quota.is_limit_reached})")
        self._assistant(content, is_quota_error=True, show_upgrade=True)
        self.state.phase = ConversationPhase.READY

    def _compose_prompt(self, mode: ConversationMode, question: str, records: Optional[List[Record]]) -> str:
        if mode is ConversationMode.RAW_DATA:
            raw = serialize_records(records or [], self.raw_data_max_rows, self.raw_data_max_chars)
            return prompts.get_raw_data_prompt(raw, question)
        analysis = self.analysis or AnalysisContext(file_name=self.file_name)
        return prompts.get_analysis_prompt(
            self.file_name, analysis.category, analysis.format_analysis(), analysis.format_summary(), question
        )

    def _build_reply_message(self, reply: str) -> Message:
        result = self.preprocessor.preprocess(reply)
        message = Message(
            role=MessageRole.ASSISTANT,
            content=result.prose,
            raw_json_block=result.first_block,
            raw_text=reply,
            tables=self.transpiler.extract_tables(result.prose)
        )
        for spec in self.validator.validate_all(result.candidates):
            spec.roles = infer_roles_for_spec(spec)
            if isinstance(spec.roles, InsufficientDimensionality):
                logger.info(f"Dropping '{spec.type}' chart: not enough numeric fields")
                continue
            message.chart_suggestions.append(spec)
        logger.info(
            f"Reply parsed: {len(message.chart_suggestions)} chart(s), "
            f"{len(result.failures)} malformed candidate(s), {len(message.tables)} table(s)"
        )
        return message
