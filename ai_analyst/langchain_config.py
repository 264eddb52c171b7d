import random
from typing import Optional
import logging

from langchain_openai import ChatOpenAI
from openai import RateLimitError, APIError

from .config import get_config
from .exceptions import OpenAIRateLimitError, OpenAIAPIError, ConfigurationError

logger = logging.getLogger(__name__)


def backoff_with_jitter(attempt: int, base_delay: float = 1.0, max_delay: float = 32.0) -> float:
    """Exponential backoff with jitter."""
    delay = min(base_delay * (2 ** attempt), max_delay)
    jitter = random.uniform(0, delay * 0.1)
    return delay + jitter


def create_chat_model(model_name: Optional[str] = None, temperature: Optional[float] = None) -> ChatOpenAI:
    """Create the chat model from configuration."""
    config = get_config()
    if not config.OPENAI_API_KEY:
        raise ConfigurationError("OPENAI_API_KEY must be set in environment")
    return ChatOpenAI(
        model=model_name or config.OPENAI_MODEL,
        temperature=config.MODEL_TEMPERATURE if temperature is None else temperature,
        api_key=config.OPENAI_API_KEY,
        max_retries=0
    )


class ChatModelClient:
    """Single request/response model inference: prompt in, text out."""

    def __init__(self, llm: Optional[ChatOpenAI] = None):
        self._llm = llm

    @property
    def llm(self) -> ChatOpenAI:
        if self._llm is None:
            self._llm = create_chat_model()
        return self._llm

    async def generate(self, prompt: str) -> str:
        """
        Send one prompt to the model.

        Raises:
            OpenAIRateLimitError: If the provider rate limits the request
            OpenAIAPIError: If the provider returns any other API error
        """
        try:
            result = await self.llm.ainvoke(prompt)
        except RateLimitError as e:
            raise OpenAIRateLimitError("OpenAI API rate limit exceeded") from e
        except APIError as e:
            raise OpenAIAPIError("OpenAI API error occurred") from e

        content = result.content if hasattr(result, 'content') else result
        if isinstance(content, list):
            content = "".join(part.get("text", "") if isinstance(part, dict) else str(part) for part in content)
        logger.debug(f"Model reply length: {len(content or '')}")
        return content or ""
