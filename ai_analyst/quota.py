"""
Quota Gate

Consumes one AI prompt from the user's plan before each conversational
turn. Transport failures are retried a bounded number of times; a
classified answer (success or limit) ends the loop immediately.
"""

from dataclasses import dataclass
from typing import Any, Optional
import asyncio
import logging
import re

import httpx

from .langchain_config import backoff_with_jitter

logger = logging.getLogger(__name__)

USAGE_SUCCESS_MESSAGE = "AI prompt used successfully"
LIMIT_PATTERN = re.compile(r"limit|upgrade your plan", re.IGNORECASE)
ACCESS_DENIED = 403


@dataclass
class QuotaResult:
    """Outcome of one usage-tracking attempt."""
    success: bool
    is_limit_reached: bool = False
    usage: Optional[Any] = None
    message: Optional[str] = None

    def __post_init__(self):
        if self.is_limit_reached and self.success:
            raise ValueError("A quota result cannot be both successful and limit-reached")


class QuotaGate:
    """Gates one usage call per turn with bounded retry and failure classification."""

    def __init__(self, base_url: str, credential: Optional[str], timeout: float = 30.0,
                 retry_base_delay: float = 0.0, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self.credential = credential
        self.timeout = timeout
        self.retry_base_delay = retry_base_delay
        self._client = client

    @property
    def usage_url(self) -> str:
        return f"{self.base_url}/files/promts/"

    async def attempt_consume(self, max_retries: int = 1) -> QuotaResult:
        """
        Record one prompt against the user's quota.

        Args:
            max_retries: Extra attempts after a transport-level failure

        Returns:
            QuotaResult; retries exhausted without a classification gives
            success=False, is_limit_reached=False
        """
        if not self.credential:
            logger.warning("No session credential; skipping usage call")
            return QuotaResult(success=False, message="No session credential")

        attempt = 0
        last_error = None
        while attempt <= max(max_retries, 0):
            try:
                response = await self._post_usage()
            except httpx.RequestError as e:
                last_error = f"{type(e).__name__}: {e}"
                logger.warning(f"Usage call attempt {attempt + 1} failed: {last_error}")
            else:
                result = self.classify(response)
                if result is not None:
                    return result
                last_error = f"HTTP {response.status_code}"
                logger.warning(f"Usage call attempt {attempt + 1} returned unclassified status {response.status_code}")

            attempt += 1
            if attempt <= max_retries and self.retry_base_delay > 0:
                await asyncio.sleep(backoff_with_jitter(attempt - 1, base_delay=self.retry_base_delay))

        logger.error(f"Usage call failed after {attempt} attempt(s): {last_error}")
        return QuotaResult(success=False, is_limit_reached=False, message=last_error)

    async def _post_usage(self) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self.credential}"}
        if self._client is not None:
            return await self._client.post(self.usage_url, json={}, headers=headers)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.usage_url, json={}, headers=headers)

    @staticmethod
    def classify(response: httpx.Response) -> Optional[QuotaResult]:
        """
        Classify a usage response.

        Returns None for error statuses that carry no limit signal, which the
        caller treats as a transport failure.
        """
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = str(body.get("message") or "")

        if response.status_code == ACCESS_DENIED or LIMIT_PATTERN.search(message):
            logger.info(f"Prompt quota reached (status {response.status_code})")
            return QuotaResult(success=False, is_limit_reached=True, message=message or None)

        if response.is_success:
            if message == USAGE_SUCCESS_MESSAGE:
                return QuotaResult(success=True, usage=body.get("usage"), message=message)
            return QuotaResult(success=False, message=message or "Unknown error")

        return None
