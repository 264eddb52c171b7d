"""
Raw Record Client

Fetches the record-level dataset behind an analyzed file.
"""

from typing import Any, Dict, List, Optional
import logging

import httpx

logger = logging.getLogger(__name__)

ENVELOPE_KEYS = ("rawData", "data")


def unwrap_records(payload: Any) -> Optional[List[Dict[str, Any]]]:
    """Find the record list in a response body: ``rawData``, ``data`` or a bare list."""
    records = payload
    if isinstance(payload, dict):
        records = next((payload[key] for key in ENVELOPE_KEYS if payload.get(key)), None)
    if not isinstance(records, list) or not records:
        return None
    if not all(isinstance(row, dict) for row in records):
        return None
    return records


class RawDataClient:
    """Authenticated GET of ``/files/rawData/{user_id}/{file_id}``."""

    def __init__(self, base_url: str, credential: Optional[str], timeout: float = 30.0,
                 client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self.credential = credential
        self.timeout = timeout
        self._client = client

    async def fetch(self, user_id: Optional[str], file_id: Optional[str]) -> Optional[List[Dict[str, Any]]]:
        """
        Fetch the records for a file.

        Returns:
            The records, or None when the data is unavailable or the call fails
        """
        if not self.credential or not user_id or not file_id:
            logger.info("Raw data fetch skipped: missing credential, user id or file id")
            return None

        url = f"{self.base_url}/files/rawData/{user_id}/{file_id}"
        headers = {"Authorization": f"Bearer {self.credential}"}
        try:
            if self._client is not None:
                response = await self._client.get(url, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, headers=headers)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch raw data for file {file_id}: {type(e).__name__}: {e}")
            return None
        except ValueError as e:
            logger.error(f"Raw data response for file {file_id} is not JSON: {e}")
            return None

        records = unwrap_records(payload)
        if records is None:
            logger.warning(f"No raw records in response for file {file_id}")
        else:
            logger.info(f"Fetched {len(records)} raw records for file {file_id}")
        return records
