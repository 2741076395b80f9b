# =============================================================================
# ingestion/api_processor.py - Remote API Processor
# =============================================================================
# Fetches one JSON document from a remote HTTP API and turns it into
# records with the same text extraction policy as the JSON processor
# (plus "name" as a last-resort field).
#
# Source config:
#   {
#       "url": "https://api.example.com/posts",
#       "method": "GET",                  # or POST
#       "headers": {"X-Team": "support"},
#       "api_key": "...",                 # sent as Authorization: Bearer
#       "data_path": "data.items",        # optional dot-path into the body
#       "text_field": "body"              # optional
#   }
#
# A non-2xx response, transport failure or non-JSON body fails the whole
# call. Nothing is retried.
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

import httpx

from core.models.ingestion import DataRecord, ProcessingResult
from ingestion.base import TEXT_FIELDS, DataProcessor, extract_text_content

logger = logging.getLogger(__name__)

API_TEXT_FIELDS = TEXT_FIELDS + ("name",)
DEFAULT_TIMEOUT_SECONDS = 30.0
SAMPLE_SIZE = 5


def follow_data_path(data: Any, data_path: str | None) -> Any:
    """Walk a dot-separated path ("data.items") into a decoded JSON body."""
    if not data_path:
        return data

    current = data
    for part in data_path.split("."):
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            current = None
        if current is None:
            break
    return current


class APIProcessor(DataProcessor):
    """
    Pulls records from a remote JSON API.

    Args:
        client: Optional httpx.Client (tests pass one with a MockTransport)
        timeout: Request timeout in seconds when no client is given
    """

    kind = "api"

    def __init__(self, client: httpx.Client | None = None, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.client = client
        self.timeout = timeout

    def process(self, raw: dict[str, Any], config: dict[str, Any] | None = None) -> ProcessingResult:
        """
        Fetch and convert.

        Args:
            raw: The API source config (url, method, headers, ...)
            config: Extra overrides merged over `raw`
        """
        source = {**(raw or {}), **(config or {})}

        if not self.validate(source):
            return ProcessingResult.failure("API source requires an http(s) url")

        url = source["url"]
        method = str(source.get("method") or "GET").upper()

        headers = {"Content-Type": "application/json", **(source.get("headers") or {})}
        if source.get("api_key"):
            headers["Authorization"] = f"Bearer {source['api_key']}"

        try:
            response = self._request(method, url, headers)
        except httpx.HTTPError as e:
            logger.warning(f"API source request to {url} failed: {e}")
            return ProcessingResult.failure(f"API request failed: {e}")

        if not response.is_success:
            logger.warning(f"API source {url} returned {response.status_code}")
            return ProcessingResult.failure(
                f"API request failed: {response.status_code} {response.reason_phrase}"
            )

        try:
            body = response.json()
        except ValueError:
            return ProcessingResult.failure("API response was not valid JSON")

        data_path = source.get("data_path")
        items = follow_data_path(body, data_path)
        if not isinstance(items, list):
            items = [items]

        text_field = source.get("text_field")
        records: list[DataRecord] = []
        errors: list[str] = []

        for index, item in enumerate(items):
            content = extract_text_content(item, text_field, API_TEXT_FIELDS)
            if not content.strip():
                errors.append(f"Item {index}: No text content found")
                continue
            records.append(self.make_record(index, content, {
                **item,
                "source_index": index,
                "api_url": url,
            }))

        logger.info(f"API source {url}: {len(records)} records, {len(errors)} errors")

        return self.build_result(records, errors, {
            "api_url": url,
            "data_path": data_path,
            "sample_data": [r.metadata for r in records[:SAMPLE_SIZE]],
        })

    def _request(self, method: str, url: str, headers: dict[str, str]) -> httpx.Response:
        if self.client is not None:
            return self.client.request(method, url, headers=headers)
        with httpx.Client(timeout=self.timeout) as client:
            return client.request(method, url, headers=headers)

    def validate(self, raw: Any) -> bool:
        return (
            isinstance(raw, dict)
            and isinstance(raw.get("url"), str)
            and raw["url"].startswith("http")
        )
