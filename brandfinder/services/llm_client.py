"""OpenRouter LLM client with cumulative usage accounting."""

import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from brandfinder.config import Settings, settings as default_settings
from brandfinder.schemas.records import TokenUsage

logger = logging.getLogger(__name__)


@dataclass
class UsageTracker:
    """Running totals across every request made by one client."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    cost: float = 0.0
    request_count: int = 0

    def record(self, usage: Dict[str, Any]) -> None:
        """Add the usage block reported by the backend."""
        self.prompt_tokens += int(usage.get("prompt_tokens") or 0)
        self.completion_tokens += int(usage.get("completion_tokens") or 0)
        self.total_tokens += int(usage.get("total_tokens") or 0)
        self.cost += float(usage.get("cost") or 0)
        self.request_count += 1

    def checkpoint(self) -> TokenUsage:
        return TokenUsage(
            prompt_tokens=self.prompt_tokens,
            completion_tokens=self.completion_tokens,
            total_tokens=self.total_tokens,
            cost=self.cost,
        )

    def since(self, before: TokenUsage) -> TokenUsage:
        """Usage accumulated after the given checkpoint."""
        return TokenUsage(
            prompt_tokens=self.prompt_tokens - before.prompt_tokens,
            completion_tokens=self.completion_tokens - before.completion_tokens,
            total_tokens=self.total_tokens - before.total_tokens,
            cost=max(self.cost - before.cost, 0.0),
        )


class OpenRouterClient:
    """Client for the OpenRouter chat completions API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the LLM client."""
        settings = settings or default_settings
        self.api_key = settings.OPENROUTER_API_KEY
        self.base_url = settings.OPENROUTER_BASE_URL
        self.site_url = settings.SITE_URL
        self.site_name = settings.SITE_NAME
        self.timeout = settings.REQUEST_TIMEOUT
        self.transport = transport
        self.usage = UsageTracker()

    def _hash_text(self, text: str) -> str:
        """Hash text using SHA256."""
        return hashlib.sha256(text.encode()).hexdigest()

    def _build_headers(self) -> Dict[str, str]:
        """Build HTTP headers for OpenRouter."""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self.site_url:
            headers["HTTP-Referer"] = self.site_url
        if self.site_name:
            headers["X-Title"] = self.site_name
        return headers

    def chat_completion(
        self,
        model: str,
        messages: List[Dict[str, str]],
        temperature: float = 0.1,
        max_tokens: int = 1000,
    ) -> Dict[str, Any]:
        """
        Call OpenRouter chat completions API once.

        Args:
            model: OpenRouter model identifier
            messages: List of message dicts with 'role' and 'content'
            temperature: Sampling temperature
            max_tokens: Maximum tokens in response

        Returns:
            Decoded response body

        Raises:
            httpx.HTTPStatusError: On a non-2xx response
            httpx.TransportError: On timeouts and connection failures
        """
        payload = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "usage": {"include": True},
        }
        request_hash = self._hash_text(json.dumps(payload, sort_keys=True))
        logger.info(f"LLM request to {model}, hash: {request_hash[:16]}")

        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            response = client.post(
                f"{self.base_url}/chat/completions",
                headers=self._build_headers(),
                json=payload,
            )

            if response.is_error:
                logger.warning(f"OpenRouter returned {response.status_code} for {model}")
                raise httpx.HTTPStatusError(
                    f"OpenRouter API error: {response.status_code} - {response.text}",
                    request=response.request,
                    response=response,
                )

            result = response.json()

        usage = result.get("usage") if isinstance(result, dict) else None
        if isinstance(usage, dict):
            self.usage.record(usage)

        return result


def extract_content(response: Any) -> Optional[str]:
    """Message content of the first choice, or None when the body is malformed."""
    if not isinstance(response, dict):
        return None
    choices = response.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    return message.get("content")
