"""Brand website lookup against OpenRouter, plus a read-only results viewer."""

import logging
from typing import Optional, Sequence

import httpx
from rich.console import Console

from brandfinder.config import Settings, settings as default_settings
from brandfinder.console import console, print_summary
from brandfinder.errors import MissingCredentialError, ModelNotFoundError
from brandfinder.schemas.records import (
    BrandResult,
    RunRecord,
    RunTokenUsage,
    TokenUsage,
    iso_timestamp,
)
from brandfinder.services.completion_store import CompletionCheck, CompletionStore
from brandfinder.services.llm_client import OpenRouterClient, extract_content
from brandfinder.services.statistics import aggregate_token_usage, build_run_record
from brandfinder.services.validators import parse_brand_payload

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that finds official websites for knife and blade brands. "
    "Always provide the most accurate and up-to-date official website URL for each brand. "
    "If you cannot find an official website, clearly state that and provide any relevant "
    "information you found. Make sure that the output you produce is valid JSON."
)


def build_brand_prompt(brand_name: str) -> str:
    """User prompt asking for the brand's official site as JSON."""
    return f"""Find the official website URL for the knife/blade brand "{brand_name}".

Please provide:
1. The official website URL (if found)
2. A brief description of the brand

Please verify the website URL is official and not a fan site or a reseller site.
Also make sure that the website is for a knife or blade brand.

Format your response as JSON with the following structure:
{{
    "brand_name": "{brand_name}",
    "website_url": "official website URL or null if not found",
    "description": "brief description of the brand",
    "additional_info": {{
        "founded": "year or null",
        "location": "country/region or null",
        "specialties": "what they're known for or null"
    }},
    "search_confidence": "high/medium/low",
    "notes": "any additional notes or null"
}}"""


def classify_transport_error(error: Exception) -> str:
    """Map a transport failure to network_error or connection_error."""
    if isinstance(error, httpx.TimeoutException):
        return "network_error"
    if isinstance(error, httpx.ConnectError):
        return "connection_error"
    if isinstance(error, httpx.NetworkError):
        return "network_error"

    message = str(error).lower()
    if "timeout" in message or "timed out" in message or "network" in message:
        return "network_error"
    return "connection_error"


class ResultsViewer:
    """Read-only access to stored results for one model key.

    Used for --show when no credential is configured.
    """

    def __init__(
        self,
        model_key: str,
        settings: Optional[Settings] = None,
        store: Optional[CompletionStore] = None,
    ):
        self.settings = settings or default_settings
        self.model_key = model_key
        self.store = store or CompletionStore(self.settings.OUTPUT_DIR)

    def check_completion(self, count: int) -> CompletionCheck:
        return self.store.check(self.model_key, count)

    def print_summary(
        self,
        results: Sequence[BrandResult],
        usage: Optional[RunTokenUsage] = None,
        out: Console = console,
    ) -> None:
        print_summary(self.model_key, results, usage=usage, out=out)


class BrandWebsiteFinder(ResultsViewer):
    """Finds official brand websites with one backend request per brand."""

    def __init__(
        self,
        model_key: Optional[str] = None,
        settings: Optional[Settings] = None,
        store: Optional[CompletionStore] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the finder.

        Raises:
            ModelNotFoundError: If the model key is not configured
            MissingCredentialError: If OPENROUTER_API_KEY is not set
        """
        settings = settings or default_settings
        model_key = model_key or settings.DEFAULT_MODEL

        model_name = settings.MODELS.get(model_key)
        if not model_name:
            raise ModelNotFoundError(model_key, list(settings.MODELS))
        if not settings.OPENROUTER_API_KEY:
            raise MissingCredentialError()

        super().__init__(model_key, settings, store)
        self.model_name = model_name
        self.client = OpenRouterClient(settings, transport=transport)
        self.store.ensure_output_dir()

    def find_brand_website(self, brand_name: str) -> BrandResult:
        """
        Look up one brand. Never raises; failures become unsuccessful results.

        Args:
            brand_name: Brand name exactly as given in the input list

        Returns:
            BrandResult for this brand
        """
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_brand_prompt(brand_name)},
        ]
        logger.info(f"Searching for {brand_name} using {self.model_key}")

        before = self.client.usage.checkpoint()
        try:
            response = self.client.chat_completion(
                model=self.model_name,
                messages=messages,
                temperature=self.settings.TEMPERATURE,
                max_tokens=self.settings.MAX_TOKENS,
            )
        except httpx.HTTPStatusError as e:
            logger.error(f"Error searching for {brand_name}: {e}")
            return self._failure(brand_name, "api_error", str(e))
        except httpx.TransportError as e:
            logger.error(f"Error searching for {brand_name}: {e!r}")
            return self._failure(brand_name, classify_transport_error(e), str(e) or repr(e))
        except Exception as e:
            logger.error(f"Error searching for {brand_name}: {e}", exc_info=True)
            return self._failure(brand_name, "unknown_error", str(e))

        usage = self.client.usage.since(before)
        content = extract_content(response)

        if not isinstance(content, str) or not content.strip():
            logger.error(f"Error searching for {brand_name}: no content in response from model")
            return self._failure(brand_name, "model_error", "No content in response from model", usage)

        try:
            payload = parse_brand_payload(content)
        except ValueError as e:
            logger.warning(f"Could not parse JSON response for {brand_name}, using fallback: {e}")
            return self._parse_fallback(brand_name, content, usage)

        data = payload.model_dump()
        data.update(
            brand_name=brand_name,
            model_used=self.model_key,
            timestamp=iso_timestamp(),
            raw_response=content,
            error_type=None,
            success=True,
            token_usage=usage.model_dump(),
        )
        return BrandResult.model_validate(data)

    def _failure(
        self,
        brand_name: str,
        error_type: str,
        message: str,
        usage: Optional[TokenUsage] = None,
    ) -> BrandResult:
        label = error_type.replace("_", " ").upper()
        return BrandResult(
            brand_name=brand_name,
            website_url=None,
            description=None,
            search_confidence="low",
            notes=f"{label}: {message}",
            model_used=self.model_key,
            raw_response=None,
            error_type=error_type,
            success=False,
            token_usage=usage or TokenUsage(),
        )

    def _parse_fallback(self, brand_name: str, content: str, usage: TokenUsage) -> BrandResult:
        return BrandResult(
            brand_name=brand_name,
            website_url=None,
            description=content[:200] + "...",
            search_confidence="low",
            notes="Could not parse structured response from model",
            model_used=self.model_key,
            raw_response=content,
            error_type="parse_error",
            success=False,
            token_usage=usage,
        )

    def build_run_record(self, results: Sequence[BrandResult], status: Optional[str] = None) -> RunRecord:
        return build_run_record(
            results,
            model_key=self.model_key,
            model_name=self.model_name,
            status=status,
            credit_to_usd=self.settings.CREDIT_TO_USD,
        )

    def save_results(self, results: Sequence[BrandResult], status: Optional[str] = None) -> str:
        """Persist a run; a status marks the file as partial."""
        record = self.build_run_record(results, status=status)
        return self.store.save_run(record, partial=status is not None)

    def print_summary(
        self,
        results: Sequence[BrandResult],
        usage: Optional[RunTokenUsage] = None,
        out: Console = console,
    ) -> None:
        if usage is None:
            usage = aggregate_token_usage(results, self.settings.CREDIT_TO_USD)
        print_summary(self.model_key, results, usage=usage, out=out)
