"""Result and run record schemas."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

PARTIAL_STATUS = "PARTIAL_RESULTS_DUE_TO_INTERRUPTION"

ERROR_TYPES = (
    "api_error",
    "network_error",
    "model_error",
    "connection_error",
    "parse_error",
    "unknown_error",
)

ErrorType = Literal[
    "api_error",
    "network_error",
    "model_error",
    "connection_error",
    "parse_error",
    "unknown_error",
]
Confidence = Literal["high", "medium", "low"]

# Values models use in place of JSON null
_NULL_STRINGS = {"", "null", "none", "n/a", "not found"}


def iso_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class AdditionalInfo(BaseModel):
    """Optional brand facts."""

    founded: Optional[str] = None
    location: Optional[str] = None
    specialties: Optional[str] = None

    @field_validator("founded", "location", "specialties", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        # Models often return the founding year as a number
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, list):
            return ", ".join(str(v) for v in value)
        return value


class TokenUsage(BaseModel):
    """Token usage attributed to a single request."""

    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)
    cost: float = Field(default=0.0, ge=0)


class BrandPayload(BaseModel):
    """JSON object the backend is asked to return for a brand."""

    model_config = ConfigDict(extra="allow")

    brand_name: Optional[str] = None
    website_url: Optional[str] = None
    description: Optional[str] = None
    additional_info: AdditionalInfo = Field(default_factory=AdditionalInfo)
    search_confidence: Confidence = "low"
    notes: Optional[str] = None

    @field_validator("website_url", mode="before")
    @classmethod
    def _normalize_url(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if value.lower() in _NULL_STRINGS:
                return None
        return value

    @field_validator("search_confidence", mode="before")
    @classmethod
    def _normalize_confidence(cls, value: Any) -> Any:
        if value is None:
            return "low"
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("additional_info", mode="before")
    @classmethod
    def _default_info(cls, value: Any) -> Any:
        return {} if value is None else value


class BrandResult(BaseModel):
    """Outcome of one brand query (one per brand per run)."""

    model_config = ConfigDict(extra="allow", protected_namespaces=())

    brand_name: str
    website_url: Optional[str] = None
    description: Optional[str] = None
    additional_info: AdditionalInfo = Field(default_factory=AdditionalInfo)
    search_confidence: Confidence = "low"
    notes: Optional[str] = None
    model_used: str
    timestamp: str = Field(default_factory=iso_timestamp)
    raw_response: Optional[str] = None
    error_type: Optional[ErrorType] = None
    success: bool
    token_usage: TokenUsage = Field(default_factory=TokenUsage)

    @model_validator(mode="after")
    def _check_error_type(self) -> "BrandResult":
        if self.success and self.error_type is not None:
            raise ValueError("successful result cannot carry an error_type")
        if not self.success and self.error_type is None:
            raise ValueError("failed result requires an error_type")
        return self

    @property
    def has_website(self) -> bool:
        """True for a successful lookup that produced a URL."""
        return self.success and bool(self.website_url)


class BrandTokenUsage(TokenUsage):
    """Per-brand entry of the run token breakdown."""

    brand_name: str


class RunTokenUsage(BaseModel):
    """Aggregate token usage for a run."""

    total_prompt_tokens: int = 0
    total_completion_tokens: int = 0
    total_tokens: int = 0
    total_cost_credits: float = 0.0
    estimated_cost_usd: float = 0.0
    average_tokens_per_brand: int = 0
    average_cost_per_brand: float = 0.0
    total_requests: int = 0
    per_brand_breakdown: List[BrandTokenUsage] = Field(default_factory=list)


class RunMetadata(BaseModel):
    """Run-level metadata and derived statistics."""

    model_config = ConfigDict(extra="allow", protected_namespaces=())

    model_used: str
    model_name: Optional[str] = None
    timestamp: str = Field(default_factory=iso_timestamp)
    total_brands_processed: int
    successful_searches: int
    failed_searches: int
    success_rate: str
    error_breakdown: Dict[str, int] = Field(default_factory=dict)
    model_availability: str
    status: Optional[str] = None
    token_usage: Optional[RunTokenUsage] = None

    @property
    def is_partial(self) -> bool:
        return self.status == PARTIAL_STATUS


class RunRecord(BaseModel):
    """Persisted output of one batch execution."""

    metadata: RunMetadata
    results: List[BrandResult]

    def to_json_dict(self) -> Dict[str, Any]:
        """Serialize for disk; the status key is only written for partial runs."""
        data = self.model_dump(mode="json")
        if data["metadata"].get("status") is None:
            data["metadata"].pop("status", None)
        return data

    def qualifying_results(self) -> List[BrandResult]:
        """Results that count toward completion (success with a URL)."""
        return [r for r in self.results if r.has_website]
