"""Pydantic record schemas."""

from brandfinder.schemas.records import (
    ERROR_TYPES,
    PARTIAL_STATUS,
    AdditionalInfo,
    BrandPayload,
    BrandResult,
    BrandTokenUsage,
    RunMetadata,
    RunRecord,
    RunTokenUsage,
    TokenUsage,
    iso_timestamp,
)

__all__ = [
    "ERROR_TYPES",
    "PARTIAL_STATUS",
    "AdditionalInfo",
    "BrandPayload",
    "BrandResult",
    "BrandTokenUsage",
    "RunMetadata",
    "RunRecord",
    "RunTokenUsage",
    "TokenUsage",
    "iso_timestamp",
]
