"""Backend response extraction and validation."""

import json
from typing import Optional

from brandfinder.schemas.records import BrandPayload


def extract_json_object(text: str) -> Optional[str]:
    """
    Find the first top-level brace-delimited object in free text.

    Braces inside JSON strings are ignored so a description containing "}"
    does not end the object early.

    Args:
        text: Model output, possibly wrapped in prose or a code fence

    Returns:
        The object text including its braces, or None if no balanced object exists
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for idx in range(start, len(text)):
            char = text[idx]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : idx + 1]
        # Unbalanced from this brace; try the next one
        start = text.find("{", start + 1)
    return None


def parse_brand_payload(content: str) -> BrandPayload:
    """
    Decode and validate the brand JSON embedded in model output.

    Args:
        content: Raw model output

    Returns:
        Validated payload

    Raises:
        ValueError: If no object is found, it is not valid JSON, or it does
            not match the expected shape (pydantic ValidationError and
            json.JSONDecodeError are both ValueError subclasses)
    """
    candidate = extract_json_object(content)
    if candidate is None:
        raise ValueError("No JSON object found in response")

    data = json.loads(candidate)
    if not isinstance(data, dict):
        raise ValueError("Response JSON is not an object")

    return BrandPayload.model_validate(data)
