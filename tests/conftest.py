"""Pytest configuration and fixtures."""

import io
import json
from typing import Any, Callable, Dict, List, Optional, Union

import httpx
import pytest
from rich.console import Console

from brandfinder.config import Settings


def completion_body(content: Optional[str], usage: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """OpenRouter-style chat completion body."""
    body: Dict[str, Any] = {"choices": [{"message": {"role": "assistant", "content": content}}]}
    if usage is not None:
        body["usage"] = usage
    return body


def brand_json(brand_name: str, website_url: Optional[str], confidence: str = "high") -> str:
    return json.dumps(
        {
            "brand_name": brand_name,
            "website_url": website_url,
            "description": f"{brand_name} makes knives",
            "additional_info": {"founded": "1990", "location": "USA", "specialties": "Folding knives"},
            "search_confidence": confidence,
            "notes": None,
        }
    )


Reply = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class ScriptedBackend:
    """Mock transport that replays one scripted reply per request."""

    def __init__(self, replies: List[Reply]):
        self.replies = list(replies)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        return reply

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def bodies(self) -> List[Dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def results_dir(tmp_path):
    return str(tmp_path / "results")


@pytest.fixture
def brands_file(tmp_path):
    path = tmp_path / "brandNames.json"
    path.write_text(json.dumps(["Acme Blades", "NoSuchBrand", "Third Edge"]))
    return str(path)


@pytest.fixture
def test_settings(results_dir, brands_file):
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        OPENROUTER_API_KEY="test-key",
        OPENROUTER_BASE_URL="https://openrouter.test/api/v1",
        OUTPUT_DIR=results_dir,
        BRANDS_FILE=brands_file,
        REQUEST_DELAY=0.0,
    )


@pytest.fixture
def quiet_console():
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def console_text(quiet_console):
    """Callable returning everything printed to quiet_console so far."""
    return lambda: quiet_console.file.getvalue()


@pytest.fixture
def backend():
    """Factory: backend(replies) -> ScriptedBackend."""
    return ScriptedBackend


@pytest.fixture
def completion():
    """Factory: completion(content, usage=None, status=200) -> httpx.Response."""

    def _completion(content, usage=None, status_code=200):
        return httpx.Response(status_code, json=completion_body(content, usage))

    return _completion


@pytest.fixture
def brand_reply():
    """Factory: brand_reply(name, url, confidence="high") -> JSON text a model might return."""
    return brand_json
