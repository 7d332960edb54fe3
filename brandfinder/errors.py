"""Configuration-level exceptions.

Per-brand failures never raise; they are captured as result records. The
exceptions here abort a whole run and carry a remediation hint for the CLI.
"""

from typing import Optional


class ConfigurationError(Exception):
    """Fatal configuration problem (exit code 1)."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint


class MissingCredentialError(ConfigurationError):
    """OPENROUTER_API_KEY is not configured."""

    def __init__(self):
        super().__init__(
            "OPENROUTER_API_KEY environment variable is required",
            hint="Set your OpenRouter API key: export OPENROUTER_API_KEY=your_key_here",
        )


class ModelNotFoundError(ConfigurationError):
    """The requested model key is not configured."""

    def __init__(self, model_key: str, available):
        available_str = ", ".join(available)
        super().__init__(
            f"Model '{model_key}' not found. Available models: {available_str}",
            hint=f"Available models: {available_str}",
        )
        self.model_key = model_key
