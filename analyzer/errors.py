"""
Exceptions raised around the scoring engine.

The scoring engine itself is total over any two strings; these cover the
collaborators that feed it: generative model replies, the model API and
audio conversion.
"""

from __future__ import annotations

from typing import Any


class PronunciationError(Exception):
    """Base exception for all pronunciation analysis errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ', '.join(f'{k}={v}' for k, v in self.context.items())
            return f'{self.message} ({ctx_str})'
        return self.message


class AnalysisError(PronunciationError):
    """Raised when an analysis request is invalid (e.g. unsupported language)."""


class ParseError(PronunciationError):
    """Raised when a model reply holds no JSON object or it does not decode."""

    def __init__(self, message: str, reply: str | None = None) -> None:
        ctx = {}
        if reply is not None:
            ctx['reply'] = reply[:200]
        super().__init__(message, ctx)
        self.reply = reply


class ValidationError(PronunciationError):
    """Raised when a decoded JSON object does not match the expected schema."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class UpstreamError(PronunciationError):
    """Raised when a generative model call fails or returns nothing."""

    def __init__(self, message: str, model: str | None = None) -> None:
        ctx = {}
        if model:
            ctx['model'] = model
        super().__init__(message, ctx)
        self.model = model


class ConversionError(PronunciationError):
    """Raised when audio cannot be converted to WAV."""
