from __future__ import annotations

import base64
import logging
import time
from dataclasses import dataclass
from typing import Any

import openai
from openai import OpenAI

from analyzer.errors import UpstreamError
from configs.settings import get_settings
from generative.schemas import TokenUsage

logger = logging.getLogger(__name__)


@dataclass
class Completion:
    text: str
    usage: TokenUsage
    elapsed_ms: float


def usage_from_response(usage: Any) -> TokenUsage:
    """Map the SDK ``usage`` block, splitting audio tokens out of the prompt."""
    if usage is None:
        return TokenUsage()
    prompt_tokens = int(getattr(usage, 'prompt_tokens', 0) or 0)
    output_tokens = int(getattr(usage, 'completion_tokens', 0) or 0)
    details = getattr(usage, 'prompt_tokens_details', None)
    audio_tokens = int(getattr(details, 'audio_tokens', 0) or 0) if details else 0
    audio_tokens = min(audio_tokens, prompt_tokens)
    total = int(getattr(usage, 'total_tokens', 0) or 0) or prompt_tokens + output_tokens
    return TokenUsage(
        textInputTokens=prompt_tokens - audio_tokens,
        audioInputTokens=audio_tokens,
        outputTokens=output_tokens,
        totalTokens=total,
    )


class GenerativeClient:
    """Thin wrapper over an OpenAI-compatible chat endpoint (Gemini by default)."""

    def __init__(self, sdk_client: OpenAI | None = None):
        self._sdk_client = sdk_client

    def _client(self) -> OpenAI:
        if self._sdk_client is None:
            settings = get_settings()
            if not settings.api_key:
                raise UpstreamError('GEMINI_API_KEY is not set')
            self._sdk_client = OpenAI(
                api_key=settings.api_key,
                base_url=settings.base_url,
                timeout=settings.request_timeout_s,
                max_retries=0,
            )
        return self._sdk_client

    def complete(
        self, prompt: str, *, model: str, audio_wav: bytes | None = None
    ) -> Completion:
        content: str | list[dict[str, Any]]
        if audio_wav is None:
            content = prompt
        else:
            content = [
                {'type': 'text', 'text': prompt},
                {
                    'type': 'input_audio',
                    'input_audio': {
                        'data': base64.b64encode(audio_wav).decode('ascii'),
                        'format': 'wav',
                    },
                },
            ]
        client = self._client()
        t0 = time.time()
        try:
            resp = client.chat.completions.create(
                model=model,
                messages=[{'role': 'user', 'content': content}],
            )
        except openai.OpenAIError as error:
            logger.error('model call failed model=%s: %s', model, error)
            raise UpstreamError(f'Model call failed: {error}', model=model) from error
        elapsed_ms = (time.time() - t0) * 1000.0
        text = ''
        if resp.choices:
            text = resp.choices[0].message.content or ''
        if not text.strip():
            raise UpstreamError('Empty response from model', model=model)
        usage = usage_from_response(resp.usage)
        logger.info(
            'model=%s elapsed_ms=%.0f chars=%d tokens=%d',
            model,
            elapsed_ms,
            len(text),
            usage.totalTokens,
        )
        return Completion(text=text, usage=usage, elapsed_ms=elapsed_ms)
