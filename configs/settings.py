from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from configs.thresholds import AVAILABLE_MODELS, DEFAULT_MODEL

GEMINI_OPENAI_BASE_URL = 'https://generativelanguage.googleapis.com/v1beta/openai/'


@dataclass(frozen=True)
class Settings:
    api_key: str
    base_url: str
    default_model: str
    max_file_mb: float
    request_timeout_s: float
    debug: bool


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    model = os.getenv('DEFAULT_MODEL', DEFAULT_MODEL)
    if model not in AVAILABLE_MODELS:
        model = DEFAULT_MODEL
    return Settings(
        api_key=os.getenv('GEMINI_API_KEY')
        or os.getenv('AI_INTEGRATIONS_GEMINI_API_KEY')
        or '',
        base_url=os.getenv('GEMINI_BASE_URL', GEMINI_OPENAI_BASE_URL),
        default_model=model,
        max_file_mb=_float_env('MAX_FILE_MB', 50.0),
        request_timeout_s=_float_env('REQUEST_TIMEOUT_S', 60.0),
        debug=os.getenv('API_DEBUG', '0') in {'1', 'true', 'True'},
    )


def resolve_model(model: str | None) -> str:
    if model and model in AVAILABLE_MODELS:
        return model
    return get_settings().default_model
