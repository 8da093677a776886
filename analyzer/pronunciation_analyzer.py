from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

from analyzer.errors import AnalysisError
from configs.settings import resolve_model
from configs.thresholds import SUPPORTED_LANGUAGES
from generative.client import GenerativeClient
from generative.schemas import PracticeSentence, TokenUsage, WordTip
from generative.services import generate_sentence, generate_tips, transcribe_audio
from processors.alignment import ScoringResult, calculate_scores
from processors.audio_processor import convert_to_wav
from utils.cost import calculate_token_cost

logger = logging.getLogger(__name__)

STAGE_NAMES = {
    'stage1': 'Transcription',
    'stage2': 'Levenshtein Scoring',
    'stage3': 'Pronunciation Tips',
}


@dataclass
class AnalysisReport:
    model: str
    transcription_transliteration: str
    scoring: ScoringResult
    tips: list[WordTip]
    timing: dict[str, float] = field(default_factory=dict)
    usage: dict[str, TokenUsage] = field(default_factory=dict)

    @property
    def total_usage(self) -> TokenUsage:
        total = TokenUsage()
        for stage_usage in self.usage.values():
            total = total + stage_usage
        return total

    def to_dict(self) -> dict[str, Any]:
        payload = self.scoring.to_dict()
        total_usage = self.total_usage
        cost_breakdown: dict[str, Any] = {
            stage: {'name': name, 'tokenUsage': self.usage.get(stage, TokenUsage()).model_dump()}
            for stage, name in STAGE_NAMES.items()
        }
        cost_breakdown['total'] = total_usage.model_dump()
        payload.update(
            {
                'transcriptionTransliteration': self.transcription_transliteration,
                'tips': [tip.model_dump() for tip in self.tips],
                'timing': {key: round(value) for key, value in self.timing.items()},
                'costBreakdown': cost_breakdown,
                'cost': calculate_token_cost(total_usage, self.model).to_dict(),
                'model': self.model,
            }
        )
        return payload


def check_language(language: str) -> str:
    if language not in SUPPORTED_LANGUAGES:
        supported = ', '.join(sorted(SUPPORTED_LANGUAGES))
        raise AnalysisError(
            f'Invalid language. Must be one of: {supported}', {'language': language}
        )
    return language


class PronunciationAnalyzer:
    """Three stage analysis: transcribe audio, score locally, coach weak words."""

    def __init__(self, client: GenerativeClient | None = None, model: str | None = None):
        self.client = client or GenerativeClient()
        self.model = resolve_model(model)

    def generate_sentence(self, language: str) -> tuple[PracticeSentence, TokenUsage]:
        check_language(language)
        logger.info('generating sentence language=%s model=%s', language, self.model)
        return generate_sentence(self.client, language, self.model)

    def score(self, transcription: str, reference_text: str) -> ScoringResult:
        return calculate_scores(transcription, reference_text)

    def analyze(
        self,
        audio: bytes,
        reference_text: str,
        language: str,
        suffix: str = '.webm',
    ) -> AnalysisReport:
        check_language(language)
        if not reference_text.strip():
            raise AnalysisError('Reference text is empty')
        started = time.time()
        wav = convert_to_wav(audio, suffix=suffix)

        t0 = time.time()
        reply, stage1_usage = transcribe_audio(
            self.client, wav, reference_text, language, self.model
        )
        t1 = time.time()
        scoring = self.score(reply.transcription, reference_text)
        t2 = time.time()
        tips, stage3_usage = generate_tips(
            self.client, scoring.entries, reference_text, language, self.model
        )
        t3 = time.time()

        timing = {
            'stage1': (t1 - t0) * 1000.0,
            'stage2': (t2 - t1) * 1000.0,
            'stage3': (t3 - t2) * 1000.0,
            'total': (t3 - started) * 1000.0,
        }
        logger.info(
            'timings_ms stage1=%.0f stage2=%.0f stage3=%.0f total=%.0f',
            timing['stage1'],
            timing['stage2'],
            timing['stage3'],
            timing['total'],
        )
        return AnalysisReport(
            model=self.model,
            transcription_transliteration=reply.transcriptionTransliteration,
            scoring=scoring,
            tips=tips,
            timing=timing,
            usage={'stage1': stage1_usage, 'stage2': TokenUsage(), 'stage3': stage3_usage},
        )
