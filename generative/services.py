from __future__ import annotations

import logging

from configs.thresholds import TIP_SCORE_THRESHOLD
from generative.client import GenerativeClient
from generative.json_reply import parse_reply
from generative.prompts import (
    build_sentence_prompt,
    build_tips_prompt,
    build_transcription_prompt,
)
from generative.schemas import (
    PracticeSentence,
    TipsReply,
    TokenUsage,
    TranscriptionReply,
    WordTip,
)
from processors.alignment import AlignmentEntry

logger = logging.getLogger(__name__)


def generate_sentence(
    client: GenerativeClient, language: str, model: str
) -> tuple[PracticeSentence, TokenUsage]:
    completion = client.complete(build_sentence_prompt(language), model=model)
    sentence = parse_reply(completion.text, PracticeSentence)
    return sentence, completion.usage


def transcribe_audio(
    client: GenerativeClient,
    wav: bytes,
    reference_text: str,
    language: str,
    model: str,
) -> tuple[TranscriptionReply, TokenUsage]:
    prompt = build_transcription_prompt(reference_text, language)
    completion = client.complete(prompt, model=model, audio_wav=wav)
    reply = parse_reply(completion.text, TranscriptionReply)
    logger.info('transcription=%r', reply.transcription)
    return reply, completion.usage


def weak_entries(
    entries: list[AlignmentEntry], threshold: int = TIP_SCORE_THRESHOLD
) -> list[AlignmentEntry]:
    """Reference-side entries (matched or missing) scoring below ``threshold``."""
    return [
        entry
        for entry in entries
        if entry.status != 'extra' and entry.similarity < threshold
    ]


def generate_tips(
    client: GenerativeClient,
    entries: list[AlignmentEntry],
    reference_text: str,
    language: str,
    model: str,
    threshold: int = TIP_SCORE_THRESHOLD,
) -> tuple[list[WordTip], TokenUsage]:
    weak = weak_entries(entries, threshold)
    if not weak:
        logger.info('all words at or above %d, skipping tips', threshold)
        return [], TokenUsage()
    prompt = build_tips_prompt(
        reference_text,
        [(entry.reference_word, entry.spoken_word, entry.similarity) for entry in weak],
        language,
    )
    completion = client.complete(prompt, model=model)
    reply = parse_reply(completion.text, TipsReply)
    return reply.tips, completion.usage
