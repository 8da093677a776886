from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any

from rapidfuzz.distance import Levenshtein

from configs.thresholds import MIN_SIMILARITY_THRESHOLD
from text import split_words

logger = logging.getLogger(__name__)

MISSING = '(missing)'
EXTRA = '(extra)'
METHOD = 'Sequence Alignment (Levenshtein)'


@dataclass(frozen=True)
class AlignmentEntry:
    reference_word: str
    spoken_word: str
    similarity: int
    status: str

    def to_dict(self) -> dict[str, Any]:
        return {
            'word': self.reference_word,
            'transcribedWord': self.spoken_word,
            'score': self.similarity,
            'status': self.status,
        }


@dataclass
class ScoringResult:
    transcription: str
    entries: list[AlignmentEntry] = field(default_factory=list)
    overall_score: int = 0
    method: str = METHOD

    def to_dict(self) -> dict[str, Any]:
        return {
            'transcription': self.transcription,
            'wordScores': [entry.to_dict() for entry in self.entries],
            'overallScore': self.overall_score,
            'method': self.method,
        }


def _matched(ref_word: str, hyp_word: str, sim: int) -> AlignmentEntry:
    return AlignmentEntry(ref_word, hyp_word, sim, 'matched')


def _missing(ref_word: str) -> AlignmentEntry:
    return AlignmentEntry(ref_word, MISSING, 0, 'missing')


def _extra(hyp_word: str) -> AlignmentEntry:
    return AlignmentEntry(EXTRA, hyp_word, 0, 'extra')


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def word_similarity(arg_a: str, arg_b: str) -> int:
    """Edit-distance similarity in 0..100, counted over Unicode code points."""
    max_len = max(len(arg_a), len(arg_b))
    if max_len == 0:
        return 100
    distance = Levenshtein.distance(arg_a, arg_b)
    return _round_half_up(max(0.0, (1.0 - distance / max_len) * 100.0))


def align_words(
    ref_tokens: list[str],
    hyp_tokens: list[str],
    threshold: int = MIN_SIMILARITY_THRESHOLD,
) -> list[AlignmentEntry]:
    """Greedy one-to-one word alignment tolerant of reordering.

    Every (reference, spoken) pair is scored, the pairs are walked from the
    highest score down and a pair is accepted when neither word is taken yet
    and its score reaches ``threshold``. Unmatched reference words become
    missing, unmatched spoken words become extra. Entries follow reference
    order, then the extra words in spoken order.
    """
    if not ref_tokens and not hyp_tokens:
        return []
    if not ref_tokens:
        return [_extra(hw) for hw in hyp_tokens]
    if not hyp_tokens:
        return [_missing(rw) for rw in ref_tokens]

    pairs = [
        (index_r, index_h, word_similarity(rw, hw))
        for index_r, rw in enumerate(ref_tokens)
        for index_h, hw in enumerate(hyp_tokens)
    ]
    # sorted() is stable, so ties keep enumeration order
    pairs = sorted(pairs, key=lambda item: item[2], reverse=True)

    ref_to_hyp: dict[int, tuple[int, int]] = {}
    used_hyp: set[int] = set()
    for index_r, index_h, sim in pairs:
        if sim < threshold:
            break
        if index_r in ref_to_hyp or index_h in used_hyp:
            continue
        ref_to_hyp[index_r] = (index_h, sim)
        used_hyp.add(index_h)

    aligned: list[AlignmentEntry] = []
    for index_r, rw in enumerate(ref_tokens):
        if index_r in ref_to_hyp:
            index_h, sim = ref_to_hyp[index_r]
            aligned.append(_matched(rw, hyp_tokens[index_h], sim))
        else:
            aligned.append(_missing(rw))
    for index_h, hw in enumerate(hyp_tokens):
        if index_h not in used_hyp:
            aligned.append(_extra(hw))
    return aligned


def overall_score(entries: list[AlignmentEntry]) -> int:
    if not entries:
        return 0
    return _round_half_up(sum(entry.similarity for entry in entries) / len(entries))


def calculate_scores(
    transcription: str,
    reference_text: str,
    threshold: int = MIN_SIMILARITY_THRESHOLD,
) -> ScoringResult:
    ref_words = split_words(reference_text)
    hyp_words = split_words(transcription)
    logger.debug('reference=%r transcription=%r', reference_text, transcription)
    logger.debug(
        'tokens reference=%d transcribed=%d', len(ref_words), len(hyp_words)
    )
    entries = align_words(ref_words, hyp_words, threshold=threshold)
    for index, entry in enumerate(entries, start=1):
        logger.debug(
            '%d. %r <-> %r (%d%%)',
            index,
            entry.reference_word,
            entry.spoken_word,
            entry.similarity,
        )
    score = overall_score(entries)
    logger.info('levenshtein scoring done pairs=%d overall=%d', len(entries), score)
    return ScoringResult(transcription=transcription, entries=entries, overall_score=score)
