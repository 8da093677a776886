from __future__ import annotations

import re
import unicodedata

_PUNCT_RE = re.compile(r'[।,.!?;:\-]')
_SPACE_RE = re.compile(r'\s+')


def normalize_text(s: str) -> str:
    if not s:
        return ''
    s = unicodedata.normalize('NFC', s).lower()
    s = _PUNCT_RE.sub(' ', s)
    s = _SPACE_RE.sub(' ', s)
    return s.strip()


def split_words(s: str) -> list[str]:
    return [word for word in _SPACE_RE.split(normalize_text(s)) if word]
