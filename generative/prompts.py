from __future__ import annotations

from configs.thresholds import SUPPORTED_LANGUAGES

SENTENCE_PROMPT_TEMPLATE = """Generate a practice sentence in {language_name} for language learners to practice pronunciation.

IMPORTANT REQUIREMENTS:
- The sentence should be approximately 12-15 words long
- If a single sentence feels too short, create TWO related sentences to reach 12-15 words total
- Use natural, conversational language with common everyday vocabulary
- Include a variety of sounds to test pronunciation thoroughly
- Make it meaningful and contextual (not just random words)

Good topics: daily routines, family interactions, shopping, weather, travel, food, hobbies, or simple conversations.

Return ONLY a JSON object with this exact structure (no markdown, no code blocks):
{{
  "originalScript": "sentence or two sentences in {script_name} script (12-15 words total)",
  "transliteration": "phonetic transliteration in English letters"
}}
"""

TRANSCRIPTION_PROMPT_TEMPLATE = """You are a {language_name} transcription expert. Listen to the audio and transcribe exactly what was spoken.

The student was supposed to say: "{reference_text}"

Your task:
1. Transcribe exactly what you heard in {script_name} script
2. Provide the transliteration (English letters) of what you heard

Return ONLY a JSON object (no markdown, no code blocks) with this structure:
{{
  "transcription": "what you heard in {script_name} script",
  "transcriptionTransliteration": "what you heard in English letters"
}}

Important:
- Transcribe EXACTLY what was spoken, even if it differs from the reference
- Use accurate phonetic transliteration
"""

TIPS_PROMPT_TEMPLATE = """You are a friendly {language_name} pronunciation coach for beginners.

The student practised this sentence: "{reference_text}"

These words need work (score out of 100, and what the student actually said):
{word_lines}

For EACH word above, write one short, practical tip:
- Use everyday language and avoid technical terms like "aspirated", "retroflex", "dental"
- Compare to familiar English sounds or common experiences
- Focus on what to DO, not just what's wrong
- Be encouraging

Return ONLY a JSON object (no markdown, no code blocks) with this structure:
{{
  "tips": [
    {{
      "word": "word in {script_name} script",
      "transliteration": "word in English letters",
      "tip": "one or two sentences"
    }}
  ]
}}
"""


def _names(language: str) -> dict[str, str]:
    info = SUPPORTED_LANGUAGES[language]
    return {'language_name': info['name'], 'script_name': info['script']}


def build_sentence_prompt(language: str) -> str:
    return SENTENCE_PROMPT_TEMPLATE.format(**_names(language))


def build_transcription_prompt(reference_text: str, language: str) -> str:
    return TRANSCRIPTION_PROMPT_TEMPLATE.format(
        reference_text=reference_text, **_names(language)
    )


def build_tips_prompt(
    reference_text: str, weak_words: list[tuple[str, str, int]], language: str
) -> str:
    """``weak_words`` holds (reference word, transcribed word, score) triples."""
    word_lines = '\n'.join(
        f'- "{word}" (score {score}, heard: "{heard}")'
        for word, heard, score in weak_words
    )
    return TIPS_PROMPT_TEMPLATE.format(
        reference_text=reference_text, word_lines=word_lines, **_names(language)
    )
