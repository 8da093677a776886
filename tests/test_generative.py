import base64
import json
import types
import unittest
from unittest.mock import Mock, patch

import openai

from analyzer.errors import UpstreamError, ValidationError
from configs.settings import Settings
from generative.client import Completion, GenerativeClient, usage_from_response
from generative.prompts import (
    build_sentence_prompt,
    build_tips_prompt,
    build_transcription_prompt,
)
from generative.schemas import TokenUsage
from generative.services import (
    generate_sentence,
    generate_tips,
    transcribe_audio,
    weak_entries,
)
from processors.alignment import EXTRA, MISSING, AlignmentEntry


def _response(content, usage=None):
    return types.SimpleNamespace(
        choices=[types.SimpleNamespace(message=types.SimpleNamespace(content=content))],
        usage=usage,
    )


class _ScriptedClient:
    def __init__(self, *replies: str):
        self.replies = list(replies)
        self.calls: list[dict] = []

    def complete(self, prompt, *, model, audio_wav=None):
        self.calls.append({'prompt': prompt, 'model': model, 'audio_wav': audio_wav})
        return Completion(
            text=self.replies.pop(0),
            usage=TokenUsage(textInputTokens=10, outputTokens=5, totalTokens=15),
            elapsed_ms=1.0,
        )


class UsageMappingTests(unittest.TestCase):
    def test_audio_tokens_split_from_prompt(self) -> None:
        usage = types.SimpleNamespace(
            prompt_tokens=100,
            completion_tokens=20,
            total_tokens=120,
            prompt_tokens_details=types.SimpleNamespace(audio_tokens=80),
        )
        self.assertEqual(
            usage_from_response(usage),
            TokenUsage(textInputTokens=20, audioInputTokens=80, outputTokens=20, totalTokens=120),
        )

    def test_missing_usage(self) -> None:
        self.assertEqual(usage_from_response(None), TokenUsage())

    def test_total_falls_back_to_sum(self) -> None:
        usage = types.SimpleNamespace(
            prompt_tokens=7, completion_tokens=3, total_tokens=None, prompt_tokens_details=None
        )
        self.assertEqual(usage_from_response(usage).totalTokens, 10)

    def test_usage_addition(self) -> None:
        total = TokenUsage(textInputTokens=1, totalTokens=1) + TokenUsage(
            audioInputTokens=2, outputTokens=3, totalTokens=5
        )
        self.assertEqual(
            total,
            TokenUsage(textInputTokens=1, audioInputTokens=2, outputTokens=3, totalTokens=6),
        )


class GenerativeClientTests(unittest.TestCase):
    def setUp(self) -> None:
        self.sdk = Mock()
        self.client = GenerativeClient(sdk_client=self.sdk)

    def test_text_completion(self) -> None:
        self.sdk.chat.completions.create.return_value = _response(
            '{"ok": true}',
            types.SimpleNamespace(
                prompt_tokens=12, completion_tokens=4, total_tokens=16, prompt_tokens_details=None
            ),
        )
        completion = self.client.complete('hi', model='gemini-2.5-flash')
        self.assertEqual(completion.text, '{"ok": true}')
        self.assertEqual(completion.usage.textInputTokens, 12)
        kwargs = self.sdk.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs['model'], 'gemini-2.5-flash')
        self.assertEqual(kwargs['messages'], [{'role': 'user', 'content': 'hi'}])

    def test_audio_is_sent_as_base64_wav_part(self) -> None:
        self.sdk.chat.completions.create.return_value = _response('{}')
        self.client.complete('listen', model='m', audio_wav=b'RIFFdata')
        content = self.sdk.chat.completions.create.call_args.kwargs['messages'][0]['content']
        self.assertEqual(content[0], {'type': 'text', 'text': 'listen'})
        self.assertEqual(content[1]['type'], 'input_audio')
        self.assertEqual(content[1]['input_audio']['format'], 'wav')
        self.assertEqual(base64.b64decode(content[1]['input_audio']['data']), b'RIFFdata')

    def test_sdk_error_becomes_upstream_error(self) -> None:
        self.sdk.chat.completions.create.side_effect = openai.OpenAIError('quota exceeded')
        with self.assertRaises(UpstreamError) as ctx:
            self.client.complete('hi', model='gemini-2.5-pro')
        self.assertEqual(ctx.exception.model, 'gemini-2.5-pro')
        self.assertIn('quota exceeded', str(ctx.exception))

    def test_empty_reply_is_upstream_error(self) -> None:
        self.sdk.chat.completions.create.return_value = _response('   ')
        with self.assertRaises(UpstreamError):
            self.client.complete('hi', model='m')

    def test_missing_api_key(self) -> None:
        settings = Settings(
            api_key='',
            base_url='http://localhost',
            default_model='gemini-2.5-flash',
            max_file_mb=50.0,
            request_timeout_s=5.0,
            debug=False,
        )
        with patch('generative.client.get_settings', return_value=settings):
            with self.assertRaises(UpstreamError):
                GenerativeClient().complete('hi', model='m')


class PromptTests(unittest.TestCase):
    def test_sentence_prompt_names_script(self) -> None:
        prompt = build_sentence_prompt('kannada')
        self.assertIn('Kannada script', prompt)
        self.assertIn('"originalScript"', prompt)

    def test_transcription_prompt_embeds_reference(self) -> None:
        prompt = build_transcription_prompt('मैं आज बाज़ार', 'hindi')
        self.assertIn('"मैं आज बाज़ार"', prompt)
        self.assertIn('Devanagari', prompt)

    def test_tips_prompt_lists_each_word(self) -> None:
        prompt = build_tips_prompt('a b', [('a', '(missing)', 0), ('b', 'bee', 50)], 'hindi')
        self.assertIn('- "a" (score 0, heard: "(missing)")', prompt)
        self.assertIn('- "b" (score 50, heard: "bee")', prompt)


class ServiceTests(unittest.TestCase):
    def test_generate_sentence(self) -> None:
        client = _ScriptedClient(
            'Sure!\n{"originalScript": "मैं आज बाज़ार जाऊँगा।", "transliteration": "main aaj baazaar jaaunga"}'
        )
        sentence, usage = generate_sentence(client, 'hindi', 'gemini-2.5-flash')
        self.assertEqual(sentence.originalScript, 'मैं आज बाज़ार जाऊँगा।')
        self.assertEqual(usage.totalTokens, 15)
        self.assertIsNone(client.calls[0]['audio_wav'])

    def test_generate_sentence_invalid_reply(self) -> None:
        client = _ScriptedClient('{"originalScript": ""}')
        with self.assertRaises(ValidationError):
            generate_sentence(client, 'hindi', 'gemini-2.5-flash')

    def test_transcribe_audio_sends_audio(self) -> None:
        client = _ScriptedClient(
            json.dumps({'transcription': 'आज', 'transcriptionTransliteration': 'aaj'})
        )
        reply, _ = transcribe_audio(client, b'RIFF', 'आज', 'hindi', 'm')
        self.assertEqual(reply.transcription, 'आज')
        self.assertEqual(client.calls[0]['audio_wav'], b'RIFF')

    def test_weak_entries_skip_extras_and_good_words(self) -> None:
        entries = [
            AlignmentEntry('a', 'a', 100, 'matched'),
            AlignmentEntry('b', 'bx', 69, 'matched'),
            AlignmentEntry('c', 'cx', 70, 'matched'),
            AlignmentEntry('d', MISSING, 0, 'missing'),
            AlignmentEntry(EXTRA, 'zz', 0, 'extra'),
        ]
        self.assertEqual([e.reference_word for e in weak_entries(entries)], ['b', 'd'])

    def test_tips_batched_in_one_request(self) -> None:
        client = _ScriptedClient(
            json.dumps(
                {
                    'tips': [
                        {'word': 'b', 'transliteration': 'b', 'tip': 'slow down'},
                        {'word': 'd', 'transliteration': 'd', 'tip': 'say it'},
                    ]
                }
            )
        )
        entries = [
            AlignmentEntry('b', 'bx', 50, 'matched'),
            AlignmentEntry('d', MISSING, 0, 'missing'),
        ]
        tips, usage = generate_tips(client, entries, 'b d', 'hindi', 'm')
        self.assertEqual([tip.word for tip in tips], ['b', 'd'])
        self.assertEqual(len(client.calls), 1)
        self.assertEqual(usage.totalTokens, 15)

    def test_no_tips_when_everything_is_good(self) -> None:
        client = _ScriptedClient()
        tips, usage = generate_tips(
            client, [AlignmentEntry('a', 'a', 100, 'matched')], 'a', 'hindi', 'm'
        )
        self.assertEqual(tips, [])
        self.assertEqual(usage, TokenUsage())
        self.assertEqual(client.calls, [])


if __name__ == '__main__':
    unittest.main()
