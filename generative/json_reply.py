"""Pull a JSON object out of a free-form model reply and validate it."""

from __future__ import annotations

import json
from typing import TypeVar

import pydantic
from pydantic import BaseModel

from analyzer.errors import ParseError, ValidationError

ModelT = TypeVar('ModelT', bound=BaseModel)


def extract_json_object(reply: str) -> str:
    """Return the first balanced ``{...}`` span of ``reply``.

    Braces inside JSON string literals are ignored, so prose or code fences
    around the object do not matter.
    """
    if not reply or not reply.strip():
        raise ParseError('Empty response from model')
    start = reply.find('{')
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(reply)):
            char = reply[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == '\\':
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == '{':
                depth += 1
            elif char == '}':
                depth -= 1
                if depth == 0:
                    return reply[start : index + 1]
        start = reply.find('{', start + 1)
    raise ParseError('Failed to find JSON object in response', reply=reply)


def parse_reply(reply: str, schema: type[ModelT]) -> ModelT:
    span = extract_json_object(reply)
    try:
        raw = json.loads(span)
    except json.JSONDecodeError as error:
        raise ParseError(f'Malformed JSON in response: {error.msg}', reply=reply) from error
    try:
        return schema.model_validate(raw)
    except pydantic.ValidationError as error:
        raise ValidationError(
            f'Invalid response structure for {schema.__name__}',
            errors=error.errors(include_url=False),
        ) from error
