"""Schemas for generative model replies and token accounting."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TokenUsage(BaseModel):
    textInputTokens: int = Field(default=0, ge=0)
    audioInputTokens: int = Field(default=0, ge=0)
    outputTokens: int = Field(default=0, ge=0)
    totalTokens: int = Field(default=0, ge=0)

    def __add__(self, other: TokenUsage) -> TokenUsage:
        return TokenUsage(
            textInputTokens=self.textInputTokens + other.textInputTokens,
            audioInputTokens=self.audioInputTokens + other.audioInputTokens,
            outputTokens=self.outputTokens + other.outputTokens,
            totalTokens=self.totalTokens + other.totalTokens,
        )


class PracticeSentence(BaseModel):
    originalScript: str = Field(..., min_length=1)
    transliteration: str = Field(..., min_length=1)


class TranscriptionReply(BaseModel):
    transcription: str = Field(..., min_length=1)
    transcriptionTransliteration: str = Field(..., min_length=1)


class WordTip(BaseModel):
    word: str = Field(..., min_length=1)
    transliteration: str = Field(..., min_length=1)
    tip: str = Field(..., min_length=1)


class TipsReply(BaseModel):
    tips: list[WordTip]
