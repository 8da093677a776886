from __future__ import annotations

from dataclasses import dataclass

from generative.schemas import TokenUsage

# USD per 1M tokens, paid tier
PRICING = {
    'gemini-2.5-pro': {'text_input': 1.25, 'audio_input': 1.25, 'output': 10.00},
    'gemini-2.5-flash': {'text_input': 0.30, 'audio_input': 1.00, 'output': 2.50},
    'gemini-2.5-flash-lite': {'text_input': 0.10, 'audio_input': 0.30, 'output': 0.40},
}
USD_TO_INR = 100


@dataclass(frozen=True)
class TokenCost:
    text_input_cost: float
    audio_input_cost: float
    output_cost: float
    total_cost: float

    def to_dict(self) -> dict[str, float]:
        return {
            'textInputCost': self.text_input_cost,
            'audioInputCost': self.audio_input_cost,
            'outputCost': self.output_cost,
            'totalCost': self.total_cost,
        }


def calculate_token_cost(usage: TokenUsage, model: str) -> TokenCost:
    pricing = PRICING.get(model)
    if pricing is None:
        return TokenCost(0.0, 0.0, 0.0, 0.0)
    text_cost = usage.textInputTokens / 1_000_000 * pricing['text_input']
    audio_cost = usage.audioInputTokens / 1_000_000 * pricing['audio_input']
    output_cost = usage.outputTokens / 1_000_000 * pricing['output']
    return TokenCost(
        text_input_cost=text_cost,
        audio_input_cost=audio_cost,
        output_cost=output_cost,
        total_cost=text_cost + audio_cost + output_cost,
    )


def format_cost(cost: float) -> str:
    if cost < 0.000001:
        return f'${cost:.8f}'
    if cost < 0.01:
        return f'${cost:.6f}'
    return f'${cost:.4f}'


def format_cost_with_rupees(cost: float) -> str:
    rupees = cost * USD_TO_INR
    if rupees < 0.00001:
        rupees_fmt = f'₹{rupees:.6f}'
    elif rupees < 1:
        rupees_fmt = f'₹{rupees:.4f}'
    else:
        rupees_fmt = f'₹{rupees:.2f}'
    return f'{format_cost(cost)} ({rupees_fmt})'
