"""
Per-model cost estimation (USD per 1K tokens).
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Rates:
    input_per_1k: float
    output_per_1k: float


FALLBACK_RATES: dict[str, Rates] = {
    "gpt-5": Rates(0.00125, 0.01),
    "gpt-5-mini": Rates(0.00025, 0.002),
    "gpt-4.1": Rates(0.002, 0.008),
    "o3-mini": Rates(0.0011, 0.0044),
    "gemini-2.5-pro": Rates(0.00125, 0.01),
    "gemini-2.5-flash": Rates(0.0003, 0.0025),
    "claude-4": Rates(0.003, 0.015),
}

DEFAULT_RATES = Rates(0.003, 0.015)


def get_rates(
    model: str,
    input_per_1k: Optional[float] = None,
    output_per_1k: Optional[float] = None,
) -> Rates:
    fallback = FALLBACK_RATES.get(model, DEFAULT_RATES)
    return Rates(
        input_per_1k=fallback.input_per_1k if input_per_1k is None else input_per_1k,
        output_per_1k=fallback.output_per_1k if output_per_1k is None else output_per_1k,
    )


def estimate_cost(rates: Rates, prompt_tokens: int, completion_tokens: int) -> float:
    return (prompt_tokens / 1000) * rates.input_per_1k + (completion_tokens / 1000) * rates.output_per_1k
