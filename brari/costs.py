"""
Token cost estimation for chat responses.

Rates are USD per one million tokens.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelRates:
    input: float
    cached_input: float
    output: float


COSTS: Dict[str, ModelRates] = {
    "gpt-4o": ModelRates(input=2.50, cached_input=1.25, output=10.00),
    "gpt-4o-mini": ModelRates(input=0.150, cached_input=0.075, output=0.600),
    "o3-mini": ModelRates(input=1.10, cached_input=0.55, output=4.40),
    "gemini-2.0-flash": ModelRates(input=0.10, cached_input=0.025, output=0.40),
}


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    cached_prompt_tokens: int = 0

    @classmethod
    def from_usage_metadata(cls, usage: Optional[Mapping[str, Any]]) -> "TokenUsage":
        """Build from a LangChain ``usage_metadata`` dict."""
        if not usage:
            return cls()
        details = usage.get("input_token_details") or {}
        prompt_tokens = int(usage.get("input_tokens") or 0)
        completion_tokens = int(usage.get("output_tokens") or 0)
        return cls(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=int(usage.get("total_tokens") or prompt_tokens + completion_tokens),
            cached_prompt_tokens=int(details.get("cache_read") or 0),
        )


@dataclass(frozen=True)
class CostEstimate:
    input_cost: float
    output_cost: float

    @property
    def total_cost(self) -> float:
        return self.input_cost + self.output_cost


def estimate_cost(model: str, usage: TokenUsage) -> Optional[CostEstimate]:
    """Estimate the dollar cost of a generation, or None for unknown models."""
    rates = COSTS.get(model)
    if rates is None:
        return None

    non_cached_prompt_tokens = usage.prompt_tokens - usage.cached_prompt_tokens
    input_cost = (
        non_cached_prompt_tokens * rates.input + usage.cached_prompt_tokens * rates.cached_input
    ) / 1_000_000
    output_cost = (usage.completion_tokens * rates.output) / 1_000_000
    return CostEstimate(input_cost=input_cost, output_cost=output_cost)


def log_usage(model: str, usage: TokenUsage) -> Optional[CostEstimate]:
    """Log token usage and estimated cost for one generation step."""
    logger.info(
        f"Chat response metrics: model={model} "
        f"token_usage={{prompt_tokens: {usage.prompt_tokens}, "
        f"completion_tokens: {usage.completion_tokens}, "
        f"total_tokens: {usage.total_tokens}, "
        f"cached_prompt_tokens: {usage.cached_prompt_tokens}}}"
    )

    estimate = estimate_cost(model, usage)
    if estimate is None:
        logger.warning(f"No cost rates configured for model {model}; skipping cost estimate")
        return None

    logger.info(
        f"Estimated cost: input=${estimate.input_cost:.4f} "
        f"output=${estimate.output_cost:.4f} total=${estimate.total_cost:.4f}"
    )
    return estimate
