"""
Pricing and ProviderEndpoint models.

Per-token prices arrive from catalogs as strings (``"0.000003"``) or numbers;
they are kept as given and parsed leniently by the cost post-processor.
"""
from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

PriceValue = Union[str, float, int, None]


class Pricing(BaseModel):
    """Per-unit prices for one endpoint (USD per token unless noted)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    prompt: PriceValue = None
    completion: PriceValue = None
    request: PriceValue = None
    image: PriceValue = None
    web_search: PriceValue = None
    internal_reasoning: PriceValue = None
    image_output: PriceValue = None
    audio: PriceValue = None
    input_audio_cache: PriceValue = None
    input_cache_read: PriceValue = None
    input_cache_write: PriceValue = None
    discount: Optional[float] = None


class ProviderEndpoint(BaseModel):
    """One serving endpoint of a model: who serves it and at what price."""

    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    name: str = ""
    model_name: str = ""
    provider_name: str = ""
    pricing: Pricing = Field(default_factory=Pricing)
    context_length: Optional[int] = None
    tag: Optional[str] = None
    quantization: Optional[str] = None
    max_completion_tokens: Optional[int] = None
    max_prompt_tokens: Optional[int] = None
    supported_parameters: Optional[List[str]] = None
    supports_implicit_caching: Optional[bool] = None


__all__ = ["Pricing", "ProviderEndpoint", "PriceValue"]
