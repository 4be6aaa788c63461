"""Centralized provider defaults (base URLs and default models).

Every default endpoint literal lives here so the registry and the config
merge never hard-code them inline.
"""
from __future__ import annotations

OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"
OPENAI_DEFAULT_MODEL = "gpt-4o-mini"

ANTHROPIC_DEFAULT_BASE_URL = "https://api.anthropic.com"
ANTHROPIC_DEFAULT_MODEL = "claude-3-5-haiku-latest"

GEMINI_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
GEMINI_DEFAULT_MODEL = "gemini-2.0-flash"

OPENROUTER_DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
OPENROUTER_DEFAULT_MODEL = "openrouter/auto"

DEEPSEEK_DEFAULT_BASE_URL = "https://api.deepseek.com/v1"
DEEPSEEK_DEFAULT_MODEL = "deepseek-chat"

XAI_DEFAULT_BASE_URL = "https://api.x.ai/v1"
XAI_DEFAULT_MODEL = "grok-2-latest"

OLLAMA_DEFAULT_BASE_URL = "http://localhost:11434/v1"
OLLAMA_DEFAULT_MODEL = "llama3.2"

MISTRAL_DEFAULT_BASE_URL = "https://api.mistral.ai/v1"
FIREWORKS_DEFAULT_BASE_URL = "https://api.fireworks.ai/inference/v1"
TOGETHER_DEFAULT_BASE_URL = "https://api.together.xyz/v1"
GROQ_DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
CEREBRAS_DEFAULT_BASE_URL = "https://api.cerebras.ai/v1"
SAMBANOVA_DEFAULT_BASE_URL = "https://api.sambanova.ai/v1"
MOONSHOT_DEFAULT_BASE_URL = "https://api.moonshot.ai/v1"
DEEPINFRA_DEFAULT_BASE_URL = "https://api.deepinfra.com/v1/openai"
NVIDIA_DEFAULT_BASE_URL = "https://integrate.api.nvidia.com/v1"
PERPLEXITY_DEFAULT_BASE_URL = "https://api.perplexity.ai"

# Azure hosts are resource specific; callers must override base_url.
AZURE_DEFAULT_BASE_URL = "https://<resource>.openai.azure.com"
AZURE_API_VERSION = "2023-03-15-preview"

__all__ = [
    "OPENAI_DEFAULT_BASE_URL",
    "OPENAI_DEFAULT_MODEL",
    "ANTHROPIC_DEFAULT_BASE_URL",
    "ANTHROPIC_DEFAULT_MODEL",
    "GEMINI_DEFAULT_BASE_URL",
    "GEMINI_DEFAULT_MODEL",
    "OPENROUTER_DEFAULT_BASE_URL",
    "OPENROUTER_DEFAULT_MODEL",
    "DEEPSEEK_DEFAULT_BASE_URL",
    "DEEPSEEK_DEFAULT_MODEL",
    "XAI_DEFAULT_BASE_URL",
    "XAI_DEFAULT_MODEL",
    "OLLAMA_DEFAULT_BASE_URL",
    "OLLAMA_DEFAULT_MODEL",
    "MISTRAL_DEFAULT_BASE_URL",
    "FIREWORKS_DEFAULT_BASE_URL",
    "TOGETHER_DEFAULT_BASE_URL",
    "GROQ_DEFAULT_BASE_URL",
    "CEREBRAS_DEFAULT_BASE_URL",
    "SAMBANOVA_DEFAULT_BASE_URL",
    "MOONSHOT_DEFAULT_BASE_URL",
    "DEEPINFRA_DEFAULT_BASE_URL",
    "NVIDIA_DEFAULT_BASE_URL",
    "PERPLEXITY_DEFAULT_BASE_URL",
    "AZURE_DEFAULT_BASE_URL",
    "AZURE_API_VERSION",
]
