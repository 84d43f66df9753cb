from wellnest.providers.base import BaseProvider
from wellnest.providers.groq_provider import GroqProvider
from wellnest.providers.gemini_provider import GeminiProvider


__all__ = [
    "BaseProvider",
    "GroqProvider",
    "GeminiProvider",
]
