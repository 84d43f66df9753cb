"""
llm_router.py — Multi-LLM Router
Routes AI requests to the best available provider with automatic fallback,
key rotation on rate limits, and response-time based scoring.
"""

import logging
import time
from datetime import datetime, timezone

from wellnest.config import GEMINI_API_KEYS, GROQ_API_KEYS
from wellnest.providers.gemini_provider import GeminiProvider
from wellnest.providers.groq_provider import GroqProvider

logger = logging.getLogger(__name__)

# Default priority order (lower = tried first)
_DEFAULT_PROVIDERS = [
    {"name": "gemini", "provider_class": GeminiProvider, "priority": 1, "keys": GEMINI_API_KEYS},
    {"name": "groq",   "provider_class": GroqProvider,   "priority": 2, "keys": GROQ_API_KEYS},
]


class LLMRouter:
    """Route AI requests to the best available LLM provider."""

    def __init__(self, providers: list[dict] | None = None):
        self.providers: list[dict] = []
        for p in providers if providers is not None else _DEFAULT_PROVIDERS:
            # Only include providers that have at least one key configured
            if not p.get("keys"):
                continue
            self.providers.append({
                "name": p["name"],
                "provider_class": p["provider_class"],
                "priority": p["priority"],
                "keys": list(p["keys"]),
                "failure_count": 0,
                "avg_response_time": 0.0,
                "total_calls": 0,
                "last_used": None,
            })

    # ------------------------------------------------------------------
    def _score(self, entry: dict) -> float:
        """Score a provider — lower is better."""
        return (
            entry["priority"]
            + (entry["failure_count"] * 5)
            + (entry["avg_response_time"] * 0.1)
        )

    # ------------------------------------------------------------------
    async def route(self, messages: list, model: str | None = None, json_mode: bool = False) -> dict:
        """Route a chat request through available providers with fallback.

        Returns
        -------
        dict  with keys: text, provider, model, status, error, response_time
        """
        last_error = "No AI providers configured"
        for entry in sorted(self.providers, key=self._score):
            provider_name = entry["name"]

            for api_key in entry["keys"]:
                t0 = time.time()
                try:
                    provider_instance = entry["provider_class"](api_key=api_key)
                    result = await provider_instance.chat(messages, model, json_mode=json_mode)
                except Exception as exc:
                    entry["failure_count"] += 1
                    last_error = f"{provider_name}: {exc}"
                    logger.exception("%s raised during chat", provider_name)
                    break  # move to next provider
                elapsed = round(time.time() - t0, 3)

                if result.get("status") == "success":
                    entry["total_calls"] += 1
                    entry["avg_response_time"] = round(
                        (entry["avg_response_time"] * (entry["total_calls"] - 1) + elapsed)
                        / entry["total_calls"],
                        3,
                    )
                    entry["failure_count"] = max(0, entry["failure_count"] - 1)
                    entry["last_used"] = datetime.now(timezone.utc).isoformat()
                    return {
                        "text": result.get("text", ""),
                        "provider": result.get("provider", provider_name),
                        "model": result.get("model", model),
                        "status": "success",
                        "error": None,
                        "response_time": elapsed,
                    }

                error_msg = str(result.get("error") or "")
                last_error = error_msg or f"{provider_name} returned an error"
                # Rate-limited: try the next key for the same provider
                if "429" in error_msg or "rate" in error_msg.lower():
                    logger.warning("%s key rate-limited, rotating", provider_name)
                    continue

                entry["failure_count"] += 1
                logger.warning("%s failed: %s", provider_name, last_error)
                break

        return {
            "text": None,
            "provider": None,
            "model": None,
            "status": "error",
            "error": last_error,
            "response_time": 0,
        }

    # ------------------------------------------------------------------
    def get_provider_status(self) -> list:
        """Return current runtime status of every provider."""
        return [
            {
                "name": entry["name"],
                "available_keys": len(entry["keys"]),
                "failure_count": entry["failure_count"],
                "avg_response_time": entry["avg_response_time"],
                "last_used": entry["last_used"],
                "priority": entry["priority"],
            }
            for entry in self.providers
        ]


_router_instance = None


def get_llm_router() -> LLMRouter:
    global _router_instance
    if _router_instance is None:
        _router_instance = LLMRouter()
    return _router_instance
