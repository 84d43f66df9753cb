import httpx

from wellnest.config import AI_TIMEOUT_SECONDS, GROQ_MODEL
from wellnest.providers.base import BaseProvider


class GroqProvider(BaseProvider):
    """Provider for Groq's OpenAI-compatible chat API using httpx."""

    endpoint = "https://api.groq.com/openai/v1/chat/completions"

    def __init__(self, api_key: str, transport: httpx.AsyncBaseTransport | None = None):
        self.api_key = api_key
        self.transport = transport

    @property
    def name(self) -> str:
        return "groq"

    async def chat(self, messages: list[dict], model: str | None = None, json_mode: bool = False) -> dict:
        used_model = model or GROQ_MODEL
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        body = {
            "model": used_model,
            "messages": messages,
            "max_tokens": 1024,
        }
        if json_mode:
            body["response_format"] = {"type": "json_object"}

        try:
            async with httpx.AsyncClient(timeout=AI_TIMEOUT_SECONDS, transport=self.transport) as client:
                response = await client.post(self.endpoint, headers=headers, json=body)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException:
            return self._result(used_model, error="Timeout")
        except httpx.HTTPStatusError as e:
            return self._result(used_model, error=f"HTTP {e.response.status_code}")
        except (httpx.HTTPError, ValueError) as e:
            return self._result(used_model, error=str(e))

        choices = data.get("choices") or []
        text = choices[0].get("message", {}).get("content") if choices else None
        if not text:
            return self._result(used_model, error="Empty completion")
        return self._result(used_model, text=text)
