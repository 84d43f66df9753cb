import asyncio

from wellnest.config import AI_TIMEOUT_SECONDS, GEMINI_MODEL
from wellnest.providers.base import BaseProvider


class GeminiProvider(BaseProvider):
    """Provider for Google Gemini API using the official SDK."""

    def __init__(self, api_key: str):
        self.api_key = api_key

    @property
    def name(self) -> str:
        return "gemini"

    async def chat(self, messages: list[dict], model: str | None = None, json_mode: bool = False) -> dict:
        used_model = model or GEMINI_MODEL
        try:
            import google.generativeai as genai
            # genai is configured module-wide, so set the key right before each call
            genai.configure(api_key=self.api_key)

            system_instruction = None
            history = []
            for msg in messages:
                if msg["role"] == "system":
                    system_instruction = msg["content"]
                elif msg["role"] == "user":
                    history.append({"role": "user", "parts": [msg["content"]]})
                elif msg["role"] == "assistant":
                    history.append({"role": "model", "parts": [msg["content"]]})

            last_message = ""
            if history and history[-1]["role"] == "user":
                last_message = history[-1]["parts"][0]
                history = history[:-1]

            generation_config = {"response_mime_type": "application/json"} if json_mode else None
            g_model = genai.GenerativeModel(
                model_name=used_model,
                system_instruction=system_instruction,
                generation_config=generation_config,
            )
            chat_session = g_model.start_chat(history=history)
            response = await asyncio.wait_for(
                chat_session.send_message_async(content=last_message),
                timeout=AI_TIMEOUT_SECONDS,
            )
            return self._result(used_model, text=response.text)
        except asyncio.TimeoutError:
            return self._result(used_model, error="Timeout")
        except Exception as e:
            # SDK raises a wide family of google.api_core errors; report them as a failed call
            return self._result(used_model, error=str(e))
