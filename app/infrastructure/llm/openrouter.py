"""
OpenRouter chat-completions client (plain requests, no SDK).
"""
import logging
from dataclasses import dataclass

import requests

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)


class LLMClientError(RuntimeError):
    """LLM call failed (missing key, transport error, HTTP error, empty reply)."""


@dataclass(frozen=True)
class LLMMessage:
    role: str  # system / user / assistant
    content: str

    def as_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class LLMReply:
    content: str
    total_tokens: int | None = None


class OpenRouterClient:
    """POST {base_url}/chat/completions and return the first choice's text."""

    def __init__(self, settings: Settings | None = None, session: requests.Session | None = None):
        self.settings = settings or get_settings()
        self.http = session or requests.Session()

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.settings.OPENROUTER_API_KEY}",
            "HTTP-Referer": "https://spendiq.app",
            "X-Title": "SpendIQ",
        }

    def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: int = 300,
        top_p: float = 0.9,
        model: str | None = None,
    ) -> LLMReply:
        """
        Raises:
            LLMClientError: key not configured, request failed or reply empty
        """
        if not self.settings.OPENROUTER_API_KEY:
            raise LLMClientError("OPENROUTER_API_KEY is not configured")

        body = {
            "model": model or self.settings.LLM_MODEL,
            "messages": [m.as_dict() for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
            "top_p": top_p,
        }
        url = f"{self.settings.OPENROUTER_BASE_URL.rstrip('/')}/chat/completions"
        try:
            resp = self.http.post(
                url,
                json=body,
                headers=self._headers(),
                timeout=self.settings.LLM_TIMEOUT_SECONDS,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.exception("OpenRouter request failed (model=%s)", body["model"])
            raise LLMClientError(f"OpenRouter API error: {exc}") from exc

        choices = data.get("choices") or []
        content = choices[0].get("message", {}).get("content") if choices else None
        if not content:
            raise LLMClientError("OpenRouter API error: no content in response")

        usage = data.get("usage") or {}
        return LLMReply(content=content, total_tokens=usage.get("total_tokens"))
