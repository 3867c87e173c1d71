# doc_distiller/llm_client.py
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import httpx

from .config import Settings
from .logs import LogFn, log
from .prompting import ComposedRequest


class LLMError(RuntimeError):
    """The backend answered, but not with a usable completion."""


class LLMClient:
    """
    Chat client for OpenAI-compatible `chat/completions` endpoints.

    One request per call: no throttle, no retry, and no timeout unless
    LLM_TIMEOUT is set. Transport problems propagate as httpx errors.

    Providers (LLM_PROVIDER):
      - gemini  (GEMINI_API_KEY, default model gemini-2.5-flash)
      - openai  (OPENAI_API_KEY)
      - groq    (GROQ_API_KEY)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        logger: Optional[LogFn] = None,
    ) -> None:
        settings = settings or Settings.from_env()
        settings.require_backend()
        self.settings = settings
        self.provider = settings.provider
        self.model = settings.model
        self.base_url = settings.base_url
        self.temperature = settings.temperature
        self.timeout = settings.timeout
        self._transport = transport
        self._logger = logger
        self._headers = {
            "Authorization": f"Bearer {settings.api_key}",
            "Content-Type": "application/json",
        }
        log(
            f"[llm:init] provider={self.provider} model={self.model} "
            f"base={self.base_url} timeout={self.timeout or 'none'}",
            logger,
        )

    def chat(self, messages: List[Dict[str, str]], **kwargs) -> Dict[str, Any]:
        """Return the raw JSON body of one chat/completions call."""
        url = f"{self.base_url}/chat/completions"
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
        }
        # GPT-5 family only accepts the default temperature
        if (self.model or "").lower().startswith("gpt-5"):
            payload["temperature"] = 1.0
        payload.update(kwargs)

        prompt_chars = sum(len(m.get("content", "")) for m in messages)
        kwargs_preview = {k: v for k, v in payload.items() if k != "messages"}
        log(
            f"[llm:req] POST {url} model={self.model} "
            f"prompt_chars={prompt_chars} kwargs={json.dumps(kwargs_preview, ensure_ascii=False)}",
            self._logger,
        )

        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            r = client.post(url, headers=self._headers, json=payload)

        if r.status_code != 200:
            preview = r.text[:500].replace("\n", "\\n")
            log(f"[llm:err] status={r.status_code} body≈{preview}", self._logger)
            raise LLMError(f"LLM error {r.status_code}: {r.text[:2000]}")

        log(f"[llm:ok] status=200 len={len(r.text)}", self._logger)
        try:
            return r.json()
        except json.JSONDecodeError as e:
            raise LLMError(f"LLM reply is not JSON: {r.text[:500]}") from e

    def complete(self, messages: List[Dict[str, str]], **kwargs) -> str:
        resp = self.chat(messages, **kwargs)
        try:
            content = resp["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            log(f"[llm:bad] missing message.content in response: {str(resp)[:500]}", self._logger)
            raise LLMError(f"Malformed LLM response: {resp}") from e
        if not isinstance(content, str):
            raise LLMError(f"Malformed LLM response: content is {type(content).__name__}")
        return content

    def generate(self, request: ComposedRequest) -> str:
        """Send one composed request and return the markdown reply."""
        return self.complete(request.messages())
