# doc_distiller/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple


# provider -> (base url, key env, model env, default model)
PROVIDERS: Dict[str, Tuple[str, str, str, str]] = {
    "gemini": (
        "https://generativelanguage.googleapis.com/v1beta/openai",
        "GEMINI_API_KEY",
        "GEMINI_MODEL",
        "gemini-2.5-flash",
    ),
    "openai": ("https://api.openai.com/v1", "OPENAI_API_KEY", "OPENAI_MODEL", "gpt-4o-mini"),
    "groq": ("https://api.groq.com/openai/v1", "GROQ_API_KEY", "GROQ_MODEL", "llama-3.3-70b-versatile"),
}

LANGUAGES = ("en", "zh")


def clean_env(s: Optional[str]) -> Optional[str]:
    if s is None:
        return None
    s = s.strip()
    if (s.startswith('"') and s.endswith('"')) or (s.startswith("'") and s.endswith("'")):
        s = s[1:-1]
    return s.strip()


class ConfigError(ValueError):
    """Raised when the environment cannot describe a usable backend."""


def _env_float(name: str) -> Optional[float]:
    v = clean_env(os.getenv(name))
    if not v:
        return None
    try:
        return float(v)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {v!r}") from e


def _env_int(name: str) -> Optional[int]:
    v = clean_env(os.getenv(name))
    if not v:
        return None
    try:
        n = int(v)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {v!r}") from e
    return n if n > 0 else None


@dataclass(frozen=True)
class Settings:
    provider: str = "gemini"
    api_key: Optional[str] = None
    model: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = 0.2
    timeout: Optional[float] = None   # None = wait for the backend indefinitely
    lang: str = "en"
    max_workers: Optional[int] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Read settings from the process environment.

        A missing API key is not an error here; the UI has to render before
        the user ever starts a run.
        """
        provider = (clean_env(os.getenv("LLM_PROVIDER")) or "gemini").lower()
        lang = (clean_env(os.getenv("DISTILLER_LANG")) or "en").lower()
        if lang not in LANGUAGES:
            lang = "en"
        temperature = _env_float("LLM_TEMPERATURE")
        return cls(
            provider=provider,
            api_key=None,
            model=clean_env(os.getenv("LLM_MODEL")),
            base_url=clean_env(os.getenv("LLM_BASE_URL")),
            temperature=0.2 if temperature is None else temperature,
            timeout=_env_float("LLM_TIMEOUT"),
            lang=lang,
            max_workers=_env_int("DISTILLER_MAX_WORKERS"),
        ).resolved()

    def resolved(self) -> "Settings":
        """Fill key, model and base URL from the provider table and env."""
        if self.provider not in PROVIDERS:
            return self
        base, key_env, model_env, default_model = PROVIDERS[self.provider]
        return replace(
            self,
            api_key=self.api_key or clean_env(os.getenv(key_env)),
            model=self.model or clean_env(os.getenv(model_env)) or default_model,
            base_url=(self.base_url or base).rstrip("/"),
        )

    def with_overrides(self, **changes) -> "Settings":
        """
        Apply non-None overrides. Switching provider re-resolves key, model and
        base URL from that provider, so LLM_MODEL / LLM_BASE_URL are not carried over.
        """
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            return self
        if "provider" in changes and changes["provider"] != self.provider:
            # provider-derived fields must be looked up again
            for field_name in ("api_key", "model", "base_url"):
                changes.setdefault(field_name, None)
        return replace(self, **changes).resolved()

    def require_backend(self) -> None:
        if self.provider not in PROVIDERS:
            raise ConfigError(
                f"Unsupported LLM_PROVIDER: {self.provider} (expected one of {', '.join(PROVIDERS)})"
            )
        if not self.api_key:
            raise ConfigError(f"Missing env: {PROVIDERS[self.provider][1]}")
