"""
Unified async LLM client for applybot.

Auto-detects provider from environment:
  LLM_URL         -> Local Ollama / llama.cpp OpenAI-compatible endpoint
  GEMINI_API_KEY  -> Google Gemini via its OpenAI-compat layer (default: gemini-2.0-flash)
  OPENAI_API_KEY  -> OpenAI (default: gpt-4o-mini)
  ANTHROPIC_API_KEY / CLAUDE_API_KEY -> Anthropic Claude (default: claude-3-5-haiku-latest)

LLM_MODEL env var overrides the model name for any provider.
The apply engine only needs text in, text out: see LLMClient.ask().
"""

from dataclasses import dataclass
import asyncio
import logging
import os
import re
from collections.abc import Mapping

import httpx

from applybot.errors import ConfigError, LLMError

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Provider detection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LLMConfig:
    """Normalized LLM configuration consumed by LLMClient."""
    provider: str
    base_url: str
    model: str
    api_key: str


@dataclass(frozen=True)
class _Provider:
    name: str
    key_vars: tuple[str, ...]
    base_url: str
    default_model: str


# Checked in this order; the first one with its variable set wins.
# For "local" the variable holds the endpoint URL, not a key.
_PROVIDERS: tuple[_Provider, ...] = (
    _Provider("local", ("LLM_URL",), "", "llama3.1"),
    _Provider("gemini", ("GEMINI_API_KEY",), "https://generativelanguage.googleapis.com/v1beta/openai", "gemini-2.0-flash"),
    _Provider("openai", ("OPENAI_API_KEY",), "https://api.openai.com/v1", "gpt-4o-mini"),
    _Provider("anthropic", ("ANTHROPIC_API_KEY", "CLAUDE_API_KEY"), "https://api.anthropic.com/v1", "claude-3-5-haiku-latest"),
)
_ALIASES = {"ollama": "local", "claude": "anthropic"}
_PRECEDENCE_TEXT = "LLM_URL > GEMINI_API_KEY > OPENAI_API_KEY > ANTHROPIC_API_KEY"


def _env_get(env: Mapping[str, str], key: str) -> str:
    value = env.get(key)
    return str(value).strip() if value is not None else ""


def _first_value(env: Mapping[str, str], keys: tuple[str, ...]) -> str:
    return next((v for v in (_env_get(env, k) for k in keys) if v), "")


def resolve_llm_config(env: Mapping[str, str] | None = None) -> LLMConfig:
    """Pick the provider the apply engine will ask.

    Reads env at call time (not module import time) so that config.load_env()
    called by the CLI is always visible here. LLM_PROVIDER only breaks ties
    between several configured providers; LLM_MODEL replaces the default model.
    """
    env_map = env if env is not None else os.environ

    configured = {p.name: (p, value) for p in _PROVIDERS if (value := _first_value(env_map, p.key_vars))}
    if not configured:
        raise ConfigError(
            "No LLM provider configured. "
            "Set one of LLM_URL, GEMINI_API_KEY, OPENAI_API_KEY, or ANTHROPIC_API_KEY."
        )

    names = list(configured)
    chosen = names[0]
    if len(names) > 1:
        raw = _env_get(env_map, "LLM_PROVIDER").lower()
        requested = _ALIASES.get(raw, raw)
        if requested in configured:
            chosen = requested
            log.warning(
                "Multiple LLM providers configured (%s). Using '%s' via LLM_PROVIDER override.",
                ", ".join(names),
                chosen,
            )
        else:
            if raw:
                log.warning("Ignoring LLM_PROVIDER='%s' because it is not configured.", raw)
            log.warning(
                "Multiple LLM providers configured (%s). Using '%s' based on precedence: %s.",
                ", ".join(names),
                chosen,
                _PRECEDENCE_TEXT,
            )

    provider, value = configured[chosen]
    model = _env_get(env_map, "LLM_MODEL") or provider.default_model
    if provider.name == "local":
        return LLMConfig("local", value.rstrip("/"), model, _env_get(env_map, "LLM_API_KEY"))
    return LLMConfig(provider.name, provider.base_url, model, value)


# ---------------------------------------------------------------------------
# Output cleaning
# ---------------------------------------------------------------------------

_HEADING_MARKER = re.compile(r"^[ \t]*#+(?:[ \t]+|$)", re.MULTILINE)
_EMPHASIS_MARKER = re.compile(r"\*+")


def clean_output(text: str) -> str:
    """Drop markdown emphasis and line-leading heading markers, then trim.

    A "#" inside a line is kept so answers such as "C#" survive.
    """
    text = _HEADING_MARKER.sub("", text or "")
    return _EMPHASIS_MARKER.sub("", text).strip()


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

_MAX_RETRIES = 5
_TIMEOUT = 120  # seconds

# Base wait on first 429/503 (doubles each retry, caps at 60s).
_RATE_LIMIT_BASE_WAIT = 10


class LLMClient:
    """Thin async client for OpenAI-compatible and Anthropic endpoints.

    One request at a time: the wizard awaits every answer before touching the
    page again.
    """

    def __init__(
        self,
        config: LLMConfig,
        temperature: float = 0.4,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.provider = config.provider
        self.base_url = config.base_url
        self.model = config.model
        self.api_key = config.api_key
        self.temperature = temperature
        self._client = httpx.AsyncClient(timeout=_TIMEOUT, transport=transport)
        self._is_anthropic: bool = config.provider == "anthropic"

    # -- OpenAI-compat API --------------------------------------------------

    async def _chat_compat(self, messages: list[dict], temperature: float, max_tokens: int) -> str:
        """Call the OpenAI-compatible endpoint (OpenAI, Gemini compat, Ollama, llama.cpp)."""
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        resp = await self._client.post(
            f"{self.base_url}/chat/completions",
            json=payload,
            headers=headers,
        )
        resp.raise_for_status()
        data = resp.json()
        return data["choices"][0]["message"]["content"] or ""

    async def _chat_anthropic(self, messages: list[dict], temperature: float, max_tokens: int) -> str:
        """Call Anthropic Messages API."""
        system_chunks: list[str] = []
        anth_messages: list[dict] = []

        for msg in messages:
            role = msg.get("role", "user")
            content = str(msg.get("content", ""))
            if role == "system":
                system_chunks.append(content)
                continue
            if role not in ("user", "assistant"):
                role = "user"
            anth_messages.append({"role": role, "content": content})

        payload: dict = {
            "model": self.model,
            "messages": anth_messages or [{"role": "user", "content": ""}],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if system_chunks:
            payload["system"] = "\n\n".join(system_chunks)

        resp = await self._client.post(
            f"{self.base_url}/messages",
            json=payload,
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": "2023-06-01",
                "content-type": "application/json",
            },
        )
        resp.raise_for_status()
        data = resp.json()

        text_blocks = [
            block.get("text", "")
            for block in data.get("content", [])
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        text = "\n".join(part for part in text_blocks if part).strip()
        if text:
            return text

        raise LLMError("Anthropic response did not include text content.")

    # -- public API ---------------------------------------------------------

    async def chat(
        self,
        messages: list[dict],
        temperature: float | None = None,
        max_tokens: int = 1024,
    ) -> str:
        """Send a chat request and return the raw assistant text.

        Retries rate limits (429/503/529) and timeouts with exponential backoff;
        anything else, or exhausting the retries, raises LLMError.
        """
        temperature = self.temperature if temperature is None else temperature

        for attempt in range(_MAX_RETRIES):
            try:
                if self._is_anthropic:
                    return await self._chat_anthropic(messages, temperature, max_tokens)
                return await self._chat_compat(messages, temperature, max_tokens)

            except httpx.HTTPStatusError as exc:
                resp = exc.response
                if resp.status_code in (429, 503, 529) and attempt < _MAX_RETRIES - 1:
                    # Respect Retry-After header if provided.
                    retry_after = resp.headers.get("Retry-After")
                    if retry_after:
                        try:
                            wait = float(retry_after)
                        except (ValueError, TypeError):
                            wait = _RATE_LIMIT_BASE_WAIT * (2 ** attempt)
                    else:
                        wait = min(_RATE_LIMIT_BASE_WAIT * (2 ** attempt), 60)

                    log.warning(
                        "LLM rate limited (HTTP %s). Waiting %ds before retry %d/%d.",
                        resp.status_code, wait, attempt + 1, _MAX_RETRIES,
                    )
                    await asyncio.sleep(wait)
                    continue
                raise LLMError(
                    f"LLM request failed: HTTP {resp.status_code} {resp.text[:200]}"
                ) from exc

            except httpx.TimeoutException as exc:
                if attempt < _MAX_RETRIES - 1:
                    wait = min(_RATE_LIMIT_BASE_WAIT * (2 ** attempt), 60)
                    log.warning(
                        "LLM request timed out, retrying in %ds (attempt %d/%d)",
                        wait, attempt + 1, _MAX_RETRIES,
                    )
                    await asyncio.sleep(wait)
                    continue
                raise LLMError("LLM request timed out after all retries") from exc

            except httpx.HTTPError as exc:
                raise LLMError(f"LLM request failed: {exc}") from exc

            except (KeyError, IndexError, TypeError, ValueError) as exc:
                raise LLMError(f"Unexpected LLM response shape: {exc}") from exc

        raise LLMError("LLM request failed after all retries")

    async def ask(self, prompt: str, **kwargs) -> str:
        """Convenience: single user prompt -> raw assistant response."""
        return await self.chat([{"role": "user", "content": prompt}], **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()


def create_client(temperature: float = 0.4, env: Mapping[str, str] | None = None) -> LLMClient:
    """Build a client from the environment."""
    config = resolve_llm_config(env)
    log.info("LLM provider: %s  model: %s", config.provider, config.model)
    return LLMClient(config, temperature=temperature)
