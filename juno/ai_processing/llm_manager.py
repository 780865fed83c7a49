"""
LLM Manager - Abstraction layer for hosted LLM backends.

Gemini is used when a Gemini key is configured, OpenRouter otherwise. Both
providers return an LLMResponse instead of raising, so callers can decide how
to treat rate limits and other failures.
"""

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import aiohttp

from ..config import get_llm_config, LLMConfig
from ..utils import get_logger

logger = get_logger(__name__)

_JSON_OBJECT = re.compile(r'\{.*\}', re.DOTALL)


@dataclass
class LLMResponse:
    """Standardized response from LLM providers."""
    success: bool
    content: str = ""
    model: str = ""
    usage: Optional[Dict[str, int]] = None
    finish_reason: Optional[str] = None
    error: Optional[str] = None
    status: Optional[int] = None
    data: Optional[Dict[str, Any]] = None


def parse_json_content(content: str) -> Optional[Dict[str, Any]]:
    """Extract the first JSON object from model output, or None."""
    match = _JSON_OBJECT.search(content or "")
    if not match:
        return None
    try:
        data = json.loads(match.group())
    except json.JSONDecodeError:
        logger.warning("Structured response is not valid JSON")
        return None
    return data if isinstance(data, dict) else None


class LLMProvider(ABC):
    """Common interface of the hosted backends."""

    name = "llm"

    def __init__(self, config: LLMConfig):
        self.config = config

    async def _post(self, url: str, headers: Dict[str, str],
                    payload: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Optional[LLMResponse]]:
        """POST a JSON payload; returns (body, None) on HTTP 200 or (None, failure)."""
        timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, headers=headers, json=payload) as response:
                    if response.status != 200:
                        detail = await response.text()
                        return None, LLMResponse(
                            success=False,
                            status=response.status,
                            error=f"{self.name} API error {response.status}: {detail}"
                        )
                    return await response.json(content_type=None), None
        except (aiohttp.ClientError, ValueError) as e:
            logger.error(f"{self.name} request failed: {e}")
            return None, LLMResponse(success=False, error=f"{self.name} API error: {e}")

    def _malformed(self, error: Exception) -> LLMResponse:
        """Failure for a 200 response whose body does not have the expected shape."""
        logger.error(f"Unexpected {self.name} response: {error!r}")
        return LLMResponse(success=False, status=200, error=f"Unexpected {self.name} response: {error!r}")

    @abstractmethod
    async def generate_text(self, prompt: str, system_prompt: str = "", **kwargs) -> LLMResponse:
        """Plain text completion."""

    @abstractmethod
    async def generate_structured_response(self, prompt: str, system_prompt: str = "",
                                           response_schema: Optional[Dict[str, Any]] = None,
                                           **kwargs) -> LLMResponse:
        """JSON completion; the parsed object is placed on ``LLMResponse.data``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether credentials are configured."""

    @abstractmethod
    def get_model_name(self) -> str:
        """Model used for requests."""


class GeminiProvider(LLMProvider):
    """Google Gemini through the generateContent REST endpoint."""

    name = "Gemini"

    async def _generate(self, prompt: str, system_prompt: str = "",
                        generation_config: Optional[Dict[str, Any]] = None) -> LLMResponse:
        if not self.config.gemini_api_key:
            return LLMResponse(success=False, error="Gemini API key not configured")

        payload: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.config.temperature,
                "maxOutputTokens": self.config.max_tokens,
                **(generation_config or {})
            }
        }
        if system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": system_prompt}]}

        body, failure = await self._post(
            f"{self.config.gemini_base_url}/models/{self.config.gemini_model}:generateContent",
            {"x-goog-api-key": self.config.gemini_api_key, "Content-Type": "application/json"},
            payload,
        )
        if failure:
            return failure

        try:
            candidates = body.get("candidates") or []
            if not candidates:
                return LLMResponse(success=False, status=200, error="Gemini returned no candidates")

            first = candidates[0]
            parts = first.get("content", {}).get("parts", [])
            return LLMResponse(
                success=True,
                content="".join(part.get("text", "") for part in parts),
                model=body.get("modelVersion", self.config.gemini_model),
                usage=body.get("usageMetadata", {}),
                finish_reason=first.get("finishReason"),
                status=200
            )
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            return self._malformed(e)

    async def generate_text(self, prompt: str, system_prompt: str = "", **kwargs) -> LLMResponse:
        return await self._generate(prompt, system_prompt)

    async def generate_structured_response(self, prompt: str, system_prompt: str = "",
                                           response_schema: Optional[Dict[str, Any]] = None,
                                           **kwargs) -> LLMResponse:
        """Ask for JSON output constrained by ``response_schema``."""
        generation_config: Dict[str, Any] = {"responseMimeType": "application/json"}
        if response_schema:
            generation_config["responseSchema"] = response_schema

        response = await self._generate(prompt, system_prompt, generation_config)
        if response.success:
            response.data = parse_json_content(response.content)
        return response

    def is_available(self) -> bool:
        return bool(self.config.gemini_api_key)

    def get_model_name(self) -> str:
        return self.config.gemini_model


class OpenRouterProvider(LLMProvider):
    """OpenRouter chat completions, used when no Gemini key is set."""

    name = "OpenRouter"
    base_url = "https://openrouter.ai/api/v1"

    async def generate_text(self, prompt: str, system_prompt: str = "", **kwargs) -> LLMResponse:
        if not self.config.openrouter_api_key:
            return LLMResponse(success=False, error="OpenRouter API key not configured")

        messages = [{"role": "system", "content": system_prompt}] if system_prompt else []
        messages.append({"role": "user", "content": prompt})

        payload: Dict[str, Any] = {
            "model": self.config.default_model,
            "messages": messages,
            "temperature": kwargs.get("temperature", self.config.temperature),
            "max_tokens": kwargs.get("max_tokens", self.config.max_tokens),
        }
        if kwargs.get("json_mode"):
            payload["response_format"] = {"type": "json_object"}

        body, failure = await self._post(
            f"{self.base_url}/chat/completions",
            {
                "Authorization": f"Bearer {self.config.openrouter_api_key}",
                "X-Title": "Juno Outreach",
                "Content-Type": "application/json",
            },
            payload,
        )
        if failure:
            return failure

        try:
            # Upstream failures can arrive as HTTP 200 with an error object
            if body.get("error"):
                error = body["error"]
                code = error.get("code") if isinstance(error, dict) else None
                message = error.get("message", error) if isinstance(error, dict) else error
                return LLMResponse(
                    success=False,
                    status=code if isinstance(code, int) else None,
                    error=f"OpenRouter API error {code}: {message}"
                )

            choice = body["choices"][0]
            content = choice["message"]["content"]
            if not isinstance(content, str):
                raise TypeError(f"message content is {type(content).__name__}")
            return LLMResponse(
                success=True,
                content=content,
                model=body.get("model", self.config.default_model),
                usage=body.get("usage", {}),
                finish_reason=choice.get("finish_reason"),
                status=200
            )
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            return self._malformed(e)

    async def generate_structured_response(self, prompt: str, system_prompt: str = "",
                                           response_schema: Optional[Dict[str, Any]] = None,
                                           **kwargs) -> LLMResponse:
        """JSON mode completion; the schema is appended to the prompt."""
        if response_schema:
            prompt = f"{prompt}\n\nRespond with a JSON object matching this schema:\n{json.dumps(response_schema, indent=2)}"

        response = await self.generate_text(prompt, system_prompt, json_mode=True, **kwargs)
        if response.success:
            response.data = parse_json_content(response.content)
        return response

    def is_available(self) -> bool:
        return bool(self.config.openrouter_api_key)

    def get_model_name(self) -> str:
        return self.config.default_model


# Preference order for the primary provider
PROVIDER_CLASSES = (
    ("gemini", GeminiProvider),
    ("openrouter", OpenRouterProvider),
)


class LLMManager:
    """Holds the configured providers and routes requests to the primary one."""

    def __init__(self, config: Optional[LLMConfig] = None):
        self.config = config or get_llm_config()
        self.providers: Dict[str, LLMProvider] = {}
        for name, provider_class in PROVIDER_CLASSES:
            provider = provider_class(self.config)
            if provider.is_available():
                self.providers[name] = provider

    def get_available_providers(self) -> List[str]:
        return list(self.providers)

    def get_primary_provider(self) -> Optional[LLMProvider]:
        return next(iter(self.providers.values()), None)

    async def generate_text(self, prompt: str, system_prompt: str = "", **kwargs) -> LLMResponse:
        provider = self.get_primary_provider()
        if provider is None:
            return LLMResponse(success=False, error="No LLM providers available")
        return await provider.generate_text(prompt, system_prompt, **kwargs)

    async def generate_structured_response(self, prompt: str, system_prompt: str = "",
                                           response_schema: Optional[Dict[str, Any]] = None,
                                           **kwargs) -> LLMResponse:
        provider = self.get_primary_provider()
        if provider is None:
            return LLMResponse(success=False, error="No LLM providers available")
        return await provider.generate_structured_response(prompt, system_prompt, response_schema, **kwargs)

    def get_provider_info(self) -> Dict[str, Dict[str, Any]]:
        """Name, model and primary flag of every configured provider."""
        primary = self.get_primary_provider()
        return {
            name: {
                "name": name,
                "available": provider.is_available(),
                "model": provider.get_model_name(),
                "is_primary": provider is primary
            }
            for name, provider in self.providers.items()
        }


_llm_manager: Optional[LLMManager] = None


def get_llm_manager() -> LLMManager:
    """Shared LLMManager built from the global configuration."""
    global _llm_manager
    if _llm_manager is None:
        _llm_manager = LLMManager()
    return _llm_manager
