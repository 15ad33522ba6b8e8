"""Generative language clients.

``LanguageModelClient.complete`` is the single entry point used by the
analysis orchestrator and the chat assistant. It wraps a provider client
(Gemini through ``google-genai`` or any OpenAI-compatible chat-completions
endpoint such as OpenRouter through ``httpx``) with an optional Gemini fallback.
"""

import asyncio
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import httpx
from httpx import HTTPStatusError, TimeoutException
from google import genai
from google.genai import types

from audit_ai.core.config import LLMSettings
from audit_ai.core.exceptions import APIClientError, APITimeoutError, ConfigurationError
from audit_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    GEMINI = "gemini"
    OPENROUTER = "openrouter"


class BaseLLMClient:
    """HTTP JSON client with retry, timeout and error logging.

    4xx responses other than 429 fail immediately; everything else is retried
    with exponential backoff.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: int = 60,
        max_retries: int = 3,
        retry_delay: int = 2,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.logger = LOGGER

    async def call_api(
        self,
        endpoint: str = "",
        payload: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """POST ``payload`` and return the parsed JSON body.

        Raises:
            APIClientError: If the API call fails after retries
            APITimeoutError: If the API call times out after retries
        """
        url = f"{self.base_url}{endpoint}"
        request_headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if headers:
            request_headers.update(headers)

        self.logger.debug(f"Calling LLM API: {url}", extra={"timeout": self.timeout})

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for attempt in range(self.max_retries):
                try:
                    response = await client.post(url, headers=request_headers, json=payload)
                    response.raise_for_status()
                    return response.json()
                except HTTPStatusError as e:
                    await self._handle_http_error(e, attempt, url)
                except TimeoutException as e:
                    await self._handle_timeout_error(e, attempt, url)
                except httpx.RequestError as e:
                    await self._handle_transport_error(e, attempt, url)

        raise APIClientError(f"Failed to call API {url} after {self.max_retries} attempts")

    async def _handle_http_error(self, error: HTTPStatusError, attempt: int, url: str) -> None:
        status_code = error.response.status_code
        error_body = error.response.text

        self.logger.warning(
            f"API HTTP error (Attempt {attempt + 1}/{self.max_retries})",
            extra={"url": url, "status_code": status_code, "error_body": error_body[:500]},
        )

        if 400 <= status_code < 500 and status_code != 429:
            raise APIClientError(f"API Client Error {status_code}: {error_body}", original_error=error) from error

        if attempt < self.max_retries - 1:
            await self._wait_before_retry(attempt)
        else:
            raise APIClientError(f"API HTTP Error {status_code} after retries", original_error=error) from error

    async def _handle_timeout_error(self, error: TimeoutException, attempt: int, url: str) -> None:
        self.logger.warning(
            f"API Timeout (Attempt {attempt + 1}/{self.max_retries})",
            extra={"url": url},
        )
        if attempt < self.max_retries - 1:
            await self._wait_before_retry(attempt)
        else:
            raise APITimeoutError(f"API Timeout after {self.max_retries} attempts", original_error=error) from error

    async def _handle_transport_error(self, error: httpx.RequestError, attempt: int, url: str) -> None:
        self.logger.warning(
            f"API transport error (Attempt {attempt + 1}/{self.max_retries})",
            extra={"url": url, "error": str(error)},
        )
        if attempt < self.max_retries - 1:
            await self._wait_before_retry(attempt)
        else:
            raise APIClientError(f"API Error: {error}", original_error=error) from error

    async def _wait_before_retry(self, attempt: int) -> None:
        await asyncio.sleep(self.retry_delay * (2 ** attempt))


class GeminiClient:
    """Wrapper for the Google Gemini async API."""

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash", max_retries: int = 3):
        self.model = model
        self.max_retries = max_retries

        try:
            self.client = genai.Client(api_key=api_key)
        except Exception as e:
            LOGGER.error(f"Failed to initialize Gemini client: {e}")
            raise ConfigurationError(f"Failed to initialize Gemini client: {e}", original_error=e) from e

        LOGGER.info(f"Initialized Gemini client with model {self.model}")

    async def generate_content(
        self,
        contents: Union[str, List[str]],
        system_instruction: Optional[str] = None,
        generation_config: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Generate text with Gemini.

        Raises:
            APIClientError: If generation fails after retries
        """
        generation_config = generation_config or {}
        config = types.GenerateContentConfig(
            temperature=generation_config.get("temperature", 0.0),
            max_output_tokens=generation_config.get("max_output_tokens"),
            system_instruction=system_instruction,
        )

        for attempt in range(self.max_retries):
            try:
                response = await self.client.aio.models.generate_content(
                    model=self.model,
                    contents=contents,
                    config=config,
                )
                if not response.text:
                    LOGGER.warning("Empty response from Gemini")
                    return ""
                return response.text
            except Exception as e:
                LOGGER.warning(f"Gemini API error (Attempt {attempt + 1}/{self.max_retries}): {e}")
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(2 ** attempt)
                else:
                    LOGGER.error(f"Gemini generation failed after retries: {e}", exc_info=True)
                    raise APIClientError(f"Gemini generation failed: {e}", original_error=e) from e

        raise APIClientError("Gemini generation failed")


class OpenRouterClient:
    """OpenAI-compatible chat-completions client (OpenRouter by default)."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://openrouter.ai/api/v1/chat/completions",
        timeout: int = 60,
        max_retries: int = 3,
    ):
        self.model = model
        self.client = BaseLLMClient(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
        )
        LOGGER.info(f"Initialized OpenRouter client with model {self.model}")

    async def generate_content(
        self,
        contents: Union[str, List[str]],
        system_instruction: Optional[str] = None,
        generation_config: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Generate text through the chat-completions endpoint.

        Raises:
            APIClientError: If the request fails or the response has no choices
        """
        messages = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        user_content = contents if isinstance(contents, str) else "".join(contents)
        messages.append({"role": "user", "content": user_content})

        generation_config = generation_config or {}
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": generation_config.get("temperature", 0.0),
        }
        if "max_output_tokens" in generation_config:
            payload["max_tokens"] = generation_config["max_output_tokens"]

        response = await self.client.call_api(payload=payload)

        choices = response.get("choices") or []
        if not choices:
            LOGGER.error(f"Unexpected OpenRouter response format: {response}")
            raise APIClientError("Invalid response format from OpenRouter")

        content = (choices[0].get("message") or {}).get("content") or ""
        if not content:
            LOGGER.warning("Empty response from OpenRouter")
        return content


class LanguageModelClient:
    """Provider-agnostic completion client with optional Gemini fallback."""

    def __init__(self, primary: Any, provider: LLMProvider, fallback: Optional[GeminiClient] = None):
        self.client = primary
        self.provider = provider
        self.fallback_client = fallback

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 1000,
        temperature: float = 0.0,
    ) -> str:
        """Run one stateless system + user completion.

        Args:
            system_prompt: System instruction
            user_prompt: User turn
            max_tokens: Output token cap
            temperature: Sampling temperature

        Returns:
            Generated text (may be empty)

        Raises:
            APIClientError: If the primary provider (and fallback, when configured) fail
        """
        generation_config = {"temperature": temperature, "max_output_tokens": max_tokens}
        try:
            return await self.client.generate_content(
                contents=user_prompt,
                system_instruction=system_prompt,
                generation_config=generation_config,
            )
        except Exception as e:
            if not self.fallback_client:
                raise
            LOGGER.warning(f"Primary provider ({self.provider.value}) failed, attempting Gemini fallback: {e}")
            try:
                return await self.fallback_client.generate_content(
                    contents=user_prompt,
                    system_instruction=system_prompt,
                    generation_config=generation_config,
                )
            except Exception as fallback_error:
                LOGGER.error(f"Fallback to Gemini also failed: {fallback_error}")
                raise APIClientError(
                    f"Both primary ({self.provider.value}) and fallback (Gemini) failed",
                    original_error=fallback_error,
                ) from fallback_error


def create_llm_client_from_settings(
    llm_settings: LLMSettings,
    timeout: int = 60,
    max_retries: int = 3,
) -> LanguageModelClient:
    """Build a ``LanguageModelClient`` for the configured provider.

    Raises:
        ConfigurationError: If the provider is unknown or fallback lacks a Gemini key
    """
    try:
        provider = LLMProvider(llm_settings.provider)
    except ValueError as e:
        raise ConfigurationError(f"Unsupported LLM provider: {llm_settings.provider}", original_error=e) from e

    if provider == LLMProvider.GEMINI:
        primary = GeminiClient(
            api_key=llm_settings.gemini_api_key,
            model=llm_settings.gemini_model,
            max_retries=max_retries,
        )
        return LanguageModelClient(primary, provider)

    primary = OpenRouterClient(
        api_key=llm_settings.openrouter_api_key,
        model=llm_settings.openrouter_model,
        base_url=llm_settings.openrouter_api_url,
        timeout=timeout,
        max_retries=max_retries,
    )

    fallback = None
    if llm_settings.enable_fallback:
        if not llm_settings.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY required when ENABLE_LLM_FALLBACK is set")
        fallback = GeminiClient(
            api_key=llm_settings.gemini_api_key,
            model=llm_settings.gemini_model,
            max_retries=max_retries,
        )

    return LanguageModelClient(primary, provider, fallback)
