"""
Provider gateway - OpenAI-compatible chat completions for the review loop.

Maps a provider key to its endpoint path and default model, performs one
non-streaming chat completion through the OpenAI client and returns the raw
reply text. Every failure surfaces as a GatewayError classified as either a
connectivity problem (no response) or a provider problem (error response).
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

import httpx
import openai
from openai import OpenAI

from legal_review.config import settings
from legal_review.exceptions import ConfigurationError, GatewayError
from legal_review.models import Provider, ProviderConfig

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_PATH = "/chat/completions"


class ProviderRoute(NamedTuple):
    endpoint_path: str
    default_model: str


PROVIDER_ROUTES: Dict[Provider, ProviderRoute] = {
    Provider.DEEPSEEK: ProviderRoute("/chat/completions", "deepseek-chat"),
    Provider.DOUBAO: ProviderRoute("/api/v3/chat/completions", "doubao-pro-32k"),
    Provider.TONGYI: ProviderRoute("/compatible-mode/v1/chat/completions", "qwen-turbo"),
}


def default_hosts() -> Dict[Provider, str]:
    return {
        Provider.DEEPSEEK: settings.deepseek_base_url,
        Provider.DOUBAO: settings.doubao_base_url,
        Provider.TONGYI: settings.tongyi_base_url,
    }


def resolve_provider(config: ProviderConfig) -> Tuple[Provider, ProviderRoute]:
    """
    Validate a provider configuration and look up its route.

    Raises:
        ConfigurationError: unknown provider key or missing API key
    """
    try:
        provider = Provider(config.provider)
    except ValueError:
        known = ", ".join(p.value for p in Provider)
        raise ConfigurationError(f"Unknown provider '{config.provider}'. Expected one of: {known}")
    if not config.api_key or not config.api_key.strip():
        raise ConfigurationError(f"An API key is required for provider '{provider.value}'")
    return provider, PROVIDER_ROUTES[provider]


def _base_url(host: str, route: ProviderRoute) -> str:
    # The client appends /chat/completions itself
    prefix = route.endpoint_path[: -len(CHAT_COMPLETIONS_PATH)]
    return host.rstrip("/") + prefix


def _error_detail(payload: Any) -> str:
    if isinstance(payload, dict):
        err = payload.get("error")
        if isinstance(err, dict):
            return str(err.get("message") or err.get("code") or err)
        if err:
            return str(err)
        if payload.get("message"):
            return str(payload["message"])
    return json.dumps(payload, ensure_ascii=False)[:500]


def extract_reply_text(payload: Any) -> str:
    """
    Pull choices[0].message.content out of a decoded response body.

    Raises:
        GatewayError: inline error object, or no usable choices
    """
    if not isinstance(payload, dict):
        raise GatewayError("AI provider returned a malformed response body", kind=GatewayError.PROVIDER)
    choices = payload.get("choices")
    if not choices:
        if "error" in payload:
            # Some providers report failures inside a 200 response
            raise GatewayError(
                f"AI provider reported an error: {_error_detail(payload)}",
                kind=GatewayError.PROVIDER,
            )
        raise GatewayError(
            f"AI provider response has no choices: {_error_detail(payload)}",
            kind=GatewayError.PROVIDER,
        )
    try:
        content = choices[0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        raise GatewayError("AI provider response has no message content", kind=GatewayError.PROVIDER)
    return content or ""


class ProviderGateway:
    """
    Issues chat completion calls against the configured providers.

    One httpx connection pool is shared by all calls. The OpenAI client
    wrapping it is built per call, so API keys are never kept on the gateway.
    """

    def __init__(
        self,
        hosts: Optional[Dict[Provider, str]] = None,
        timeout: Optional[float] = None,
        max_tokens: Optional[int] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.hosts = hosts or default_hosts()
        self.timeout = timeout if timeout is not None else settings.llm_timeout_seconds
        self.max_tokens = max_tokens if max_tokens is not None else settings.llm_max_tokens
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.Client(timeout=self.timeout, follow_redirects=True)

    def _client(self, provider: Provider, route: ProviderRoute, api_key: str) -> OpenAI:
        return OpenAI(
            api_key=api_key,
            base_url=_base_url(self.hosts[provider], route),
            timeout=self.timeout,
            max_retries=0,
            http_client=self._http_client,
        )

    def close(self) -> None:
        """Close the shared connection pool unless it was supplied by the caller."""
        if self._owns_http_client:
            self._http_client.close()
            logger.info("Provider gateway connection pool closed")

    def build_messages(self, prompt: str, system_prompt: Optional[str]) -> List[Dict[str, str]]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return messages

    def complete(self, config: ProviderConfig, prompt: str, system_prompt: Optional[str] = None) -> str:
        """
        Send one prompt and return the reply text.

        Args:
            config: Provider selection, API key and optional model override
            prompt: Rendered user prompt
            system_prompt: Optional system instruction sent ahead of the prompt

        Returns:
            Raw reply text at choices[0].message.content

        Raises:
            ConfigurationError: provider or API key invalid
            GatewayError: call failed or returned no usable reply
        """
        provider, route = resolve_provider(config)
        model = config.model or route.default_model
        client = self._client(provider, route, config.api_key)
        logger.info(f"Calling {provider.value}, model={model}, max_tokens={self.max_tokens}, "
                    f"prompt_length={len(prompt)}")
        try:
            raw = client.chat.completions.with_raw_response.create(
                model=model,
                messages=self.build_messages(prompt, system_prompt),
                max_tokens=self.max_tokens,
                stream=False,
            )
            payload = raw.http_response.json()
        except openai.APIConnectionError as e:
            logger.error(f"{provider.value} unreachable: {e}")
            raise GatewayError(
                "Could not reach the AI service (network failure, timeout or CORS restriction). "
                f"Check your network connection and proxy settings. ({e})",
                kind=GatewayError.CONNECTIVITY,
            ) from e
        except openai.APIStatusError as e:
            detail = _error_detail(e.body) if e.body is not None else e.message
            logger.error(f"{provider.value} returned status {e.status_code}: {detail}")
            raise GatewayError(
                f"AI service call failed. Check your API key and model. "
                f"(status {e.status_code}: {detail})",
                kind=GatewayError.PROVIDER,
                status_code=e.status_code,
            ) from e
        except ValueError as e:
            logger.error(f"{provider.value} returned a non-JSON body: {e}")
            raise GatewayError(
                "AI provider returned a body that is not JSON",
                kind=GatewayError.PROVIDER,
            ) from e
        except (openai.OpenAIError, httpx.HTTPError) as e:
            logger.error(f"{provider.value} call failed: {type(e).__name__}: {e}")
            raise GatewayError(f"AI service call failed: {e}", kind=GatewayError.PROVIDER) from e

        content = extract_reply_text(payload)
        logger.info(f"{provider.value} reply received, content_length: {len(content)}")
        return content
