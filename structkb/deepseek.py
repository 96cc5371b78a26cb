"""Secondary provider: DeepSeek chat completions over plain HTTP.

Text only: no search grounding, no illustration. The API key is the one the
user entered in the settings and is sent only as this request's
``Authorization`` header.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import requests

from structkb.errors import (
    EmptyResponseError,
    MissingCredentialError,
    NetworkError,
    ProviderError,
)
from structkb.providers import SYSTEM_INSTRUCTION, Provider, ProviderAnswer

if TYPE_CHECKING:
    from config.settings import Settings

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "请先在设置中配置 DeepSeek API Key"
REQUEST_FAILED_MESSAGE = "DeepSeek 请求失败"


def _error_message(response: requests.Response) -> str:
    """Pull ``error.message`` out of a failure body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return ""
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("message") or ""
    return ""


class DeepSeekProvider(Provider):
    """One non-streaming chat-completion request per query."""

    def __init__(self, settings: Settings, api_key: str) -> None:
        self.settings = settings
        self.api_key = api_key

    @property
    def url(self) -> str:
        return self.settings.deepseek_base_url.rstrip("/") + "/v1/chat/completions"

    def answer(self, prompt: str) -> ProviderAnswer:
        if not self.api_key:
            raise MissingCredentialError(MISSING_KEY_MESSAGE)

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        payload = {
            "model": self.settings.deepseek_model,
            "messages": [
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {"role": "user", "content": prompt},
            ],
            "stream": False,
        }

        logger.info("DeepSeek answer model=%s prompt=%r", self.settings.deepseek_model, prompt)
        try:
            response = requests.post(
                self.url,
                headers=headers,
                json=payload,
                timeout=self.settings.request_timeout,
            )
        except requests.RequestException as exc:
            logger.warning("DeepSeek transport error: %s", exc)
            raise NetworkError() from exc

        if not response.ok:
            message = _error_message(response) or REQUEST_FAILED_MESSAGE
            logger.warning("DeepSeek returned %d: %s", response.status_code, message)
            raise ProviderError(message)

        try:
            text = response.json()["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ProviderError(REQUEST_FAILED_MESSAGE) from exc

        if not text.strip():
            raise EmptyResponseError()
        return ProviderAnswer(text=text)
