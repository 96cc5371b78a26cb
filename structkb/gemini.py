"""Primary provider: Gemini with Google Search grounding and illustrations.

Two independent calls are made per query:

1. ``answer()``: text answer grounded with the ``google_search`` tool; the
   grounding chunks of the first candidate become ``SourceRef`` objects.
2. ``illustrate()``: a text-free structural diagram from the image model,
   returned as a ``data:image/png;base64,...`` URI.

An answer failure propagates as an ``AssistantError``; an illustration
failure is logged and reported as "no image".

The SDK client is lazy-initialised so that the class can be instantiated in
tests without a live API key.
"""

from __future__ import annotations

import base64
import logging
from typing import TYPE_CHECKING, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from structkb.errors import (
    EmptyResponseError,
    MissingCredentialError,
    NetworkError,
    ProviderError,
)
from structkb.models import SourceRef
from structkb.providers import SYSTEM_INSTRUCTION, Provider, ProviderAnswer

if TYPE_CHECKING:
    from config.settings import Settings

logger = logging.getLogger(__name__)

#: Title used for a grounding chunk that carries a URI but no title.
DEFAULT_SOURCE_TITLE = "参考来源"

_IMAGE_PROMPT = (
    'A professional 3D technical engineering diagram showing the structural '
    'mechanics and physical principles of: "{prompt}". Minimalist blueprint style. '
    'White background. ABSOLUTELY NO TEXT, NO CHARACTERS, NO LABELS, NO CHINESE OR '
    'ENGLISH WORDS. Use only arrows, dashed lines, and geometric structural shapes '
    'to show force distribution.'
)


def image_prompt(prompt: str) -> str:
    """Build the diagram instruction for *prompt*."""
    return _IMAGE_PROMPT.format(prompt=prompt)


def extract_sources(response: object) -> list[SourceRef]:
    """Map grounding chunks of the first candidate to ``SourceRef`` objects.

    Chunks without a usable URI are dropped; the provider's order is kept.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources: list[SourceRef] = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        uri = getattr(web, "uri", None) or ""
        if not uri:
            continue
        title = getattr(web, "title", None) or DEFAULT_SOURCE_TITLE
        sources.append(SourceRef(title=title, uri=uri))
    return sources


def extract_image(response: object) -> Optional[str]:
    """Return the first inline image part as a PNG data URI, if any."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    for part in getattr(content, "parts", None) or []:
        inline = getattr(part, "inline_data", None)
        data = getattr(inline, "data", None)
        if not data:
            continue
        # The SDK hands back raw bytes; older payloads may already be base64.
        if isinstance(data, bytes):
            data = base64.b64encode(data).decode("ascii")
        return f"data:image/png;base64,{data}"
    return None


class GeminiProvider(Provider):
    """Search-grounded answers plus structural illustrations."""

    supports_image = True
    supports_search = True

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._client: object = None  # Lazy-initialised genai.Client

    @property
    def client(self) -> object:
        """Lazy-initialise and return the Gemini SDK client."""
        if self._client is None:
            self._client = genai.Client(api_key=self.settings.gemini_api_key)
        return self._client

    def answer(self, prompt: str) -> ProviderAnswer:
        if not self.settings.gemini_api_key:
            raise MissingCredentialError("未配置 Gemini API Key（GEMINI_API_KEY）")

        logger.info("Gemini answer model=%s prompt=%r", self.settings.text_model, prompt)
        try:
            response = self.client.models.generate_content(
                model=self.settings.text_model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=SYSTEM_INSTRUCTION,
                    tools=[types.Tool(google_search=types.GoogleSearch())],
                ),
            )
        except genai_errors.APIError as exc:
            logger.warning("Gemini API error code=%s: %s", exc.code, exc.message)
            raise ProviderError(exc.message or "") from exc
        except httpx.HTTPError as exc:
            logger.warning("Gemini transport error: %s", exc)
            raise NetworkError() from exc
        except Exception as exc:
            logger.exception("Unexpected Gemini failure")
            raise ProviderError() from exc

        text = response.text or ""
        if not text.strip():
            raise EmptyResponseError()

        sources = extract_sources(response)
        logger.info("Gemini answer complete: %d sources", len(sources))
        return ProviderAnswer(text=text, sources=sources)

    def illustrate(self, prompt: str) -> Optional[str]:
        if not self.settings.gemini_api_key:
            return None
        try:
            response = self.client.models.generate_content(
                model=self.settings.image_model,
                contents=types.Content(
                    role="user",
                    parts=[types.Part(text=image_prompt(prompt))],
                ),
            )
            return extract_image(response)
        except Exception:
            logger.warning("Illustration failed for prompt=%r", prompt, exc_info=True)
            return None
