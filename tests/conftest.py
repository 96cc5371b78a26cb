"""Shared fixtures for the structkb test suite."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest


def make_settings(**overrides):
    """Return a minimal Settings-like object for testing."""
    settings = MagicMock()
    settings.gemini_api_key = "test-gemini-key"
    settings.text_model = "gemini-3-flash-preview"
    settings.image_model = "gemini-2.5-flash-image"
    settings.deepseek_model = "deepseek-chat"
    settings.deepseek_base_url = "https://api.deepseek.com"
    settings.request_timeout = 30.0
    for k, v in overrides.items():
        setattr(settings, k, v)
    return settings


def gemini_text_response(text, chunks=()):
    """Fake ``generate_content`` response carrying grounding chunks."""
    grounding_chunks = [
        SimpleNamespace(web=SimpleNamespace(title=title, uri=uri))
        for title, uri in chunks
    ]
    candidate = SimpleNamespace(
        grounding_metadata=SimpleNamespace(grounding_chunks=grounding_chunks),
        content=SimpleNamespace(parts=[SimpleNamespace(text=text, inline_data=None)]),
    )
    return SimpleNamespace(text=text, candidates=[candidate])


def gemini_image_response(data=None):
    """Fake image-model response; ``data=None`` means no inline image part."""
    parts = [SimpleNamespace(text="Here is the diagram.", inline_data=None)]
    if data is not None:
        parts.append(SimpleNamespace(text=None, inline_data=SimpleNamespace(data=data)))
    candidate = SimpleNamespace(content=SimpleNamespace(parts=parts))
    return SimpleNamespace(text=None, candidates=[candidate])


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "structkb.db"
