"""Application settings — all configuration loaded from environment variables.

Usage:
    from config.settings import Settings
    settings = Settings()
    settings.validate()   # raises ValueError if GEMINI_API_KEY is missing
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_DB_PATH = Path(__file__).parent.parent / "data" / "structkb.db"


@dataclass
class Settings:
    """Centralised application configuration.

    All values are read from environment variables at instantiation time
    so that tests can override them by patching ``os.environ``.
    """

    # ── API Keys ────────────────────────────────────────────────────────────
    #: Credential for the primary (Gemini) provider. The DeepSeek key is
    #: user-entered and lives in the persisted ``Config`` instead.
    gemini_api_key: str = field(
        default_factory=lambda: os.environ.get(
            "GEMINI_API_KEY", os.environ.get("API_KEY", "")
        )
    )

    # ── Flask ───────────────────────────────────────────────────────────────
    debug: bool = field(
        default_factory=lambda: os.environ.get("FLASK_DEBUG", "0") == "1"
    )
    port: int = field(
        default_factory=lambda: int(os.environ.get("PORT", "5000"))
    )

    # ── Storage ─────────────────────────────────────────────────────────────
    config_db_path: Path = field(
        default_factory=lambda: Path(
            os.environ.get("CONFIG_DB_PATH", str(DEFAULT_DB_PATH))
        )
    )

    # ── Secondary provider ──────────────────────────────────────────────────
    deepseek_base_url: str = field(
        default_factory=lambda: os.environ.get(
            "DEEPSEEK_BASE_URL", "https://api.deepseek.com"
        )
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "120"))
    )

    # ── AI Models ───────────────────────────────────────────────────────────
    #: Search-grounded answer model.
    text_model: str = "gemini-3-flash-preview"
    #: Model used for the structural illustration.
    image_model: str = "gemini-2.5-flash-image"
    #: Plain chat-completion model on the secondary provider.
    deepseek_model: str = "deepseek-chat"

    def validate(self) -> None:
        """Raise ``ValueError`` if any required setting is missing."""
        if not self.gemini_api_key:
            raise ValueError(
                "GEMINI_API_KEY environment variable is not set. "
                "Copy .env.example to .env and add your key."
            )
