"""Configuration management for Conceptcraft.

This module provides centralized configuration management using Pydantic Settings.
Most values are loaded from environment variables with the CONCEPTCRAFT_ prefix.
Two deployment-standard variables are also honoured without the prefix:

- ``OPENROUTER_API_KEY`` — credential for the upstream chat-completion provider
- ``PORT`` — server port override (as set by most hosting platforms)

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (CONCEPTCRAFT_* prefix, or the bare names above)
2. .env file in the project root
3. Default values defined in ConceptcraftConfig

Example .env file:
    OPENROUTER_API_KEY=sk-or-...
    PORT=3000
    CONCEPTCRAFT_MODEL_ID=google/gemini-2.0-flash-exp:free
    CONCEPTCRAFT_LOG_LEVEL=DEBUG

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.

Usage Example
-------------
    from conceptcraft.core.config import config

    print(config.model_id)
    print(config.has_api_key)
"""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_DIR = Path(__file__).resolve().parent.parent


class ConceptcraftConfig(BaseSettings):
    """Main configuration for Conceptcraft.

    Attributes
    ----------
    Upstream Relay:
        openrouter_api_key : str | None
            Bearer credential for the provider.  ``None`` means relay calls
            fail with a configuration error.
        openrouter_base_url : str
            Full URL of the chat-completions endpoint.
        model_id : str
            Model identifier sent with every relay call.
        max_tokens : int
            Completion token limit per relay call.
        temperature : float
            Sampling temperature per relay call.
        http_referer, app_title : str
            Attribution headers sent to the provider.

    Server:
        server_host : str
            Bind address for uvicorn.
        server_port : int
            Bind port (``PORT`` or ``CONCEPTCRAFT_SERVER_PORT``).
        static_dir, templates_dir : Path
            Frontend assets shipped with the package.

    Wizard:
        api_base_url : str | None
            Base URL the wizard uses to reach the HTTP API.  Defaults to the
            local server.
        gallery_dir : Path
            Directory holding the persisted gallery list.
        results_delay : float
            Seconds to stay on the progress step after a successful generation.
        guidance_preview_chars : int
            Length at which relay guidance text is truncated in responses.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CONCEPTCRAFT_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Upstream relay settings
    openrouter_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CONCEPTCRAFT_OPENROUTER_API_KEY", "OPENROUTER_API_KEY"),
        description="Credential for the upstream chat-completion provider",
    )
    openrouter_base_url: str = Field(
        default="https://openrouter.ai/api/v1/chat/completions",
        description="Chat-completions endpoint URL",
    )
    model_id: str = Field(
        default="google/gemini-2.0-flash-exp:free",
        description="Model identifier sent with every relay call",
    )
    max_tokens: int = Field(default=4000, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    http_referer: str = Field(
        default="https://ai-image-generator.onrender.com",
        description="HTTP-Referer attribution header",
    )
    app_title: str = Field(
        default="AI Image Generator",
        description="X-Title attribution header",
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=3000,
        validation_alias=AliasChoices("CONCEPTCRAFT_SERVER_PORT", "PORT"),
        ge=1,
        le=65535,
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    # Paths
    static_dir: Path = Field(
        default=_PACKAGE_DIR / "static",
        description="Directory served at /static",
    )
    templates_dir: Path = Field(
        default=_PACKAGE_DIR / "templates",
        description="Directory containing the SPA shell (index.html)",
    )
    gallery_dir: Path = Field(
        default=Path("data"),
        description="Directory for the persisted gallery list",
    )

    # Wizard settings
    api_base_url: str | None = Field(
        default=None,
        description="Base URL of the HTTP API as seen by the wizard",
    )
    results_delay: float = Field(default=1.0, ge=0.0)
    guidance_preview_chars: int = Field(default=500, ge=1)

    def __init__(self, **kwargs):
        """Initialize configuration and create the gallery directory."""
        super().__init__(**kwargs)

        self.gallery_dir.mkdir(parents=True, exist_ok=True)

    @property
    def has_api_key(self) -> bool:
        """Whether an upstream credential is configured."""
        return bool(self.openrouter_api_key)

    @property
    def resolved_api_base_url(self) -> str:
        """Base URL for wizard API calls, defaulting to the local server."""
        if self.api_base_url:
            return self.api_base_url.rstrip("/")
        return f"http://127.0.0.1:{self.server_port}"


# Global configuration instance
config = ConceptcraftConfig()
