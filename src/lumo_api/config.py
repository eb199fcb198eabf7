"""Configuration models for lumo-api."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
]


class BrowserConfig(BaseModel):
    """Settings for the automated Chromium instance."""

    headless: bool = True
    viewport_width: int = 1280
    viewport_height: int = 720
    user_agent: Optional[str] = None
    launch_args: list[str] = Field(default_factory=lambda: list(DEFAULT_LAUNCH_ARGS))
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = "networkidle"
    action_timeout: float = Field(
        default=10.0,
        description="Timeout (in seconds) for individual UI actions such as clicks and fills.",
    )


class SelectorConfig(BaseModel):
    """CSS selectors locating the chat UI elements."""

    chat_input: str = "textarea[data-testid='chat-input']"
    answer: str = "div[data-testid='assistant-message']"
    web_search_toggle: str = "button[data-testid='web-search-toggle']"
    toggle_active_class: str = "is-active"


class SiteConfig(BaseModel):
    """Where the chat application lives and how to recognise it."""

    app_url: str = "https://lumo.proton.me/"
    login_url: str = "https://lumo.proton.me/login"
    ready_timeout: float = Field(
        default=30.0,
        description="Seconds to wait for the chat input after navigating to the app.",
    )
    selectors: SelectorConfig = Field(default_factory=SelectorConfig)


class PollingConfig(BaseModel):
    """Timing of the answer stabilization poller."""

    poll_interval: float = 0.2
    settle_interval: float = 0.3
    placeholders: list[str] = Field(default_factory=lambda: ["…", "..."])


class LoginConfig(BaseModel):
    """Settings for the one-time interactive login."""

    interactive: bool = Field(
        default=True,
        description="Allow bootstrap to block on a human login when no auth state is stored.",
    )
    waiter: Literal["console", "portal"] = "console"
    headless: bool = False
    enable_vnc: bool = False
    vnc_host: str = "127.0.0.1"
    vnc_port: Optional[int] = None
    portal_host: str = "127.0.0.1"
    portal_port: int = 8765
    timeout: Optional[float] = Field(
        default=None,
        description="Optional timeout (in seconds) for the human to finish logging in.",
    )


class ServerConfig(BaseModel):
    """HTTP listener settings."""

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    default_timeout: float = 30.0
    max_prompt_length: int = 4096


class ServiceConfig(BaseSettings):
    """Top-level configuration for the lumo-api service."""

    model_config = SettingsConfigDict(
        env_prefix="LUMO_API_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    auth_state_path: Path = Path("auth.json")
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    site: SiteConfig = Field(default_factory=SiteConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    login: LoginConfig = Field(default_factory=LoginConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


def load_config(
    path: Path | None = None,
    *,
    env_file: Path | None = None,
    **overrides: object,
) -> ServiceConfig:
    """Load configuration from an optional YAML file, the environment and overrides."""

    data: dict[str, Any] = {}
    if path:
        import yaml

        data = yaml.safe_load(path.read_text()) or {}
    if overrides:
        _deep_update(data, overrides)
    settings_kwargs: dict[str, object] = {}
    if env_file is not None:
        settings_kwargs["_env_file"] = env_file
    config = ServiceConfig(**settings_kwargs)
    if not data:
        return config

    merged = config.model_dump(mode="python")
    _deep_update(merged, data)
    return ServiceConfig.model_validate(merged)


def _deep_update(target: dict[str, Any], updates: Mapping[str, Any]) -> None:
    """Recursively merge ``updates`` into ``target`` in-place."""

    for key, value in updates.items():
        if (
            isinstance(value, Mapping)
            and isinstance(existing := target.get(key), Mapping)
        ):
            nested: dict[str, Any]
            if isinstance(existing, dict):
                nested = existing
            else:
                nested = dict(existing)
            _deep_update(nested, value)
            target[key] = nested
        else:
            target[key] = value
