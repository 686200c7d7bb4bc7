#!/usr/bin/env python3
from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ["true", "1", "yes"]


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ["true", "1", "yes"]
    return bool(value)


@dataclass(frozen=True)
class Settings:
    """Options owned by the settings collaborator; read-only for the engine"""
    auto_detect: bool = True
    show_confirmation: bool = True
    sync_enabled: bool = False
    api_endpoint: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Settings':
        """Build settings from a stored dict (camelCase or snake_case keys)."""
        data = data or {}

        def pick(camel: str, snake: str, default):
            if camel in data:
                return data[camel]
            return data.get(snake, default)

        return cls(
            auto_detect=_as_bool(pick("autoDetect", "auto_detect", None), True),
            show_confirmation=_as_bool(pick("showConfirmation", "show_confirmation", None), True),
            sync_enabled=_as_bool(pick("syncEnabled", "sync_enabled", None), False),
            api_endpoint=str(pick("apiEndpoint", "api_endpoint", "") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "autoDetect": self.auto_detect,
            "showConfirmation": self.show_confirmation,
            "syncEnabled": self.sync_enabled,
            "apiEndpoint": self.api_endpoint,
        }


@dataclass
class Config:
    """Application configuration"""
    auto_detect: bool = _env_bool("CARTWATCH_AUTO_DETECT", "true")
    show_confirmation: bool = _env_bool("CARTWATCH_SHOW_CONFIRMATION", "true")
    sync_enabled: bool = _env_bool("CARTWATCH_SYNC_ENABLED", "false")
    api_endpoint: str = os.getenv("CARTWATCH_API_ENDPOINT", "")

    # Deduplication windows (seconds)
    duplicate_window: float = float(os.getenv("CARTWATCH_DUPLICATE_WINDOW", "300"))
    release_delay: float = float(os.getenv("CARTWATCH_RELEASE_DELAY", "1.0"))
    signature_ttl: float = float(os.getenv("CARTWATCH_SIGNATURE_TTL", "3.0"))

    # Local cart file used by the CLI
    cart_file: Path = Path(os.getenv("CARTWATCH_CART_FILE", "./workspace/cart.json"))

    # Browser rendering
    headless: bool = _env_bool("CARTWATCH_HEADLESS", "true")
    page_timeout_ms: int = int(os.getenv("CARTWATCH_PAGE_TIMEOUT_MS", "30000"))

    log_level: str = os.getenv("CARTWATCH_LOG_LEVEL", "INFO")

    def settings(self) -> Settings:
        return Settings(
            auto_detect=self.auto_detect,
            show_confirmation=self.show_confirmation,
            sync_enabled=self.sync_enabled,
            api_endpoint=self.api_endpoint,
        )

config = Config()
