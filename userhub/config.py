"""Configuration management for the user directory and prompt gateway."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

import yaml

from .database import resolve_database_path

DEFAULT_MODEL = "claude-3-5-sonnet-latest"
DEFAULT_MAX_TOKENS = 1024


@dataclass(frozen=True)
class LLMConfig:
    """Credentials and model selection for the chat completion provider."""

    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "LLMConfig":
        """Create an :class:`LLMConfig` from raw dictionary data."""
        api_key = data.get("api_key")
        raw_max_tokens = data.get("max_tokens")
        if raw_max_tokens is None or raw_max_tokens == "":
            max_tokens = DEFAULT_MAX_TOKENS
        else:
            try:
                max_tokens = int(raw_max_tokens)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"llm.max_tokens must be an integer, got {raw_max_tokens!r}") from exc
        return LLMConfig(
            api_key=str(api_key) if api_key else None,
            model=str(data.get("model") or DEFAULT_MODEL),
            max_tokens=max_tokens,
        )


@dataclass(frozen=True)
class Settings:
    database_path: Path
    cors_origins: Tuple[str, ...] = ("*",)
    llm: LLMConfig = field(default_factory=LLMConfig)


def _section(raw: Mapping[str, object], key: str) -> Dict[str, object]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Configuration section '{key}' must be a mapping")
    return value


def _split_origins(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "userhub.yaml").resolve(strict=False)
    return candidate


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings from an optional YAML file, letting the environment win."""

    if config_path is None:
        config_path = resolve_config_path(os.getenv("USERHUB_CONFIG"))

    raw: Dict[str, object] = {}
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration file {config_path} must contain a mapping")
        raw = loaded

    database_section = _section(raw, "database")
    cors_section = _section(raw, "cors")
    llm_section = dict(_section(raw, "llm"))

    db_value = os.getenv("USERHUB_DB_PATH") or database_section.get("path")
    database_path = resolve_database_path(str(db_value) if db_value else None)

    env_origins = os.getenv("USERHUB_CORS_ORIGINS")
    if env_origins is not None:
        origins = _split_origins(env_origins)
    else:
        configured = cors_section.get("allow_origins", ["*"])
        if isinstance(configured, str):
            origins = _split_origins(configured)
        else:
            origins = [str(item) for item in configured]

    for key, env_name in (
        ("api_key", "ANTHROPIC_API_KEY"),
        ("model", "USERHUB_LLM_MODEL"),
        ("max_tokens", "USERHUB_LLM_MAX_TOKENS"),
    ):
        value = os.getenv(env_name)
        if value:
            llm_section[key] = value

    return Settings(
        database_path=database_path,
        cors_origins=tuple(origins) or ("*",),
        llm=LLMConfig.from_dict(llm_section),
    )


__all__ = ["LLMConfig", "Settings", "load_settings", "resolve_config_path"]
