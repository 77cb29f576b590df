"""
Configuration management for Wall-Bounce.
Supports ~/.wallbounce config file for the model catalog, credentials and limits.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .errors import ConfigError


@dataclass
class ModelConfig:
    identifier: str
    provider: str = "openai"
    api_key: Optional[str] = None
    api_key_env: Optional[str] = None
    base_url: Optional[str] = None
    model_name: Optional[str] = None
    max_tokens: Optional[int] = None
    max_retries: int = 0
    input_per_1k: Optional[float] = None
    output_per_1k: Optional[float] = None

    def resolved_api_key(self) -> Optional[str]:
        if self.api_key:
            return self.api_key
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        return None

    def is_bound(self) -> bool:
        return bool(self.resolved_api_key() and self.base_url)


DEFAULT_CATALOG = ("gpt-5", "gemini-2.5-pro", "o3-mini", "gpt-4.1")


@dataclass
class Config:
    models: dict[str, ModelConfig] = field(default_factory=dict)
    default_models: list[str] = field(default_factory=lambda: ["gpt-5", "gemini-2.5-pro", "o3-mini"])
    default_task_type: str = "general"
    call_timeout_ms: int = 30000
    deadline_ms: Optional[int] = 60000
    max_context_chars: int = 0
    max_session_history: int = 50
    max_sessions: int = 1000
    use_session_memory: bool = False
    synthesis: str = "last_successful"
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    log_level: str = "INFO"

    def __post_init__(self):
        if not self.models:
            self.models = self._get_default_catalog()

    def _get_default_catalog(self) -> dict[str, ModelConfig]:
        return {name: ModelConfig(identifier=name) for name in DEFAULT_CATALOG}

    def catalog(self) -> list[str]:
        return list(self.models.keys())

    def get_model_config(self, identifier: str) -> Optional[ModelConfig]:
        return self.models.get(identifier)

    def get_bound_models(self) -> list[str]:
        return [name for name, model in self.models.items() if model.is_bound()]


CONFIG_FILE_NAME = ".wallbounce"
CONFIG_ENV_VAR = "WALLBOUNCE_CONFIG"


def get_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / CONFIG_FILE_NAME


def load_config(path: Optional[Path] = None) -> Config:
    config_path = Path(path) if path else get_config_path()
    if not config_path.exists():
        return Config()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the top level")

    return parse_config(data)


def _parse_model(name: str, model_data: Optional[dict]) -> ModelConfig:
    model_data = model_data or {}
    if not isinstance(model_data, dict):
        raise ConfigError(f"Model '{name}' must be a mapping")
    return ModelConfig(
        identifier=name,
        provider=model_data.get("provider", "openai"),
        api_key=model_data.get("api_key"),
        api_key_env=model_data.get("api_key_env"),
        base_url=model_data.get("base_url"),
        model_name=model_data.get("model_name") or name,
        max_tokens=model_data.get("max_tokens"),
        max_retries=int(model_data.get("max_retries", 0)),
        input_per_1k=model_data.get("input_per_1k"),
        output_per_1k=model_data.get("output_per_1k"),
    )


def _optional(data: dict, key: str, cast):
    value = data.get(key)
    return None if value is None else cast(value)


def parse_config(data: dict) -> Config:
    models = {}

    raw_models = data.get("models") or {}
    if not isinstance(raw_models, dict):
        raise ConfigError("'models' must be a mapping of identifier to settings")
    for name, model_data in raw_models.items():
        models[str(name)] = _parse_model(str(name), model_data)

    deadline_ms = data.get("deadline_ms", 60000)
    if deadline_ms is not None and deadline_ms <= 0:
        deadline_ms = None

    config = Config(
        models=models,
        default_task_type=data.get("default_task_type", "general"),
        call_timeout_ms=int(data.get("call_timeout_ms", 30000)),
        deadline_ms=deadline_ms,
        max_context_chars=int(data.get("max_context_chars", 0)),
        max_session_history=int(data.get("max_session_history", 50)),
        max_sessions=int(data.get("max_sessions", 1000)),
        use_session_memory=bool(data.get("use_session_memory", False)),
        synthesis=data.get("synthesis", "last_successful"),
        temperature=_optional(data, "temperature", float),
        max_tokens=_optional(data, "max_tokens", int),
        log_level=data.get("log_level", "INFO"),
    )
    if "default_models" in data:
        config.default_models = list(data["default_models"] or [])
    return config


def save_config(config: Config, path: Optional[Path] = None) -> None:
    config_path = Path(path) if path else get_config_path()

    data = {
        "default_models": list(config.default_models),
        "default_task_type": config.default_task_type,
        "call_timeout_ms": config.call_timeout_ms,
        "deadline_ms": config.deadline_ms or 0,
        "max_context_chars": config.max_context_chars,
        "max_session_history": config.max_session_history,
        "max_sessions": config.max_sessions,
        "use_session_memory": config.use_session_memory,
        "synthesis": config.synthesis,
        "log_level": config.log_level,
        "models": {},
    }
    if config.temperature is not None:
        data["temperature"] = config.temperature
    if config.max_tokens:
        data["max_tokens"] = config.max_tokens

    for name, model in config.models.items():
        model_data = {}
        if model.provider != "openai":
            model_data["provider"] = model.provider
        if model.api_key:
            model_data["api_key"] = model.api_key
        if model.api_key_env:
            model_data["api_key_env"] = model.api_key_env
        if model.base_url:
            model_data["base_url"] = model.base_url
        if model.model_name and model.model_name != name:
            model_data["model_name"] = model.model_name
        if model.max_tokens:
            model_data["max_tokens"] = model.max_tokens
        if model.max_retries:
            model_data["max_retries"] = model.max_retries
        if model.input_per_1k is not None:
            model_data["input_per_1k"] = model.input_per_1k
        if model.output_per_1k is not None:
            model_data["output_per_1k"] = model.output_per_1k
        data["models"][name] = model_data or None

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)


def create_sample_config(path: Optional[Path] = None) -> Path:
    config_path = Path(path) if path else get_config_path()
    if config_path.exists():
        return config_path

    sample_config = """# Wall-Bounce Configuration
# Copy this file to ~/.wallbounce and fill in your API keys

default_models: [gpt-5, gemini-2.5-pro, o3-mini]
default_task_type: general

# Per-call timeout and end-to-end deadline (0 disables the deadline)
call_timeout_ms: 30000
deadline_ms: 60000

# Cap on forwarded context characters (0 = unbounded)
max_context_chars: 0

max_session_history: 50
max_sessions: 1000
use_session_memory: false

# last_successful or digest
synthesis: last_successful
# Sampling temperature and completion cap sent with every call when set.
# Leave temperature unset for reasoning models (gpt-5, o3-mini), which reject it.
# temperature: 0.2
# max_tokens: 4096

log_level: INFO

# Model catalog
# Each model needs: base_url and api_key (or api_key_env)
# Optional: provider (openai, azure), model_name, max_tokens, max_retries,
#           input_per_1k, output_per_1k (USD per 1K tokens)
models:
  gpt-5:
    api_key_env: "OPENAI_API_KEY"
    base_url: "https://api.openai.com/v1"
    input_per_1k: 0.00125
    output_per_1k: 0.01

  o3-mini:
    api_key_env: "OPENAI_API_KEY"
    base_url: "https://api.openai.com/v1"

  gpt-4.1:
    api_key_env: "OPENAI_API_KEY"
    base_url: "https://api.openai.com/v1"

  gemini-2.5-pro:
    api_key_env: "GEMINI_API_KEY"
    base_url: "https://generativelanguage.googleapis.com/v1beta/openai/"
    input_per_1k: 0.00125
    output_per_1k: 0.01
"""

    with open(config_path, "w", encoding="utf-8") as f:
        f.write(sample_config)
    return config_path
