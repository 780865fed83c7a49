"""
Configuration management for Juno Outreach.

Settings come from environment variables, optionally seeded from a ``.env``
file, and are grouped into dataclass sections: LLM credentials, retry and
pacing for LLM processing, and the classifier keyword tables.
"""

import os
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_KEYWORDS_FILE = str(Path(__file__).resolve().parent.parent / "ai_processing" / "keywords.json")

SECRET_FIELDS = ("gemini_api_key", "openrouter_api_key")


@dataclass
class LLMConfig:
    """Credentials and request settings for the hosted LLM backends."""
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-3-flash-preview"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    openrouter_api_key: Optional[str] = None
    default_model: str = "anthropic/claude-3.5-sonnet"
    temperature: float = 0.7
    max_tokens: int = 2000
    timeout_seconds: float = 60.0


@dataclass
class ProcessingConfig:
    """Retry and pacing settings for sequential LLM processing."""
    max_retries: int = 3
    base_delay_seconds: float = 2.0
    backoff_multiplier: float = 2.0
    max_backoff_seconds: float = 60.0
    item_delay_seconds: float = 1.5


@dataclass
class ClassifierConfig:
    keywords_file: str = DEFAULT_KEYWORDS_FILE


@dataclass
class AppConfig:
    """Top-level settings with one nested section per component."""
    log_level: str = "INFO"
    log_to_file: bool = False
    data_dir: str = "data"
    profile_ttl_days: float = 7.0

    llm: LLMConfig = field(default_factory=LLMConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)

    @property
    def export_dir(self) -> str:
        return f"{self.data_dir}/exports"

    @property
    def profile_file(self) -> str:
        return f"{self.data_dir}/profile.json"


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# (section, attribute, environment variable, converter); section None is AppConfig itself
ENV_SETTINGS: List[Tuple[Optional[str], str, str, Callable[[str], Any]]] = [
    ("llm", "gemini_api_key", "GEMINI_API_KEY", str),
    ("llm", "gemini_model", "GEMINI_MODEL", str),
    ("llm", "openrouter_api_key", "OPENROUTER_API_KEY", str),
    ("llm", "default_model", "DEFAULT_LLM_MODEL", str),
    ("llm", "temperature", "LLM_TEMPERATURE", float),
    ("llm", "timeout_seconds", "LLM_TIMEOUT_SECONDS", float),
    ("processing", "max_retries", "MAX_RETRIES", int),
    ("processing", "base_delay_seconds", "RETRY_BASE_DELAY_SECONDS", float),
    ("processing", "item_delay_seconds", "ITEM_DELAY_SECONDS", float),
    ("classifier", "keywords_file", "JUNO_KEYWORDS_FILE", str),
    (None, "data_dir", "DATA_DIR", str),
    (None, "profile_ttl_days", "PROFILE_TTL_DAYS", float),
    (None, "log_level", "LOG_LEVEL", str),
    (None, "log_to_file", "LOG_TO_FILE", _flag),
]


class ConfigManager:
    """Builds an AppConfig from the environment and checks it for problems."""

    def __init__(self, env_file: Optional[str] = None):
        self.env_file = env_file or ".env"
        self.config = AppConfig()
        self.load_config()

    def load_config(self) -> None:
        """Apply every environment variable that is set over the current values."""
        if Path(self.env_file).exists():
            load_dotenv(self.env_file)
            logger.info(f"Loaded environment from {self.env_file}")

        for section, attribute, env_var, convert in ENV_SETTINGS:
            raw = os.getenv(env_var)
            if raw is None or raw == "":
                continue
            target = getattr(self.config, section) if section else self.config
            try:
                setattr(target, attribute, convert(raw))
            except ValueError:
                logger.warning(f"Ignoring invalid {env_var}={raw!r}")

        logger.debug("Configuration loaded")

    def ensure_directories(self) -> None:
        for directory in (self.config.data_dir, self.config.export_dir, f"{self.config.data_dir}/logs"):
            Path(directory).mkdir(parents=True, exist_ok=True)

    def get_llm_config(self) -> LLMConfig:
        return self.config.llm

    def get_processing_config(self) -> ProcessingConfig:
        return self.config.processing

    def get_classifier_config(self) -> ClassifierConfig:
        return self.config.classifier

    def get_app_config(self) -> AppConfig:
        return self.config

    def validate_config(self) -> Dict[str, List[str]]:
        """Return ``{"errors": [...], "warnings": [...]}``; nothing is raised."""
        errors: List[str] = []
        warnings: List[str] = []
        llm, processing = self.config.llm, self.config.processing

        if not (llm.gemini_api_key or llm.openrouter_api_key):
            warnings.append("No LLM backend configured - set GEMINI_API_KEY or OPENROUTER_API_KEY to use --llm")
        if not Path(self.config.classifier.keywords_file).exists():
            errors.append(f"Keywords file not found: {self.config.classifier.keywords_file}")
        if processing.max_retries < 0:
            errors.append("MAX_RETRIES must not be negative")
        if min(processing.item_delay_seconds, processing.base_delay_seconds) < 0:
            errors.append("Delays must not be negative")
        if self.config.profile_ttl_days <= 0:
            warnings.append("PROFILE_TTL_DAYS is not positive - stored profiles expire immediately")

        return {"errors": errors, "warnings": warnings}

    def mask_sensitive_config(self) -> Dict[str, Any]:
        """Configuration as a dict with API keys shortened for display."""
        data = asdict(self.config)
        data["export_dir"] = self.config.export_dir
        data["profile_file"] = self.config.profile_file

        for key in SECRET_FIELDS:
            secret = data["llm"].get(key)
            if secret:
                data["llm"][key] = f"{secret[:8]}..." if len(secret) > 8 else "***"
        return data


config_manager = ConfigManager()


def get_config() -> AppConfig:
    return config_manager.get_app_config()


def get_llm_config() -> LLMConfig:
    return config_manager.get_llm_config()


def get_processing_config() -> ProcessingConfig:
    return config_manager.get_processing_config()


def get_classifier_config() -> ClassifierConfig:
    return config_manager.get_classifier_config()


def validate_config() -> Dict[str, List[str]]:
    return config_manager.validate_config()
