"""
Configuration management for Meeting Tickets.

This module handles environment variables, API keys, and model configurations
using python-dotenv for explicit .env loading. No implicit loading occurs at import time.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from openai import OpenAI

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""

    pass


PROJECT_KEY_PREFIX = "sk-proj-"
PROJECT_KEY_HEADERS = {"OpenAI-Beta": "babel:model-completions-v2"}
PROJECT_KEY_QUERY = {"project": "babel"}

DEFAULT_ENV_FILENAME = ".env"
ENV_FILE_ENV_VARS = ("MT_ENV_FILE", "MEETING_TICKETS_ENV_FILE")


@lru_cache(maxsize=32)
def load_config(env_path: Optional[str] = None, override: bool = False) -> None:
    """Explicitly load environment variables from the given .env file path.

    Notes:
    - This function does NOT perform implicit loading when env_path is None.
    """
    if env_path:
        load_dotenv(dotenv_path=env_path, override=override)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid {name} value: {raw}. Using {default} as default.")
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Invalid {name} value: {raw}. Using {default} as default.")
        return default
    if value <= 0:
        logger.warning(f"{name} must be positive, got {value}. Using {default} as default.")
        return default
    return value


class Config:
    """Configuration settings for Meeting Tickets."""

    def __init__(self):
        # Do not implicitly load any .env here. Callers must use load_env() explicitly.
        pass

    @property
    def openai_api_key(self) -> str:
        """Get OpenAI API key from environment."""
        key = os.getenv("OPENAI_API_KEY")
        if not key or not key.strip():
            raise ConfigError("OPENAI_API_KEY not found in environment. Please set it in your environment or .env file.")
        return key.strip()

    @property
    def is_project_key(self) -> bool:
        """Check whether the configured key is a project-scoped key (sk-proj-...)."""
        key = os.getenv("OPENAI_API_KEY", "").strip()
        return key.startswith(PROJECT_KEY_PREFIX)

    @property
    def api_base(self) -> str:
        """Get the base URL used for direct HTTP calls (default: https://api.openai.com/v1)."""
        return os.getenv("OPENAI_API_BASE", "https://api.openai.com/v1").rstrip("/")

    @property
    def llm_model(self) -> str:
        """Get the LLM model name used for ticket extraction (default: gpt-3.5-turbo)."""
        return os.getenv("LLM_MODEL", "gpt-3.5-turbo")

    @property
    def is_reasoning_model(self) -> bool:
        """Check if the configured model is a reasoning model (default: False)."""
        value = os.getenv("IS_REASONING_MODEL", "false").lower()
        return value in ("true", "1", "yes", "on")

    @property
    def max_tokens(self) -> int:
        """Get the completion token limit for ticket extraction (default: 200)."""
        return _int_env("MAX_TOKENS", 200)

    @property
    def asr_model(self) -> str:
        """Get the model name for ASR (default: whisper-1)."""
        return os.getenv("ASR_MODEL", "whisper-1")

    @property
    def openai_timeout(self) -> int:
        """Get OpenAI API timeout in seconds (default: 60)."""
        return _int_env("OPENAI_TIMEOUT", 60)

    @property
    def max_retries(self) -> int:
        """Get maximum number of client-level retries for API calls (default: 0)."""
        return _int_env("MAX_RETRIES", 0)

    @property
    def recording_duration(self) -> float:
        """Get recording duration in seconds (default: 10)."""
        return _float_env("RECORDING_DURATION", 10.0)

    @property
    def sample_rate(self) -> int:
        """Get capture sample rate in Hz (default: 16000)."""
        return _int_env("SAMPLE_RATE", 16000)

    @property
    def channels(self) -> int:
        """Get number of capture channels (default: 1)."""
        return _int_env("CHANNELS", 1)

    @property
    def audio_file(self) -> Path:
        """Get the path of the transient recording (default: ./recording.wav)."""
        return Path(os.getenv("AUDIO_FILE_PATH", "recording.wav"))


# Global config instance
config = Config()


def load_env(env_path: Optional[str] = None, override: bool = False) -> Optional[str]:
    """
    Load environment variables from a .env file, if available.

    Load order (first match wins):
    1) Explicit env_path argument
    2) Env file path via MT_ENV_FILE or MEETING_TICKETS_ENV_FILE
    3) <cwd>/.env

    Returns the path loaded, or None if nothing was loaded.
    """
    if env_path and Path(env_path).is_file():
        load_config(env_path, override=override)
        return env_path

    for var in ENV_FILE_ENV_VARS:
        explicit = os.getenv(var)
        if explicit and Path(explicit).is_file():
            load_config(explicit, override=override)
            return explicit

    local = Path.cwd() / DEFAULT_ENV_FILENAME
    if local.is_file():
        load_config(str(local), override=override)
        return str(local)

    return None


@lru_cache(maxsize=1)
def get_client() -> OpenAI:
    """
    Get configured OpenAI client with timeout and retry settings.

    The client talks to the same API base as the direct HTTP calls.
    Project-scoped keys get the extra default headers and query parameters
    the project endpoints expect.

    Returns:
        OpenAI client instance

    Raises:
        ConfigError: If the API key is missing or the client cannot be created
    """
    api_key = config.openai_api_key

    extra = {}
    if config.is_project_key:
        extra["default_headers"] = dict(PROJECT_KEY_HEADERS)
        extra["default_query"] = dict(PROJECT_KEY_QUERY)

    try:
        return OpenAI(
            api_key=api_key,
            base_url=config.api_base,
            timeout=config.openai_timeout,
            max_retries=config.max_retries,
            **extra,
        )
    except Exception as e:
        raise ConfigError(f"Failed to create OpenAI client: {e}")


def create_client() -> Optional[OpenAI]:
    """
    Get the OpenAI client, or None when it cannot be configured.

    A missing or malformed credential is not fatal: a warning is logged and
    the run continues with a disabled client.
    """
    try:
        return get_client()
    except ConfigError as e:
        logger.warning(f"Error initializing OpenAI client: {e}")
        return None
