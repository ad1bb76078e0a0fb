from pathlib import Path

import pytest

from meeting_tickets.core.config import get_client, load_config

MANAGED_ENV_VARS = (
    "OPENAI_API_KEY",
    "OPENAI_API_BASE",
    "LLM_MODEL",
    "IS_REASONING_MODEL",
    "MAX_TOKENS",
    "ASR_MODEL",
    "OPENAI_TIMEOUT",
    "MAX_RETRIES",
    "RECORDING_DURATION",
    "SAMPLE_RATE",
    "CHANNELS",
    "AUDIO_FILE_PATH",
    "MT_DEBUG",
    "MT_ENV_FILE",
    "MEETING_TICKETS_ENV_FILE",
)


@pytest.fixture(autouse=True)
def clean_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """
    Run every test from an empty working directory with none of our settings
    in the environment and no cached client.
    """
    for name in MANAGED_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_client.cache_clear()
    load_config.cache_clear()
    yield
    get_client.cache_clear()
    load_config.cache_clear()
