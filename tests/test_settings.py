"""Tests for environment-driven configuration."""

from juno.config import ConfigManager

ENV_VARS = [
    "GEMINI_API_KEY", "GEMINI_MODEL", "OPENROUTER_API_KEY", "DEFAULT_LLM_MODEL", "LLM_TEMPERATURE",
    "LLM_TIMEOUT_SECONDS", "MAX_RETRIES", "RETRY_BASE_DELAY_SECONDS", "ITEM_DELAY_SECONDS",
    "PROFILE_TTL_DAYS", "JUNO_KEYWORDS_FILE", "DATA_DIR", "LOG_LEVEL", "LOG_TO_FILE",
]


def make_manager(tmp_path, monkeypatch, **env):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    for name, value in env.items():
        monkeypatch.setenv(name, value)
    return ConfigManager(env_file=str(tmp_path / "missing.env"))


class TestConfigManager:

    def test_defaults(self, tmp_path, monkeypatch):
        config = make_manager(tmp_path, monkeypatch).get_app_config()

        assert config.processing.max_retries == 3
        assert config.processing.item_delay_seconds == 1.5
        assert config.profile_ttl_days == 7.0
        assert config.log_to_file is False
        assert config.llm.gemini_api_key is None

    def test_environment_overrides(self, tmp_path, monkeypatch):
        manager = make_manager(
            tmp_path, monkeypatch,
            MAX_RETRIES="5", ITEM_DELAY_SECONDS="0", DATA_DIR="/tmp/juno", LOG_TO_FILE="true",
        )
        config = manager.get_app_config()

        assert manager.get_processing_config().max_retries == 5
        assert config.processing.item_delay_seconds == 0.0
        assert config.profile_file == "/tmp/juno/profile.json"
        assert config.export_dir == "/tmp/juno/exports"
        assert config.log_to_file is True

    def test_env_file_is_loaded(self, tmp_path, monkeypatch):
        for name in ENV_VARS:
            monkeypatch.setenv(name, "")
            monkeypatch.delenv(name)
        env_file = tmp_path / ".env"
        env_file.write_text("GEMINI_MODEL=gemini-test\n", encoding="utf-8")

        manager = ConfigManager(env_file=str(env_file))
        monkeypatch.delenv("GEMINI_MODEL", raising=False)

        assert manager.get_llm_config().gemini_model == "gemini-test"

    def test_missing_llm_keys_is_a_warning(self, tmp_path, monkeypatch):
        issues = make_manager(tmp_path, monkeypatch).validate_config()

        assert issues["errors"] == []
        assert any("GEMINI_API_KEY" in warning for warning in issues["warnings"])

    def test_missing_keywords_file_is_an_error(self, tmp_path, monkeypatch):
        manager = make_manager(tmp_path, monkeypatch, JUNO_KEYWORDS_FILE=str(tmp_path / "nope.json"))
        issues = manager.validate_config()
        assert any("Keywords file not found" in error for error in issues["errors"])

    def test_negative_retries_is_an_error(self, tmp_path, monkeypatch):
        issues = make_manager(tmp_path, monkeypatch, MAX_RETRIES="-1").validate_config()
        assert "MAX_RETRIES must not be negative" in issues["errors"]

    def test_api_keys_are_masked(self, tmp_path, monkeypatch):
        manager = make_manager(tmp_path, monkeypatch, GEMINI_API_KEY="abcdefghijklmnop", OPENROUTER_API_KEY="short")
        masked = manager.mask_sensitive_config()

        assert masked["llm"]["gemini_api_key"] == "abcdefgh..."
        assert masked["llm"]["openrouter_api_key"] == "***"
        assert manager.get_llm_config().gemini_api_key == "abcdefghijklmnop"

    def test_ensure_directories(self, tmp_path, monkeypatch):
        data_dir = tmp_path / "juno-data"
        make_manager(tmp_path, monkeypatch, DATA_DIR=str(data_dir)).ensure_directories()

        assert (data_dir / "exports").is_dir()
        assert (data_dir / "logs").is_dir()
