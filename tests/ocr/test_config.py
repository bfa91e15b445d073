"""Unit tests for OCR configuration."""

import json

import pytest

from shotocr.ocr.config import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_PROMPT,
    OCRConfig,
    Provider,
    WireProtocol,
    load_config,
    reset_config,
    save_config,
)


class TestProvider:
    """Tests for Provider defaults."""

    def test_default_endpoints(self):
        assert Provider.OPENAI.default_endpoint == (
            "https://api.openai.com/v1/chat/completions"
        )
        assert Provider.ANTHROPIC.default_endpoint == (
            "https://api.anthropic.com/v1/messages"
        )
        assert Provider.DEEPSEEK.default_endpoint == (
            "https://api.deepseek.com/v1/chat/completions"
        )
        assert Provider.BAIDU.default_endpoint.startswith(
            "https://aip.baidubce.com/"
        )

    def test_default_models(self):
        assert Provider.OPENAI.default_model == "gpt-4o"
        assert Provider.DEEPSEEK.default_model == "deepseek-chat"
        assert Provider.BAIDU.default_model == "ernie-4.0-turbo-8k"

    def test_custom_has_no_defaults(self):
        assert Provider.CUSTOM.default_endpoint == ""
        assert Provider.CUSTOM.default_model == ""

    def test_protocol_families(self):
        assert Provider.OPENAI.protocol is WireProtocol.OPENAI
        assert Provider.DEEPSEEK.protocol is WireProtocol.OPENAI
        assert Provider.CUSTOM.protocol is WireProtocol.OPENAI
        assert Provider.ANTHROPIC.protocol is WireProtocol.ANTHROPIC
        assert Provider.BAIDU.protocol is WireProtocol.BAIDU

    def test_from_name_is_case_insensitive(self):
        assert Provider.from_name(" Anthropic ") is Provider.ANTHROPIC

    def test_from_name_unknown(self):
        with pytest.raises(ValueError, match="Unsupported provider"):
            Provider.from_name("tesseract")


class TestOCRConfig:
    """Tests for OCRConfig class."""

    def test_defaults(self):
        config = OCRConfig()

        assert config.provider is Provider.OPENAI
        assert config.api_key == ""
        assert config.max_tokens == DEFAULT_MAX_TOKENS
        assert config.prompt == DEFAULT_PROMPT
        assert not config.is_valid()

    def test_is_valid_requires_all_fields(self):
        config = OCRConfig.for_provider(Provider.OPENAI, api_key="k")
        assert config.is_valid()
        assert not OCRConfig.for_provider(Provider.CUSTOM, api_key="k").is_valid()
        assert not OCRConfig.for_provider(
            Provider.OPENAI, api_key="k", model=""
        ).is_valid()

    def test_validate_names_missing_field(self):
        with pytest.raises(ValueError, match="API key is required"):
            OCRConfig().validate()
        with pytest.raises(ValueError, match="endpoint is required"):
            OCRConfig.for_provider(Provider.CUSTOM, api_key="k").validate()
        with pytest.raises(ValueError, match="model is required"):
            OCRConfig.for_provider(
                Provider.CUSTOM, api_key="k", endpoint="https://gw.local/v1"
            ).validate()

    def test_config_is_immutable(self):
        config = OCRConfig()
        with pytest.raises(Exception):
            config.api_key = "changed"

    def test_provider_name_is_coerced(self):
        config = OCRConfig(provider="deepseek")
        assert config.provider is Provider.DEEPSEEK

    def test_with_provider_resets_endpoint_and_model(self):
        config = OCRConfig.for_provider(
            Provider.OPENAI, api_key="k", max_tokens=100, prompt="p"
        )

        switched = config.with_provider(Provider.ANTHROPIC)

        assert switched.provider is Provider.ANTHROPIC
        assert switched.endpoint == Provider.ANTHROPIC.default_endpoint
        assert switched.model == Provider.ANTHROPIC.default_model
        assert switched.api_key == "k"
        assert switched.max_tokens == 100
        assert switched.prompt == "p"

    def test_repr_masks_api_key(self):
        config = OCRConfig.for_provider(Provider.OPENAI, api_key="secret")
        assert "secret" not in repr(config)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SHOTOCR_PROVIDER", "baidu")
        monkeypatch.setenv("SHOTOCR_API_KEY", "env-token")
        monkeypatch.setenv("SHOTOCR_MAX_TOKENS", "512")
        monkeypatch.delenv("SHOTOCR_ENDPOINT", raising=False)
        monkeypatch.delenv("SHOTOCR_MODEL", raising=False)
        monkeypatch.delenv("SHOTOCR_PROMPT", raising=False)

        config = OCRConfig.from_env()

        assert config.provider is Provider.BAIDU
        assert config.api_key == "env-token"
        assert config.endpoint == Provider.BAIDU.default_endpoint
        assert config.model == Provider.BAIDU.default_model
        assert config.max_tokens == 512

    def test_from_env_rejects_non_integer_max_tokens(self, monkeypatch):
        monkeypatch.setenv("SHOTOCR_MAX_TOKENS", "lots")

        with pytest.raises(
            ValueError, match="SHOTOCR_MAX_TOKENS must be an integer"
        ):
            OCRConfig.from_env()

    def test_from_env_missing_key_is_logged(self, monkeypatch, caplog):
        monkeypatch.delenv("SHOTOCR_API_KEY", raising=False)
        monkeypatch.delenv("SHOTOCR_PROVIDER", raising=False)

        OCRConfig.from_env()

        assert "API key not found" in caplog.text

    def test_dict_round_trip(self):
        config = OCRConfig.for_provider(
            Provider.CUSTOM,
            api_key="k",
            endpoint="https://gw.local/v1/chat/completions",
            model="qwen-vl",
        )
        assert OCRConfig.from_dict(config.to_dict()) == config


class TestConfigStore:
    """Tests for the JSON configuration store."""

    def test_load_missing_file_returns_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.json")
        assert config == OCRConfig()

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        config = OCRConfig.for_provider(Provider.ANTHROPIC, api_key="k")

        saved_path = save_config(config, path)

        assert saved_path == path
        assert json.loads(path.read_text(encoding="utf-8"))["provider"] == (
            "anthropic"
        )
        assert load_config(path) == config

    def test_load_corrupt_file_returns_defaults(self, tmp_path, caplog):
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")

        assert load_config(path) == OCRConfig()
        assert "Failed to read configuration" in caplog.text

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "env.json"
        monkeypatch.setenv("SHOTOCR_CONFIG", str(path))

        save_config(OCRConfig.for_provider(Provider.DEEPSEEK, api_key="k"))

        assert path.exists()
        assert load_config().provider is Provider.DEEPSEEK

    def test_reset_config(self, tmp_path):
        path = tmp_path / "config.json"
        save_config(OCRConfig.for_provider(Provider.BAIDU, api_key="k"), path)

        config = reset_config(path)

        assert config == OCRConfig()
        assert load_config(path) == OCRConfig()
