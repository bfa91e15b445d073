"""OCR configuration.

This module describes which provider an OCR call goes to and with which
credentials and parameters. It also provides a small JSON store so a
configuration can be kept between runs.

Configuration can be created in three ways:

1. Explicitly:
     config = OCRConfig(
         provider=Provider.ANTHROPIC,
         api_key="sk-...",
         endpoint=Provider.ANTHROPIC.default_endpoint,
         model=Provider.ANTHROPIC.default_model,
     )

2. From provider defaults:
     config = OCRConfig.for_provider(Provider.DEEPSEEK, api_key="sk-...")

3. From environment variables (SHOTOCR_PROVIDER, SHOTOCR_API_KEY,
   SHOTOCR_ENDPOINT, SHOTOCR_MODEL, SHOTOCR_MAX_TOKENS, SHOTOCR_PROMPT):
     config = OCRConfig.from_env()
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 4096
DEFAULT_PROMPT = (
    "Extract all text from the image, keeping the original formatting and "
    "layout. Return only the recognized text without any explanation."
)

CONFIG_PATH_ENV = "SHOTOCR_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "shotocr" / "config.json"


class WireProtocol(str, Enum):
    """Wire-protocol families understood by the dispatcher."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    BAIDU = "baidu"


class Provider(str, Enum):
    """Supported upstream vision API vendors."""

    OPENAI = "openai"
    DEEPSEEK = "deepseek"
    ANTHROPIC = "anthropic"
    BAIDU = "baidu"
    CUSTOM = "custom"

    @property
    def protocol(self) -> WireProtocol:
        return _PROVIDER_DEFAULTS[self][0]

    @property
    def default_endpoint(self) -> str:
        return _PROVIDER_DEFAULTS[self][1]

    @property
    def default_model(self) -> str:
        return _PROVIDER_DEFAULTS[self][2]

    @classmethod
    def from_name(cls, name: str) -> "Provider":
        """Look up a provider by name, case-insensitively.

        Raises:
            ValueError: If the name is not a supported provider.
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unsupported provider: {name}. "
                f"Supported providers: {', '.join(p.value for p in cls)}"
            )


# provider -> (protocol, default endpoint, default model)
_PROVIDER_DEFAULTS = {
    Provider.OPENAI: (
        WireProtocol.OPENAI,
        "https://api.openai.com/v1/chat/completions",
        "gpt-4o",
    ),
    Provider.DEEPSEEK: (
        WireProtocol.OPENAI,
        "https://api.deepseek.com/v1/chat/completions",
        "deepseek-chat",
    ),
    Provider.ANTHROPIC: (
        WireProtocol.ANTHROPIC,
        "https://api.anthropic.com/v1/messages",
        "claude-3-5-sonnet-20241022",
    ),
    Provider.BAIDU: (
        WireProtocol.BAIDU,
        "https://aip.baidubce.com/rpc/2.0/ai_custom/v1/wenxinworkshop/"
        "chat/completions",
        "ernie-4.0-turbo-8k",
    ),
    # Endpoint and model must be supplied by the user
    Provider.CUSTOM: (WireProtocol.OPENAI, "", ""),
}


@dataclass(frozen=True)
class OCRConfig:
    """Settings for one OCR call.

    The dispatcher assumes the configuration is valid; callers should check
    is_valid() (or call validate()) before handing it over.

    Attributes:
        provider: Upstream API vendor.
        api_key: Credential sent to the provider.
        endpoint: Full URL of the provider endpoint.
        model: Model identifier.
        max_tokens: Token budget for the answer.
        prompt: Instruction sent along with the image.
    """

    provider: Provider = Provider.OPENAI
    api_key: str = ""
    endpoint: str = Provider.OPENAI.default_endpoint
    model: str = Provider.OPENAI.default_model
    max_tokens: int = DEFAULT_MAX_TOKENS
    prompt: str = DEFAULT_PROMPT

    def __post_init__(self):
        if not isinstance(self.provider, Provider):
            object.__setattr__(
                self, "provider", Provider.from_name(str(self.provider))
            )

    def __repr__(self) -> str:
        masked = "***" if self.api_key else ""
        return (
            f"OCRConfig(provider={self.provider.value!r}, "
            f"api_key={masked!r}, endpoint={self.endpoint!r}, "
            f"model={self.model!r}, max_tokens={self.max_tokens})"
        )

    def is_valid(self) -> bool:
        """Whether api_key, endpoint and model are all non-empty."""
        return bool(self.api_key and self.endpoint and self.model)

    def validate(self):
        """Validate configuration.

        Raises:
            ValueError: If a required field is empty.
        """
        if not self.api_key:
            raise ValueError(
                f"{self.provider.value} API key is required. Set it with "
                f"--api-key or through SHOTOCR_API_KEY environment variable"
            )
        if not self.endpoint:
            raise ValueError(
                f"{self.provider.value} endpoint is required. Set it with "
                f"--endpoint or through SHOTOCR_ENDPOINT environment variable"
            )
        if not self.model:
            raise ValueError(
                f"{self.provider.value} model is required. Set it with "
                f"--model or through SHOTOCR_MODEL environment variable"
            )

    @classmethod
    def for_provider(
        cls,
        provider: Union[Provider, str],
        api_key: str = "",
        **kwargs
    ) -> "OCRConfig":
        """Create configuration populated with the provider's defaults."""
        if not isinstance(provider, Provider):
            provider = Provider.from_name(provider)
        kwargs.setdefault("endpoint", provider.default_endpoint)
        kwargs.setdefault("model", provider.default_model)
        return cls(provider=provider, api_key=api_key, **kwargs)

    def with_provider(self, provider: Union[Provider, str]) -> "OCRConfig":
        """Switch provider, resetting endpoint and model to its defaults."""
        if not isinstance(provider, Provider):
            provider = Provider.from_name(provider)
        return replace(
            self,
            provider=provider,
            endpoint=provider.default_endpoint,
            model=provider.default_model,
        )

    @classmethod
    def from_env(cls) -> "OCRConfig":
        """Create configuration from SHOTOCR_* environment variables."""
        provider = Provider.from_name(
            os.environ.get("SHOTOCR_PROVIDER", Provider.OPENAI.value)
        )
        api_key = os.environ.get("SHOTOCR_API_KEY", "")
        if api_key:
            logger.info(
                f"{provider.value} API key loaded from environment variable"
            )
        else:
            logger.warning(
                f"{provider.value} API key not found in environment"
            )

        endpoint = os.environ.get("SHOTOCR_ENDPOINT")
        if endpoint:
            logger.info("Endpoint loaded from environment variable")
        else:
            logger.info("Endpoint not set, using provider default")
            endpoint = provider.default_endpoint

        try:
            max_tokens = int(
                os.environ.get("SHOTOCR_MAX_TOKENS", str(DEFAULT_MAX_TOKENS))
            )
        except ValueError:
            raise ValueError("SHOTOCR_MAX_TOKENS must be an integer")

        config = cls(
            provider=provider,
            api_key=api_key,
            endpoint=endpoint,
            model=os.environ.get("SHOTOCR_MODEL") or provider.default_model,
            max_tokens=max_tokens,
            prompt=os.environ.get("SHOTOCR_PROMPT") or DEFAULT_PROMPT,
        )
        logger.info(f"Model: {config.model}")
        logger.info(f"Max tokens: {config.max_tokens}")
        return config

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["provider"] = self.provider.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OCRConfig":
        """Build configuration from a mapping, ignoring unknown keys."""
        provider = Provider.from_name(
            data.get("provider", Provider.OPENAI.value)
        )
        return cls(
            provider=provider,
            api_key=data.get("api_key", ""),
            endpoint=data.get("endpoint", provider.default_endpoint),
            model=data.get("model", provider.default_model),
            max_tokens=int(data.get("max_tokens", DEFAULT_MAX_TOKENS)),
            prompt=data.get("prompt") or DEFAULT_PROMPT,
        )


def default_config() -> OCRConfig:
    return OCRConfig()


def get_config_path(path: Optional[Union[str, Path]] = None) -> Path:
    if path:
        return Path(path)
    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def load_config(path: Optional[Union[str, Path]] = None) -> OCRConfig:
    """Load configuration from the JSON store.

    A missing or unreadable file yields the default configuration.
    """
    config_path = get_config_path(path)
    if not config_path.exists():
        logger.info(
            f"No configuration file at {config_path}, using defaults"
        )
        return default_config()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        config = OCRConfig.from_dict(data)
    except (OSError, ValueError, TypeError, AttributeError) as e:
        logger.warning(
            f"Failed to read configuration from {config_path}: {e}. "
            f"Using defaults"
        )
        return default_config()

    logger.info(f"Configuration loaded from {config_path}")
    return config


def save_config(
    config: OCRConfig,
    path: Optional[Union[str, Path]] = None
) -> Path:
    """Write configuration to the JSON store and return the file path."""
    config_path = get_config_path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, ensure_ascii=False, indent=2)
    logger.info(f"Configuration saved to {config_path}")
    return config_path


def reset_config(path: Optional[Union[str, Path]] = None) -> OCRConfig:
    """Overwrite the stored configuration with the defaults."""
    config = default_config()
    save_config(config, path)
    return config
