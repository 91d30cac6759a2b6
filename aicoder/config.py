# aicoder/config.py
"""
配置加载：默认值 < .aicoder/config.yaml < 环境变量 < 命令行参数。
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .core.errors import ConfigurationError

CONFIG_FILE = Path(".aicoder") / "config.yaml"

DEFAULT_API_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "anthropic/claude-3.5-sonnet"

ENV_API_KEY = "OPENROUTER_API_KEY"
ENV_API_URL = "OPENROUTER_API_URL"
ENV_MODEL = "OPENROUTER_MODEL_NAME"

CONFIG_KEYS = ("api_key", "api_url", "model")


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str] = None
    api_url: str = DEFAULT_API_URL
    model: str = DEFAULT_MODEL
    verbose: bool = False

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigurationError(
                f"API key is required. Set {ENV_API_KEY} env variable or use --key option."
            )
        return self.api_key


def load_config_file(path: Path = CONFIG_FILE) -> Dict[str, Any]:
    """解析 config.yaml；文件不存在时返回空字典"""
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"YAML syntax error in {path}: {e}")
    except OSError as e:
        raise ConfigurationError(f"Failed to read {path}: {e}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a YAML mapping, got {type(data).__name__}")
    return {k: v for k, v in data.items() if k in CONFIG_KEYS and v}


def load_settings(
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
    config_path: Path = CONFIG_FILE,
) -> Settings:
    environ = os.environ if environ is None else environ
    settings = replace(Settings(), **load_config_file(config_path))

    from_env = {
        "api_key": environ.get(ENV_API_KEY),
        "api_url": environ.get(ENV_API_URL),
        "model": environ.get(ENV_MODEL),
    }
    settings = replace(settings, **{k: v for k, v in from_env.items() if v})

    if overrides:
        settings = replace(settings, **{k: v for k, v in overrides.items() if v is not None})
    return settings
